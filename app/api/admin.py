from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.posts import build_post_views, post_view_query
from app.database import get_db
from app.security import TokenData, is_admin
from models.auth import AuthRole
from models.post import Comment, Post
from models.role import Role
from models.user import User
from schemas.admin import (
    DailyCount,
    DashboardOverview,
    DashboardResponse,
    HistoryResponse,
    RecentActivity,
    RecentUser,
    RoleCount,
)

router = APIRouter()

RECENT_DAYS = 7
TOP_POSTS = 6
RECENT_USERS = 5


async def _count(db: AsyncSession, column, *filters) -> int:
    return (await db.execute(select(func.count(column)).where(*filters))).scalar() or 0


async def _top_posts(db: AsyncSession, sort_by: str, limit: int = TOP_POSTS):
    stmt, likes_count, comments_count = post_view_query()
    order = {
        "likes": likes_count.desc(),
        "comments": comments_count.desc(),
    }.get(sort_by, Post.created_at.desc())
    rows = (await db.execute(stmt.order_by(order, Post.id.desc()).limit(limit))).all()
    return await build_post_views(db, rows)


async def _daily_counts(db: AsyncSession, column) -> list[DailyCount]:
    day = func.date(column)
    rows = await db.execute(select(day, func.count()).group_by(day).order_by(day))
    return [DailyCount(date=str(date), count=count) for date, count in rows if date]


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard_stats(
    metadata: TokenData = Depends(is_admin),
    db: AsyncSession = Depends(get_db),
):
    since = datetime.utcnow() - timedelta(days=RECENT_DAYS)
    overview = DashboardOverview(
        total_users=await _count(db, User.id),
        total_posts=await _count(db, Post.id),
        total_comments=await _count(db, Comment.id),
        new_users=await _count(db, User.id, User.created_at >= since),
        new_posts=await _count(db, Post.id, Post.created_at >= since),
        new_comments=await _count(db, Comment.id, Comment.created_at >= since),
    )
    user_rows = await db.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(RECENT_USERS)
    )
    recent_users = [
        RecentUser(id=u.id, name=u.name or "", avatar=u.avatar or "", bio=u.bio or "", created_at=u.created_at)
        for u in user_rows.scalars().all()
    ]
    return DashboardResponse(
        overview=overview,
        recent_activity=RecentActivity(
            posts=await _top_posts(db, "recent"),
            users=recent_users,
            most_liked_posts=await _top_posts(db, "likes"),
            most_commented_posts=await _top_posts(db, "comments"),
        ),
    )


@router.get("/history", response_model=HistoryResponse)
async def get_historical_data(
    metadata: TokenData = Depends(is_admin),
    db: AsyncSession = Depends(get_db),
):
    role_rows = await db.execute(
        select(Role.name, func.count(AuthRole.id))
        .select_from(AuthRole)
        .join(Role, Role.enum == AuthRole.role)
        .group_by(Role.name)
        .order_by(Role.name)
    )
    return HistoryResponse(
        users_over_time=await _daily_counts(db, User.created_at),
        posts_over_time=await _daily_counts(db, Post.created_at),
        comments_over_time=await _daily_counts(db, Comment.created_at),
        role_distribution=[RoleCount(role=name, count=count) for name, count in role_rows],
    )
