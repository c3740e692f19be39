import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.posts import get_post_or_404
from app.database import get_db
from app.security import TokenData, has_admin_role, is_moderator, verify_token
from app.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, build_pagination, page_offset
from models.post import Comment, Post
from models.user import User
from schemas.common import MessageResponse, PaginatedResponse
from schemas.post import CommentCreate, CommentResponse, CommentUpdate
from schemas.user import UserSummary

router = APIRouter()
logger = logging.getLogger("devconnect.comments")


def _comment_query():
    return select(Comment, User.name, User.avatar).outerjoin(User, User.id == Comment.user_id)


def _to_response(comment: Comment, name: str | None, avatar: str | None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=UserSummary(id=comment.user_id, name=name or "", avatar=avatar or ""),
    )


async def load_comment_view(db: AsyncSession, comment_id: int) -> CommentResponse | None:
    row = (await db.execute(_comment_query().where(Comment.id == comment_id))).first()
    if not row:
        return None
    return _to_response(*row)


async def _get_comment_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = (await db.execute(select(Comment).where(Comment.id == comment_id))).scalar_one_or_none()
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


async def _can_manage(db: AsyncSession, comment: Comment, metadata: TokenData) -> bool:
    if comment.user_id == metadata.id or await has_admin_role(db, metadata):
        return True
    post_owner = (await db.execute(select(Post.user_id).where(Post.id == comment.post_id))).scalar_one_or_none()
    return post_owner == metadata.id


@router.post("/comment", status_code=201, response_model=CommentResponse)
async def create_comment(
    payload: CommentCreate,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    await get_post_or_404(db, payload.post_id)
    comment = Comment(post_id=payload.post_id, user_id=metadata.id, content=payload.content)
    db.add(comment)
    await db.commit()
    return await load_comment_view(db, comment.id)


@router.get("/comments/recent", response_model=PaginatedResponse[CommentResponse])
async def list_recent_comments(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    metadata: TokenData = Depends(is_moderator),
    db: AsyncSession = Depends(get_db),
):
    rows = (await db.execute(
        _comment_query()
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
    )).all()
    total = (await db.execute(select(func.count(Comment.id)))).scalar() or 0
    items = [_to_response(*row) for row in rows]
    return PaginatedResponse[CommentResponse](
        items=items,
        pagination=build_pagination(page, limit, total, len(items)),
    )


@router.get("/comments/post/{post_id}", response_model=list[CommentResponse])
async def get_comments_by_post(
    post_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    rows = (await db.execute(
        _comment_query()
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )).all()
    return [_to_response(*row) for row in rows]


@router.get("/comment/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    view = await load_comment_view(db, comment_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return view


@router.put("/comment/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_comment_or_404(db, comment_id)
    if not await _can_manage(db, comment, metadata):
        raise HTTPException(status_code=403, detail="Not authorized to update this comment")
    comment.content = payload.content
    await db.commit()
    return await load_comment_view(db, comment_id)


@router.delete("/comment/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_comment_or_404(db, comment_id)
    if not await _can_manage(db, comment, metadata):
        raise HTTPException(status_code=403, detail="Not authorized to delete this comment")
    await db.delete(comment)
    await db.commit()
    logger.info("User %s deleted comment %s", metadata.id, comment_id)
    return MessageResponse(message="Comment deleted successfully")
