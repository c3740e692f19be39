import logging
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.security import TokenData, has_admin_role, verify_token
from app.services.post_writer import (
    PostWriterError,
    PostWriterNotConfigured,
    generate_post as write_post,
)
from app.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, build_pagination, page_offset
from models.post import Comment, Post, PostLike
from models.user import User
from schemas.common import MessageResponse, PaginatedResponse
from schemas.post import (
    GeneratePostRequest,
    GeneratePostResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from schemas.user import UserSummary

router = APIRouter()
logger = logging.getLogger("devconnect.posts")


def post_view_query():
    """Posts joined with their author and like/comment counts.

    Returns the select plus the two count columns so callers can sort on them.
    Posts whose author has no profile drop out through the inner join.
    """
    like_counts = (
        select(PostLike.post_id, func.count(PostLike.id).label("likes_count"))
        .group_by(PostLike.post_id)
        .subquery()
    )
    comment_counts = (
        select(Comment.post_id, func.count(Comment.id).label("comments_count"))
        .group_by(Comment.post_id)
        .subquery()
    )
    likes_count = func.coalesce(like_counts.c.likes_count, 0).label("likes_count")
    comments_count = func.coalesce(comment_counts.c.comments_count, 0).label("comments_count")
    stmt = (
        select(Post, User.name, User.avatar, likes_count, comments_count)
        .join(User, User.id == Post.user_id)
        .outerjoin(like_counts, like_counts.c.post_id == Post.id)
        .outerjoin(comment_counts, comment_counts.c.post_id == Post.id)
    )
    return stmt, likes_count, comments_count


async def build_post_views(db: AsyncSession, rows) -> list[PostResponse]:
    rows = list(rows)
    post_ids = [row[0].id for row in rows]
    likes_map: dict[int, list[int]] = defaultdict(list)
    if post_ids:
        like_rows = await db.execute(
            select(PostLike.post_id, PostLike.user_id)
            .where(PostLike.post_id.in_(post_ids))
            .order_by(PostLike.id)
        )
        for post_id, liked_user in like_rows:
            likes_map[post_id].append(liked_user)
    return [
        PostResponse(
            id=post.id,
            content=post.content,
            doc_uri=post.doc_uri or "",
            likes=likes_map.get(post.id, []),
            likes_count=likes_count,
            comments_count=comments_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
            user=UserSummary(id=post.user_id, name=name or "", avatar=avatar or ""),
        )
        for post, name, avatar, likes_count, comments_count in rows
    ]


async def load_post_view(db: AsyncSession, post_id: int) -> PostResponse | None:
    stmt, _, _ = post_view_query()
    rows = (await db.execute(stmt.where(Post.id == post_id))).all()
    views = await build_post_views(db, rows)
    return views[0] if views else None


async def get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    post = (await db.execute(select(Post).where(Post.id == post_id))).scalar_one_or_none()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


async def _paginated_posts(
    db: AsyncSession,
    filters: list,
    page: int,
    limit: int,
    sort_by: str | None = "recent",
) -> PaginatedResponse[PostResponse]:
    stmt, likes_count, comments_count = post_view_query()
    if sort_by == "likes":
        order_by = [likes_count.desc()]
    elif sort_by == "comments":
        order_by = [comments_count.desc()]
    elif sort_by == "recent":
        order_by = [Post.created_at.desc()]
    else:
        order_by = [Post.created_at.desc(), likes_count.desc(), comments_count.desc()]
    order_by.append(Post.id.desc())
    skip = page_offset(page, limit)
    rows = (await db.execute(stmt.where(*filters).order_by(*order_by).offset(skip).limit(limit))).all()
    total = (await db.execute(
        select(func.count(Post.id)).join(User, User.id == Post.user_id).where(*filters)
    )).scalar() or 0
    items = await build_post_views(db, rows)
    return PaginatedResponse[PostResponse](
        items=items,
        pagination=build_pagination(page, limit, total, len(items)),
    )


@router.get("", response_model=list[PostResponse])
async def list_posts(db: AsyncSession = Depends(get_db)):
    stmt, _, _ = post_view_query()
    rows = (await db.execute(stmt.order_by(Post.created_at.desc(), Post.id.desc()))).all()
    return await build_post_views(db, rows)


@router.get("/feed", response_model=PaginatedResponse[PostResponse])
async def get_feed(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    sort_by: str | None = None,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    return await _paginated_posts(db, [Post.user_id != metadata.id], page, limit, sort_by)


@router.get("/user/me", response_model=PaginatedResponse[PostResponse])
async def get_my_posts(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    return await _paginated_posts(db, [Post.user_id == metadata.id], page, limit)


@router.get("/user/{user_id}", response_model=PaginatedResponse[PostResponse])
async def get_user_posts(
    user_id: int,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    return await _paginated_posts(db, [Post.user_id == user_id], page, limit)


@router.post("/generate", response_model=GeneratePostResponse)
async def generate_post(payload: GeneratePostRequest, metadata: TokenData = Depends(verify_token)):
    try:
        content = await write_post(payload.message)
    except PostWriterNotConfigured as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except PostWriterError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return GeneratePostResponse(content=content)


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    payload: PostCreate,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    author = (await db.execute(select(User.id).where(User.id == metadata.id))).first()
    if not author:
        raise HTTPException(status_code=404, detail="User not found")
    post = Post(user_id=metadata.id, content=payload.content, doc_uri=payload.doc_uri or "")
    db.add(post)
    await db.commit()
    return await load_post_view(db, post.id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    view = await load_post_view(db, post_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return view


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    post = await get_post_or_404(db, post_id)
    if post.user_id != metadata.id and not await has_admin_role(db, metadata):
        raise HTTPException(status_code=403, detail="Not authorized to update this post")
    if payload.content is not None:
        post.content = payload.content
    if payload.doc_uri:
        post.doc_uri = payload.doc_uri
    await db.commit()
    view = await load_post_view(db, post_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return view


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    post = await get_post_or_404(db, post_id)
    if post.user_id != metadata.id and not await has_admin_role(db, metadata):
        raise HTTPException(status_code=403, detail="Not authorized to delete this post")
    await db.execute(delete(PostLike).where(PostLike.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.delete(post)
    await db.commit()
    logger.info("User %s deleted post %s", metadata.id, post_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=PostResponse)
async def toggle_like(
    post_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    await get_post_or_404(db, post_id)
    existing = (await db.execute(
        select(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == metadata.id)
    )).scalar_one_or_none()
    if existing:
        await db.delete(existing)
    else:
        db.add(PostLike(post_id=post_id, user_id=metadata.id))
    await db.commit()
    view = await load_post_view(db, post_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return view
