from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, or_, select
from app.database import get_db
from app.security import TokenData, is_admin, verify_token
from app.storage.oss import StorageError, upload_bytes
from app.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, build_pagination, page_offset
from models.user import User
from schemas.common import PaginatedResponse
from schemas.user import ProfileResponse, ProfileUpdateRequest, SearchUserResponse, SocialLinks

router = APIRouter()

SOCIAL_FIELDS = ("github", "linkedin", "twitter", "website")


def to_profile(user: User, roles: list[int] | None = None) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        name=user.name or "",
        bio=user.bio or "",
        skills=user.skills or "",
        social=SocialLinks(**{name: getattr(user, name) or "" for name in SOCIAL_FIELDS}),
        avatar=user.avatar or "",
        roles=roles or [],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def apply_profile_update(user: User, payload: ProfileUpdateRequest) -> None:
    # fields left out of the request stay untouched
    for name in ("name", "bio", "skills", "avatar"):
        value = getattr(payload, name)
        if value is not None:
            setattr(user, name, value)
    if payload.social is not None:
        for name in SOCIAL_FIELDS:
            value = getattr(payload.social, name)
            if value is not None:
                setattr(user, name, value)


@router.get("", response_model=ProfileResponse)
async def user_me(metadata: TokenData = Depends(verify_token), db: AsyncSession = Depends(get_db)):
    user = await get_user_or_404(db, metadata.id)
    return to_profile(user, metadata.roles)


@router.put("", response_model=ProfileResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, metadata.id)
    apply_profile_update(user, payload)
    await db.commit()
    await db.refresh(user)
    return to_profile(user, metadata.roles)


@router.post("/avatar", response_model=ProfileResponse)
async def upload_avatar(
    image: UploadFile = File(...),
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, metadata.id)
    try:
        url = await upload_bytes(
            await image.read(),
            image.filename,
            category="avatars",
            user_id=metadata.id,
            content_type=image.content_type,
        )
    except StorageError:
        raise HTTPException(status_code=500, detail="Upload failed")
    user.avatar = url
    await db.commit()
    await db.refresh(user)
    return to_profile(user, metadata.roles)


@router.get("/search", response_model=PaginatedResponse[SearchUserResponse])
async def search_users(
    search: str = "",
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    filters = [User.id != metadata.id, User.name != ""]
    term = search.strip().lower()
    if term:
        filters.append(or_(
            func.lower(User.name).contains(term, autoescape=True),
            func.lower(User.bio).contains(term, autoescape=True),
            func.lower(User.skills).contains(term, autoescape=True),
        ))
    rows = await db.execute(
        select(User).where(*filters).order_by(User.name, User.id).offset(page_offset(page, limit)).limit(limit)
    )
    users = rows.scalars().all()
    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar() or 0
    return PaginatedResponse[SearchUserResponse](
        items=[
            SearchUserResponse(
                id=u.id,
                name=u.name,
                bio=u.bio or "",
                avatar=u.avatar or "",
                created_at=u.created_at,
                updated_at=u.updated_at,
            ) for u in users
        ],
        pagination=build_pagination(page, limit, total, len(users)),
    )


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_user_by_id(
    user_id: int,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, user_id)
    # roles stay private on public profiles
    return to_profile(user)


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_user(
    user_id: int,
    payload: ProfileUpdateRequest,
    metadata: TokenData = Depends(is_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, user_id)
    apply_profile_update(user, payload)
    await db.commit()
    await db.refresh(user)
    return to_profile(user)
