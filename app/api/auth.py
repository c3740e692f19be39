import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.security import TokenData, create_token, hash_password, is_admin, verify_password
from app.services.email import EmailDeliveryError, send_password_reset_email
from models.auth import Auth, AuthRole
from models.reset_token import ResetToken
from models.role import Role, RoleEnum
from models.user import User
from schemas.auth import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    TokenResponse,
    UpdateRolesRequest,
    UpdateRolesResponse,
)
from schemas.common import MessageResponse

router = APIRouter()
logger = logging.getLogger("devconnect.auth")


async def find_auth(db: AsyncSession, username_or_email: str) -> Auth | None:
    res = await db.execute(
        select(Auth).where(or_(Auth.username == username_or_email, Auth.email == username_or_email))
    )
    return res.scalars().first()


async def get_auth_roles(db: AsyncSession, auth_id: int) -> list[int]:
    rows = await db.execute(select(AuthRole.role).where(AuthRole.auth_id == auth_id).order_by(AuthRole.id))
    return [role for (role,) in rows]


async def set_auth_roles(db: AsyncSession, auth_id: int, roles: list[int]) -> None:
    await db.execute(delete(AuthRole).where(AuthRole.auth_id == auth_id))
    for role in dict.fromkeys(roles):
        db.add(AuthRole(auth_id=auth_id, role=role))


async def check_duplicate_username_or_email(db: AsyncSession, payload: SignupRequest) -> None:
    if (await db.execute(select(Auth.id).where(Auth.username == payload.username))).first():
        raise HTTPException(status_code=400, detail="Failed! Username is already in use!")
    if (await db.execute(select(Auth.id).where(Auth.email == payload.email))).first():
        raise HTTPException(status_code=400, detail="Failed! Email is already in use!")


async def check_roles_existed(db: AsyncSession, payload: SignupRequest) -> None:
    for role in payload.roles or []:
        exists = (await db.execute(select(Role.id).where(Role.enum == role))).first()
        if not exists:
            raise HTTPException(status_code=400, detail=f"Failed! Role {role} does not exist!")


@router.post("/signup", status_code=201, response_model=MessageResponse)
async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db)):
    await check_duplicate_username_or_email(db, payload)
    await check_roles_existed(db, payload)
    auth = Auth(
        username=payload.username,
        email=payload.email,
        password=hash_password(payload.password),
    )
    db.add(auth)
    await db.flush()
    await set_auth_roles(db, auth.id, payload.roles or [RoleEnum.user.value])
    # profile shares the auth id
    db.add(User(id=auth.id))
    await db.commit()
    logger.info("Registered user %s", auth.id)
    return MessageResponse(message="User registered successfully!")


@router.post("/signin", response_model=TokenResponse)
async def signin(payload: SigninRequest, db: AsyncSession = Depends(get_db)):
    auth = await find_auth(db, payload.username_or_email)
    if not auth:
        raise HTTPException(status_code=404, detail="User Not Found.")
    if not verify_password(payload.password, auth.password):
        raise HTTPException(status_code=401, detail="Invalid Password!")
    roles = await get_auth_roles(db, auth.id)
    token = create_token(auth.id, auth.username, auth.email, roles)
    return TokenResponse(access_token=token)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(payload: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    auth = await find_auth(db, payload.username_or_email)
    if not auth:
        raise HTTPException(status_code=404, detail="No account found with that username or email.")
    roles = await get_auth_roles(db, auth.id)
    token = create_token(
        auth.id,
        auth.username,
        auth.email,
        roles,
        expires_seconds=settings.RESET_TOKEN_EXPIRE_SECONDS,
        unique=True,
    )
    db.add(ResetToken(
        token=token,
        user_id=auth.id,
        expires_at=datetime.utcnow() + timedelta(seconds=settings.RESET_TOKEN_EXPIRE_SECONDS),
    ))
    await db.commit()
    try:
        await send_password_reset_email(auth.email, token)
    except EmailDeliveryError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return MessageResponse(message="Password reset email sent successfully.")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(payload: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    reset_token = (await db.execute(
        select(ResetToken).where(ResetToken.token == payload.token)
    )).scalar_one_or_none()
    if not reset_token:
        raise HTTPException(status_code=400, detail="Invalid reset token.")
    if reset_token.expires_at < datetime.utcnow():
        raise HTTPException(status_code=400, detail="Password reset token has expired.")
    if reset_token.is_used:
        raise HTTPException(status_code=400, detail="This password reset link has already been used.")
    auth = (await db.execute(select(Auth).where(Auth.id == reset_token.user_id))).scalar_one_or_none()
    if not auth:
        raise HTTPException(status_code=400, detail="Invalid reset token.")
    reset_token.is_used = True
    auth.password = hash_password(payload.new_password)
    await db.commit()
    logger.info("Password reset for user %s", auth.id)
    return MessageResponse(message="Password has been reset successfully.")


@router.post("/update-roles", response_model=UpdateRolesResponse)
async def update_user_roles(
    payload: UpdateRolesRequest,
    metadata: TokenData = Depends(is_admin),
    db: AsyncSession = Depends(get_db),
):
    if not payload.roles:
        raise HTTPException(status_code=400, detail="At least one role must be provided")
    valid_roles = {role.value for role in RoleEnum}
    if any(role not in valid_roles for role in payload.roles):
        raise HTTPException(status_code=400, detail="Invalid role values provided")
    auth = (await db.execute(select(Auth).where(Auth.id == payload.user_id))).scalar_one_or_none()
    if not auth:
        raise HTTPException(status_code=404, detail="User not found")
    await set_auth_roles(db, auth.id, payload.roles)
    await db.commit()
    logger.info("User %s changed roles of %s to %s", metadata.id, auth.id, payload.roles)
    return UpdateRolesResponse(
        message="User roles updated successfully",
        roles=await get_auth_roles(db, auth.id),
    )
