import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from models.auth import Auth, AuthRole
from models.role import Role, RoleEnum


JWT_SECRET = settings.AUTH_JWT_SECRET or "devconnect-dev-secret"
JWT_ALGORITHM = settings.AUTH_JWT_ALGORITHM or "HS256"
logger = logging.getLogger("devconnect.security")

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


@dataclass
class TokenData:
    id: int
    username: str = ""
    email: str = ""
    roles: list[int] = field(default_factory=list)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_token(
    user_id: int,
    username: str,
    email: str,
    roles: list[int],
    *,
    expires_seconds: int | None = None,
    unique: bool = False,
) -> str:
    expire = datetime.utcnow() + timedelta(seconds=expires_seconds or settings.ACCESS_TOKEN_EXPIRE_SECONDS)
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "username": username,
        "email": email,
        "roles": list(roles),
        "exp": expire,
    }
    if unique:
        payload["jti"] = uuid.uuid4().hex
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _mask_user_id(user_id) -> str:
    value = str(user_id or "").strip()
    if not value:
        return "-"
    if len(value) <= 8:
        return value
    return f"{value[:4]}...{value[-4:]}"


def _audit_auth_failure(request: Request | None, reason: str, *, user_id=None) -> None:
    if not request:
        logger.warning("AUTH_DENY reason=%s", reason)
        return
    path = getattr(getattr(request, "url", None), "path", "-")
    method = getattr(request, "method", "-")
    client = getattr(request, "client", None)
    ip = getattr(client, "host", "-") if client else "-"
    logger.warning(
        "AUTH_DENY reason=%s method=%s path=%s ip=%s user=%s",
        reason,
        method,
        path,
        ip,
        _mask_user_id(user_id),
    )


def decode_token(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


def _token_data_from_payload(payload: dict) -> TokenData | None:
    subject = payload.get("id") or payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None
    roles = []
    for role in payload.get("roles") or []:
        try:
            roles.append(int(role))
        except (TypeError, ValueError):
            continue
    return TokenData(
        id=user_id,
        username=payload.get("username") or "",
        email=payload.get("email") or "",
        roles=roles,
    )


def verify_token(request: Request) -> TokenData:
    raw = (request.headers.get("authorization") or "").strip()
    if not raw:
        _audit_auth_failure(request, "missing_token")
        raise HTTPException(status_code=403, detail="No token provided!")
    if not raw.startswith("Bearer "):
        _audit_auth_failure(request, "invalid_token_format")
        raise HTTPException(status_code=403, detail="Invalid token format!")
    token = raw.split(" ", 1)[1].strip()
    try:
        payload = decode_token(token)
    except JWTError:
        _audit_auth_failure(request, "invalid_token")
        raise HTTPException(status_code=401, detail="Unauthorized!")
    metadata = _token_data_from_payload(payload)
    if metadata is None:
        _audit_auth_failure(request, "token_missing_sub")
        raise HTTPException(status_code=401, detail="Unauthorized!")
    return metadata


async def load_role_names(db: AsyncSession, auth_id: int) -> set[str]:
    rows = await db.execute(
        select(Role.name)
        .join(AuthRole, AuthRole.role == Role.enum)
        .where(AuthRole.auth_id == auth_id)
    )
    return {name.lower() for (name,) in rows}


async def has_admin_role(db: AsyncSession, metadata: TokenData) -> bool:
    """Admin check against the stored roles, for owner-or-admin rules."""
    return RoleEnum.admin.name in await load_role_names(db, metadata.id)


async def _require_role(
    request: Request,
    db: AsyncSession,
    metadata: TokenData,
    accepted: set[str],
    message: str,
) -> TokenData:
    if not metadata or not metadata.id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    auth = (await db.execute(select(Auth).where(Auth.id == metadata.id))).scalar_one_or_none()
    if not auth:
        raise HTTPException(status_code=404, detail="User not found")
    role_names = await load_role_names(db, auth.id)
    if role_names & accepted:
        return metadata
    _audit_auth_failure(request, "missing_role", user_id=metadata.id)
    raise HTTPException(status_code=403, detail=message)


async def is_admin(
    request: Request,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> TokenData:
    return await _require_role(request, db, metadata, {RoleEnum.admin.name}, "Require Admin Role!")


async def is_moderator(
    request: Request,
    metadata: TokenData = Depends(verify_token),
    db: AsyncSession = Depends(get_db),
) -> TokenData:
    return await _require_role(
        request,
        db,
        metadata,
        {RoleEnum.moderator.name, RoleEnum.admin.name},
        "Require Moderator Role!",
    )
