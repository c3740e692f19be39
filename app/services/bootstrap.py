import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.security import hash_password
from models.auth import Auth, AuthRole
from models.role import Role, RoleEnum
from models.user import User

logger = logging.getLogger("devconnect.bootstrap")


async def seed_roles(db: AsyncSession) -> bool:
    count = (await db.execute(select(func.count(Role.id)))).scalar() or 0
    if count:
        return False
    for role in RoleEnum:
        db.add(Role(name=role.name, enum=role.value))
    await db.commit()
    logger.info("Roles initialized successfully")
    return True


async def ensure_admin(db: AsyncSession) -> Auth:
    admin = (await db.execute(
        select(Auth).where(Auth.username == settings.ADMIN_USERNAME)
    )).scalar_one_or_none()
    if admin:
        return admin
    admin = Auth(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        password=hash_password(settings.ADMIN_PASSWORD),
    )
    db.add(admin)
    await db.flush()
    db.add(AuthRole(auth_id=admin.id, role=RoleEnum.admin.value))
    db.add(User(
        id=admin.id,
        name="Admin",
        bio="System Administrator",
        skills="Administration, System Management",
        github="https://github.com/admin",
        linkedin="https://linkedin.com/in/admin",
    ))
    await db.commit()
    logger.info("Admin user created successfully")
    return admin


async def bootstrap(db: AsyncSession) -> None:
    await seed_roles(db)
    await ensure_admin(db)
