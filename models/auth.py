from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base


class Auth(Base):
    __tablename__ = "auths"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AuthRole(Base):
    __tablename__ = "auth_roles"
    __table_args__ = (
        UniqueConstraint('auth_id', 'role', name='uq_auth_role'),
    )

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(Integer, ForeignKey("auths.id"), index=True, nullable=False)
    role = Column(Integer, index=True, nullable=False)  # RoleEnum value
