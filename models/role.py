import enum

from sqlalchemy import Column, Integer, String
from app.database import Base


class RoleEnum(enum.IntEnum):
    user = 101
    moderator = 102
    admin = 103


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    enum = Column(Integer, unique=True, index=True, nullable=False)
