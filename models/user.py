from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from app.database import Base

class User(Base):
    """Public profile; shares its primary key with the Auth record."""
    __tablename__ = "users"

    id = Column(Integer, ForeignKey("auths.id"), primary_key=True, autoincrement=False)
    name = Column(String, default="", nullable=False)
    bio = Column(Text, default="", nullable=False)
    skills = Column(String, default="", nullable=False)
    github = Column(String, default="", nullable=False)
    linkedin = Column(String, default="", nullable=False)
    twitter = Column(String, default="", nullable=False)
    website = Column(String, default="", nullable=False)
    avatar = Column(String, default="", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
