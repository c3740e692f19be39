from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class SocialLinks(BaseModel):
    github: str = ""
    linkedin: str = ""
    twitter: str = ""
    website: str = ""


class SocialLinksUpdate(BaseModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None


class ProfileResponse(BaseModel):
    id: int
    name: str
    bio: str
    skills: str
    social: SocialLinks
    avatar: str
    roles: List[int] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[str] = None
    social: Optional[SocialLinksUpdate] = None
    avatar: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    name: str
    avatar: str


class SearchUserResponse(BaseModel):
    id: int
    name: str
    bio: str
    avatar: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
