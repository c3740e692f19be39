from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from schemas.user import UserSummary


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1)
    doc_uri: str = ""


class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1)
    doc_uri: Optional[str] = None


class PostResponse(BaseModel):
    id: int
    content: str
    doc_uri: str
    likes: List[int] = []
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: UserSummary


class GeneratePostRequest(BaseModel):
    message: str = Field(..., min_length=1)


class GeneratePostResponse(BaseModel):
    content: str


class CommentCreate(BaseModel):
    post_id: int
    content: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: UserSummary
