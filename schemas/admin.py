from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from schemas.post import PostResponse


class DashboardOverview(BaseModel):
    total_users: int
    total_posts: int
    total_comments: int
    new_users: int
    new_posts: int
    new_comments: int


class RecentUser(BaseModel):
    id: int
    name: str
    avatar: str
    bio: str
    created_at: Optional[datetime] = None


class RecentActivity(BaseModel):
    posts: List[PostResponse]
    users: List[RecentUser]
    most_liked_posts: List[PostResponse]
    most_commented_posts: List[PostResponse]


class DashboardResponse(BaseModel):
    overview: DashboardOverview
    recent_activity: RecentActivity


class DailyCount(BaseModel):
    date: str
    count: int


class RoleCount(BaseModel):
    role: str
    count: int


class HistoryResponse(BaseModel):
    users_over_time: List[DailyCount]
    posts_over_time: List[DailyCount]
    comments_over_time: List[DailyCount]
    role_distribution: List[RoleCount]
