from datetime import datetime
from pydantic import BaseModel


class UserStats(BaseModel):
    posts_count: int = 0
    products_count: int = 0
    comments_count: int = 0
    likes_received: int = 0
    projects_count: int = 0
    investments_count: int = 0
    total_invested: int = 0
    unread_notifications: int = 0
    points: int = 0


class Activity(BaseModel):
    id: str
    type: str
    title: str
    description: str
    link: str | None = None
    created_at: datetime
