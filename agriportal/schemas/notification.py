from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Literal

NotificationTypeLiteral = Literal[
    "POST_LIKE",
    "POST_COMMENT",
    "COMMENT_REPLY",
    "PROJECT_INVESTMENT",
    "PROJECT_RATING",
    "FOLLOW",
    "MENTION",
    "SYSTEM",
]


class NotificationOut(BaseModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    link: str | None = None
    actor_id: int | None = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SystemNotificationCreate(BaseModel):
    user_id: int
    title: str
    message: str
    link: str | None = None
    type: NotificationTypeLiteral = "SYSTEM"


class UnreadCount(BaseModel):
    count: int
