from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from agriportal.db.base import Base


class UserSettings(Base):
    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True)

    language: Mapped[str] = mapped_column(String(5), default="vi")
    theme: Mapped[str] = mapped_column(String(10), default="light")

    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    email_new_follower: Mapped[bool] = mapped_column(Boolean, default=True)
    email_post_like: Mapped[bool] = mapped_column(Boolean, default=False)
    email_post_comment: Mapped[bool] = mapped_column(Boolean, default=True)
    email_project_update: Mapped[bool] = mapped_column(Boolean, default=True)

    push_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    push_new_follower: Mapped[bool] = mapped_column(Boolean, default=True)
    push_post_like: Mapped[bool] = mapped_column(Boolean, default=True)
    push_post_comment: Mapped[bool] = mapped_column(Boolean, default=True)
    push_project_update: Mapped[bool] = mapped_column(Boolean, default=True)

    profile_visibility: Mapped[str] = mapped_column(String(20), default="public")
    show_email: Mapped[bool] = mapped_column(Boolean, default=False)
    show_phone: Mapped[bool] = mapped_column(Boolean, default=False)
    allow_messages: Mapped[bool] = mapped_column(Boolean, default=True)
    show_activity: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
