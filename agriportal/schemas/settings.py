from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Any, Literal


class SettingsOut(BaseModel):
    user_id: int
    language: str
    theme: str
    email_notifications: bool
    email_new_follower: bool
    email_post_like: bool
    email_post_comment: bool
    email_project_update: bool
    push_notifications: bool
    push_new_follower: bool
    push_post_like: bool
    push_post_comment: bool
    push_project_update: bool
    profile_visibility: str
    show_email: bool
    show_phone: bool
    allow_messages: bool
    show_activity: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettingsUpdate(BaseModel):
    language: Literal["vi", "en"] | None = None
    theme: Literal["light", "dark", "system"] | None = None
    email_notifications: bool | None = None
    email_new_follower: bool | None = None
    email_post_like: bool | None = None
    email_post_comment: bool | None = None
    email_project_update: bool | None = None
    push_notifications: bool | None = None
    push_new_follower: bool | None = None
    push_post_like: bool | None = None
    push_post_comment: bool | None = None
    push_project_update: bool | None = None
    profile_visibility: Literal["public", "followers", "private"] | None = None
    show_email: bool | None = None
    show_phone: bool | None = None
    allow_messages: bool | None = None
    show_activity: bool | None = None


class DataExport(BaseModel):
    profile: dict[str, Any]
    settings: dict[str, Any] | None
    posts: list[dict[str, Any]]
    comments: list[dict[str, Any]]
    products: list[dict[str, Any]]
    investments: list[dict[str, Any]]
    export_date: datetime
