from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict

from agriportal.schemas.user import UserOut

ModeratedType = Literal["post", "product", "project"]
DeletableType = Literal["post", "product", "project", "comment"]
ReportContentTypeLiteral = Literal["post", "product", "project", "comment", "user"]
ReportReasonLiteral = Literal["spam", "inappropriate", "harassment", "misleading", "other"]
ReportStatusLiteral = Literal["pending", "reviewing", "resolved", "dismissed"]


class AdminStats(BaseModel):
    total_users: int = 0
    active_users: int = 0
    banned_users: int = 0
    total_posts: int = 0
    pending_posts: int = 0
    total_products: int = 0
    pending_products: int = 0
    total_projects: int = 0
    pending_projects: int = 0
    total_reports: int = 0
    pending_reports: int = 0
    total_investments: int = 0
    total_comments: int = 0


class AdminUserOut(UserOut):
    is_banned: bool = False
    banned_reason: str | None = None
    points: int = 0
    total_posts: int = 0
    total_products: int = 0


class BanRequest(BaseModel):
    ban_status: bool = True
    reason: str | None = None


class ChangeRoleRequest(BaseModel):
    new_role: Literal["farmer", "business"]
    make_admin: bool = False


class ModerateRequest(BaseModel):
    new_status: Literal["approved", "rejected"]
    note: str | None = None


class ModerationItem(BaseModel):
    id: int
    content_type: ModeratedType
    title: str
    user_id: int
    author_username: str | None = None
    moderation_status: str
    moderation_note: str | None = None
    moderated_at: datetime | None = None
    created_at: datetime


class ReportCreate(BaseModel):
    content_type: ReportContentTypeLiteral
    content_id: int
    reason: ReportReasonLiteral
    description: str | None = None


class ResolveReportRequest(BaseModel):
    new_status: Literal["resolved", "dismissed"]
    resolution_note: str | None = None


class ReportOut(BaseModel):
    id: int
    reporter_id: int | None = None
    reporter_username: str | None = None
    content_type: str
    content_id: int
    reason: str
    description: str | None = None
    status: str
    resolved_by: int | None = None
    resolver_username: str | None = None
    resolved_at: datetime | None = None
    resolution_note: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
