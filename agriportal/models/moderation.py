from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from agriportal.db.base import Base


class ModerationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ModeratedMixin:
    """Review state shared by posts, products and projects; rejected rows are hidden from public lists"""

    moderation_status: Mapped[str] = mapped_column(String(20), default=ModerationStatus.APPROVED.value, index=True)
    moderation_note: Mapped[str | None] = mapped_column(Text, default=None)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)


class ReportContentType(str, Enum):
    POST = "post"
    PRODUCT = "product"
    PROJECT = "project"
    COMMENT = "comment"
    USER = "user"


class ReportReason(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    HARASSMENT = "harassment"
    MISLEADING = "misleading"
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ContentReport(Base):
    __tablename__ = "content_reports"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    reporter_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    content_type: Mapped[str] = mapped_column(String(20), index=True)
    content_id: Mapped[int] = mapped_column(index=True)
    reason: Mapped[str] = mapped_column(String(20))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(20), default=ReportStatus.PENDING.value, index=True)
    resolved_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    resolution_note: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
