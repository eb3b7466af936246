from __future__ import annotations
from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Text, Integer, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agriportal.db.base import Base


class ProjectRating(Base):
    __tablename__ = "project_ratings"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_rating_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_project_rating_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("investment_projects.id", ondelete="CASCADE"), index=True)
    project: Mapped["InvestmentProject"] = relationship(back_populates="ratings")
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    rating: Mapped[int] = mapped_column(Integer)
    review: Mapped[str | None] = mapped_column(Text, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
