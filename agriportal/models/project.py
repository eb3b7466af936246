from __future__ import annotations
from datetime import datetime, date
from enum import Enum
from sqlalchemy import String, Date, DateTime, ForeignKey, Text, BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agriportal.db.base import Base
from agriportal.models.moderation import ModeratedMixin


class ProjectStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    FUNDED = "funded"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvestmentProject(ModeratedMixin, Base):
    __tablename__ = "investment_projects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    # Amounts are whole VND
    funding_goal: Mapped[int] = mapped_column(BigInteger)
    current_funding: Mapped[int] = mapped_column(BigInteger, default=0)
    farmers_impacted: Mapped[int] = mapped_column(Integer)
    area: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default=ProjectStatus.ACTIVE.value, index=True)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    start_date: Mapped[date | None] = mapped_column(Date, default=None)
    end_date: Mapped[date | None] = mapped_column(Date, default=None)

    investments: Mapped[list["ProjectInvestment"]] = relationship(back_populates="project", cascade="all, delete-orphan")
    ratings: Mapped[list["ProjectRating"]] = relationship(back_populates="project", cascade="all, delete-orphan")
    followers: Mapped[list["ProjectFollow"]] = relationship(cascade="all, delete-orphan")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
