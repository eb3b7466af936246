from __future__ import annotations
from sqlalchemy import select, func, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.moderation import ContentReport


class ReportRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, report_id: int) -> ContentReport | None:
        res = await self.db.execute(select(ContentReport).where(ContentReport.id == report_id))
        return res.scalar_one_or_none()

    async def create(self, report: ContentReport) -> ContentReport:
        self.db.add(report)
        await self.db.commit()
        await self.db.refresh(report)
        return report

    async def update(self, report: ContentReport) -> ContentReport:
        await self.db.commit()
        await self.db.refresh(report)
        return report

    async def list(self, status: str | None = None, limit: int = 20, offset: int = 0) -> list[ContentReport]:
        stmt = select(ContentReport)
        if status:
            stmt = stmt.where(ContentReport.status == status)
        stmt = stmt.order_by(ContentReport.created_at.desc(), ContentReport.id.desc())
        res = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def count(self, status: str | None = None) -> int:
        stmt = select(func.count(ContentReport.id))
        if status:
            stmt = stmt.where(ContentReport.status == status)
        return (await self.db.execute(stmt)).scalar_one()

    async def detach_user(self, user_id: int) -> None:
        """Keep a deleted user's reports and resolutions, without the user"""
        await self.db.execute(update(ContentReport).where(ContentReport.reporter_id == user_id).values(reporter_id=None))
        await self.db.execute(update(ContentReport).where(ContentReport.resolved_by == user_id).values(resolved_by=None))

    async def delete_about_user(self, user_id: int) -> None:
        await self.db.execute(
            delete(ContentReport).where(ContentReport.content_type == "user", ContentReport.content_id == user_id)
        )
