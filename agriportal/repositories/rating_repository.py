from __future__ import annotations
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.rating import ProjectRating


class RatingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_user(self, project_id: int, user_id: int) -> ProjectRating | None:
        res = await self.db.execute(
            select(ProjectRating).where(
                ProjectRating.project_id == project_id,
                ProjectRating.user_id == user_id,
            )
        )
        return res.scalar_one_or_none()

    async def create(self, rating: ProjectRating) -> ProjectRating:
        self.db.add(rating)
        await self.db.commit()
        await self.db.refresh(rating)
        return rating

    async def update(self, rating: ProjectRating) -> ProjectRating:
        await self.db.commit()
        await self.db.refresh(rating)
        return rating

    async def stats(self, project_id: int) -> tuple[float, int]:
        """Return (average rating, number of ratings) for one project"""
        res = await self.db.execute(
            select(func.avg(ProjectRating.rating), func.count(ProjectRating.id))
            .where(ProjectRating.project_id == project_id)
        )
        avg, count = res.one()
        return float(avg or 0), int(count or 0)

    async def list_by_project(self, project_id: int, limit: int, offset: int) -> list[ProjectRating]:
        res = await self.db.execute(
            select(ProjectRating)
            .where(ProjectRating.project_id == project_id)
            .order_by(ProjectRating.created_at.desc(), ProjectRating.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(res.scalars().all())

    async def count_by_project(self, project_id: int) -> int:
        res = await self.db.execute(
            select(func.count(ProjectRating.id)).where(ProjectRating.project_id == project_id)
        )
        return res.scalar() or 0

    async def aggregate_by_project(self) -> list[tuple[int, float, int]]:
        """(project_id, average, count) for every project that has been rated"""
        res = await self.db.execute(
            select(
                ProjectRating.project_id,
                func.avg(ProjectRating.rating),
                func.count(ProjectRating.id),
            ).group_by(ProjectRating.project_id)
        )
        return [(project_id, float(avg), int(count)) for project_id, avg, count in res.all()]
