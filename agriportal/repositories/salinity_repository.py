from __future__ import annotations
from datetime import date
from sqlalchemy import select, func, extract
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.salinity import SalinityForecast


class SalinityRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_many(self, rows: list[SalinityForecast]) -> None:
        self.db.add_all(rows)
        await self.db.commit()

    async def count(self) -> int:
        res = await self.db.execute(select(func.count(SalinityForecast.id)))
        return res.scalar() or 0

    async def list_for_province(
        self,
        province: str,
        start: date | None = None,
        end: date | None = None,
        year: int | None = None,
    ) -> list[SalinityForecast]:
        # Province names are matched case-insensitively
        stmt = select(SalinityForecast).where(func.lower(SalinityForecast.province) == province.strip().lower())
        if start is not None:
            stmt = stmt.where(SalinityForecast.forecast_date >= start)
        if end is not None:
            stmt = stmt.where(SalinityForecast.forecast_date <= end)
        if year is not None:
            stmt = stmt.where(extract("year", SalinityForecast.forecast_date) == year)
        res = await self.db.execute(stmt.order_by(SalinityForecast.forecast_date.asc()))
        return list(res.scalars().all())

    async def latest_per_province(self) -> list[SalinityForecast]:
        latest = (
            select(
                SalinityForecast.province,
                func.max(SalinityForecast.forecast_date).label("latest_date"),
            )
            .group_by(SalinityForecast.province)
            .subquery()
        )
        res = await self.db.execute(
            select(SalinityForecast)
            .join(
                latest,
                (SalinityForecast.province == latest.c.province)
                & (SalinityForecast.forecast_date == latest.c.latest_date),
            )
            .order_by(SalinityForecast.province)
        )
        return list(res.scalars().all())
