from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.investment import ProjectInvestment, InvestmentStatus


class InvestmentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, investment_id: int) -> ProjectInvestment | None:
        res = await self.db.execute(select(ProjectInvestment).where(ProjectInvestment.id == investment_id))
        return res.scalar_one_or_none()

    async def create(self, investment: ProjectInvestment) -> ProjectInvestment:
        self.db.add(investment)
        await self.db.commit()
        await self.db.refresh(investment)
        return investment

    async def update(self, investment: ProjectInvestment) -> ProjectInvestment:
        await self.db.commit()
        await self.db.refresh(investment)
        return investment

    async def list_by_project(self, project_id: int) -> list[ProjectInvestment]:
        res = await self.db.execute(
            select(ProjectInvestment)
            .where(ProjectInvestment.project_id == project_id)
            .order_by(ProjectInvestment.created_at.desc(), ProjectInvestment.id.desc())
        )
        return list(res.scalars().all())

    async def list_by_investor(self, investor_id: int, limit: int | None = None) -> list[ProjectInvestment]:
        stmt = (
            select(ProjectInvestment)
            .where(ProjectInvestment.investor_id == investor_id)
            .order_by(ProjectInvestment.created_at.desc(), ProjectInvestment.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def has_confirmed(self, investor_id: int, project_id: int) -> bool:
        res = await self.db.execute(
            select(ProjectInvestment.id)
            .where(
                ProjectInvestment.investor_id == investor_id,
                ProjectInvestment.project_id == project_id,
                ProjectInvestment.status == InvestmentStatus.CONFIRMED.value,
            )
            .limit(1)
        )
        return res.scalar_one_or_none() is not None
