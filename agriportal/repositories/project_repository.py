from __future__ import annotations
from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.project import InvestmentProject
from agriportal.models.investment import ProjectInvestment, InvestmentStatus
from agriportal.models.moderation import ModerationStatus


def locked_project_query(project_id: int) -> Select:
    """Select a project row and hold it locked until the transaction ends"""
    return (
        select(InvestmentProject)
        .where(InvestmentProject.id == project_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, project_id: int) -> InvestmentProject | None:
        res = await self.db.execute(select(InvestmentProject).where(InvestmentProject.id == project_id))
        return res.scalar_one_or_none()

    async def get_for_update(self, project_id: int) -> InvestmentProject | None:
        # Funding updates read current_funding through this so increments never overlap
        res = await self.db.execute(locked_project_query(project_id))
        return res.scalar_one_or_none()

    async def create(self, project: InvestmentProject) -> InvestmentProject:
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def update(self, project: InvestmentProject) -> InvestmentProject:
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def delete(self, project: InvestmentProject) -> None:
        await self.db.delete(project)
        await self.db.commit()

    async def list(
        self,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
        exclude_rejected: bool = False,
    ) -> list[InvestmentProject]:
        stmt = select(InvestmentProject)
        if exclude_rejected:
            stmt = stmt.where(InvestmentProject.moderation_status != ModerationStatus.REJECTED.value)
        if status:
            stmt = stmt.where(InvestmentProject.status == status)
        stmt = stmt.order_by(InvestmentProject.created_at.desc(), InvestmentProject.id.desc())
        res = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def list_by_owner(self, user_id: int) -> list[InvestmentProject]:
        res = await self.db.execute(
            select(InvestmentProject)
            .where(InvestmentProject.user_id == user_id)
            .order_by(InvestmentProject.created_at.desc(), InvestmentProject.id.desc())
        )
        return list(res.scalars().all())

    async def list_by_ids(self, project_ids: set[int]) -> list[InvestmentProject]:
        if not project_ids:
            return []
        res = await self.db.execute(select(InvestmentProject).where(InvestmentProject.id.in_(project_ids)))
        return list(res.scalars().all())

    async def investor_counts(self, project_ids: list[int]) -> dict[int, int]:
        """Distinct investors with a confirmed investment, per project"""
        if not project_ids:
            return {}
        res = await self.db.execute(
            select(
                ProjectInvestment.project_id,
                func.count(func.distinct(ProjectInvestment.investor_id)),
            )
            .where(
                ProjectInvestment.project_id.in_(project_ids),
                ProjectInvestment.status == InvestmentStatus.CONFIRMED.value,
            )
            .group_by(ProjectInvestment.project_id)
        )
        return {project_id: count for project_id, count in res.all()}
