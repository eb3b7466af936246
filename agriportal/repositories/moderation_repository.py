from __future__ import annotations
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.investment import ProjectInvestment
from agriportal.models.post import Post, PostComment
from agriportal.models.product import Product
from agriportal.models.project import InvestmentProject

# Content kinds that carry a moderation_status
MODERATED_MODELS = {
    "post": Post,
    "product": Product,
    "project": InvestmentProject,
}


class ModerationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, content_type: str, content_id: int) -> Post | Product | InvestmentProject | None:
        model = MODERATED_MODELS[content_type]
        res = await self.db.execute(select(model).where(model.id == content_id))
        return res.scalar_one_or_none()

    async def list(self, content_type: str, status: str | None = None, limit: int = 20, offset: int = 0):
        model = MODERATED_MODELS[content_type]
        stmt = select(model)
        if status:
            stmt = stmt.where(model.moderation_status == status)
        stmt = stmt.order_by(model.created_at.desc(), model.id.desc())
        res = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def count(self, content_type: str, status: str | None = None) -> int:
        model = MODERATED_MODELS[content_type]
        stmt = select(func.count(model.id))
        if status:
            stmt = stmt.where(model.moderation_status == status)
        return (await self.db.execute(stmt)).scalar_one()

    async def update(self, item):
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def delete(self, item) -> None:
        await self.db.delete(item)
        await self.db.commit()

    async def count_investments(self) -> int:
        return (await self.db.execute(select(func.count(ProjectInvestment.id)))).scalar_one()

    async def count_comments(self) -> int:
        return (await self.db.execute(select(func.count(PostComment.id)))).scalar_one()
