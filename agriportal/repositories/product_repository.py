from __future__ import annotations
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.moderation import ModerationStatus
from agriportal.models.product import Product


class ProductRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, product_id: int) -> Product | None:
        res = await self.db.execute(select(Product).where(Product.id == product_id))
        return res.scalar_one_or_none()

    async def create(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def update(self, product: Product) -> Product:
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self.db.commit()

    async def list(
        self,
        category: str | None = None,
        user_id: int | None = None,
        limit: int | None = 20,
        offset: int = 0,
        exclude_rejected: bool = False,
    ) -> list[Product]:
        stmt = select(Product)
        if exclude_rejected:
            stmt = stmt.where(Product.moderation_status != ModerationStatus.REJECTED.value)
        if category:
            stmt = stmt.where(Product.category == category)
        if user_id is not None:
            stmt = stmt.where(Product.user_id == user_id)
        stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def count_by_user(self, user_ids: set[int] | None = None) -> dict[int, int]:
        stmt = select(Product.user_id, func.count(Product.id))
        if user_ids is not None:
            stmt = stmt.where(Product.user_id.in_(user_ids))
        res = await self.db.execute(stmt.group_by(Product.user_id))
        return {user_id: count for user_id, count in res.all()}
