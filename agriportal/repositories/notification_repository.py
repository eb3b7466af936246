from __future__ import annotations
from sqlalchemy import select, func, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.notification import Notification


class NotificationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, notification_id: int) -> Notification | None:
        res = await self.db.execute(select(Notification).where(Notification.id == notification_id))
        return res.scalar_one_or_none()

    async def create(self, notification: Notification) -> Notification:
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def update(self, notification: Notification) -> Notification:
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def delete(self, notification: Notification) -> None:
        await self.db.delete(notification)
        await self.db.commit()

    async def list_for_user(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        unread_only: bool = False,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read == False)  # noqa: E712
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        res = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def count_unread(self, user_id: int) -> int:
        res = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
        )
        return res.scalar() or 0

    async def mark_all_read(self, user_id: int) -> int:
        res = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        await self.db.commit()
        return res.rowcount or 0

    async def delete_read(self, user_id: int) -> int:
        res = await self.db.execute(
            delete(Notification).where(
                Notification.user_id == user_id,
                Notification.is_read == True,  # noqa: E712
            )
        )
        await self.db.commit()
        return res.rowcount or 0
