from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.user_settings import UserSettings


class SettingsRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_user(self, user_id: int) -> UserSettings | None:
        res = await self.db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
        return res.scalar_one_or_none()

    async def create(self, user_settings: UserSettings) -> UserSettings:
        self.db.add(user_settings)
        await self.db.commit()
        await self.db.refresh(user_settings)
        return user_settings

    async def update(self, user_settings: UserSettings) -> UserSettings:
        await self.db.commit()
        await self.db.refresh(user_settings)
        return user_settings
