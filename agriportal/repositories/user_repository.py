from __future__ import annotations
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.user import User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        res = await self.db.execute(select(User).where(User.id == user_id))
        return res.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        res = await self.db.execute(select(User).where(User.username == username))
        return res.scalar_one_or_none()

    async def usernames_by_ids(self, user_ids: set[int]) -> dict[int, str]:
        if not user_ids:
            return {}
        res = await self.db.execute(select(User.id, User.username).where(User.id.in_(user_ids)))
        return {row.id: row.username for row in res}

    async def list_by_ids(self, user_ids: set[int]) -> dict[int, User]:
        if not user_ids:
            return {}
        res = await self.db.execute(select(User).where(User.id.in_(user_ids)))
        return {u.id: u for u in res.scalars().all()}

    async def create(self, user: User) -> User:
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update(self, user: User) -> User:
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def list(self) -> list[User]:
        res = await self.db.execute(select(User).order_by(User.id))
        return list(res.scalars().all())

    async def search(
        self,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[User]:
        stmt = select(User)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(User.username.ilike(pattern), User.phone_number.ilike(pattern)))
        if role:
            stmt = stmt.where(User.role == role)
        if status == "banned":
            stmt = stmt.where(User.is_banned == True)  # noqa: E712
        elif status == "active":
            stmt = stmt.where(User.is_banned == False)  # noqa: E712
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        res = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def count(self, banned: bool | None = None) -> int:
        stmt = select(func.count(User.id))
        if banned is not None:
            stmt = stmt.where(User.is_banned == banned)
        return (await self.db.execute(stmt)).scalar_one()

    async def has_admin_user(self) -> bool:
        res = await self.db.execute(select(User.id).where(User.is_admin == True).limit(1))  # noqa: E712
        return res.scalar_one_or_none() is not None

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()
