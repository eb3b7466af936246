from __future__ import annotations
from sqlalchemy import select, func, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.follow import UserFollow, ProjectFollow


class FollowRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Users

    async def get_user_follow(self, follower_id: int, following_id: int) -> UserFollow | None:
        res = await self.db.execute(
            select(UserFollow).where(UserFollow.follower_id == follower_id, UserFollow.following_id == following_id)
        )
        return res.scalar_one_or_none()

    async def add(self, follow: UserFollow | ProjectFollow) -> UserFollow | ProjectFollow:
        self.db.add(follow)
        await self.db.commit()
        await self.db.refresh(follow)
        return follow

    async def remove(self, follow: UserFollow | ProjectFollow) -> None:
        await self.db.delete(follow)
        await self.db.commit()

    async def follower_count(self, user_id: int) -> int:
        res = await self.db.execute(select(func.count(UserFollow.id)).where(UserFollow.following_id == user_id))
        return res.scalar_one()

    async def following_count(self, user_id: int) -> int:
        res = await self.db.execute(select(func.count(UserFollow.id)).where(UserFollow.follower_id == user_id))
        return res.scalar_one()

    async def list_followers(self, user_id: int, limit: int = 20, offset: int = 0) -> list[UserFollow]:
        res = await self.db.execute(
            select(UserFollow)
            .where(UserFollow.following_id == user_id)
            .order_by(UserFollow.created_at.desc(), UserFollow.id.desc())
            .limit(limit).offset(offset)
        )
        return list(res.scalars().all())

    async def list_following(self, user_id: int, limit: int = 20, offset: int = 0) -> list[UserFollow]:
        res = await self.db.execute(
            select(UserFollow)
            .where(UserFollow.follower_id == user_id)
            .order_by(UserFollow.created_at.desc(), UserFollow.id.desc())
            .limit(limit).offset(offset)
        )
        return list(res.scalars().all())

    async def following_ids(self, user_id: int) -> set[int]:
        res = await self.db.execute(select(UserFollow.following_id).where(UserFollow.follower_id == user_id))
        return set(res.scalars().all())

    # Projects

    async def get_project_follow(self, user_id: int, project_id: int) -> ProjectFollow | None:
        res = await self.db.execute(
            select(ProjectFollow).where(ProjectFollow.user_id == user_id, ProjectFollow.project_id == project_id)
        )
        return res.scalar_one_or_none()

    async def project_follower_count(self, project_id: int) -> int:
        res = await self.db.execute(select(func.count(ProjectFollow.id)).where(ProjectFollow.project_id == project_id))
        return res.scalar_one()

    async def list_project_followers(self, project_id: int, limit: int = 20, offset: int = 0) -> list[ProjectFollow]:
        res = await self.db.execute(
            select(ProjectFollow)
            .where(ProjectFollow.project_id == project_id)
            .order_by(ProjectFollow.created_at.desc(), ProjectFollow.id.desc())
            .limit(limit).offset(offset)
        )
        return list(res.scalars().all())

    async def list_followed_projects(self, user_id: int, limit: int = 20, offset: int = 0) -> list[ProjectFollow]:
        res = await self.db.execute(
            select(ProjectFollow)
            .where(ProjectFollow.user_id == user_id)
            .order_by(ProjectFollow.created_at.desc(), ProjectFollow.id.desc())
            .limit(limit).offset(offset)
        )
        return list(res.scalars().all())

    async def delete_for_user(self, user_id: int, project_ids: list[int] | None = None) -> None:
        """Drop every follow made by or pointing at a user, plus follows of their projects"""
        await self.db.execute(
            delete(UserFollow).where(or_(UserFollow.follower_id == user_id, UserFollow.following_id == user_id))
        )
        project_filter = ProjectFollow.user_id == user_id
        if project_ids:
            project_filter = or_(project_filter, ProjectFollow.project_id.in_(project_ids))
        await self.db.execute(delete(ProjectFollow).where(project_filter))
