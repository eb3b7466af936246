from __future__ import annotations
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from agriportal.models.moderation import ModerationStatus
from agriportal.models.post import Post, PostLike, PostComment


class PostRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, post_id: int) -> Post | None:
        res = await self.db.execute(select(Post).where(Post.id == post_id))
        return res.scalar_one_or_none()

    async def create(self, post: Post) -> Post:
        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)
        return post

    async def update(self, post: Post) -> Post:
        await self.db.commit()
        await self.db.refresh(post)
        return post

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.commit()

    async def list(
        self,
        category: str | None = None,
        user_id: int | None = None,
        since: datetime | None = None,
        limit: int | None = 20,
        offset: int = 0,
        user_ids: set[int] | None = None,
        exclude_rejected: bool = False,
    ) -> list[Post]:
        stmt = select(Post)
        if exclude_rejected:
            stmt = stmt.where(Post.moderation_status != ModerationStatus.REJECTED.value)
        if user_ids is not None:
            stmt = stmt.where(Post.user_id.in_(user_ids))
        if category:
            stmt = stmt.where(Post.category == category)
        if user_id is not None:
            stmt = stmt.where(Post.user_id == user_id)
        if since is not None:
            stmt = stmt.where(Post.created_at >= since)
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def count_by_user(self, user_ids: set[int] | None = None) -> dict[int, int]:
        stmt = select(Post.user_id, func.count(Post.id))
        if user_ids is not None:
            stmt = stmt.where(Post.user_id.in_(user_ids))
        res = await self.db.execute(stmt.group_by(Post.user_id))
        return {user_id: count for user_id, count in res.all()}

    # Likes

    async def get_like(self, post_id: int, user_id: int) -> PostLike | None:
        res = await self.db.execute(
            select(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        )
        return res.scalar_one_or_none()

    async def add_like(self, like: PostLike) -> PostLike:
        self.db.add(like)
        await self.db.commit()
        await self.db.refresh(like)
        return like

    async def remove_like(self, like: PostLike) -> None:
        await self.db.delete(like)
        await self.db.commit()

    async def like_counts(self, post_ids: list[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        res = await self.db.execute(
            select(PostLike.post_id, func.count(PostLike.id))
            .where(PostLike.post_id.in_(post_ids))
            .group_by(PostLike.post_id)
        )
        return {post_id: count for post_id, count in res.all()}

    async def liked_post_ids(self, user_id: int, post_ids: list[int]) -> set[int]:
        if not post_ids:
            return set()
        res = await self.db.execute(
            select(PostLike.post_id).where(PostLike.user_id == user_id, PostLike.post_id.in_(post_ids))
        )
        return set(res.scalars().all())

    async def likes_received_by_user(self, user_ids: set[int] | None = None) -> dict[int, int]:
        """Number of likes on each author's posts"""
        stmt = select(Post.user_id, func.count(PostLike.id)).join(PostLike, PostLike.post_id == Post.id)
        if user_ids is not None:
            stmt = stmt.where(Post.user_id.in_(user_ids))
        res = await self.db.execute(stmt.group_by(Post.user_id))
        return {user_id: count for user_id, count in res.all()}

    async def list_likes_by_user(self, user_id: int, limit: int) -> list[PostLike]:
        res = await self.db.execute(
            select(PostLike)
            .where(PostLike.user_id == user_id)
            .order_by(PostLike.created_at.desc(), PostLike.id.desc())
            .limit(limit)
        )
        return list(res.scalars().all())

    # Comments

    async def get_comment(self, comment_id: int) -> PostComment | None:
        res = await self.db.execute(select(PostComment).where(PostComment.id == comment_id))
        return res.scalar_one_or_none()

    async def add_comment(self, comment: PostComment) -> PostComment:
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def delete_comment(self, comment: PostComment) -> None:
        await self.db.delete(comment)
        await self.db.commit()

    async def list_comments(self, post_id: int) -> list[PostComment]:
        res = await self.db.execute(
            select(PostComment)
            .where(PostComment.post_id == post_id)
            .order_by(PostComment.created_at.asc(), PostComment.id.asc())
        )
        return list(res.scalars().all())

    async def list_comments_by_user(self, user_id: int, limit: int | None = None) -> list[PostComment]:
        stmt = (
            select(PostComment)
            .where(PostComment.user_id == user_id)
            .order_by(PostComment.created_at.desc(), PostComment.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def comment_counts(self, post_ids: list[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        res = await self.db.execute(
            select(PostComment.post_id, func.count(PostComment.id))
            .where(PostComment.post_id.in_(post_ids))
            .group_by(PostComment.post_id)
        )
        return {post_id: count for post_id, count in res.all()}

    async def comment_count_by_user(self, user_ids: set[int] | None = None) -> dict[int, int]:
        stmt = select(PostComment.user_id, func.count(PostComment.id))
        if user_ids is not None:
            stmt = stmt.where(PostComment.user_id.in_(user_ids))
        res = await self.db.execute(stmt.group_by(PostComment.user_id))
        return {user_id: count for user_id, count in res.all()}
