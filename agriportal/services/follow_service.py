import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.follow import UserFollow, ProjectFollow
from agriportal.models.notification import NotificationType
from agriportal.models.user import User
from agriportal.repositories.follow_repository import FollowRepository
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.follow import FollowEntry, FollowStats, FollowedProject, ProjectFollowStats
from agriportal.schemas.post import PostOut
from agriportal.schemas.project import ProjectOut
from agriportal.schemas.user import UserPublic
from agriportal.services.notification_service import NotificationService
from agriportal.services.post_service import PostService
from agriportal.services.realtime import NotificationBroker

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "Không tìm thấy người dùng"
PROJECT_NOT_FOUND = "Không tìm thấy dự án"


class FollowService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.follows = FollowRepository(db)
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)
        self.notifications = NotificationService(db, broker)

    async def _user(self, user_id: int) -> User:
        target = await self.users.get_by_id(user_id)
        if target is None:
            raise LookupError(USER_NOT_FOUND)
        return target

    async def follow_user(self, follower: User, user_id: int) -> bool:
        """Follow a user; returns False when already following"""
        if follower.id == user_id:
            raise ValueError("Không thể follow chính mình")
        target = await self._user(user_id)
        if await self.follows.get_user_follow(follower.id, user_id) is not None:
            return False
        try:
            await self.follows.add(UserFollow(follower_id=follower.id, following_id=user_id))
        except IntegrityError:
            # A concurrent request created the same follow
            await self.db.rollback()
            return False
        logger.info("User %s followed user %s", follower.id, user_id)
        await self.notifications.create_notification(
            user_id=target.id,
            type=NotificationType.FOLLOW,
            title="Người theo dõi mới",
            message=f"{follower.username} đã bắt đầu theo dõi bạn",
            link=f"/users/{follower.username}",
            actor_id=follower.id,
        )
        return True

    async def unfollow_user(self, follower: User, user_id: int) -> bool:
        follow = await self.follows.get_user_follow(follower.id, user_id)
        if follow is None:
            return False
        await self.follows.remove(follow)
        return True

    async def user_stats(self, user_id: int, viewer: User | None = None) -> FollowStats:
        await self._user(user_id)
        stats = FollowStats(
            followers_count=await self.follows.follower_count(user_id),
            following_count=await self.follows.following_count(user_id),
        )
        if viewer is not None and viewer.id != user_id:
            stats.is_following = await self.follows.get_user_follow(viewer.id, user_id) is not None
            stats.is_followed_by = await self.follows.get_user_follow(user_id, viewer.id) is not None
        return stats

    async def _entries(self, pairs: list[tuple[int, datetime]]) -> list[FollowEntry]:
        users = await self.users.list_by_ids({user_id for user_id, _ in pairs})
        return [
            FollowEntry(user=UserPublic.model_validate(users[user_id]), followed_at=followed_at)
            for user_id, followed_at in pairs
            if user_id in users
        ]

    async def followers(self, user_id: int, limit: int = 20, offset: int = 0) -> list[FollowEntry]:
        await self._user(user_id)
        rows = await self.follows.list_followers(user_id, limit, offset)
        return await self._entries([(f.follower_id, f.created_at) for f in rows])

    async def following(self, user_id: int, limit: int = 20, offset: int = 0) -> list[FollowEntry]:
        await self._user(user_id)
        rows = await self.follows.list_following(user_id, limit, offset)
        return await self._entries([(f.following_id, f.created_at) for f in rows])

    async def following_feed(self, user: User, limit: int = 20, offset: int = 0) -> list[PostOut]:
        """Posts by the users this user follows, newest first"""
        followed = await self.follows.following_ids(user.id)
        if not followed:
            return []
        posts = await PostRepository(self.db).list(
            user_ids=followed, limit=limit, offset=offset, exclude_rejected=True
        )
        return await PostService(self.db).decorate(posts, user)

    # Projects

    async def _project_exists(self, project_id: int) -> None:
        if await self.projects.get_by_id(project_id) is None:
            raise LookupError(PROJECT_NOT_FOUND)

    async def follow_project(self, user: User, project_id: int) -> bool:
        await self._project_exists(project_id)
        if await self.follows.get_project_follow(user.id, project_id) is not None:
            return False
        try:
            await self.follows.add(ProjectFollow(user_id=user.id, project_id=project_id))
        except IntegrityError:
            await self.db.rollback()
            return False
        logger.info("User %s followed project %s", user.id, project_id)
        return True

    async def unfollow_project(self, user: User, project_id: int) -> bool:
        follow = await self.follows.get_project_follow(user.id, project_id)
        if follow is None:
            return False
        await self.follows.remove(follow)
        return True

    async def project_stats(self, project_id: int, viewer: User | None = None) -> ProjectFollowStats:
        await self._project_exists(project_id)
        stats = ProjectFollowStats(followers_count=await self.follows.project_follower_count(project_id))
        if viewer is not None:
            stats.is_following = await self.follows.get_project_follow(viewer.id, project_id) is not None
        return stats

    async def project_followers(self, project_id: int, limit: int = 20, offset: int = 0) -> list[FollowEntry]:
        await self._project_exists(project_id)
        rows = await self.follows.list_project_followers(project_id, limit, offset)
        return await self._entries([(f.user_id, f.created_at) for f in rows])

    async def followed_projects(self, user_id: int, limit: int = 20, offset: int = 0) -> list[FollowedProject]:
        await self._user(user_id)
        rows = await self.follows.list_followed_projects(user_id, limit, offset)
        projects = {p.id: p for p in await self.projects.list_by_ids({f.project_id for f in rows})}
        return [
            FollowedProject(project=ProjectOut.model_validate(projects[f.project_id]), followed_at=f.created_at)
            for f in rows
            if f.project_id in projects
        ]
