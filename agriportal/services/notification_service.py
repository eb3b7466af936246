import logging
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.notification import Notification, NotificationType
from agriportal.models.user import User
from agriportal.repositories.notification_repository import NotificationRepository
from agriportal.schemas.notification import NotificationOut
from agriportal.services.realtime import NotificationBroker

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.notifications = NotificationRepository(db)
        self.broker = broker

    async def create_notification(
        self,
        user_id: int,
        type: NotificationType | str,
        title: str,
        message: str,
        link: str | None = None,
        actor_id: int | None = None,
    ) -> Notification:
        """Persist a notification, then push it to the user's open channels"""
        notification = Notification(
            user_id=user_id,
            type=type.value if isinstance(type, NotificationType) else type,
            title=title,
            message=message,
            link=link,
            actor_id=actor_id,
            is_read=False,
        )
        notification = await self.notifications.create(notification)
        if self.broker is not None:
            payload = NotificationOut.model_validate(notification).model_dump(mode="json")
            delivered = self.broker.publish(user_id, payload)
            logger.debug("Notification %s pushed to %d subscriber(s)", notification.id, delivered)
        return notification

    async def get_notifications(
        self,
        user: User,
        limit: int = 50,
        offset: int = 0,
        unread_only: bool = False,
    ) -> list[Notification]:
        return await self.notifications.list_for_user(user.id, limit=limit, offset=offset, unread_only=unread_only)

    async def get_unread_count(self, user: User) -> int:
        return await self.notifications.count_unread(user.id)

    async def _get_owned(self, user: User, notification_id: int) -> Notification | None:
        notification = await self.notifications.get_by_id(notification_id)
        if not notification or notification.user_id != user.id:
            return None
        return notification

    async def mark_as_read(self, user: User, notification_id: int) -> Notification | None:
        notification = await self._get_owned(user, notification_id)
        if notification is None:
            return None
        if not notification.is_read:
            notification.is_read = True
            notification = await self.notifications.update(notification)
        return notification

    async def mark_all_as_read(self, user: User) -> int:
        return await self.notifications.mark_all_read(user.id)

    async def delete_notification(self, user: User, notification_id: int) -> bool:
        notification = await self._get_owned(user, notification_id)
        if notification is None:
            return False
        await self.notifications.delete(notification)
        return True

    async def delete_all_read(self, user: User) -> int:
        return await self.notifications.delete_read(user.id)
