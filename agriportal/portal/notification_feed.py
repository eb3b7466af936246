"""
In-memory notification list kept in sync with the realtime channel.

The unread counter moves by exactly one per new unread notification, and a
notification id already in the list is ignored, so a replayed message never
double counts.
"""
import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Broker Subscription or WebSocketSubscription"""

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]: ...

    def unsubscribe(self) -> None: ...


class NotificationFeed:
    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = []
        self.unread_count = 0
        self._subscription: Optional[NotificationChannel] = None
        self._pump: Optional[asyncio.Task] = None

    def load(self, notifications: list[dict[str, Any]], unread_count: int | None = None) -> None:
        """Replace the list with a fetched page (newest first)"""
        self.items = list(notifications)
        if unread_count is None:
            unread_count = sum(1 for n in self.items if not n.get("is_read"))
        self.unread_count = max(0, unread_count)

    def merge(self, notifications: list[dict[str, Any]], unread_count: int | None = None) -> None:
        """Load a fetched page while keeping realtime items the page does not contain"""
        fetched = {n.get("id") for n in notifications}
        live = [n for n in self.items if n.get("id") not in fetched]
        self.load(notifications, unread_count)
        for item in sorted(live, key=lambda n: n.get("id") or 0):
            self.receive(item)

    def _find(self, notification_id: int) -> Optional[dict[str, Any]]:
        return next((n for n in self.items if n.get("id") == notification_id), None)

    def receive(self, notification: dict[str, Any]) -> bool:
        if self._find(notification.get("id")) is not None:
            return False
        self.items.insert(0, notification)
        if not notification.get("is_read"):
            self.unread_count += 1
        return True

    def mark_read(self, notification_id: int) -> None:
        item = self._find(notification_id)
        if item is not None:
            if item.get("is_read"):
                return
            item["is_read"] = True
        self.unread_count = max(0, self.unread_count - 1)

    def mark_all_read(self) -> None:
        for item in self.items:
            item["is_read"] = True
        self.unread_count = 0

    def remove(self, notification_id: int) -> None:
        item = self._find(notification_id)
        if item is None:
            return
        self.items.remove(item)
        if not item.get("is_read"):
            self.unread_count = max(0, self.unread_count - 1)

    def clear(self) -> None:
        self.items = []
        self.unread_count = 0

    @property
    def attached(self) -> bool:
        return self._subscription is not None

    def attach(self, subscription: NotificationChannel) -> None:
        """Start feeding messages from a realtime subscription into the list"""
        self.detach()
        self._subscription = subscription
        self._pump = asyncio.create_task(self._run(subscription))

    async def _run(self, subscription: NotificationChannel) -> None:
        async for payload in subscription:
            self.receive(payload)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._pump is not None:
            self._pump.cancel()
            self._pump = None
