"""
In-process fan-out of new notifications to connected clients.

Each subscriber owns a bounded asyncio.Queue. Publishing never blocks: a queue that
is full (a client that stopped reading) drops the oldest pending item so newer
notifications still arrive in order.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, AsyncIterator

from agriportal.core.config import settings

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    def __init__(self, broker: "NotificationBroker", user_id: int, maxsize: int):
        self.broker = broker
        self.user_id = user_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def deliver(self, payload: dict[str, Any]) -> None:
        if self.closed:
            return
        if self.queue.full():
            dropped = self.queue.get_nowait()
            logger.warning("Subscriber queue full for user %s, dropped %s", self.user_id, dropped.get("id"))
        self.queue.put_nowait(payload)

    async def get(self) -> dict[str, Any] | None:
        """Next payload, or None once unsubscribed"""
        if self.closed and self.queue.empty():
            return None
        item = await self.queue.get()
        if item is _CLOSED:
            return None
        return item

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.broker._remove(self)
        # Wake a pending get(); drop one queued item if needed to make room
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[dict[str, Any]]:
        while True:
            item = await self.get()
            if item is None:
                return
            yield item


class NotificationBroker:
    def __init__(self, queue_size: int | None = None):
        self.queue_size = queue_size or settings.NOTIFICATION_QUEUE_SIZE
        self._subscribers: dict[int, list[Subscription]] = defaultdict(list)

    def subscribe(self, user_id: int) -> Subscription:
        subscription = Subscription(self, user_id, self.queue_size)
        self._subscribers[user_id].append(subscription)
        logger.info("User %s subscribed to notifications (%d open)", user_id, len(self._subscribers[user_id]))
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.user_id)
        if not subscribers:
            return
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            del self._subscribers[subscription.user_id]

    def subscriber_count(self, user_id: int) -> int:
        return len(self._subscribers.get(user_id, []))

    def publish(self, user_id: int, payload: dict[str, Any]) -> int:
        """Deliver payload to every open subscription of user_id; returns how many"""
        subscribers = list(self._subscribers.get(user_id, []))
        for subscription in subscribers:
            subscription.deliver(payload)
        return len(subscribers)
