"""
Realtime notifications for a portal running outside the API process.

WebSocketSubscription reads the /notifications/ws endpoint and behaves like the
broker's in-process Subscription: ``async for`` yields each notification dict
until unsubscribe() is called or the server goes away.
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

logger = logging.getLogger(__name__)


def websocket_url(http_base: str, path: str) -> str:
    base = http_base.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return base + path


class WebSocketSubscription:
    def __init__(self, url: str, connect: Callable[[str], Any] = websockets.connect):
        self.url = url
        self._connect = connect
        self._connection: Any = None
        self._closing: Optional[asyncio.Task] = None
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        if self.closed:
            return
        try:
            async with self._connect(self.url) as connection:
                self._connection = connection
                # unsubscribe() may have run while the handshake was in flight
                if self.closed:
                    return
                async for message in connection:
                    try:
                        payload = json.loads(message)
                    except ValueError:
                        logger.warning("Ignoring malformed notification message")
                        continue
                    yield payload
        except ConnectionClosed as e:
            logger.info("Notification socket closed: %s", e)
        except (OSError, WebSocketException) as e:
            logger.warning("Notification socket unavailable: %s", e)
        finally:
            self._connection = None
            self.closed = True

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._connection is not None:
            self._closing = asyncio.ensure_future(self._connection.close())
