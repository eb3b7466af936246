"""
Tests for the WebSocket notification channel used by a remote portal
"""
import asyncio
import json

import pytest
from httpx import ASGITransport, AsyncClient

from agriportal.portal.api_client import PortalClient
from agriportal.portal.auth_context import AuthContext
from agriportal.portal.realtime_channel import WebSocketSubscription, websocket_url


class FakeSocket:
    """Server side of a connection: tests push raw text frames into it"""

    def __init__(self):
        self.frames: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def push(self, payload):
        self.frames.put_nowait(payload if isinstance(payload, str) else json.dumps(payload))

    async def close(self):
        if not self.closed:
            self.closed = True
            self.frames.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.frames.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


class FakeConnect:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.urls = []
        self.socket = FakeSocket()

    def __call__(self, url):
        self.urls.append(url)
        return self

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self.socket

    async def __aexit__(self, *exc_info):
        await self.socket.close()


async def _collect(subscription: WebSocketSubscription) -> list:
    return [payload async for payload in subscription]


@pytest.mark.unit
class TestWebSocketUrl:

    @pytest.mark.parametrize("base,expected", [
        ("http://localhost:8000/api/v1", "ws://localhost:8000/api/v1/notifications/ws"),
        ("https://nongnghiep.vn/api/v1/", "wss://nongnghiep.vn/api/v1/notifications/ws"),
    ])
    def test_scheme_mapping(self, base, expected):
        assert websocket_url(base, "/notifications/ws") == expected

    def test_client_builds_tokenized_url(self):
        client = PortalClient(base_url="https://nongnghiep.vn/", ws_connect=FakeConnect())
        client.token = "abc.def"
        subscription = client.subscribe_notifications(5)
        assert subscription.url == "wss://nongnghiep.vn/api/v1/notifications/ws?token=abc.def"

    @pytest.mark.edge_case
    def test_requires_sign_in(self):
        client = PortalClient(ws_connect=FakeConnect())
        with pytest.raises(ValueError):
            client.subscribe_notifications()


@pytest.mark.unit
@pytest.mark.asyncio
class TestWebSocketSubscription:

    async def test_yields_decoded_messages_until_unsubscribed(self):
        connect = FakeConnect()
        subscription = WebSocketSubscription("ws://test/ws", connect=connect)
        received = []

        async def consume():
            async for payload in subscription:
                received.append(payload)

        task = asyncio.create_task(consume())
        connect.socket.push({"id": 1, "title": "Có nhà đầu tư mới"})
        connect.socket.push("khong-phai-json")
        connect.socket.push({"id": 2, "title": "Đánh giá mới"})
        await asyncio.sleep(0.01)

        subscription.unsubscribe()
        subscription.unsubscribe()
        await asyncio.wait_for(task, timeout=1)

        assert [p["id"] for p in received] == [1, 2]
        assert subscription.closed
        assert connect.socket.closed

    async def test_server_close_ends_iteration(self):
        connect = FakeConnect()
        subscription = WebSocketSubscription("ws://test/ws", connect=connect)
        connect.socket.push({"id": 7})
        await connect.socket.close()
        assert await _collect(subscription) == [{"id": 7}]
        assert subscription.closed

    @pytest.mark.edge_case
    async def test_connection_failure_yields_nothing(self):
        subscription = WebSocketSubscription("ws://test/ws", connect=FakeConnect(OSError("refused")))
        assert await _collect(subscription) == []
        assert subscription.closed

    @pytest.mark.edge_case
    async def test_unsubscribed_before_connect(self):
        connect = FakeConnect()
        subscription = WebSocketSubscription("ws://test/ws", connect=connect)
        subscription.unsubscribe()
        assert await _collect(subscription) == []
        assert connect.urls == []


@pytest.mark.integration
@pytest.mark.asyncio
class TestRemoteFeed:

    async def test_auth_context_feed_over_websocket(self, app, test_client: AsyncClient, farmer_user):
        connect = FakeConnect()
        async with PortalClient(base_url="http://test", transport=ASGITransport(app=app), ws_connect=connect) as portal:
            context = AuthContext(portal, subscribe=portal.subscribe_notifications)
            assert (await context.sign_in("nongdan", "testpass123")).ok
            assert context.feed.attached
            await asyncio.sleep(0.01)
            assert connect.urls == [f"ws://test/api/v1/notifications/ws?token={context.token}"]

            connect.socket.push({"id": 41, "type": "SYSTEM", "title": "Cảnh báo mặn", "is_read": False})
            await asyncio.sleep(0.01)
            assert [n["id"] for n in context.feed.items] == [41]
            assert context.feed.unread_count == 1

            context.sign_out()
            await asyncio.sleep(0.01)
            assert not context.feed.attached
            assert connect.socket.closed
