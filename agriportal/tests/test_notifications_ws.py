"""
Tests for the realtime notification WebSocket

httpx's ASGITransport cannot open WebSockets, so these tests drive the app
through Starlette's TestClient with a file database shared by its event loop.
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from agriportal.core.config import settings
from agriportal.db.base import Base
from agriportal.db.session import get_db

PASSWORD = "matkhau123"

PROJECT = {
    "title": "Nuôi tôm lúa luân canh",
    "description": "Mô hình tôm lúa thích ứng xâm nhập mặn",
    "funding_goal": 1_000_000,
    "farmers_impacted": 12,
    "area": "Cà Mau",
    "start_date": "2025-02-01",
    "end_date": "2025-11-30",
}

INVESTOR = {
    "investor_name": "Công ty Xanh",
    "investor_email": "dautu@example.com",
    "investor_phone": "0912345678",
}


@pytest.fixture
def ws_client(app, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "INIT_DB_ON_STARTUP", False)
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ws.db'}", poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        client.portal.call(create_tables)
        yield client
        client.portal.call(engine.dispose)
    app.dependency_overrides.clear()


def _account(client: TestClient, username: str, role: str) -> tuple[int, str]:
    registered = client.post(
        "/api/v1/auth/register",
        json={"username": username, "password": PASSWORD, "phone_number": "0912345678", "role": role},
    )
    assert registered.status_code == 201, registered.text
    login = client.post("/api/v1/auth/login", json={"username": username, "password": PASSWORD})
    assert login.status_code == 200, login.text
    return registered.json()["id"], login.json()["access_token"]


@pytest.mark.api
class TestNotificationWebSocket:

    @pytest.mark.parametrize("query", ["?token=khong-hop-le", ""])
    def test_rejects_invalid_token(self, ws_client: TestClient, query: str):
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect(f"/api/v1/notifications/ws{query}") as websocket:
                websocket.receive_json()
        assert exc.value.code == 1008

    def test_rejects_refresh_token(self, ws_client: TestClient):
        _account(ws_client, "nongdan", "farmer")
        login = ws_client.post("/api/v1/auth/login", json={"username": "nongdan", "password": PASSWORD})
        refresh = login.json()["refresh_token"]
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect(f"/api/v1/notifications/ws?token={refresh}") as websocket:
                websocket.receive_json()
        assert exc.value.code == 1008

    def test_investment_notification_is_pushed(self, ws_client: TestClient, broker):
        farmer_id, farmer_token = _account(ws_client, "nongdan", "farmer")
        _, business_token = _account(ws_client, "doanhnghiep", "business")
        created = ws_client.post(
            "/api/v1/projects", headers={"Authorization": f"Bearer {farmer_token}"}, json=PROJECT
        )
        assert created.status_code == 201, created.text
        project_id = created.json()["id"]

        with ws_client.websocket_connect(f"/api/v1/notifications/ws?token={farmer_token}") as websocket:
            assert broker.subscriber_count(farmer_id) == 1
            invested = ws_client.post(
                f"/api/v1/projects/{project_id}/investments",
                headers={"Authorization": f"Bearer {business_token}"},
                json={"amount": 250_000, **INVESTOR},
            )
            assert invested.status_code == 201, invested.text
            message = websocket.receive_json()

        assert message["type"] == "PROJECT_INVESTMENT"
        assert message["user_id"] == farmer_id
        assert "250.000 VNĐ" in message["message"]
        assert message["is_read"] is False

        stored = ws_client.get("/api/v1/notifications", headers={"Authorization": f"Bearer {farmer_token}"}).json()
        assert [n["id"] for n in stored] == [message["id"]]
