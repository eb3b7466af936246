"""
Pytest configuration and fixtures for agriportal tests
"""
import pytest
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

import agriportal.models  # noqa: F401  registers every table on Base.metadata
from agriportal.core.config import settings
from agriportal.core.security import hash_password
from agriportal.db.base import Base
from agriportal.db.session import get_db
from agriportal.main import create_app
from agriportal.models.user import User
from agriportal.repositories.user_repository import UserRepository


# Test database URL - use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpass123"


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """Uploaded images go to a per-test directory"""
    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(settings, "FILE_UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Fresh in-memory SQLite database per test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def test_db(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def broker(app):
    return app.state.notification_broker


@pytest.fixture
async def test_client(app, test_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with dependency override for database.
    """
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, username: str, role: str, is_admin: bool = False) -> User:
    return await UserRepository(db).create(User(
        username=username,
        phone_number="+84912345678",
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        province="Bến Tre",
        is_admin=is_admin,
        is_active=True,
    ))


@pytest.fixture
async def farmer_user(test_db: AsyncSession) -> User:
    """Project owner / community member."""
    return await _create_user(test_db, "nongdan", "farmer")


@pytest.fixture
async def business_user(test_db: AsyncSession) -> User:
    """Investor account."""
    return await _create_user(test_db, "doanhnghiep", "business")


@pytest.fixture
async def admin_user(test_db: AsyncSession) -> User:
    return await _create_user(test_db, "quantri", "farmer", is_admin=True)


async def _login(client: AsyncClient, username: str) -> str:
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
async def farmer_token(test_client: AsyncClient, farmer_user: User) -> str:
    return await _login(test_client, farmer_user.username)


@pytest.fixture
async def business_token(test_client: AsyncClient, business_user: User) -> str:
    return await _login(test_client, business_user.username)


@pytest.fixture
async def admin_token(test_client: AsyncClient, admin_user: User) -> str:
    return await _login(test_client, admin_user.username)


PROJECT_PAYLOAD = {
    "title": "Trồng lúa chịu mặn ST25",
    "description": "Chuyển đổi 20ha sang giống lúa chịu mặn",
    "funding_goal": 1_000_000,
    "farmers_impacted": 30,
    "area": "Bến Tre",
    "start_date": "2025-01-01",
    "end_date": "2025-12-31",
}

INVESTOR = {
    "investor_name": "Công ty Xanh",
    "investor_email": "dautu@example.com",
    "investor_phone": "0912345678",
}


@pytest.fixture
def project_payload() -> dict:
    return dict(PROJECT_PAYLOAD)


@pytest.fixture
def investor_details() -> dict:
    return dict(INVESTOR)


@pytest.fixture
async def project(test_client: AsyncClient, farmer_token: str) -> dict:
    """An active project owned by the farmer"""
    response = await test_client.post(
        "/api/v1/projects",
        headers={"Authorization": f"Bearer {farmer_token}"},
        json=PROJECT_PAYLOAD,
    )
    assert response.status_code == 201, response.text
    return response.json()
