"""
Pytest fixtures for test database, client, and domain objects.

Each test gets a fresh in-memory SQLite database (aiosqlite) with all tables
created. Redis is disabled; tests that assert on change notifications use
the `published_events` fixture, which records what would be published.
"""

import json
import os
from typing import AsyncGenerator

# Must be set before the application settings are first read
os.environ["REDIS_ENABLED"] = "false"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from beach_admin.main import app
from beach_admin.db.base import Base
from beach_admin.db.session import get_db
from beach_admin.models.user import User
from beach_admin.schemas.beach import BeachCreate, ZoneCreate
from beach_admin.services import beach_service, zone_service, notification_service

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables on a private in-memory database and yield a session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class RecordingRedis:
    """Stands in for the Redis client; keeps every published envelope."""

    def __init__(self):
        self.messages = []

    async def publish(self, channel: str, message: str) -> int:
        self.messages.append(json.loads(message))
        return 1


@pytest.fixture
def published_events(monkeypatch) -> list:
    """List of {"event", "room", "data"} envelopes published during the test."""
    fake = RecordingRedis()

    async def fake_get_redis():
        return fake

    monkeypatch.setattr(notification_service, "get_redis", fake_get_redis)
    return fake.messages


@pytest_asyncio.fixture
async def beach(db_session: AsyncSession):
    """An empty beach with no zones."""
    return await beach_service.create_beach(
        db_session,
        BeachCreate(name="Playa Norte", location="Valencia", price_per_day=25),
    )


@pytest_asyncio.fixture
async def grid_beach(db_session: AsyncSession, beach):
    """The beach with one 2x3 zone of available sunbeds."""
    return await zone_service.add_zone(db_session, beach.id, ZoneCreate(name="Front Row", rows=2, cols=3))


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    user = User(email="admin@example.com", name="Beach Admin", role="admin")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def other_admin(db_session: AsyncSession) -> User:
    user = User(email="other@example.com", name="Other Admin", role="Admin")
    db_session.add(user)
    await db_session.commit()
    return user
