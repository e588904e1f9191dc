"""Shared test fixtures.

Integration tests run against an in-memory SQLite database (one shared
connection per test) with the schema built from the ORM metadata. Redis
is replaced by a recorder so published events can be asserted on; rate
limiting passes through because the real pool is never initialized.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

os.environ.setdefault("ENG_LOG_FORMAT", "console")
os.environ.setdefault("ENG_TIMEZONE", "UTC")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.config import get_settings
from engagement.database import close_db, get_engine, get_session, init_db
from engagement.db import models  # noqa: F401  # registers tables on Base.metadata
from engagement.db.base import Base
from engagement.dependencies import get_now, get_redis_dep
from engagement.main import create_app

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Wednesday; the week in progress is [Sun 2024-01-07, Sun 2024-01-14).
WEDNESDAY = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


class Clock:
    """Mutable stand-in for the request clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingRedis:
    """Captures pub/sub publishes instead of sending them."""

    def __init__(self) -> None:
        self.published: list[tuple[str, str]] = []

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1

    async def ping(self) -> bool:
        return True


@pytest.fixture
def clock() -> Clock:
    return Clock(WEDNESDAY)


@pytest.fixture
def fake_redis() -> RecordingRedis:
    return RecordingRedis()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh in-memory schema for one test."""
    get_settings.cache_clear()
    await init_db(TEST_DATABASE_URL)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service calls and assertions."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(
    database: None, clock: Clock, fake_redis: RecordingRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the ASGI app with the clock and Redis overridden."""
    app = create_app()

    async def _redis() -> AsyncGenerator[object | None, None]:
        yield fake_redis

    app.dependency_overrides[get_now] = clock
    app.dependency_overrides[get_redis_dep] = _redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
