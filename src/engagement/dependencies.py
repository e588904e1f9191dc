"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator
from datetime import datetime

from engagement.config import get_settings
from engagement.database import get_session as _get_session
from engagement.gamification.week_utils import utc_now
from engagement.redis_client import get_redis as _get_redis

get_db = _get_session


async def get_redis_dep() -> AsyncGenerator[object | None, None]:
    """Yield the Redis client, or None when Redis is not initialized."""
    try:
        client: object | None = _get_redis()
    except RuntimeError:
        client = None
    yield client


def get_now() -> datetime:
    """Current instant as aware UTC. Overridden in tests to pin the clock."""
    return utc_now()


def get_timezone() -> str:
    """Zone used to bucket days and weeks."""
    return get_settings().timezone
