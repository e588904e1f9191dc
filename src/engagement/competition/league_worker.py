"""Weekly league settlement arq worker.

Runs once a week, a few minutes after the Sunday reset, and awards the
league badges for the week that just closed.

    arq engagement.competition.league_worker.LeagueWorkerSettings
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from arq import cron
from arq.connections import RedisSettings
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.competition.leaderboard_service import settle_weekly_league
from engagement.config import get_settings
from engagement.database import close_db, get_session, init_db

logger = logging.getLogger(__name__)


async def _get_db_session() -> AsyncSession:
    async for session in get_session():
        return session
    raise RuntimeError("Failed to get database session")


async def settle_league(ctx: dict) -> int:
    """Award league_first/second/third for the closed week. Returns badges awarded."""
    settings = get_settings()
    if not settings.league_settlement_enabled:
        logger.info("League settlement disabled, skipping")
        return 0

    db = await _get_db_session()
    try:
        awarded = await settle_weekly_league(db, ctx.get("redis"), tz=settings.timezone)
        return len(awarded)
    except Exception:
        logger.exception("League settlement failed")
        await db.rollback()
        raise
    finally:
        await db.close()


async def league_startup(ctx: dict) -> None:
    settings = get_settings()
    await init_db(settings.database_url)
    ctx["redis"] = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=5,
    )
    logger.info("League worker started")


async def league_shutdown(ctx: dict) -> None:
    redis_client = ctx.get("redis")
    if redis_client:
        await redis_client.aclose()
    await close_db()
    logger.info("League worker shut down")


class LeagueWorkerSettings:
    """arq worker settings for weekly league settlement."""

    functions = [settle_league]
    # Sunday 00:05 UTC; with a non-UTC ENG_TIMEZONE the job still settles
    # the most recently passed local boundary.
    cron_jobs = [cron(settle_league, weekday=6, hour=0, minute=5, run_at_startup=False)]
    on_startup = league_startup
    on_shutdown = league_shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().redis_url)
    max_jobs = 1
    job_timeout = 300
