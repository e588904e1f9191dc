"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from engagement.activity.router import router as activity_router
from engagement.competition.router import router as competition_router
from engagement.config import get_settings
from engagement.database import close_db, init_db
from engagement.gamification.router import router as gamification_router
from engagement.health.router import router as health_router
from engagement.middleware import setup_middleware
from engagement.redis_client import close_redis, init_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("Engagement API started (%s, tz=%s)", settings.environment, settings.timezone)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Engagement Ledger API",
        description="Streaks, points, badges and leagues for practice sessions",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(gamification_router)
    app.include_router(competition_router)
    app.include_router(activity_router)

    return app


app = create_app()
