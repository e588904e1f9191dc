"""Middleware registration."""

from fastapi import FastAPI

from engagement.config import Settings
from engagement.middleware.cors import setup_cors
from engagement.middleware.error_handler import setup_error_handlers
from engagement.middleware.logging import setup_logging
from engagement.middleware.rate_limit import RateLimitMiddleware
from engagement.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware. Starlette runs the last added one outermost.

    CORS goes last so its headers also land on 429 and error responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
