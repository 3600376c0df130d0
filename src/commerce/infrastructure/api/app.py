"""FastAPI application factory, one app per service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commerce.infrastructure.api import orders, payments, users
from commerce.infrastructure.api.errors import install_error_handlers
from commerce.infrastructure.api.middleware import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
)
from commerce.infrastructure.bootstrap import Container

logger = logging.getLogger(__name__)

SERVICES: dict[str, APIRouter] = {
    "orders": orders.router,
    "payments": payments.router,
    "users": users.router,
}


def create_app(service: str, container: Container) -> FastAPI:
    """Build the app for ``service`` ("orders", "payments" or "users")."""
    if service not in SERVICES:
        raise ValueError(f"Unknown service {service!r}; expected one of {', '.join(SERVICES)}")

    settings = container.settings
    title = f"{service.capitalize()} service"

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            container.start()
        except Exception:
            logger.critical(f"{title} failed to start", exc_info=True)
            raise
        logger.info(
            f"{title} started: env={settings.app.environment} version={settings.app.version}"
        )
        try:
            yield
        finally:
            container.stop()
            logger.info(f"{title} stopped")

    app = FastAPI(title=title, version=settings.app.version, lifespan=lifespan)
    app.state.container = container

    # Added last runs first: CORS, then request logging, then rate limiting.
    app.add_middleware(
        RateLimitMiddleware,
        limiter=FixedWindowRateLimiter(
            max_requests=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        ),
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origin.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    install_error_handlers(app)

    @app.get("/health")
    def health() -> dict[str, object]:
        return {
            "success": True,
            "message": f"{service.capitalize()} service is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": service,
        }

    app.include_router(SERVICES[service])
    return app
