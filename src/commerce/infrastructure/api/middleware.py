"""HTTP middleware: request logging and per-client rate limiting."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from commerce.domain.exceptions import RateLimitExceededError
from commerce.infrastructure.api.errors import error_response

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} {response.status_code} "
            f"{duration_ms:.1f}ms ip={_client_ip(request)}",
        )
        return response


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """In-memory fixed-window counter keyed by client id.

    Expired windows are swept at most once per window length, so clients
    that stop calling are forgotten.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._windows)

    def allow(self, client_id: str) -> bool:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            window = self._windows.get(client_id)
            if window is None or now >= window.reset_at:
                self._windows[client_id] = _Window(count=1, reset_at=now + self.window_seconds)
                return True
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def _sweep(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window_seconds


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)
        client_id = _client_ip(request)
        if not self.limiter.allow(client_id):
            logger.warning(f"Rate limit exceeded: client={client_id}")
            return error_response(request, RateLimitExceededError("Too many requests"))
        return await call_next(request)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
