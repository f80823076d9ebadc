"""Response middleware for the JSON feed: hardening headers, no caching, timing."""

from __future__ import annotations

import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

SLOW_REQUEST_SEC = 1.0


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers on every response.

    Feed responses must never be cached: ages are recomputed per request.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        response.headers["Server-Timing"] = f"app;dur={elapsed * 1000:.1f}"

        if elapsed > SLOW_REQUEST_SEC:
            logger.warning(f"[API] Slow {request.url.path}: {elapsed:.2f}s")
        return response
