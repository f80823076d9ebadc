"""FastAPI application factory for the graduation feed."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.metrics_registry import registry
from src.api.middleware import SecurityHeadersMiddleware

# Shared by every router that rate limits
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # The on-demand price client is created lazily by the first lookup
    if registry.dexscreener is not None:
        await registry.dexscreener.close()
        registry.dexscreener = None


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"[API] {request.method} {request.url.path} failed")
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal error"})


def create_app() -> FastAPI:
    """Build the read-only graduation API."""
    app = FastAPI(
        title="Graduation Radar API",
        version="0.1.0",
        docs_url="/api/docs" if settings.dashboard_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.dashboard_debug else None,
        lifespan=_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, _unhandled_error)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.dashboard_cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from src.api.routers.graduations import router as graduations_router
    from src.api.routers.health import router as health_router
    from src.api.routers.tokens import router as tokens_router

    app.include_router(health_router)
    app.include_router(graduations_router)
    app.include_router(tokens_router)

    return app
