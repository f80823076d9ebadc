"""Uvicorn runner for the graduation API, sharing the radar's event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


def build_server() -> uvicorn.Server:
    from src.api.app import create_app

    config = uvicorn.Config(
        app=create_app(),
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        log_level="warning",
        access_log=False,
        proxy_headers=True,  # rate limit by client ip behind a reverse proxy
        loop="none",
    )
    return uvicorn.Server(config)


async def run_dashboard_server() -> None:
    """Serve /api/live-launches until cancelled together with the radar."""
    server = build_server()
    logger.info(f"Graduation API on http://{settings.dashboard_host}:{settings.dashboard_port}")
    await server.serve()
