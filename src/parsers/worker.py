"""Radar runtime: graduation stream, stats reporter and dashboard API on one loop."""

import asyncio

from loguru import logger

from config.settings import settings
from src.api.metrics_registry import registry
from src.parsers.graduation.service import GraduationService


async def run_radar() -> None:
    service = GraduationService.from_settings(settings)
    registry.graduations = service

    tasks = [
        asyncio.create_task(service.run(), name="graduation_ws"),
        asyncio.create_task(_stats_reporter(service), name="stats"),
    ]
    if settings.dashboard_enabled:
        from src.api.server import run_dashboard_server

        tasks.append(asyncio.create_task(run_dashboard_server(), name="dashboard"))

    try:
        # The stream returning (no key, or reconnects exhausted) is not fatal:
        # the API keeps serving the cache until shutdown.
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        await service.stop()


async def _stats_reporter(service: GraduationService) -> None:
    """Log radar stats every 60 seconds."""
    while True:
        await asyncio.sleep(60)
        logger.info(f"[STATS] {service.format_stats_line()}")
