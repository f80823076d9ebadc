"""FastAPI dependency injection: runtime objects from the registry."""

from __future__ import annotations

from fastapi import HTTPException, status

from config.settings import settings
from src.api.metrics_registry import MetricsRegistry, registry
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.graduation.service import GraduationService


def get_registry() -> MetricsRegistry:
    """Return the global metrics registry."""
    return registry


def get_graduation_service() -> GraduationService:
    """The running radar. 503 until the worker has registered it."""
    if registry.graduations is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Graduation radar not started",
        )
    return registry.graduations


def get_dexscreener() -> DexScreenerClient:
    """Shared DexScreener client for on-demand price lookups (created lazily)."""
    if registry.dexscreener is None:
        registry.dexscreener = DexScreenerClient(max_rps=settings.dexscreener_max_rps)
    return registry.dexscreener
