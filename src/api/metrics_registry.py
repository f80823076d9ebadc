"""Singleton registry for runtime objects shared between worker and dashboard API.

Populated once during ``run_radar()`` initialization. FastAPI endpoints
read these references directly; safe because everything runs in a
single asyncio event loop.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.parsers.dexscreener.client import DexScreenerClient
    from src.parsers.graduation.service import GraduationService


class MetricsRegistry:
    """Holds references to runtime objects for API access."""

    def __init__(self) -> None:
        self.graduations: GraduationService | None = None
        self.dexscreener: DexScreenerClient | None = None
        self.started_at = time.time()


registry = MetricsRegistry()
