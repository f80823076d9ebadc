"""Health check, no auth required."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_registry
from src.api.metrics_registry import MetricsRegistry

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime_sec: int
    stream: str


@router.get("/health", response_model=HealthResponse)
async def health_check(reg: MetricsRegistry = Depends(get_registry)) -> HealthResponse:
    """ok while the stream is connected, degraded otherwise (cache still served)."""
    stream = "not_started"
    if reg.graduations is not None:
        status = reg.graduations.connection_status()
        if reg.graduations.stream is None:
            stream = "disabled"
        elif status.degraded:
            stream = "exhausted"
        else:
            stream = status.state

    return HealthResponse(
        status="ok" if stream == "connected" else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_sec=int(time.time() - reg.started_at),
        stream=stream,
    )
