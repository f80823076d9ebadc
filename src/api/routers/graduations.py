"""Graduation feed: newest-first graduations with ages recomputed per request."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from src.api.dependencies import get_graduation_service
from src.parsers.graduation.service import GraduationService

router = APIRouter(prefix="/api/live-launches", tags=["graduations"])


@router.get("")
async def list_live_launches(
    service: GraduationService = Depends(get_graduation_service),
) -> dict[str, Any]:
    now = time.time()
    launches = [r.to_launch(now) for r in service.list_graduations()]
    status = service.connection_status()
    if status.degraded:
        message = "Stream offline, serving cached graduations"
    elif service.stream is None:
        message = "Stream disabled (no API key), serving cached graduations"
    else:
        message = "Graduated Pump.fun tokens (completed bonding curve)"
    return {
        "success": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "launches": launches,
        "count": len(launches),
        "totalScanned": status.message_count,
        "message": message,
    }


@router.get("/status")
async def live_launches_status(
    service: GraduationService = Depends(get_graduation_service),
) -> dict[str, Any]:
    status = service.connection_status()
    return {
        "connected": status.connected,
        "state": status.state,
        "reconnectAttempts": status.reconnect_attempts,
        "degraded": status.degraded,
        "messageCount": status.message_count,
        "cacheSize": status.cache_size,
        "oldestTimestamp": status.oldest_timestamp,
        "newestTimestamp": status.newest_timestamp,
    }
