"""Rugcheck.xyz API client: risk report for newly graduated tokens."""

import asyncio

import httpx
from loguru import logger

from src.parsers.rate_limiter import RateLimiter
from src.parsers.rugcheck.models import RugcheckReport, RugcheckRisk

BASE_URL = "https://api.rugcheck.xyz/v1"
TOP_HOLDERS_COUNTED = 10
MAX_RETRIES = 1
RETRY_DELAYS = [2.0]


class RugcheckClient:
    """Async HTTP client for Rugcheck.xyz (free, no API key)."""

    def __init__(self, max_rps: float = 2.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=5.0)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token_report(self, mint: str) -> RugcheckReport | None:
        """Fetch the full report. None if unknown token or API error."""
        url = f"{BASE_URL}/tokens/{mint}/report"

        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url)

                if resp.status_code == 404:
                    return None
                if resp.status_code == 429 and attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[RUGCHECK] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                if resp.status_code != 200:
                    logger.debug(f"[RUGCHECK] HTTP {resp.status_code} for {mint[:12]}")
                    return None

                return _parse_report(resp.json(), mint)

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    await asyncio.sleep(RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)])
                else:
                    logger.debug(f"[RUGCHECK] Failed for {mint[:12]}: {e}")
                    return None

        return None


def _parse_report(data: dict, mint: str) -> RugcheckReport:
    risks = [
        RugcheckRisk(
            name=r.get("name", "unknown"),
            description=r.get("description") or "",
            level=r.get("level", "info"),
            score=r.get("score", 0),
        )
        for r in data.get("risks") or []
        if isinstance(r, dict)
    ]
    return RugcheckReport(
        mint=mint,
        score=int(data.get("score_normalised", data.get("score", 0)) or 0),
        risks=risks,
        rugged=bool(data.get("rugged", False)),
        top_holders_pct=_top_holders_pct(data.get("topHolders")),
        creator_pct=_creator_pct(data),
    )


def _top_holders_pct(holders: object) -> float | None:
    if not isinstance(holders, list) or not holders:
        return None
    total = 0.0
    for holder in holders[:TOP_HOLDERS_COUNTED]:
        if isinstance(holder, dict):
            total += float(holder.get("pct") or 0)
    return round(total, 2)


def _creator_pct(data: dict) -> float | None:
    """creatorBalance and token.supply are both raw base units."""
    balance = data.get("creatorBalance")
    token = data.get("token")
    supply = token.get("supply") if isinstance(token, dict) else None
    if balance is None or not supply:
        return None
    try:
        return round(float(balance) / float(supply) * 100, 2)
    except (TypeError, ValueError):
        return None
