"""Pump.fun frontend API client: coin metadata for freshly graduated mints."""

import asyncio

import httpx
from loguru import logger

from src.parsers.pumpfun.models import PumpfunCoin
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://frontend-api-v3.pump.fun"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class PumpfunClient:
    """Async HTTP client for Pump.fun frontend API (free, no key)."""

    def __init__(self, max_rps: float = 2.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_coin(self, mint: str) -> PumpfunCoin | None:
        """Fetch one coin. None on 404, non-200 or network failure."""
        url = f"{BASE_URL}/coins/{mint}"

        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url)

                if resp.status_code == 429:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[PUMPFUN] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue

                if resp.status_code != 200:
                    logger.debug(f"[PUMPFUN] HTTP {resp.status_code} for {mint[:12]}")
                    return None

                data = resp.json()
                if not isinstance(data, dict) or not data.get("mint"):
                    return None
                return _parse_coin(data)

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[PUMPFUN] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                else:
                    logger.warning(f"[PUMPFUN] Failed for {mint[:12]}: {e}")
                    return None

        return None


def _parse_coin(data: dict) -> PumpfunCoin:
    return PumpfunCoin(
        mint=data.get("mint", ""),
        name=data.get("name") or "",
        symbol=data.get("symbol") or "",
        image_uri=data.get("image_uri") or None,
        website=data.get("website") or None,
        twitter=data.get("twitter") or None,
        telegram=data.get("telegram") or None,
        usd_market_cap=float(data.get("usd_market_cap") or 0),
    )
