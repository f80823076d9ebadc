import asyncio

import httpx
from loguru import logger

from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.dexscreener.com"
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 2.0]
BATCH_LIMIT = 30


class DexScreenerClient:
    """Async REST client for DexScreener public API (no auth required)."""

    def __init__(self, rate_limiter: RateLimiter | None = None, max_rps: float = 4.0) -> None:
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=10.0,
            headers={"Accept": "application/json"},
        )
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)

    async def _request_with_retry(self, path: str) -> httpx.Response:
        """Execute GET with retry on 429/timeout. Raises on final failure."""
        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                response = await self._client.get(path)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt >= MAX_RETRIES:
                    raise
                logger.debug(f"[DEXSCREENER] {type(e).__name__}, retrying in {delay}s")
                await asyncio.sleep(delay)
                continue

            if response.status_code == 429 and attempt < MAX_RETRIES:
                retry_after = response.headers.get("Retry-After")
                if retry_after:
                    delay = max(float(retry_after), delay)
                logger.debug(f"[DEXSCREENER] 429 rate limited, retrying in {delay}s")
                await asyncio.sleep(delay)
                continue
            response.raise_for_status()
            return response
        raise httpx.HTTPError(f"DexScreener retries exhausted for {path}")

    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]:
        """All pairs for a Solana token, most liquid first."""
        response = await self._request_with_retry(f"/token-pairs/v1/solana/{token_address}")
        data = response.json()
        if isinstance(data, list):
            raw = data
        else:
            raw = data.get("pairs") or []
        pairs = [DexScreenerPair.model_validate(p) for p in raw if isinstance(p, dict)]
        pairs.sort(key=lambda p: p.liquidity_usd, reverse=True)
        return pairs

    async def get_tokens_batch(self, addresses: list[str]) -> list[DexScreenerPair]:
        """Pairs for up to 30 tokens in one request."""
        if not addresses:
            return []
        batch = addresses[:BATCH_LIMIT]
        response = await self._request_with_retry(f"/tokens/v1/solana/{','.join(batch)}")
        data = response.json()
        if isinstance(data, list):
            return [DexScreenerPair.model_validate(p) for p in data if isinstance(p, dict)]
        return []

    async def close(self) -> None:
        await self._client.aclose()
