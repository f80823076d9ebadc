"""Solana JSON-RPC client for transaction lookups (getTransaction)."""

import httpx
from loguru import logger

from src.parsers.rate_limiter import RateLimiter


class SolanaRpcClient:
    """Async client for Solana RPC. Every call goes through the shared limiter."""

    def __init__(
        self,
        rpc_url: str,
        rate_limiter: RateLimiter | None = None,
        min_interval: float = 0.5,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = httpx.AsyncClient(timeout=15.0)
        self._rate_limiter = rate_limiter or RateLimiter(min_interval=min_interval)

    async def get_transaction(self, signature: str) -> dict | None:
        """Fetch a jsonParsed transaction. None on error or when not yet indexed.

        One attempt only; the caller owns the retry policy.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getTransaction",
            "params": [
                signature,
                {
                    "encoding": "jsonParsed",
                    "commitment": "confirmed",
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        }
        await self._rate_limiter.acquire()
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"[RPC] getTransaction failed for {signature[:16]}: {e}")
            return None

        if "error" in data:
            logger.debug(f"[RPC] getTransaction error for {signature[:16]}: {data['error']}")
            return None
        return data.get("result")

    async def close(self) -> None:
        await self._client.aclose()
