"""Token price lookup: DexScreener on demand, for clients watching a graduation."""

# No `from __future__ import annotations` here: the slowapi wrapper would make
# FastAPI resolve string annotations against slowapi's module globals.
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from pydantic import BaseModel

from config.settings import settings
from src.api.app import limiter
from src.api.dependencies import get_dexscreener
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.graduation.enricher import pair_to_metadata

router = APIRouter(prefix="/api", tags=["tokens"])

WINDOWS = ("m5", "h1", "h6", "h24")
NO_PAIRS = "No trading pairs found"


class TokenPricesRequest(BaseModel):
    contracts: list[str] = []


def _num(value: Decimal | None) -> float:
    return float(value or 0)


def pair_to_price(pair: DexScreenerPair) -> dict[str, Any]:
    """Price fields shared by the single and bulk lookups. Missing numbers are 0."""
    change = pair.priceChange
    volume = pair.volume
    liquidity = pair.liquidity
    txns = pair.txns
    counts = {}
    for window in WINDOWS:
        t = getattr(txns, window) if txns else None
        counts[window] = {
            "buys": (t.buys or 0) if t else 0,
            "sells": (t.sells or 0) if t else 0,
        }
    return {
        "price": pair.priceUsd or "0",
        "priceNative": pair.priceNative or "0",
        "priceChange": {w: _num(getattr(change, w)) if change else 0.0 for w in WINDOWS},
        "volume": {w: _num(getattr(volume, w)) if volume else 0.0 for w in WINDOWS},
        "liquidity": {
            "usd": _num(liquidity.usd) if liquidity else 0.0,
            "base": _num(liquidity.base) if liquidity else 0.0,
            "quote": _num(liquidity.quote) if liquidity else 0.0,
        },
        "txns": counts,
        "pairAddress": pair.pairAddress,
        "pairCreatedAt": pair.pairCreatedAt,
        "dexId": pair.dexId,
        "url": pair.url,
    }


def _best_pairs(pairs: list[DexScreenerPair]) -> dict[str, DexScreenerPair]:
    """Most liquid pair per base token."""
    best: dict[str, DexScreenerPair] = {}
    for pair in pairs:
        if pair.baseToken is None:
            continue
        current = best.get(pair.baseToken.address)
        if current is None or pair.liquidity_usd > current.liquidity_usd:
            best[pair.baseToken.address] = pair
    return best


@router.get("/token-price/{contract}")
@limiter.limit(settings.token_price_rate_limit)
async def token_price(
    request: Request,
    contract: str,
    dexscreener: DexScreenerClient = Depends(get_dexscreener),
) -> dict[str, Any]:
    try:
        pairs = await dexscreener.get_token_pairs(contract)
    except httpx.HTTPError as e:
        logger.warning(f"[DEXSCREENER] Price lookup failed for {contract[:12]}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="DexScreener unavailable",
        ) from e
    if not pairs:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No trading pairs found for this token",
        )

    pair = pairs[0]
    meta = pair_to_metadata(pair, contract)
    return {
        "success": True,
        "contract": contract,
        "symbol": meta.symbol,
        "name": meta.name,
        **pair_to_price(pair),
        "marketCap": meta.market_cap_usd,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/token-prices")
@limiter.limit(settings.token_prices_rate_limit)
async def token_prices(
    request: Request,
    body: TokenPricesRequest,
    dexscreener: DexScreenerClient = Depends(get_dexscreener),
) -> dict[str, Any]:
    """Bulk lookup. Each contract succeeds or fails on its own."""
    contracts = body.contracts
    if not contracts:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Array of contract addresses required",
        )
    if len(contracts) > settings.token_prices_max_contracts:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {settings.token_prices_max_contracts} contracts per request",
        )

    started = time.perf_counter()
    best: dict[str, DexScreenerPair] = {}
    upstream_error: str | None = None
    try:
        pairs = await dexscreener.get_tokens_batch(list(dict.fromkeys(contracts)))
        best = _best_pairs(pairs)
    except httpx.HTTPError as e:
        logger.warning(f"[DEXSCREENER] Bulk price lookup failed: {e}")
        upstream_error = "DexScreener unavailable"

    prices: list[dict[str, Any]] = []
    for contract in contracts:
        pair = best.get(contract)
        if pair is None:
            prices.append({
                "contract": contract,
                "success": False,
                "error": upstream_error or NO_PAIRS,
            })
        else:
            prices.append({"contract": contract, "success": True, **pair_to_price(pair)})

    elapsed = int((time.perf_counter() - started) * 1000)
    success_count = sum(1 for p in prices if p["success"])
    failed_count = len(prices) - success_count
    logger.info(
        f"[API] Fetched {success_count}/{len(prices)} prices in {elapsed}ms "
        f"({failed_count} failed)"
    )
    return {
        "success": True,
        "prices": prices,
        "count": len(prices),
        "successCount": success_count,
        "failedCount": failed_count,
        "elapsed": elapsed,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
