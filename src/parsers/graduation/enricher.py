"""Metadata enrichment for graduated mints: DexScreener first, Pump.fun as fallback."""

import asyncio

from loguru import logger

from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.graduation.models import UNKNOWN_NAME, UNKNOWN_SYMBOL, TokenMetadata
from src.parsers.pumpfun.client import PumpfunClient


def _num(value: object) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class MetadataSource:
    name = "base"

    async def fetch(self, mint: str) -> TokenMetadata | None:
        raise NotImplementedError


class DexScreenerSource(MetadataSource):
    """Most liquid pair. No pairs yet (common right after migration) counts as a miss."""

    name = "dexscreener"

    def __init__(self, client: DexScreenerClient) -> None:
        self._client = client

    async def fetch(self, mint: str) -> TokenMetadata | None:
        pairs = await self._client.get_token_pairs(mint)
        if not pairs:
            return None
        return pair_to_metadata(pairs[0], mint)


def pair_to_metadata(pair: DexScreenerPair, mint: str) -> TokenMetadata:
    token = pair.baseToken
    if token is not None and token.address != mint and pair.quoteToken is not None:
        token = pair.quoteToken
    info = pair.info
    return TokenMetadata(
        symbol=(token.symbol if token else None) or UNKNOWN_SYMBOL,
        name=(token.name if token else None) or UNKNOWN_NAME,
        logo=info.imageUrl if info else None,
        website=info.websites[0].url if info and info.websites else None,
        twitter=info.social("twitter") if info else None,
        telegram=info.social("telegram") if info else None,
        price_usd=_num(pair.priceUsd),
        liquidity_usd=_num(pair.liquidity_usd),
        market_cap_usd=_num(pair.marketCap or pair.fdv),
        price_change_m5=_num(pair.priceChange.m5 if pair.priceChange else 0),
        price_change_h1=_num(pair.priceChange.h1 if pair.priceChange else 0),
        source="dexscreener",
    )


class PumpfunSource(MetadataSource):
    """Descriptive fields and market cap only; Pump.fun has no price/liquidity here."""

    name = "pumpfun"

    def __init__(self, client: PumpfunClient) -> None:
        self._client = client

    async def fetch(self, mint: str) -> TokenMetadata | None:
        coin = await self._client.get_coin(mint)
        if coin is None:
            return None
        return TokenMetadata(
            symbol=coin.symbol or UNKNOWN_SYMBOL,
            name=coin.name or UNKNOWN_NAME,
            logo=coin.image_uri,
            website=coin.website,
            twitter=coin.twitter,
            telegram=coin.telegram,
            market_cap_usd=coin.usd_market_cap,
            source="pumpfun",
        )


class MetadataEnricher:
    """Walks the sources in order; first non-empty result wins.

    Never raises: every source failing yields None and the caller
    falls back to placeholder metadata. Each source gets at most
    ``source_timeout_sec``; a stalled source counts as a miss.
    """

    def __init__(self, sources: list[MetadataSource], *, source_timeout_sec: float = 15.0) -> None:
        self._sources = sources
        self._timeout = source_timeout_sec

    async def enrich(self, mint: str) -> TokenMetadata | None:
        for source in self._sources:
            try:
                metadata = await asyncio.wait_for(source.fetch(mint), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.info(f"[GRAD] {source.name} timed out after {self._timeout:.0f}s for {mint[:12]}")
                continue
            except Exception as e:
                logger.debug(f"[GRAD] {source.name} metadata failed for {mint[:12]}: {e}")
                continue
            if metadata is not None:
                return metadata
            logger.debug(f"[GRAD] {source.name} has no metadata for {mint[:12]}")
        logger.info(f"[GRAD] No metadata for {mint[:12]}, using placeholders")
        return None
