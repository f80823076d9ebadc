"""Extractor → Enricher → Cache for one accepted migration notification."""

import asyncio

from loguru import logger

from src.parsers.graduation.cache import GraduationCache
from src.parsers.graduation.constants import SOURCE_TAG
from src.parsers.graduation.enricher import MetadataEnricher
from src.parsers.graduation.mint_extractor import MintExtractor
from src.parsers.graduation.models import GraduationRecord, LogNotification, RiskSummary
from src.parsers.rugcheck.client import RugcheckClient


class GraduationProcessor:
    def __init__(
        self,
        extractor: MintExtractor,
        enricher: MetadataEnricher,
        cache: GraduationCache,
        *,
        rugcheck: RugcheckClient | None = None,
        risk_timeout_sec: float = 15.0,
        source_tag: str = SOURCE_TAG,
    ) -> None:
        self._extractor = extractor
        self._enricher = enricher
        self._cache = cache
        self._rugcheck = rugcheck
        self._risk_timeout = risk_timeout_sec
        self._source_tag = source_tag

    async def process(self, notification: LogNotification) -> GraduationRecord | None:
        """Returns the new record, or None if dropped (no mint, or mint already cached)."""
        signature = notification.signature
        if not signature:
            return None

        extraction = await self._extractor.extract(signature, notification.logs)
        if extraction is None:
            return None

        mint = extraction.mint
        if mint in self._cache:
            logger.debug(f"[GRAD] {mint[:12]} already cached, ignoring {signature[:16]}")
            return None

        metadata, risk = await asyncio.gather(
            self._enricher.enrich(mint),
            self._fetch_risk(mint),
        )
        record = GraduationRecord.build(
            mint=mint,
            signature=signature,
            source=self._source_tag,
            metadata=metadata,
            extraction_method=extraction.method,
            risk=risk,
        )
        # A concurrent event for the same mint may have won while we awaited.
        if not self._cache.add(record):
            logger.debug(f"[GRAD] {mint[:12]} cached concurrently, ignoring {signature[:16]}")
            return None

        logger.info(
            f"[GRAD] Graduated: {record.symbol} {mint[:12]}... "
            f"liq=${record.liquidity_usd:,.0f} via {extraction.method}"
        )
        return record

    async def _fetch_risk(self, mint: str) -> RiskSummary | None:
        if self._rugcheck is None:
            return None
        try:
            report = await asyncio.wait_for(
                self._rugcheck.get_token_report(mint), timeout=self._risk_timeout,
            )
        except Exception as e:
            logger.debug(f"[GRAD] Rugcheck failed for {mint[:12]}: {e!r}")
            return None
        if report is None:
            return None
        if report.danger_count:
            logger.info(f"[RUGCHECK] {mint[:12]} has {report.danger_count} danger-level risks")
        return RiskSummary(
            score=report.score,
            risks=report.risk_names,
            rugged=report.rugged,
            top_holders_pct=report.top_holders_pct,
            creator_pct=report.creator_pct,
        )
