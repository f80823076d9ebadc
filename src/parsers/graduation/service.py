"""GraduationService: the single owner of the radar's mutable state.

Wires stream → filter → processor → cache and is the only read surface
for the HTTP layer. Everything runs on one asyncio loop: the filter and
cache are touched between awaits only, processing tasks run concurrently.
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from config.settings import Settings
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.graduation.cache import GraduationCache
from src.parsers.graduation.enricher import DexScreenerSource, MetadataEnricher, PumpfunSource
from src.parsers.graduation.event_filter import EventFilter, FilterVerdict
from src.parsers.graduation.mint_extractor import MintExtractor, default_strategies
from src.parsers.graduation.models import ConnectionStatus, GraduationRecord, LogNotification
from src.parsers.graduation.processor import GraduationProcessor
from src.parsers.graduation.rpc_client import SolanaRpcClient
from src.parsers.graduation.ws_client import GraduationStreamClient, StreamState
from src.parsers.pumpfun.client import PumpfunClient
from src.parsers.rate_limiter import RateLimiter
from src.parsers.rugcheck.client import RugcheckClient


class GraduationService:
    def __init__(
        self,
        processor: Callable[[LogNotification], Awaitable[GraduationRecord | None]],
        cache: GraduationCache,
        *,
        stream_state: StreamState | None = None,
        stream: GraduationStreamClient | None = None,
        grace_period_sec: float = 30.0,
        inflight_capacity: int = 100,
        closers: list[Callable[[], Awaitable[None]]] | None = None,
    ) -> None:
        self._process = processor
        self.cache = cache
        self.stream_state = stream.stream_state if stream else (stream_state or StreamState())
        self.stream = stream
        self.event_filter = EventFilter(
            self.stream_state,
            grace_period_sec=grace_period_sec,
            inflight_capacity=inflight_capacity,
        )
        self._closers = closers or []
        self._pending_tasks: set[asyncio.Task] = set()
        if stream is not None:
            stream.on_notification = self.handle_notification

    @classmethod
    def from_settings(cls, settings: Settings) -> "GraduationService":
        """Build the full pipeline. No Helius key → no stream (cache-only mode)."""
        rpc = SolanaRpcClient(
            settings.rpc_url,
            rate_limiter=RateLimiter(min_interval=settings.tx_fetch_min_interval_sec),
        )
        dexscreener = DexScreenerClient(max_rps=settings.dexscreener_max_rps)
        pumpfun = PumpfunClient(max_rps=settings.pumpfun_max_rps)
        rugcheck = RugcheckClient(max_rps=settings.rugcheck_max_rps) if settings.enable_rugcheck else None

        cache = GraduationCache(settings.graduation_cache_capacity)
        processor = GraduationProcessor(
            MintExtractor(
                rpc,
                strategies=default_strategies(settings.graduation_program_id),
                attempts=settings.tx_fetch_attempts,
                retry_delay_sec=settings.tx_fetch_retry_delay_sec,
            ),
            MetadataEnricher(
                [DexScreenerSource(dexscreener), PumpfunSource(pumpfun)],
                source_timeout_sec=settings.metadata_source_timeout_sec,
            ),
            cache,
            rugcheck=rugcheck,
            risk_timeout_sec=settings.metadata_source_timeout_sec,
        )

        stream = None
        if settings.ws_url:
            stream = GraduationStreamClient(
                settings.ws_url,
                settings.graduation_program_id,
                keepalive_sec=settings.graduation_keepalive_sec,
                base_delay_sec=settings.graduation_reconnect_base_delay_sec,
                max_reconnect_attempts=settings.graduation_max_reconnect_attempts,
            )

        closers = [rpc.close, dexscreener.close, pumpfun.close]
        if rugcheck:
            closers.append(rugcheck.close)
        return cls(
            processor.process,
            cache,
            stream=stream,
            grace_period_sec=settings.graduation_grace_period_sec,
            inflight_capacity=settings.graduation_inflight_capacity,
            closers=closers,
        )

    @property
    def pending_count(self) -> int:
        return len(self._pending_tasks)

    async def run(self) -> None:
        """Run the stream until stopped or reconnects are exhausted."""
        if self.stream is None:
            logger.warning("[GRAD] No Helius API key configured, graduation stream disabled (cache-only)")
            return
        await self.stream.connect()

    def handle_notification(self, notification: LogNotification) -> FilterVerdict:
        """Filter synchronously in arrival order, process accepted events as tasks."""
        verdict = self.event_filter.evaluate(notification)
        if verdict.accepted:
            logger.debug(f"[GRAD] Migration accepted: {notification.signature}")
            task = asyncio.create_task(self._safe_process(notification))
            self._pending_tasks.add(task)
            task.add_done_callback(self._pending_tasks.discard)
        return verdict

    async def _safe_process(self, notification: LogNotification) -> None:
        """Runs to completion. Lookup timeouts live in the processor."""
        sig = (notification.signature or "")[:16]
        try:
            await self._process(notification)
        except Exception as e:
            logger.error(f"[GRAD] Processing error for {sig}: {e}")

    def list_graduations(self) -> list[GraduationRecord]:
        """Newest first. Age is derived by the caller from detected_at."""
        return self.cache.records()

    def connection_status(self) -> ConnectionStatus:
        oldest = self.cache.oldest
        newest = self.cache.newest
        return ConnectionStatus(
            connected=self.stream_state.connected,
            state=self.stream_state.state.value,
            reconnect_attempts=self.stream_state.reconnect_attempts,
            degraded=self.stream_state.degraded,
            message_count=self.stream.message_count if self.stream else 0,
            cache_size=len(self.cache),
            oldest_timestamp=oldest.detected_at_ms if oldest else None,
            newest_timestamp=newest.detected_at_ms if newest else None,
        )

    def format_stats_line(self) -> str:
        status = self.connection_status()
        counts = self.event_filter.counts
        return (
            f"GRAD state: {status.state} | msgs: {status.message_count} | "
            f"accepted: {counts[FilterVerdict.ACCEPTED]} | "
            f"grace-skipped: {counts[FilterVerdict.GRACE_PERIOD]} | "
            f"dupes: {counts[FilterVerdict.DUPLICATE]} | "
            f"in-flight: {self.pending_count} | cache: {status.cache_size}"
        )

    async def stop(self) -> None:
        """Stop the stream (cancels a pending reconnect timer) and close clients.

        In-flight processing tasks are left to finish on their own.
        """
        if self.stream:
            await self.stream.stop()
        for close in self._closers:
            try:
                await close()
            except Exception as e:
                logger.debug(f"[GRAD] Client close failed: {e}")
        logger.info(f"[GRAD] Stopped, {len(self.cache)} graduations cached")
