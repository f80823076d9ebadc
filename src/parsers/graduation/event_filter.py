"""Per-notification gate: migration marker, startup grace period, in-flight dedup."""

import time
from collections import OrderedDict
from enum import Enum

from loguru import logger

from src.parsers.graduation.constants import MIGRATION_MARKER
from src.parsers.graduation.models import LogNotification
from src.parsers.graduation.ws_client import StreamState


class FilterVerdict(Enum):
    ACCEPTED = "accepted"
    FAILED_TX = "failed_tx"
    DUPLICATE = "duplicate"
    NO_MARKER = "no_marker"
    GRACE_PERIOD = "grace_period"

    @property
    def accepted(self) -> bool:
        return self is FilterVerdict.ACCEPTED


class InFlightSignatureSet:
    """FIFO-bounded membership set of signatures. No expiry, no per-entry data."""

    def __init__(self, capacity: int = 100) -> None:
        self._capacity = capacity
        self._items: OrderedDict[str, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, signature: object) -> bool:
        return signature in self._items

    def add(self, signature: str) -> None:
        if signature in self._items:
            return
        if len(self._items) >= self._capacity:
            self._items.popitem(last=False)
        self._items[signature] = None


class EventFilter:
    """Decides whether a log notification is a graduation worth processing.

    Rules run in order and the first match rejects:
    failed tx / no signature, already in flight, no migrate marker,
    inside the grace window of the current connection epoch.
    """

    def __init__(
        self,
        stream_state: StreamState,
        *,
        grace_period_sec: float = 30.0,
        inflight_capacity: int = 100,
    ) -> None:
        self._state = stream_state
        self._grace_period = grace_period_sec
        self.inflight = InFlightSignatureSet(inflight_capacity)
        self.counts: dict[FilterVerdict, int] = {v: 0 for v in FilterVerdict}

    def evaluate(self, notification: LogNotification, now: float | None = None) -> FilterVerdict:
        verdict = self._check(notification, time.time() if now is None else now)
        self.counts[verdict] += 1
        if verdict.accepted and notification.signature:
            self.inflight.add(notification.signature)
        return verdict

    def _check(self, notification: LogNotification, now: float) -> FilterVerdict:
        signature = notification.signature
        if notification.err is not None or not signature:
            return FilterVerdict.FAILED_TX
        if signature in self.inflight:
            return FilterVerdict.DUPLICATE
        if MIGRATION_MARKER not in notification.text:
            return FilterVerdict.NO_MARKER

        connected_at = self._state.connected_at
        if connected_at is None or now - connected_at < self._grace_period:
            logger.debug(f"[GRAD] Grace period, skipping migration {signature[:16]}")
            return FilterVerdict.GRACE_PERIOD
        return FilterVerdict.ACCEPTED
