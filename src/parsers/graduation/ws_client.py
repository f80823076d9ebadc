"""WebSocket client for PumpSwap migrations via Solana logsSubscribe.

Same shape as the other stream clients: ConnectionState enum, exponential
backoff, typed callback. Differences: the backoff is bounded by an attempt
count (after which the radar serves its cache only), the pending reconnect
timer is cancellable by ``stop()``, and ``connected_at`` is published for the
event filter's grace period.
"""

import asyncio
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import websockets
from loguru import logger
from pydantic import ValidationError

from src.parsers.graduation.constants import SUBSCRIBE_REQUEST_ID
from src.parsers.graduation.models import LogNotification


class SubscriptionError(ConnectionError):
    """logsSubscribe was answered with an error; the connection is useless."""


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class StreamState:
    """Process-wide connection state. Written only by GraduationStreamClient."""

    state: ConnectionState = ConnectionState.DISCONNECTED
    connected_at: float | None = None  # start of the current connection epoch
    reconnect_attempts: int = 0
    degraded: bool = False  # reconnects exhausted, cache-only from now on

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED


class GraduationStreamClient:
    """Persistent logsSubscribe connection for one program id.

    Every notification is handed to ``on_notification`` synchronously, in
    arrival order. The client itself only tells the subscription ack apart
    from notifications.
    """

    def __init__(
        self,
        ws_url: str,
        program_id: str,
        *,
        stream_state: StreamState | None = None,
        keepalive_sec: float = 30.0,
        base_delay_sec: float = 5.0,
        max_reconnect_attempts: int = 10,
        connect_factory: Callable[..., Any] = websockets.connect,
    ) -> None:
        self._ws_url = ws_url
        self._program_id = program_id
        self._state = stream_state or StreamState()
        self._keepalive_sec = keepalive_sec
        self._base_delay = base_delay_sec
        self._max_attempts = max_reconnect_attempts
        self._connect = connect_factory
        self._ws: Any | None = None
        self._running = False
        self._stop_event: asyncio.Event | None = None
        self._message_count = 0
        self._subscription_id: int | None = None

        self.on_notification: Callable[[LogNotification], None] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state.state

    @property
    def stream_state(self) -> StreamState:
        return self._state

    @property
    def message_count(self) -> int:
        return self._message_count

    @property
    def subscription_id(self) -> int | None:
        return self._subscription_id

    def next_reconnect_delay(self) -> float | None:
        """Count one more attempt and return its delay, or None once attempts are exhausted.

        delay = base * 2^(attempt - 1)
        """
        if self._state.reconnect_attempts >= self._max_attempts:
            return None
        self._state.reconnect_attempts += 1
        return self._base_delay * 2 ** (self._state.reconnect_attempts - 1)

    async def connect(self) -> None:
        """Connect and listen. Reconnects with backoff until stopped or exhausted."""
        self._running = True
        self._stop_event = asyncio.Event()
        while self._running:
            self._state.state = ConnectionState.CONNECTING
            try:
                async with self._connect(
                    self._ws_url,
                    ping_interval=self._keepalive_sec,
                    ping_timeout=10,
                    close_timeout=5,
                ) as ws:
                    self._ws = ws
                    self._mark_connected()
                    await self._subscribe()
                    logger.info(
                        f"[GRAD] Solana WS connected, logsSubscribe {self._program_id[:8]}... active"
                    )
                    await self._listen()
                logger.warning("[GRAD] WS stream closed by server")
            except (
                websockets.WebSocketException,
                ConnectionError,
                OSError,
                TimeoutError,
            ) as e:
                logger.warning(f"[GRAD] WS disconnected: {e}")
            self._mark_disconnected()

            if not self._running:
                break
            delay = self.next_reconnect_delay()
            if delay is None:
                self._state.degraded = True
                logger.error(
                    f"[GRAD] Gave up after {self._max_attempts} reconnect attempts, "
                    "serving cached graduations only"
                )
                break
            logger.info(
                f"[GRAD] Reconnecting in {delay:.0f}s "
                f"(attempt {self._state.reconnect_attempts}/{self._max_attempts})"
            )
            if await self._wait_or_stop(delay):
                break
        self._running = False

    def _mark_connected(self) -> None:
        self._state.state = ConnectionState.CONNECTED
        self._state.connected_at = time.time()

    def _mark_disconnected(self) -> None:
        self._state.state = ConnectionState.DISCONNECTED
        self._ws = None
        self._subscription_id = None

    async def _wait_or_stop(self, delay: float) -> bool:
        """Sleep out the reconnect timer. True if stop() cancelled it."""
        if self._stop_event is None:
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def _subscribe(self) -> None:
        """Send logsSubscribe. The ack is picked up by _listen by request id."""
        if not self._ws:
            return
        await self._ws.send(json.dumps({
            "jsonrpc": "2.0",
            "id": SUBSCRIBE_REQUEST_ID,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self._program_id]},
                {"commitment": "confirmed"},
            ],
        }))

    async def _listen(self) -> None:
        if not self._ws:
            return

        async for message in self._ws:
            self._message_count += 1
            try:
                data = json.loads(message)
            except json.JSONDecodeError:
                continue
            if not isinstance(data, dict):
                continue
            self.handle_message(data)

    def handle_message(self, data: dict) -> None:
        if data.get("id") == SUBSCRIBE_REQUEST_ID:
            if "result" not in data:
                raise SubscriptionError(f"logsSubscribe rejected: {data.get('error')}")
            self._subscription_id = data["result"]
            # only a confirmed subscription ends the backoff sequence
            self._state.reconnect_attempts = 0
            logger.debug(f"[GRAD] logsSubscribe id={self._subscription_id}")
            return

        try:
            notification = LogNotification.from_message(data)
        except (ValidationError, AttributeError, TypeError) as e:
            logger.debug(f"[GRAD] Malformed logsNotification: {e}")
            return
        if notification is None or self.on_notification is None:
            return
        try:
            self.on_notification(notification)
        except Exception as e:
            logger.error(f"[GRAD] Notification handler error: {e}")

    async def stop(self) -> None:
        self._running = False
        if self._stop_event:
            self._stop_event.set()
        if self._ws:
            await self._ws.close()
            self._ws = None
        self._state.state = ConnectionState.DISCONNECTED
