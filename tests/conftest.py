"""Shared test fixtures."""

import time
from collections.abc import Callable

import pytest

from src.parsers.graduation.constants import MIGRATION_MARKER, PUMP_PROGRAM_ID
from src.parsers.graduation.models import LogNotification
from src.parsers.graduation.ws_client import ConnectionState, StreamState


@pytest.fixture
def make_notification() -> Callable[..., LogNotification]:
    """Factory for logsNotification values; default logs carry the migrate marker."""

    def _make(
        signature: str | None = "sig1",
        logs: list[str] | None = None,
        err: object | None = None,
    ) -> LogNotification:
        if logs is None:
            logs = [
                f"Program {PUMP_PROGRAM_ID} invoke [1]",
                f"Program log: {MIGRATION_MARKER}",
                f"Program {PUMP_PROGRAM_ID} success",
            ]
        return LogNotification(signature=signature, logs=logs, err=err)

    return _make


@pytest.fixture
def connected_state() -> StreamState:
    """Connected long enough ago that the grace period is over."""
    return StreamState(
        state=ConnectionState.CONNECTED,
        connected_at=time.time() - 120,
    )
