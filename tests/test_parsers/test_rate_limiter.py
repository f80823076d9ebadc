"""Tests for the minimum-interval rate limiter."""

import asyncio

import pytest

from src.parsers.rate_limiter import RateLimiter


def test_interval_from_rps():
    assert RateLimiter(2.0).min_interval == pytest.approx(0.5)
    assert RateLimiter(min_interval=0.5).min_interval == 0.5


def test_requires_a_limit():
    with pytest.raises(ValueError):
        RateLimiter()


@pytest.mark.asyncio
async def test_first_call_is_immediate():
    limiter = RateLimiter(min_interval=5.0)
    await asyncio.wait_for(limiter.acquire(), timeout=1.0)


@pytest.mark.asyncio
async def test_callers_are_delayed_not_rejected():
    limiter = RateLimiter(min_interval=0.05)
    loop = asyncio.get_running_loop()
    start = loop.time()
    await asyncio.gather(*(limiter.acquire() for _ in range(4)))
    elapsed = loop.time() - start
    # 4 calls → 3 enforced gaps
    assert elapsed >= 0.15 - 0.01
