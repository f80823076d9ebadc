import asyncio


class RateLimiter:
    """Minimum-interval limiter for async clients sharing one quota.

    Callers are delayed, never rejected. A single lock plus one
    last-call checkpoint serializes every client holding the same instance.
    """

    def __init__(self, max_rps: float | None = None, *, min_interval: float | None = None) -> None:
        if min_interval is None:
            if not max_rps:
                raise ValueError("RateLimiter needs max_rps or min_interval")
            min_interval = 1.0 / max_rps
        self._min_interval = min_interval
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def acquire(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_request is not None:
                wait = self._min_interval - (loop.time() - self._last_request)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request = loop.time()
