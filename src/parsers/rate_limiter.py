import asyncio


class RateLimiter:
    """Minimum-interval pacer for async HTTP clients.

    Callers serialize on a lock only long enough to claim the next slot.
    ``max_rps <= 0`` turns the limiter into a no-op.
    """

    def __init__(self, max_rps: float) -> None:
        self._min_interval = 1.0 / max_rps if max_rps > 0 else 0.0
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._min_interval > 0

    async def acquire(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait = self._min_interval - (loop.time() - self._last_request)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = loop.time()
