import asyncio
import threading
import time


class RateLimiter:
    """
    Keeps a minimum interval between consecutive requests.

    wait_if_needed is used by the blocking client and is safe to call from
    several threads; wait_if_needed_async is its counterpart for the
    asyncio client, where concurrent tasks queue up on the same gap.
    """

    def __init__(self, min_interval_ms: float = 1000.0) -> None:
        self.min_interval = max(float(min_interval_ms), 0.0) / 1000.0
        self._last = None
        self._lock = threading.Lock()
        self._async_lock = None

    @property
    def enabled(self) -> bool:
        return self.min_interval > 0

    def _remaining(self) -> float:
        if self._last is None:
            return 0.0
        return self.min_interval - (time.perf_counter() - self._last)

    def wait_if_needed(self):
        """Sleep until min_interval has passed since the previous request."""
        if not self.enabled:
            return
        with self._lock:
            remaining = self._remaining()
            if remaining > 0:
                time.sleep(remaining)
            self._last = time.perf_counter()

    async def wait_if_needed_async(self):
        if not self.enabled:
            return
        if self._async_lock is None:
            self._async_lock = asyncio.Lock()
        async with self._async_lock:
            remaining = self._remaining()
            if remaining > 0:
                await asyncio.sleep(remaining)
            self._last = time.perf_counter()

    def reset(self):
        self._last = None
