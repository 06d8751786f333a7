import asyncio
import time
import unittest

import context  # noqa: F401

from hn_thread.rate_limiter import RateLimiter


class TestRateLimiter(unittest.TestCase):
    def test_min_interval_conversion(self):
        limiter = RateLimiter(min_interval_ms=250)
        self.assertAlmostEqual(limiter.min_interval, 0.25)

    def test_zero_interval_disables_waiting(self):
        limiter = RateLimiter(min_interval_ms=0)
        self.assertFalse(limiter.enabled)

        t0 = time.perf_counter()
        for _ in range(5):
            limiter.wait_if_needed()
        self.assertLess(time.perf_counter() - t0, 0.01)

    def test_first_call_does_not_sleep(self):
        limiter = RateLimiter(min_interval_ms=200)

        t0 = time.perf_counter()
        limiter.wait_if_needed()
        self.assertLess(time.perf_counter() - t0, 0.05)

    def test_second_call_waits_for_interval(self):
        interval_ms = 50
        limiter = RateLimiter(min_interval_ms=interval_ms)

        t0 = time.perf_counter()
        limiter.wait_if_needed()
        limiter.wait_if_needed()
        elapsed = time.perf_counter() - t0

        self.assertGreaterEqual(elapsed, interval_ms / 1000.0)
        self.assertLess(elapsed, interval_ms / 1000.0 + 0.2)

    def test_reset_forgets_previous_request(self):
        limiter = RateLimiter(min_interval_ms=500)
        limiter.wait_if_needed()
        limiter.reset()

        t0 = time.perf_counter()
        limiter.wait_if_needed()
        self.assertLess(time.perf_counter() - t0, 0.05)

    def test_async_waits_are_serialized(self):
        interval_ms = 30
        limiter = RateLimiter(min_interval_ms=interval_ms)

        async def run():
            await asyncio.gather(*(limiter.wait_if_needed_async() for _ in range(3)))

        t0 = time.perf_counter()
        asyncio.run(run())
        elapsed = time.perf_counter() - t0

        # first request goes straight through, the other two wait in turn
        self.assertGreaterEqual(elapsed, 2 * interval_ms / 1000.0)


if __name__ == "__main__":
    unittest.main()
