from __future__ import annotations

import unittest

from app.gate.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = SlidingWindowRateLimiter(window_seconds=60, clock=self.clock)

    def test_requests_under_limit_are_allowed(self) -> None:
        first = self.limiter.check("owner:a", 2)
        second = self.limiter.check("owner:a", 2)

        self.assertTrue(first.allowed)
        self.assertEqual(first.remaining, 1)
        self.assertTrue(second.allowed)
        self.assertEqual(second.remaining, 0)

    def test_request_over_limit_is_refused_with_retry_after(self) -> None:
        self.limiter.check("owner:a", 1)
        self.clock.now += 20

        decision = self.limiter.check("owner:a", 1)

        self.assertFalse(decision.allowed)
        self.assertEqual(decision.remaining, 0)
        self.assertEqual(decision.reset_seconds, 40)

    def test_window_slides(self) -> None:
        self.limiter.check("owner:a", 1)
        self.clock.now += 60

        self.assertTrue(self.limiter.check("owner:a", 1).allowed)

    def test_keys_are_independent(self) -> None:
        self.limiter.check("owner:a", 1)

        self.assertTrue(self.limiter.check("owner:b", 1).allowed)
        self.assertFalse(self.limiter.check("owner:a", 1).allowed)

    def test_refused_requests_are_not_counted(self) -> None:
        self.limiter.check("ip:1.2.3.4", 1)
        for _ in range(5):
            self.limiter.check("ip:1.2.3.4", 1)
        self.clock.now += 61

        self.assertTrue(self.limiter.check("ip:1.2.3.4", 1).allowed)

    def test_reset_clears_key(self) -> None:
        self.limiter.check("owner:a", 1)
        self.limiter.reset("owner:a")

        self.assertTrue(self.limiter.check("owner:a", 1).allowed)


    def test_idle_keys_are_dropped_after_a_window(self) -> None:
        self.limiter.check("ip:10.0.0.1", 1)
        self.limiter.check("ip:10.0.0.2", 1)
        self.clock.now += 30
        self.limiter.check("ip:10.0.0.3", 1)
        self.clock.now += 31

        self.limiter.check("owner:a", 1)

        self.assertEqual(self.limiter.tracked_keys(), {"ip:10.0.0.3", "owner:a"})

    def test_dropped_key_starts_a_fresh_window(self) -> None:
        self.limiter.check("ip:10.0.0.1", 1)
        self.clock.now += 61
        self.limiter.check("owner:a", 1)

        decision = self.limiter.check("ip:10.0.0.1", 1)

        self.assertTrue(decision.allowed)
        self.assertEqual(decision.remaining, 0)


if __name__ == "__main__":
    unittest.main()
