"""
app/gate/rate_limiter.py

Sliding-window request limiter keyed by caller identity.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateDecision:
    """
    Outcome of one limiter check.

    ``reset_seconds`` is how long until the oldest counted request leaves the
    window; when a request is refused it doubles as the Retry-After value.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class SlidingWindowRateLimiter:
    """
    Counts accepted requests per key over a rolling time window.
    """

    def __init__(
        self,
        *,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window_seconds = max(1.0, float(window_seconds))
        self._clock = clock
        self._hits_by_key: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + self._window_seconds

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def check(self, key: str, limit: int) -> RateDecision:
        """
        Record one request for ``key`` if it fits under ``limit``.

        Refused requests are not counted.
        """

        limit = max(1, int(limit))
        with self._lock:
            now = self._clock()
            cutoff = now - self._window_seconds
            if now >= self._next_sweep:
                self._drop_idle_keys(cutoff)
                self._next_sweep = now + self._window_seconds

            hits = self._hits_by_key.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= limit:
                return RateDecision(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_seconds=self._seconds_until_reset(hits, now),
                )

            hits.append(now)
            return RateDecision(
                allowed=True,
                limit=limit,
                remaining=limit - len(hits),
                reset_seconds=self._seconds_until_reset(hits, now),
            )

    def tracked_keys(self) -> set[str]:
        with self._lock:
            return set(self._hits_by_key)

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._hits_by_key.clear()
            else:
                self._hits_by_key.pop(key, None)

    def _drop_idle_keys(self, cutoff: float) -> None:
        # A key whose newest hit left the window would start from zero anyway.
        idle = [key for key, hits in self._hits_by_key.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits_by_key[key]

    def _seconds_until_reset(self, hits: deque[float], now: float) -> int:
        if not hits:
            return 0
        return max(1, math.ceil(hits[0] + self._window_seconds - now))
