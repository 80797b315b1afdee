"""
In-Memory Rate Limiter
======================
Fixed window rate limiter for a single server process.
"""

import threading
import time
from typing import Callable, Dict

from .models import RateLimitInfo


class InMemoryRateLimiter:
    """
    Fixed window rate limiter keyed by caller.

    State lives in the process. The first check of a new window drops every
    counter left over from earlier windows.
    """

    def __init__(self, rate: int = 5, window: int = 60, clock: Callable[[], float] = time.time):
        """
        Args:
            rate: Number of requests allowed per window
            window: Window size in seconds
            clock: Returns the current Unix time
        """
        if rate < 1 or window < 1:
            raise ValueError("rate and window must be positive")
        self.rate = rate
        self.window = window
        self._clock = clock
        self._buckets: Dict[str, dict] = {}
        self._current_window = 0
        self._lock = threading.Lock()

    def check(self, key: str) -> RateLimitInfo:
        """
        Check if request is allowed, consuming one slot if it is.

        Args:
            key: Unique identifier (e.g., client address)

        Returns:
            RateLimitInfo with decision and quota
        """
        now = self._clock()
        window_start = int(now // self.window) * self.window
        reset_at = int(window_start + self.window)

        with self._lock:
            if window_start > self._current_window:
                self._prune(window_start)

            bucket = self._buckets.get(key)

            # Reset if new window
            if bucket is None or bucket["window"] < window_start:
                bucket = {"window": window_start, "count": 0}
                self._buckets[key] = bucket

            if bucket["count"] >= self.rate:
                return RateLimitInfo(
                    allowed=False,
                    remaining=0,
                    limit=self.rate,
                    reset_at=reset_at,
                    retry_after=max(1, reset_at - int(now)),
                )

            bucket["count"] += 1
            remaining = self.rate - bucket["count"]

        return RateLimitInfo(
            allowed=True,
            remaining=remaining,
            limit=self.rate,
            reset_at=reset_at,
        )

    def _prune(self, window_start: int) -> None:
        """Drop counters from past windows. Caller holds the lock."""
        self._buckets = {
            key: bucket
            for key, bucket in self._buckets.items()
            if bucket["window"] >= window_start
        }
        self._current_window = window_start

    def reset(self) -> None:
        """Forget every counter."""
        with self._lock:
            self._buckets.clear()

    def get_key_pattern(self, prefix: str, identifier: str) -> str:
        """Generate a rate limit key."""
        return f"ratelimit:{prefix}:{identifier}"
