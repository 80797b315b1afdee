"""
Tests for Rate Limiting
=======================
"""

import pytest


class FakeTime:
    def __init__(self, now=1_000_020.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRateLimit:
    """Tests for the in-memory limiter."""

    def test_in_memory_rate_limiter(self):
        """Should enforce rate limits."""
        from mailotp_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=5, window=60)

        # First 5 should pass
        for i in range(5):
            result = limiter.check("client1")
            assert result.allowed is True
            assert result.remaining == 4 - i

        # 6th should fail
        result = limiter.check("client1")
        assert result.allowed is False
        assert result.remaining == 0
        assert result.retry_after >= 1

    def test_rate_limit_separate_keys(self):
        """Different keys should have separate limits."""
        from mailotp_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=2, window=60)

        limiter.check("client1")
        limiter.check("client1")

        assert limiter.check("client1").allowed is False
        assert limiter.check("client2").allowed is True

    def test_window_resets(self):
        """A new window starts a new count."""
        from mailotp_core.rate_limit import InMemoryRateLimiter, RateLimitResult

        clock = FakeTime()
        limiter = InMemoryRateLimiter(rate=1, window=60, clock=clock)

        assert limiter.check("client1").result == RateLimitResult.ALLOWED
        blocked = limiter.check("client1")
        assert blocked.result == RateLimitResult.BLOCKED
        assert blocked.reset_at == 1_000_020 + 60
        assert blocked.retry_after == 60

        clock.now += 60
        assert limiter.check("client1").allowed is True

    def test_headers(self):
        from mailotp_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=1, window=60, clock=FakeTime())
        allowed = limiter.check("client1")
        blocked = limiter.check("client1")

        assert allowed.headers() == {
            "X-RateLimit-Limit": "1",
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": "1000080",
        }
        assert blocked.headers()["Retry-After"] == "60"

    def test_reset(self):
        from mailotp_core.rate_limit import InMemoryRateLimiter

        limiter = InMemoryRateLimiter(rate=1, window=60)
        limiter.check("client1")
        limiter.reset()

        assert limiter.check("client1").allowed is True

    def test_rejects_invalid_configuration(self):
        from mailotp_core.rate_limit import InMemoryRateLimiter

        with pytest.raises(ValueError):
            InMemoryRateLimiter(rate=0)

    def test_past_windows_are_dropped(self):
        """Counters from earlier windows do not pile up."""
        from mailotp_core.rate_limit import InMemoryRateLimiter

        clock = FakeTime()
        limiter = InMemoryRateLimiter(rate=5, window=60, clock=clock)

        for i in range(1000):
            limiter.check(f"client{i}")
        assert len(limiter._buckets) == 1000

        clock.now += 3600
        limiter.check("late-client")

        assert list(limiter._buckets) == ["late-client"]
        assert limiter.check("client0").remaining == 4

    def test_current_window_is_kept(self):
        from mailotp_core.rate_limit import InMemoryRateLimiter

        clock = FakeTime(now=1_000_020.0)
        limiter = InMemoryRateLimiter(rate=1, window=60, clock=clock)

        limiter.check("client1")
        clock.now += 10
        limiter.check("client2")

        assert limiter.check("client1").allowed is False
