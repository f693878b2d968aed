"""Tests for PlatformRateLimiter."""

import pytest

from codescore.core.errors import RateLimitedError
from codescore.models.profile import Platform
from codescore.services.rate_limiter import PlatformRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestPlatformRateLimiter:
    def test_allows_up_to_limit_then_fails_fast(self):
        clock = FakeClock()
        limiter = PlatformRateLimiter(limits={"leetcode": 2}, window_seconds=60, timer=clock)

        limiter.acquire(Platform.LEETCODE)
        limiter.acquire("leetcode")
        with pytest.raises(RateLimitedError) as exc_info:
            limiter.acquire(Platform.LEETCODE)

        assert exc_info.value.platform == "leetcode"
        assert exc_info.value.retry_after == pytest.approx(60.0)

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        limiter = PlatformRateLimiter(limits={"leetcode": 1}, window_seconds=60, timer=clock)

        limiter.acquire(Platform.LEETCODE)
        clock.now += 30
        with pytest.raises(RateLimitedError) as exc_info:
            limiter.acquire(Platform.LEETCODE)
        assert exc_info.value.retry_after == pytest.approx(30.0)

        clock.now += 31
        limiter.acquire(Platform.LEETCODE)
        assert limiter.remaining(Platform.LEETCODE) == 0

    def test_requests_inside_window_do_not_extend_it(self):
        clock = FakeClock()
        limiter = PlatformRateLimiter(limits={"leetcode": 3}, window_seconds=60, timer=clock)

        limiter.acquire(Platform.LEETCODE)
        clock.now += 50
        limiter.acquire(Platform.LEETCODE)
        clock.now += 11
        assert limiter.remaining(Platform.LEETCODE) == 3

    def test_platforms_are_independent_and_unlisted_ones_unthrottled(self):
        limiter = PlatformRateLimiter(limits={"leetcode": 1, "codechef": 1}, window_seconds=60, timer=FakeClock())

        limiter.acquire(Platform.LEETCODE)
        limiter.acquire(Platform.CODECHEF)
        for _ in range(50):
            limiter.acquire(Platform.CODEFORCES)
        assert limiter.remaining(Platform.CODEFORCES) is None
        with pytest.raises(RateLimitedError):
            limiter.acquire(Platform.CODECHEF)
