import time
from collections.abc import Callable, Mapping

from cachetools import TTLCache
from loguru import logger

from codescore.core.config import settings
from codescore.core.errors import RateLimitedError
from codescore.models.profile import Platform


class _Window:
    __slots__ = ("opened_at", "count")

    def __init__(self, opened_at: float):
        self.opened_at = opened_at
        self.count = 0


class PlatformRateLimiter:
    """
    Fixed-window request gate per platform.

    acquire() either lets the call through immediately or raises RateLimitedError;
    it never sleeps. Windows live in a TTLCache so an idle platform's counter
    simply expires.
    """

    def __init__(
        self,
        limits: Mapping[str, int] | None = None,
        window_seconds: float | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        limits = settings.PLATFORM_RATE_LIMITS if limits is None else limits
        self.limits = {Platform(name): int(limit) for name, limit in limits.items()}
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self._timer = timer
        self._windows: TTLCache = TTLCache(maxsize=len(Platform), ttl=self.window_seconds, timer=timer)

    def acquire(self, platform: Platform | str) -> None:
        platform = Platform(platform)
        limit = self.limits.get(platform)
        if limit is None:
            return

        window = self._windows.get(platform)
        if window is None:
            # Assigning only on creation keeps the expiry anchored to the window start.
            window = _Window(self._timer())
            self._windows[platform] = window

        if window.count >= limit:
            retry_after = max(0.0, window.opened_at + self.window_seconds - self._timer())
            logger.warning(f"[{platform.value}] Rate limit of {limit}/{self.window_seconds}s reached")
            raise RateLimitedError(
                f"{platform.value} rate limit reached, retry in {retry_after:.0f}s",
                platform=platform.value,
                retry_after=retry_after,
            )
        window.count += 1

    def remaining(self, platform: Platform | str) -> int | None:
        platform = Platform(platform)
        limit = self.limits.get(platform)
        if limit is None:
            return None
        window = self._windows.get(platform)
        return limit - (window.count if window else 0)
