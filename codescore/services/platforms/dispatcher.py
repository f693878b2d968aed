import httpx
from loguru import logger

from codescore.core.errors import (
    AdapterError,
    ParseFailureError,
    TransientError,
    UnsupportedPlatformError,
)
from codescore.models.profile import Platform, ProfileSnapshot
from codescore.services.platforms.base import PlatformAdapter
from codescore.services.platforms.codechef import CodeChefAdapter
from codescore.services.platforms.codeforces import CodeforcesAdapter
from codescore.services.platforms.hackerrank import HackerRankAdapter
from codescore.services.platforms.leetcode import LeetCodeAdapter

ADAPTER_CLASSES: dict[Platform, type[PlatformAdapter]] = {
    Platform.LEETCODE: LeetCodeAdapter,
    Platform.CODEFORCES: CodeforcesAdapter,
    Platform.CODECHEF: CodeChefAdapter,
    Platform.HACKERRANK: HackerRankAdapter,
}


def resolve_platform(platform: Platform | str) -> Platform:
    try:
        return Platform(platform)
    except ValueError:
        raise UnsupportedPlatformError(f"Unsupported platform: {platform!r}", platform=str(platform)) from None


class PlatformDispatcher:
    """
    Routes (platform, username) to the adapter that owns the platform.

    The platform is validated before any I/O. Failures come out as AdapterError
    subclasses only; anything an adapter let slip is classified here. No retries.
    """

    def __init__(
        self,
        adapters: dict[Platform, PlatformAdapter] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if adapters is None:
            adapters = {
                platform: adapter_cls(timeout=timeout, transport=transport)
                for platform, adapter_cls in ADAPTER_CLASSES.items()
            }
        self.adapters = adapters

    async def dispatch(self, platform: Platform | str, username: str) -> ProfileSnapshot:
        resolved = resolve_platform(platform)
        adapter = self.adapters.get(resolved)
        if adapter is None:
            raise UnsupportedPlatformError(f"No adapter configured for {resolved.value}", platform=resolved.value)

        logger.debug(f"[{resolved.value}] Fetching profile for {username}")
        try:
            return await adapter.fetch(username, resolved)
        except AdapterError as e:
            e.platform = e.platform or resolved.value
            e.username = e.username or username
            self._log_failure(e)
            raise
        except httpx.HTTPError as e:
            error = TransientError(f"{resolved.value} request failed: {e}", resolved.value, username)
            self._log_failure(error)
            raise error from e
        except (AttributeError, KeyError, TypeError, ValueError, IndexError) as e:
            error = ParseFailureError(
                f"Unexpected {resolved.value} response shape for {username}: {e!r}", resolved.value, username
            )
            self._log_failure(error)
            raise error from e

    @staticmethod
    def _log_failure(error: AdapterError) -> None:
        prefix = f"[{error.platform}] {error.username}"
        if isinstance(error, ParseFailureError):
            logger.error(f"{prefix}: parse failure, adapter needs attention: {error}")
        else:
            logger.warning(f"{prefix}: {error.kind.value}: {error}")

    async def close(self) -> None:
        for platform, adapter in self.adapters.items():
            try:
                await adapter.close()
            except Exception as exc:
                logger.warning(f"Failed to close {platform.value} client: {exc}")
