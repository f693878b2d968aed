from abc import ABC, abstractmethod

import httpx

from codescore.core.base_client import BaseClient
from codescore.core.config import settings
from codescore.core.errors import UnsupportedPlatformError
from codescore.models.profile import Platform, ProfileSnapshot


class PlatformAdapter(BaseClient, ABC):
    """One external platform behind a common fetch(username) -> ProfileSnapshot capability."""

    platform: Platform
    base_url: str = ""
    accept: str = "application/json"

    def __init__(self, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        headers = {
            "User-Agent": settings.PLATFORM_USER_AGENT,
            "Accept": self.accept,
        }
        super().__init__(
            base_url=self.base_url,
            timeout=timeout or settings.PLATFORM_REQUEST_TIMEOUT_SECONDS,
            headers=headers,
            transport=transport,
        )

    def ensure_platform(self, platform: Platform | str) -> None:
        if platform != self.platform:
            raise UnsupportedPlatformError(
                f"{type(self).__name__} handles {self.platform.value}, not {platform}", platform=str(platform)
            )

    async def fetch(self, username: str, platform: Platform | str | None = None) -> ProfileSnapshot:
        if platform is not None:
            self.ensure_platform(platform)
        return await self._fetch(username)

    @abstractmethod
    async def _fetch(self, username: str) -> ProfileSnapshot:
        raise NotImplementedError
