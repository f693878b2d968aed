from typing import Any

import httpx
from loguru import logger

from codescore.core.errors import ParseFailureError, TransientError

# Responses with these statuses are the platform telling us to come back later.
TRANSIENT_STATUS_CODES = {408, 425, 429}


class BaseClient:
    """
    Base asynchronous HTTP client with error classification and logging.

    Timeouts, transport failures, throttling and 5xx responses are raised as
    TransientError. Every other response is handed back to the caller, which
    knows what a 4xx means for its platform. Requests are never retried here.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx.AsyncClient instance."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = await self.get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Request timed out ({method} {url}) after {self.timeout}s")
            raise TransientError(f"{method} {url} timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.warning(f"Request failed ({method} {url}): {e}")
            raise TransientError(f"{method} {url} failed: {e}") from e

        status = response.status_code
        if status >= 500 or status in TRANSIENT_STATUS_CODES:
            logger.warning(f"Request to {method} {url} returned {status}")
            raise TransientError(f"{method} {url} returned HTTP {status}")

        logger.debug(f"{method} {url} -> {status}")
        return response

    @staticmethod
    def decode_json(response: httpx.Response) -> Any:
        """Decode a JSON body, classifying malformed payloads as parse failures."""
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailureError(f"Expected JSON from {response.request.url}, got undecodable body") from e

    async def get(self, url: str, params: dict[str, Any] | None = None, **kwargs) -> httpx.Response:
        return await self._request("GET", url, params=params, **kwargs)

    async def post(self, url: str, json: dict[str, Any] | None = None, **kwargs) -> httpx.Response:
        return await self._request("POST", url, json=json, **kwargs)
