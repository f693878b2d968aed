"""
Shared error taxonomy for platform fetches.

Every failure that leaves an adapter, the dispatcher or the rate limiter is one
of these. ``kind`` is what gets persisted next to the error message and what the
API layer maps onto HTTP statuses.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    PARSE_FAILURE = "parse_failure"
    RATE_LIMITED = "rate_limited"
    UNSUPPORTED = "unsupported"


class AdapterError(Exception):
    kind: ErrorKind = ErrorKind.TRANSIENT

    def __init__(self, message: str, platform: str | None = None, username: str | None = None):
        super().__init__(message)
        self.message = message
        self.platform = platform
        self.username = username

    def __str__(self) -> str:
        return self.message


class ProfileNotFoundError(AdapterError):
    """The platform confirmed the username does not exist. Never retried."""

    kind = ErrorKind.NOT_FOUND


class TransientError(AdapterError):
    """Network failure, timeout, throttling by the platform or a 5xx."""

    kind = ErrorKind.TRANSIENT


class ParseFailureError(AdapterError):
    """The response did not have the structure the adapter relies on."""

    kind = ErrorKind.PARSE_FAILURE


class RateLimitedError(AdapterError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, platform: str | None = None, retry_after: float | None = None):
        super().__init__(message, platform=platform)
        self.retry_after = retry_after


class UnsupportedPlatformError(AdapterError):
    kind = ErrorKind.UNSUPPORTED
