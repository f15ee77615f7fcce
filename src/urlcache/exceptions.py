"""
Custom exception hierarchy for the URL cache.

All exceptions inherit from UrlCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class UrlCacheError(Exception):
    """Base exception for all URL cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class UnsupportedSchemeError(UrlCacheError):
    """Raised when a URL scheme has no cache naming rule.

    Only http and https are recognised. This is never retried.

    Context should include:
        - scheme: The rejected scheme
        - url: The URL being named
    """

    pass


class InvalidURLError(UrlCacheError):
    """Raised when a URL cannot be parsed.

    Context should include:
        - url: The raw input
    """

    pass


class CacheNotFoundError(UrlCacheError):
    """Raised when the content or metadata file of an entry is missing.

    Callers treat this as a cache miss.

    Context should include:
        - url: The URL that was looked up
        - path: The missing file
    """

    pass


class CacheParseError(UrlCacheError):
    """Raised when a metadata file exists but is not a JSON object of strings.

    Distinct from CacheNotFoundError so callers can tell a corrupted entry
    from one that was never written.

    Context should include:
        - url: The URL that was looked up
        - path: The metadata file
    """

    pass


class CacheIOError(UrlCacheError):
    """Raised when a filesystem operation fails.

    Context should include:
        - path: The file or directory involved
        - operation: What was attempted (mkdir, open, write, chmod)
    """

    pass


class SerializationError(UrlCacheError):
    """Raised when a headers mapping cannot be encoded as JSON.

    Context should include:
        - url: The URL being stored
    """

    pass


class FetchError(UrlCacheError):
    """Raised when fetching a resource over the network fails.

    Context should include:
        - url: The URL that was being fetched
        - status_code: HTTP status code if applicable
    """

    pass
