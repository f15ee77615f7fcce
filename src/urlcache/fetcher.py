"""
Resource fetcher backed by the URL cache.

Serves a URL from HttpCache when an entry exists and otherwise downloads it
with httpx and stores the body and headers. Cached entries are returned as
is; no revalidation against the server is attempted.
"""

from __future__ import annotations

from types import TracebackType

import httpx

from urlcache.exceptions import CacheNotFoundError, CacheParseError, FetchError
from urlcache.logging import get_logger, log_context
from urlcache.naming import URLInput, base_url_to_path, parse_url
from urlcache.store import HttpCache
from urlcache.types import CachedResponse, HeadersMap

logger = get_logger(__name__)

USER_AGENT = "urlcache/0.1 (+https://pypi.org/project/urlcache/)"

REQUEST_TIMEOUT = 30.0

# httpx decodes compressed bodies on read, so these no longer describe the stored bytes
ENCODING_HEADERS = ("content-encoding", "content-length")


class ResourceFetcher:
    """Fetches URLs through an HttpCache.

    Features:
    - Cache-first lookup; misses and corrupted entries are re-downloaded
    - Redirects followed, final body stored under the requested URL
    - Response headers stored with lower-cased names
    - Bodies stored decoded, without content-encoding and content-length
    """

    def __init__(
        self,
        cache: HttpCache,
        client: httpx.Client | None = None,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = USER_AGENT,
    ) -> None:
        """Initialize the fetcher.

        Args:
            cache: Cache to read from and write to.
            client: HTTP client to use. Created on first fetch if omitted.
            timeout: Request timeout in seconds for a created client.
            user_agent: User-Agent header for a created client.
        """
        self.cache = cache
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> ResourceFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def fetch(self, url: URLInput, use_cache: bool = True) -> CachedResponse:
        """Return the resource at ``url``, from cache when possible.

        Args:
            url: URL to fetch. A fragment is ignored.
            use_cache: If False, always download and overwrite the entry.

        Returns:
            CachedResponse with ``from_cache`` telling where it came from.

        Raises:
            FetchError: If the download fails or returns a non-2xx status.
            UnsupportedSchemeError: If the URL scheme cannot be cached.
            CacheIOError: If the entry cannot be written.
        """
        parsed = parse_url(url).copy_with(fragment=None)
        # Fail on unsupported schemes before any network traffic
        base_url_to_path(parsed)
        url_str = str(parsed)

        with log_context(operation="fetch", url=url_str):
            if use_cache:
                cached = self._from_cache(parsed)
                if cached is not None:
                    return cached

            content, headers = self._download(parsed)
            self.cache.set(parsed, headers, content)
            logger.info("Fetched and cached", size=len(content))
            return CachedResponse(url=url_str, content=content, headers=headers, from_cache=False)

    def _from_cache(self, url: httpx.URL) -> CachedResponse | None:
        try:
            content, headers = self.cache.get_bytes(url)
        except CacheNotFoundError:
            logger.debug("Cache miss")
            return None
        except CacheParseError:
            logger.warning("Cached entry is corrupt, fetching again")
            return None

        logger.debug("Using cached content", size=len(content))
        return CachedResponse(url=str(url), content=content, headers=headers, from_cache=True)

    def _download(self, url: httpx.URL) -> tuple[bytes, HeadersMap]:
        client = self._get_client()
        try:
            response = client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed: {e}", context={"url": str(url)}) from e

        if not response.is_success:
            raise FetchError(
                f"Unexpected HTTP status {response.status_code}",
                context={"url": str(url), "status_code": response.status_code},
            )

        # Repeated headers are joined the way httpx.Headers.get() joins them
        headers = {name.lower(): response.headers[name] for name in response.headers.keys()}
        if "content-encoding" in headers:
            for name in ENCODING_HEADERS:
                headers.pop(name, None)
        return response.content, headers
