"""
urlcache - filesystem cache of URL responses.

Maps a URL to a content file and a JSON headers file under a cache root:

    <root>/<scheme>/<host>[_PORT<port>]/<sha256 of path and query>
"""

from urlcache.exceptions import (
    CacheIOError,
    CacheNotFoundError,
    CacheParseError,
    FetchError,
    InvalidURLError,
    SerializationError,
    UnsupportedSchemeError,
    UrlCacheError,
)
from urlcache.naming import base_url_to_path, url_to_path
from urlcache.store import HttpCache
from urlcache.types import CachedResponse, CachePaths, HeadersMap

__version__ = "0.1.0"

__all__ = [
    "CacheIOError",
    "CacheNotFoundError",
    "CacheParseError",
    "CachePaths",
    "CachedResponse",
    "FetchError",
    "HeadersMap",
    "HttpCache",
    "InvalidURLError",
    "SerializationError",
    "UnsupportedSchemeError",
    "UrlCacheError",
    "base_url_to_path",
    "url_to_path",
]
