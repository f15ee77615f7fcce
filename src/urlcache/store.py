"""
Filesystem cache of URL responses.

Each cached URL is a pair of sibling files under the cache root:

    <root>/<scheme>/<host>[_PORT<port>]/<sha256>                content bytes
    <root>/<scheme>/<host>[_PORT<port>]/<sha256>.headers.json   JSON object of headers

This is a simplified take on an HTTP cache: it stores and returns content and
headers but does not decide whether a cached copy is still fresh. Callers
compare the returned headers (ETag, Last-Modified, ...) themselves.

The two files are written one after the other without locking or atomic
rename. A crash or a concurrent writer can leave an entry with only one of
them present, or with content and headers from different writes; readers
see that as CacheNotFoundError or CacheParseError on the next get().
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import BinaryIO

import orjson
from pydantic import TypeAdapter, ValidationError

from urlcache.exceptions import (
    CacheIOError,
    CacheNotFoundError,
    CacheParseError,
    SerializationError,
)
from urlcache.logging import get_logger, log_context
from urlcache.naming import URLInput, url_to_path
from urlcache.types import CachePaths, HeadersMap

logger = get_logger(__name__)

# Owner read/write, everyone else read.
DEFAULT_FILE_MODE = 0o644

_HEADERS_ADAPTER = TypeAdapter(dict[str, str])


class HttpCache:
    """URL-keyed store of response content and headers.

    The cache root is fixed at construction; several instances with
    different roots can live side by side in one process.

    Not safe for concurrent writers to the same URL.
    """

    def __init__(self, location: str | Path, file_mode: int = DEFAULT_FILE_MODE) -> None:
        """Create the cache, making the root directory if needed.

        Args:
            location: Root directory of the cache.
            file_mode: Permission bits applied to every file written.

        Raises:
            CacheIOError: If the directory cannot be created.
        """
        self.location = Path(location).absolute()
        self.file_mode = file_mode
        self._mkdir(self.location)
        logger.debug("Cache opened", location=str(self.location))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self.location)!r})"

    def __contains__(self, url: URLInput) -> bool:
        return self.contains(url)

    def get_cache_path(self, url: URLInput) -> Path:
        """Absolute path of the content file for ``url``."""
        return self.location / url_to_path(url)

    def get_paths(self, url: URLInput) -> CachePaths:
        """Absolute content and metadata paths for ``url``."""
        return CachePaths.for_content(self.get_cache_path(url))

    def contains(self, url: URLInput) -> bool:
        """Whether both files of the entry exist. Does not validate them."""
        paths = self.get_paths(url)
        return paths.content.is_file() and paths.metadata.is_file()

    def get(self, url: URLInput) -> tuple[BinaryIO, HeadersMap]:
        """Open the cached content and load its headers.

        The caller owns the returned file object and must close it.

        Args:
            url: URL to look up.

        Returns:
            Tuple of (binary file open for reading, headers mapping).

        Raises:
            CacheNotFoundError: If the content or the metadata file is missing.
            CacheParseError: If the metadata file is not a JSON object of strings.
            CacheIOError: If a file exists but cannot be read.
            UnsupportedSchemeError: If the URL scheme has no cache name.
        """
        paths = self.get_paths(url)
        with log_context(operation="get", url=str(url)):
            content = self._open_content(url, paths.content)
            try:
                headers = self._read_headers(url, paths.metadata)
            except Exception:
                content.close()
                raise
            logger.debug("Cache hit", path=str(paths.content))
            return content, headers

    def get_bytes(self, url: URLInput) -> tuple[bytes, HeadersMap]:
        """Like get(), but reads the whole content and closes the file."""
        content, headers = self.get(url)
        with content:
            try:
                data = content.read()
            except OSError as e:
                raise CacheIOError(
                    f"Failed to read cache file: {e}",
                    context={"path": content.name, "operation": "read"},
                ) from e
        return data, headers

    def set(self, url: URLInput, headers: Mapping[str, str], content: bytes) -> None:
        """Store content and headers for ``url``, replacing any previous entry.

        Headers are validated and encoded before anything touches the disk,
        so a SerializationError leaves an existing entry intact.

        Args:
            url: URL the content was fetched from.
            headers: Header name to value mapping.
            content: Raw response body.

        Raises:
            SerializationError: If headers are not a string to string mapping.
            CacheIOError: If a directory or file cannot be written.
            UnsupportedSchemeError: If the URL scheme has no cache name.
        """
        paths = self.get_paths(url)
        with log_context(operation="set", url=str(url)):
            serialized = self._serialize_headers(url, headers)
            self._mkdir(paths.content.parent)
            self._write_file(paths.content, content)
            self._write_file(paths.metadata, serialized)
            logger.debug(
                "Cached",
                path=str(paths.content),
                size=len(content),
                headers=len(headers),
            )

    def _mkdir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError(
                f"Failed to create cache directory: {e.strerror or e}",
                context={"path": str(path), "operation": "mkdir"},
            ) from e

    def _open_content(self, url: URLInput, path: Path) -> BinaryIO:
        try:
            return path.open("rb")
        except FileNotFoundError as e:
            raise CacheNotFoundError(
                "URL is not cached",
                context={"url": str(url), "path": str(path)},
            ) from e
        except OSError as e:
            raise CacheIOError(
                f"Failed to open cache file: {e.strerror or e}",
                context={"path": str(path), "operation": "open"},
            ) from e

    def _read_headers(self, url: URLInput, path: Path) -> HeadersMap:
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise CacheNotFoundError(
                "Cached content has no headers file",
                context={"url": str(url), "path": str(path)},
            ) from e
        except OSError as e:
            raise CacheIOError(
                f"Failed to read headers file: {e.strerror or e}",
                context={"path": str(path), "operation": "read"},
            ) from e

        try:
            return _HEADERS_ADAPTER.validate_python(orjson.loads(raw), strict=True)
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning("Corrupt headers file", path=str(path))
            raise CacheParseError(
                "Headers file is not a JSON object of strings",
                context={"url": str(url), "path": str(path)},
            ) from e

    def _serialize_headers(self, url: URLInput, headers: Mapping[str, str]) -> bytes:
        if not isinstance(headers, Mapping):
            raise SerializationError(
                f"Headers must be a mapping, got {type(headers).__name__}",
                context={"url": str(url)},
            )
        try:
            validated = _HEADERS_ADAPTER.validate_python(dict(headers), strict=True)
            return orjson.dumps(validated)
        except (ValidationError, orjson.JSONEncodeError, UnicodeError) as e:
            raise SerializationError(
                f"Cannot encode headers: {e}",
                context={"url": str(url)},
            ) from e

    def _write_file(self, path: Path, data: bytes) -> None:
        try:
            path.write_bytes(data)
            path.chmod(self.file_mode)
        except OSError as e:
            raise CacheIOError(
                f"Failed to write cache file: {e.strerror or e}",
                context={"path": str(path), "operation": "write"},
            ) from e
