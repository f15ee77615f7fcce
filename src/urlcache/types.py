"""
Core types for the URL cache.

- HeadersMap: string to string mapping persisted next to cached content
- CachePaths: the pair of files that make up one cache entry
- CachedResponse: what the fetcher hands back to its callers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

HeadersMap = dict[str, str]

# Appended to the content file name to get its sidecar metadata file.
METADATA_SUFFIX = ".headers.json"


@dataclass(frozen=True)
class CachePaths:
    """Content and metadata file locations for one URL."""

    content: Path
    metadata: Path

    @classmethod
    def for_content(cls, content: Path) -> CachePaths:
        """Build the pair from the content path."""
        return cls(content=content, metadata=content.with_name(content.name + METADATA_SUFFIX))


@dataclass
class CachedResponse:
    """A resource body with its headers and where it came from."""

    url: str
    content: bytes
    headers: HeadersMap = field(default_factory=dict)
    from_cache: bool = False

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def size(self) -> int:
        return len(self.content)
