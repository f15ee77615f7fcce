"""
Tests for URL to cache path derivation.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import httpx
import pytest

from urlcache.exceptions import InvalidURLError, UnsupportedSchemeError
from urlcache.naming import (
    base_url_to_path,
    hash_url_rest,
    parse_url,
    url_rest,
    url_to_path,
)

FOO_TS_HASH = "2c0a064891b9e3fbe386f5d4a833bce5076543f5404613656042107213a7bbc8"
ROOT_HASH = "8a5edab282632443219e051e4ade2d1d5bbc671c781051bf1437897cbdfea0f1"
QUERY_HASH = "e4edd1f433165141015db6a823094e6bd8f24dd16fe33f2abd99d34a0a21a3c0"


class TestUrlToPath:
    """Tests for the full derived path."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://deno.land/x/foo.ts", f"https/deno.land/{FOO_TS_HASH}"),
            ("https://deno.land:8080/x/foo.ts", f"https/deno.land_PORT8080/{FOO_TS_HASH}"),
            ("https://deno.land/", f"https/deno.land/{ROOT_HASH}"),
            ("https://deno.land/?asdf=qwer", f"https/deno.land/{QUERY_HASH}"),
            ("https://deno.land/?asdf=qwer#qwer", f"https/deno.land/{QUERY_HASH}"),
        ],
    )
    def test_known_paths(self, url: str, expected: str) -> None:
        """Test derived paths against fixed SHA-256 vectors."""
        assert url_to_path(url) == Path(expected)

    def test_path_is_relative(self) -> None:
        """Test that the derived path has three relative segments."""
        path = url_to_path("http://example.com/a/b/c.js")
        assert not path.is_absolute()
        assert len(path.parts) == 3
        assert path.parts[:2] == ("http", "example.com")

    def test_fragment_ignored(self) -> None:
        """Test that URLs differing only by fragment share a path."""
        assert url_to_path("https://x/?q=1") == url_to_path("https://x/?q=1#frag")
        assert url_to_path("https://x/a.ts") == url_to_path("https://x/a.ts#L10")

    def test_deterministic(self) -> None:
        """Test that the same URL always yields the same path."""
        url = "https://example.com/mod.ts?v=2"
        assert url_to_path(url) == url_to_path(url)
        assert url_to_path(url) == url_to_path(httpx.URL(url))

    def test_query_changes_path(self) -> None:
        """Test that the query string is part of the identity."""
        assert url_to_path("https://x/a?v=1") != url_to_path("https://x/a?v=2")
        assert url_to_path("https://x/a") != url_to_path("https://x/a?v=1")

    def test_hash_covers_path_and_query(self) -> None:
        """Test that the digest is SHA-256 of path plus ?query."""
        expected = hashlib.sha256(b"/a/b.ts?x=1&y=2").hexdigest()
        assert url_to_path("https://example.com/a/b.ts?x=1&y=2").name == expected

    def test_host_does_not_change_digest(self) -> None:
        """Test that only path and query feed the digest."""
        a = url_to_path("https://one.example/lib.js")
        b = url_to_path("https://two.example/lib.js")
        assert a.name == b.name
        assert a.parent != b.parent


class TestBaseUrlToPath:
    """Tests for the scheme and host segments."""

    def test_host_without_port(self) -> None:
        """Test that an absent port leaves the host untouched."""
        assert base_url_to_path("https://example.com/p") == Path("https/example.com")

    def test_non_default_port(self) -> None:
        """Test that a non-default port is joined with _PORT."""
        assert base_url_to_path("https://example.com:8080/p") == Path(
            "https/example.com_PORT8080"
        )

    @pytest.mark.parametrize(
        "url",
        ["http://example.com:80/p", "https://example.com:443/p"],
    )
    def test_default_port_dropped(self, url: str) -> None:
        """Test that explicit default ports do not change the host segment."""
        assert base_url_to_path(url).name == "example.com"

    def test_scheme_kept(self) -> None:
        """Test that http and https land in separate directories."""
        assert base_url_to_path("http://example.com/").parts[0] == "http"
        assert base_url_to_path("https://example.com/").parts[0] == "https"

    def test_host_lowercased_by_parser(self) -> None:
        """Test that host case does not split the cache."""
        assert url_to_path("https://Example.COM/a") == url_to_path("https://example.com/a")

    def test_ipv6_host(self) -> None:
        """Test that IPv6 literals keep their brackets."""
        assert base_url_to_path("http://[::1]:8000/").name == "[::1]_PORT8000"

    @pytest.mark.parametrize(
        "url",
        [
            "file:///etc/passwd",
            "ftp://example.com/file.txt",
            "ws://example.com/socket",
        ],
    )
    def test_unsupported_scheme(self, url: str) -> None:
        """Test that schemes other than http and https are rejected."""
        with pytest.raises(UnsupportedSchemeError) as exc_info:
            url_to_path(url)

        assert exc_info.value.context["scheme"] == url.split(":", 1)[0]

    def test_relative_url_rejected(self) -> None:
        """Test that a URL without scheme is invalid."""
        with pytest.raises(InvalidURLError):
            url_to_path("/just/a/path")


class TestHelpers:
    """Tests for parsing and hashing helpers."""

    def test_url_rest_includes_query(self) -> None:
        """Test that the rest string is path plus ?query."""
        assert url_rest("https://x/a/b?c=d#e") == "/a/b?c=d"

    def test_url_rest_empty_path(self) -> None:
        """Test that an empty path is normalised to /."""
        assert url_rest("https://deno.land") == "/"
        assert url_to_path("https://deno.land") == url_to_path("https://deno.land/")

    def test_hash_url_rest(self) -> None:
        """Test the digest helper."""
        assert hash_url_rest("/") == ROOT_HASH
        assert len(hash_url_rest("/anything")) == 64

    def test_parse_url_passthrough(self) -> None:
        """Test that httpx.URL input is returned as is."""
        url = httpx.URL("https://example.com/")
        assert parse_url(url) is url
