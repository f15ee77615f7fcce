"""
Deterministic cache names for URLs.

URLs can contain a lot of characters that cannot be used in file names
("?", "#", ":"), so each URL is turned into a relative path of the form:

    <scheme>/<host>[_PORT<port>]/<sha256 of path and query>

The fragment is never part of the name: it points inside a document and two
URLs differing only by fragment address the same resource.

Everything in this module is pure; nothing touches the filesystem.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import httpx

from urlcache.exceptions import InvalidURLError, UnsupportedSchemeError

SUPPORTED_SCHEMES = ("http", "https")

# ":" cannot be used in file names on some platforms.
PORT_SEPARATOR = "_PORT"

URLInput = str | httpx.URL


def parse_url(url: URLInput) -> httpx.URL:
    """Coerce a string or httpx.URL into an absolute httpx.URL.

    Raises:
        InvalidURLError: If the input cannot be parsed or is relative.
    """
    if isinstance(url, httpx.URL):
        parsed = url
    else:
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidURLError(f"Cannot parse URL: {e}", context={"url": str(url)}) from e

    if not parsed.scheme:
        raise InvalidURLError("URL must be absolute", context={"url": str(url)})
    return parsed


def hash_url_rest(rest: str) -> str:
    """Hex-encoded SHA-256 of the UTF-8 bytes of ``rest``."""
    return hashlib.sha256(rest.encode("utf-8")).hexdigest()


def _host_segment(url: httpx.URL) -> str:
    host = url.raw_host.decode("ascii")
    if not host:
        raise InvalidURLError("URL has no host", context={"url": str(url)})
    if ":" in host:
        # IPv6 literal, keep the brackets the URL was written with
        host = f"[{host}]"
    if url.port is not None:
        return f"{host}{PORT_SEPARATOR}{url.port}"
    return host


def base_url_to_path(url: URLInput) -> Path:
    """Turn the base of a URL (scheme, host, port) into a relative path.

    Default ports are dropped by the URL parser, so ``https://a:443/`` and
    ``https://a/`` share a directory. A non-default port is joined to the
    host with ``_PORT``.

    Args:
        url: URL string or httpx.URL.

    Returns:
        Two-segment relative path ``<scheme>/<host-segment>``.

    Raises:
        UnsupportedSchemeError: If the scheme is not http or https.
        InvalidURLError: If the URL cannot be parsed or has no host.
    """
    parsed = parse_url(url)
    scheme = parsed.scheme
    if scheme not in SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(
            f"Don't know how to create cache name for scheme: {scheme}",
            context={"scheme": scheme, "url": str(parsed)},
        )
    return Path(scheme, _host_segment(parsed))


def url_rest(url: URLInput) -> str:
    """Path plus ``?query`` when a query component is present.

    Path and query stay percent-encoded. An empty path is normalised to
    ``/`` by the parser.
    """
    return parse_url(url).raw_path.decode("ascii")


def url_to_path(url: URLInput) -> Path:
    """Turn a URL into a hashed relative cache path.

    Args:
        url: URL string or httpx.URL.

    Returns:
        Relative path ``<scheme>/<host-segment>/<hex digest>``.

    Raises:
        UnsupportedSchemeError: If the scheme is not http or https.
        InvalidURLError: If the URL cannot be parsed or has no host.
    """
    parsed = parse_url(url)
    return base_url_to_path(parsed) / hash_url_rest(url_rest(parsed))
