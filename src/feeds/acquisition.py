"""Feed acquisition over HTTP.

Fetches raw bytes with urllib and decodes them into the payload shape a
parser expects. Failures are raised as typed exceptions so the refresher
can tell them apart:

- FeedTransportError : network failure or non-2xx response
- FeedDecodeError    : bytes arrived but are not the expected text/JSON
                       (including corrupt gzip streams)

Gzip-compressed bodies are detected by their magic bytes and inflated before
decoding, whether or not the server labelled them with Content-Encoding.
"""
from __future__ import annotations

import gzip
import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
import zlib
from pathlib import Path
from typing import Any

from src.utils.exceptions import FeedDecodeError, FeedTransportError
from src.version import get_version

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
URL_SCHEMES = ("http", "https")

__all__ = [
    "GZIP_MAGIC",
    "URL_SCHEMES",
    "has_http_scheme",
    "fetch_bytes",
    "read_local_bytes",
    "maybe_gunzip",
    "decode_text",
    "decode_json",
    "fetch_text",
    "fetch_json",
]


def has_http_scheme(url: str) -> bool:
    try:
        return urllib.parse.urlsplit(url).scheme.lower() in URL_SCHEMES
    except ValueError:
        return False


def fetch_bytes(url: str, *, timeout: float = 10.0) -> bytes:
    """GET ``url`` and return the raw body, raising FeedTransportError on failure."""
    if not url:
        raise FeedTransportError("no feed URL configured")
    if not has_http_scheme(url):
        raise FeedTransportError(f"unsupported feed URL (expected http or https): {url!r}")
    req = urllib.request.Request(
        url,
        headers={
            "User-Agent": f"expiry-board/{get_version()}",
            "Accept-Encoding": "gzip",
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, "status", 200)
            if not 200 <= int(status) < 300:
                raise FeedTransportError(f"feed responded with HTTP {status}", status=int(status))
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise FeedTransportError(f"feed responded with HTTP {e.code}", status=e.code) from e
    except (urllib.error.URLError, TimeoutError, OSError, http.client.HTTPException) as e:
        reason = getattr(e, "reason", e)
        raise FeedTransportError(f"network error fetching feed: {reason}") from e
    logger.debug("fetched %s bytes from %s", len(body), url)
    return body


def read_local_bytes(path: str | Path) -> bytes:
    """Read a feed snapshot from disk (CLI / offline runs)."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise FeedTransportError(f"cannot read feed file {path}: {e}") from e


def maybe_gunzip(data: bytes) -> bytes:
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise FeedDecodeError(f"gzip decompression failed: {e}") from e


def decode_text(data: bytes) -> str:
    """Decode a (possibly gzip-compressed) UTF-8 body into text."""
    raw = maybe_gunzip(data)
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FeedDecodeError(f"feed is not valid UTF-8 text: {e}") from e


def decode_json(data: bytes) -> Any:
    """Decode a (possibly gzip-compressed) JSON body."""
    text = decode_text(data)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FeedDecodeError(f"feed is not valid JSON: {e.msg} at line {e.lineno} column {e.colno}") from e


def fetch_text(url: str, *, timeout: float = 10.0) -> str:
    return decode_text(fetch_bytes(url, timeout=timeout))


def fetch_json(url: str, *, timeout: float = 10.0) -> Any:
    return decode_json(fetch_bytes(url, timeout=timeout))
