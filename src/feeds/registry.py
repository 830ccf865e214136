"""Feed strategy selection.

A feed strategy is a plain pair of callables chosen at configuration time:
``acquire()`` produces the native payload and ``parse(payload)`` turns it into
a FeedParseResult. Exactly one strategy is active per deployment.

  csv   : HTTP text          -> parse_delimited_text
  json  : HTTP (gzip) JSON   -> parse_json_array
  sheet : spreadsheet rows   -> parse_tabular_rows
"""
from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.config.feed_settings import FEED_KINDS, FeedSettings
from src.expiry.models import FeedParseResult
from src.interfaces.feed_protocol import FeedAcquirer, FeedParser
from src.utils.exceptions import ConfigError, FeedStructureError

from .acquisition import decode_json, decode_text, fetch_json, fetch_text, has_http_scheme
from .delimited import parse_delimited_text
from .json_array import parse_json_array
from .sheets import read_sheet_rows
from .tabular import parse_tabular_rows

logger = logging.getLogger(__name__)

__all__ = ["FeedStrategy", "build_parser", "build_decoder", "build_feed", "require_source_url"]


@dataclass(frozen=True, slots=True)
class FeedStrategy:
    name: str
    acquire: FeedAcquirer
    parse: FeedParser

    def run(self, *, strict: bool = False) -> FeedParseResult:
        """One acquire + parse pass; ``strict`` raises when the feed is unusable."""
        parsed = self.parse(self.acquire())
        if strict and not parsed.usable:
            raise FeedStructureError(f"feed unusable: {parsed.fatal}")
        return parsed


def _check_kind(kind: str) -> str:
    k = (kind or "").strip().lower()
    if k not in FEED_KINDS:
        raise ConfigError(f"unsupported feed: {kind!r} (expected one of {', '.join(FEED_KINDS)})")
    return k


def build_parser(settings: FeedSettings, kind: str | None = None) -> FeedParser:
    """Return the parser for ``kind`` (defaults to the configured feed)."""
    k = _check_kind(kind or settings.feed)
    if k == "csv":
        return functools.partial(parse_delimited_text, columns=settings.csv_columns, delimiter=settings.csv_delimiter)
    if k == "json":
        return functools.partial(parse_json_array, fields=settings.json_fields)
    return functools.partial(parse_tabular_rows, columns=settings.sheet_columns)


def build_decoder(kind: str) -> Callable[[bytes], Any]:
    """Bytes -> native payload for offline snapshots (sheet snapshots are JSON row arrays)."""
    k = _check_kind(kind)
    return decode_text if k == "csv" else decode_json


def require_source_url(settings: FeedSettings) -> str:
    """Return the effective URL of an HTTP feed or raise ConfigError when it is unusable."""
    url = settings.source_url
    if not url:
        raise ConfigError(f"feed {settings.feed} needs EB_FEED_URL (no feed URL configured)")
    if not has_http_scheme(url):
        raise ConfigError(f"feed URL must be http or https: {url!r}")
    return url


def build_feed(settings: FeedSettings, *, acquire: FeedAcquirer | None = None) -> FeedStrategy:
    """Compose the active feed strategy; ``acquire`` overrides the network step."""
    kind = _check_kind(settings.feed)
    if acquire is None:
        if kind == "csv":
            acquire = functools.partial(fetch_text, settings.source_url, timeout=settings.timeout)
        elif kind == "json":
            acquire = functools.partial(fetch_json, settings.source_url, timeout=settings.timeout)
        else:
            acquire = functools.partial(read_sheet_rows, settings.credentials)
        if kind in ("csv", "json") and not settings.url:
            logger.warning("Feed %s selected but EB_FEED_URL is empty; every refresh will fail", kind)
    return FeedStrategy(name=kind, acquire=acquire, parse=build_parser(settings, kind))
