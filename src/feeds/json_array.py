"""JSON-array feed parser.

Input is an already-decoded JSON value. Anything other than a list makes the
feed unusable. Elements are read by field name; a missing field becomes an
empty string and non-object elements are skipped one by one.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from src.expiry.models import FeedParseResult, RawInstrumentRecord

logger = logging.getLogger(__name__)

DEFAULT_FIELDS: tuple[str, str, str] = ("instrument_type", "underlying_symbol", "expiry")

__all__ = ["DEFAULT_FIELDS", "parse_json_array"]


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_json_array(payload: object, *, fields: Sequence[str] = DEFAULT_FIELDS) -> FeedParseResult:
    """Parse a decoded JSON array of instrument objects.

    ``fields`` names the (kind, symbol, expiry) keys in that order. The expiry
    value is passed through untouched (epoch milliseconds or text).
    """
    if not isinstance(payload, list):
        logger.error("json feed is not an array (got %s)", type(payload).__name__)
        return FeedParseResult.unusable(f"expected JSON array, got {type(payload).__name__}")

    kind_key, symbol_key, expiry_key = fields
    records: list[RawInstrumentRecord] = []
    skipped = 0
    for item in payload:
        if not isinstance(item, Mapping):
            skipped += 1
            continue
        expiry = item.get(expiry_key)
        records.append(
            RawInstrumentRecord(
                instrument_kind=_text(item.get(kind_key)),
                underlying_symbol=_text(item.get(symbol_key)),
                raw_expiry="" if expiry is None else expiry,
            )
        )
    logger.debug("json feed parsed: records=%s skipped=%s", len(records), skipped)
    return FeedParseResult(records=tuple(records), skipped=skipped)
