"""Delimited-text (CSV-like) feed parser.

The first non-blank line is the header. Required columns are located by
exact, whitespace-trimmed, case-sensitive name; if any is missing the whole
feed is unusable. Data lines are split on the delimiter with no quoting
support, so a delimiter embedded inside a field shifts that row's columns.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from src.expiry.models import FeedParseResult, RawInstrumentRecord

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS: tuple[str, str, str] = ("instrument_type", "underlying_symbol", "expiry_date")

__all__ = ["DEFAULT_COLUMNS", "parse_delimited_text"]


def parse_delimited_text(
    text: object,
    *,
    columns: Sequence[str] = DEFAULT_COLUMNS,
    delimiter: str = ",",
) -> FeedParseResult:
    """Parse delimited text into raw instrument records.

    ``columns`` names the (kind, symbol, expiry) header fields in that order.
    """
    if not isinstance(text, str):
        return FeedParseResult.unusable(f"expected text payload, got {type(text).__name__}")

    lines = [ln for ln in text.lstrip("\ufeff").splitlines() if ln.strip()]
    if not lines:
        return FeedParseResult.unusable("empty feed: no header line")

    header = [h.strip() for h in lines[0].split(delimiter)]
    missing = [c for c in columns if c not in header]
    if missing:
        logger.error("delimited feed missing required columns %s (header=%s)", missing, header)
        return FeedParseResult.unusable(f"missing required columns: {', '.join(missing)}")

    kind_idx, symbol_idx, expiry_idx = (header.index(c) for c in columns)
    width = max(kind_idx, symbol_idx, expiry_idx) + 1

    records: list[RawInstrumentRecord] = []
    skipped = 0
    for line in lines[1:]:
        fields = line.split(delimiter)
        if len(fields) < width:
            skipped += 1
            continue
        records.append(
            RawInstrumentRecord(
                instrument_kind=fields[kind_idx].strip(),
                underlying_symbol=fields[symbol_idx].strip(),
                raw_expiry=fields[expiry_idx].strip(),
            )
        )
    logger.debug("delimited feed parsed: records=%s skipped=%s", len(records), skipped)
    return FeedParseResult(records=tuple(records), skipped=skipped)
