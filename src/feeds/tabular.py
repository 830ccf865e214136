"""Tabular-row feed parser (spreadsheet rows addressed by column name).

The spreadsheet carries no instrument-kind column. Every accepted row is
emitted twice, once as a call and once as a put, so it passes the option
kind filter like any other feed; aggregation dedups by date so the
duplication never shows in the result.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from src.expiry.models import OPTION_KINDS, FeedParseResult, RawInstrumentRecord

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS: tuple[str, str] = ("Symbol", "Expiry Date")

__all__ = ["DEFAULT_COLUMNS", "parse_tabular_rows"]


def _filled(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def parse_tabular_rows(rows: object, *, columns: Sequence[str] = DEFAULT_COLUMNS) -> FeedParseResult:
    """Parse spreadsheet rows; rows missing symbol or expiry are skipped individually."""
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        return FeedParseResult.unusable(f"expected a sequence of rows, got {type(rows).__name__}")

    symbol_col, expiry_col = columns
    records: list[RawInstrumentRecord] = []
    accepted = 0
    skipped = 0
    for row in rows:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        symbol = row.get(symbol_col)
        expiry = row.get(expiry_col)
        if not (_filled(symbol) and _filled(expiry)):
            skipped += 1
            continue
        accepted += 1
        symbol_text = str(symbol).strip()
        raw_expiry = expiry.strip() if isinstance(expiry, str) else expiry
        for kind in OPTION_KINDS:
            records.append(RawInstrumentRecord(kind, symbol_text, raw_expiry))
    logger.debug("tabular feed parsed: rows=%s records=%s skipped=%s", accepted, len(records), skipped)
    return FeedParseResult(records=tuple(records), skipped=skipped)
