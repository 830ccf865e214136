"""Next-expiry aggregation.

Rules:
- every record's raw expiry is normalized to a calendar date; records that
  fail normalization are dropped (counted, never escalated)
- surviving dates are collected per symbol into a set, so textually different
  spellings of the same day collapse into one entry
- symbols are emitted in the whitelist's declared order, each with its
  earliest ``limit`` distinct dates ascending, or a single "NO DATA" row;
  a name repeated in the whitelist is emitted once, at its first position

The aggregation is a pure function of its inputs: no clock, no environment,
no state carried between runs.
"""
from __future__ import annotations

import datetime as _dt
import logging
from collections.abc import Iterable, Sequence

from .dates import to_canonical_date
from .models import AggregationResult, CanonicalExpiry, ExpiryResultRow, RawInstrumentRecord

logger = logging.getLogger(__name__)

NEXT_EXPIRY_COUNT = 2

__all__ = [
    "NEXT_EXPIRY_COUNT",
    "collect_expiry_sets",
    "aggregate_detailed",
    "aggregate",
]


def collect_expiry_sets(
    records: Iterable[RawInstrumentRecord], whitelist: Sequence[str]
) -> tuple[dict[str, set[_dt.date]], int]:
    """Group canonical dates by whitelisted symbol.

    Returns (symbol -> set of dates, number of records dropped on normalization).
    Every whitelisted symbol is present in the mapping, possibly with an empty set.
    """
    sets: dict[str, set[_dt.date]] = {sym: set() for sym in whitelist}
    dropped = 0
    for rec in records:
        symbol = (rec.underlying_symbol or "").strip()
        bucket = sets.get(symbol)
        if bucket is None:
            continue
        d = to_canonical_date(rec.raw_expiry)
        if d is None:
            dropped += 1
            continue
        bucket.add(d)
    return sets, dropped


def aggregate_detailed(
    records: Iterable[RawInstrumentRecord],
    whitelist: Sequence[str],
    *,
    limit: int = NEXT_EXPIRY_COUNT,
) -> AggregationResult:
    symbols = list(dict.fromkeys(whitelist))
    sets, dropped = collect_expiry_sets(records, symbols)
    rows: list[ExpiryResultRow] = []
    for symbol in symbols:
        keys = sorted(sets[symbol])
        if not keys:
            rows.append(ExpiryResultRow.no_data(symbol))
            continue
        for d in keys[:limit]:
            rows.append(ExpiryResultRow(symbol=symbol, display_text=CanonicalExpiry(symbol, d).display_text))
    if dropped:
        logger.debug("aggregate: dropped %s records with unparseable expiry", dropped)
    return AggregationResult(
        rows=tuple(rows),
        dropped=dropped,
        expiry_sets={sym: frozenset(v) for sym, v in sets.items()},
    )


def aggregate(records: Iterable[RawInstrumentRecord], whitelist: Sequence[str]) -> list[ExpiryResultRow]:
    """Return the next-two-expiries rows for each whitelisted symbol."""
    return list(aggregate_detailed(records, whitelist).rows)
