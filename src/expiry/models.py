"""Data model for the expiry-aggregation engine.

All records are immutable; a result sequence is rebuilt from scratch on
every aggregation run and never partially updated.
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any

from .dates import format_display

# Recognized option-kind codes (call, put)
CALL = "CE"
PUT = "PE"
OPTION_KINDS: tuple[str, str] = (CALL, PUT)

NO_DATA = "NO DATA"

RawExpiry = str | int | float | _dt.date | None


@dataclass(frozen=True, slots=True)
class RawInstrumentRecord:
    """One row of any feed: kind, underlying symbol and the raw expiry value."""

    instrument_kind: str
    underlying_symbol: str
    raw_expiry: RawExpiry

    def to_dict(self) -> dict[str, Any]:
        expiry = self.raw_expiry.isoformat() if isinstance(self.raw_expiry, _dt.date) else self.raw_expiry
        return {
            "instrument_type": self.instrument_kind,
            "underlying_symbol": self.underlying_symbol,
            "expiry": expiry,
        }


@dataclass(frozen=True, slots=True, order=True)
class CanonicalExpiry:
    """A symbol-scoped calendar date; ordering follows (symbol, sort_key)."""

    symbol: str
    sort_key: _dt.date

    @property
    def display_text(self) -> str:
        return format_display(self.sort_key)


@dataclass(frozen=True, slots=True)
class ExpiryResultRow:
    symbol: str
    display_text: str

    @property
    def is_sentinel(self) -> bool:
        return self.display_text == NO_DATA

    @classmethod
    def no_data(cls, symbol: str) -> ExpiryResultRow:
        return cls(symbol=symbol, display_text=NO_DATA)

    def to_dict(self) -> dict[str, str]:
        return {"symbol": self.symbol, "expiry": self.display_text}


@dataclass(frozen=True, slots=True)
class FeedParseResult:
    """Outcome of parsing one feed payload.

    ``records`` are the produced rows, ``skipped`` counts rows dropped
    individually (short rows, non-object elements, rows missing fields) and
    ``fatal`` carries the reason when the whole feed is unusable, in which
    case ``records`` is always empty.
    """

    records: tuple[RawInstrumentRecord, ...] = ()
    skipped: int = 0
    fatal: str | None = None

    @property
    def usable(self) -> bool:
        return self.fatal is None

    @classmethod
    def unusable(cls, reason: str) -> FeedParseResult:
        return cls(records=(), skipped=0, fatal=reason)


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Rows plus the bookkeeping of one aggregation run."""

    rows: tuple[ExpiryResultRow, ...]
    dropped: int = 0
    expiry_sets: dict[str, frozenset[_dt.date]] = field(default_factory=dict)


__all__ = [
    "CALL",
    "PUT",
    "OPTION_KINDS",
    "NO_DATA",
    "RawExpiry",
    "RawInstrumentRecord",
    "CanonicalExpiry",
    "ExpiryResultRow",
    "FeedParseResult",
    "AggregationResult",
]
