"""Expiry date normalization (single source of truth).

Feeds disagree on how they spell a date. Everything is folded into a plain
``datetime.date`` (the canonical sort key) before comparison, and rendered
back out through one fixed display format.

Accepted inputs:
- epoch milliseconds (int/float) : read as a calendar date in the local time zone
- ``YYYY-MM-DD`` / ``YYYY/MM/DD``  : 4-character first part means year-first
- ``DD-MM-YYYY`` / ``DD/MM/YYYY``  : any other first part means day-first
- ``YYYYMMDD``                     : delimiter-free 8-character text
- ``datetime.date`` / ``datetime.datetime`` : already canonical (time dropped)

Anything else, zero, negative or non-finite timestamps, empty text, two-digit
years and impossible calendar dates normalize to ``None``. A missing date is
never defaulted to the epoch.
"""
from __future__ import annotations

import datetime as _dt
import math
from typing import Any

__all__ = [
    "to_canonical_date",
    "format_display",
    "sort_key_int",
]

_DELIMITERS = ("-", "/")


def _is_digits(part: str) -> bool:
    return bool(part) and part.isascii() and part.isdigit()


def _from_epoch_ms(raw: int | float) -> _dt.date | None:
    try:
        value = float(raw)
        if not math.isfinite(value) or value <= 0:
            return None
        return _dt.datetime.fromtimestamp(value / 1000.0).date()
    except (OverflowError, OSError, ValueError):
        return None


def _split_text(text: str) -> list[str] | None:
    for delim in _DELIMITERS:
        if delim in text:
            return [p.strip() for p in text.split(delim)]
    if len(text) == 8:
        return [text[:4], text[4:6], text[6:]]
    return None


def _from_text(text: str) -> _dt.date | None:
    s = text.strip()
    if not s:
        return None
    parts = _split_text(s)
    if parts is None or len(parts) != 3 or not all(_is_digits(p) for p in parts):
        return None
    if len(parts[0]) == 4:
        year, month, day = parts
    else:
        day, month, year = parts
    if len(year) != 4:
        return None
    try:
        return _dt.date(int(year), int(month), int(day))
    except ValueError:
        return None


def to_canonical_date(raw: Any) -> _dt.date | None:
    """Normalize a raw expiry value to a calendar date, or None when unusable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, _dt.datetime):
        return raw.date()
    if isinstance(raw, _dt.date):
        return raw
    if isinstance(raw, (int, float)):
        return _from_epoch_ms(raw)
    if isinstance(raw, str):
        return _from_text(raw)
    return None


def format_display(d: _dt.date) -> str:
    """Render a canonical date as ``DD-MM-YYYY``."""
    return f"{d.day:02d}-{d.month:02d}-{d.year:04d}"


def sort_key_int(d: _dt.date) -> int:
    """Integer form of the sort key (year*10000 + month*100 + day)."""
    return d.year * 10000 + d.month * 100 + d.day
