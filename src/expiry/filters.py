"""Row filter: decide whether a raw instrument record is in scope."""
from __future__ import annotations

from collections.abc import Collection, Iterable

from .models import OPTION_KINDS, RawInstrumentRecord

__all__ = ["has_expiry", "is_in_scope", "filter_records"]


def has_expiry(raw: object) -> bool:
    """Cheap presence check; the date normalizer still has the final say."""
    if raw is None:
        return False
    if isinstance(raw, str):
        return bool(raw.strip())
    return True


def is_in_scope(record: RawInstrumentRecord, whitelist: Collection[str]) -> bool:
    kind = (record.instrument_kind or "").strip()
    if kind not in OPTION_KINDS:
        return False
    symbol = (record.underlying_symbol or "").strip()
    if symbol not in whitelist:
        return False
    return has_expiry(record.raw_expiry)


def filter_records(records: Iterable[RawInstrumentRecord], whitelist: Collection[str]) -> list[RawInstrumentRecord]:
    allowed = frozenset(whitelist)
    return [r for r in records if is_in_scope(r, allowed)]
