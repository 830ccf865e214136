"""Expiry-aggregation core: date normalization, row filtering and aggregation."""

from .aggregator import NEXT_EXPIRY_COUNT, aggregate, aggregate_detailed
from .dates import format_display, to_canonical_date
from .filters import filter_records, is_in_scope
from .models import (
    NO_DATA,
    OPTION_KINDS,
    AggregationResult,
    CanonicalExpiry,
    ExpiryResultRow,
    FeedParseResult,
    RawInstrumentRecord,
)

__all__ = [
    "NEXT_EXPIRY_COUNT",
    "NO_DATA",
    "OPTION_KINDS",
    "AggregationResult",
    "CanonicalExpiry",
    "ExpiryResultRow",
    "FeedParseResult",
    "RawInstrumentRecord",
    "aggregate",
    "aggregate_detailed",
    "filter_records",
    "format_display",
    "is_in_scope",
    "to_canonical_date",
]
