"""Shared test fixtures and utilities for the expiry-board test suite.

    from tests.fixtures import StaticAcquirer, csv_text, make_refresher
"""

from tests.fixtures.dummies import (
    BlockingAcquirer,
    DummyResponse,
    FailingAcquirer,
    SequenceAcquirer,
    StaticAcquirer,
    decode_failure,
)

from tests.fixtures.factories import (
    CSV_HEADER,
    csv_text,
    epoch_ms,
    gzip_json_payload,
    json_payload,
    make_record,
    make_refresher,
    make_settings,
)

__all__ = [
    "BlockingAcquirer",
    "DummyResponse",
    "FailingAcquirer",
    "SequenceAcquirer",
    "StaticAcquirer",
    "decode_failure",
    "CSV_HEADER",
    "csv_text",
    "epoch_ms",
    "gzip_json_payload",
    "json_payload",
    "make_record",
    "make_refresher",
    "make_settings",
]
