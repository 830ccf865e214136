"""Pure feed-to-result pipeline.

parse -> filter -> aggregate, with the bookkeeping needed to tell apart the
three ways a row can vanish: skipped by the parser, filtered out of scope,
or dropped on an unparseable date. A structurally unusable feed still
produces the all-"NO DATA" result; ``fatal`` says why.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.expiry.aggregator import aggregate_detailed
from src.expiry.filters import filter_records
from src.expiry.models import ExpiryResultRow, FeedParseResult
from src.interfaces.feed_protocol import FeedParser

__all__ = ["PipelineResult", "run_pipeline"]


@dataclass(frozen=True, slots=True)
class PipelineResult:
    feed: str
    rows: tuple[ExpiryResultRow, ...]
    parsed: FeedParseResult
    in_scope: int = 0
    dropped: int = 0

    @property
    def fatal(self) -> str | None:
        return self.parsed.fatal

    def stages(self) -> dict[str, int]:
        return {
            "parsed": len(self.parsed.records),
            "skipped": self.parsed.skipped,
            "in_scope": self.in_scope,
            "dropped_dates": self.dropped,
        }


def run_pipeline(payload: Any, parse: FeedParser, whitelist: Sequence[str], *, feed: str = "") -> PipelineResult:
    parsed = parse(payload)
    in_scope = filter_records(parsed.records, whitelist)
    agg = aggregate_detailed(in_scope, whitelist)
    return PipelineResult(
        feed=feed,
        rows=agg.rows,
        parsed=parsed,
        in_scope=len(in_scope),
        dropped=agg.dropped,
    )
