"""Refresh and feed metrics.

Metrics:
  eb_refresh_total{feed,outcome}            Counter   refresh runs by outcome
                                                      (ok, transport_error, decode_error,
                                                       structural_error, coalesced, error)
  eb_records_total{feed,stage}              Counter   records per pipeline stage
                                                      (parsed, skipped, in_scope, dropped_dates)
  eb_refresh_duration_seconds{feed}         Histogram wall time of completed runs
  eb_last_success_timestamp_seconds{feed}   Gauge     unix time of the last ok run

Instruments register against the default registry unless a registry is
passed in (tests use an isolated CollectorRegistry).
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from src.metrics.protocols import CounterLike, GaugeLike, HistogramLike

logger = logging.getLogger(__name__)

__all__ = ["FeedMetrics", "get_feed_metrics", "reset_feed_metrics"]


def _existing(registry: CollectorRegistry, name: str) -> Any | None:
    for coll, names in getattr(registry, '_collector_to_names', {}).items():  # type: ignore[attr-defined]
        if name in names:
            return coll
    return None


class FeedMetrics:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else REGISTRY
        self.refresh_total: CounterLike = self._ensure(
            Counter, 'eb_refresh_total', 'Refresh runs by feed and outcome', ['feed', 'outcome'])
        self.records_total: CounterLike = self._ensure(
            Counter, 'eb_records_total', 'Instrument records by feed and pipeline stage', ['feed', 'stage'])
        self.refresh_duration: HistogramLike = self._ensure(
            Histogram, 'eb_refresh_duration_seconds', 'Wall time of completed refresh runs', ['feed'])
        self.last_success: GaugeLike = self._ensure(
            Gauge, 'eb_last_success_timestamp_seconds', 'Unix time of the last successful refresh', ['feed'])

    def _ensure(self, kind: Any, name: str, doc: str, labels: list[str]) -> Any:
        try:
            return kind(name, doc, labels, registry=self.registry)
        except ValueError:  # duplicate
            # Counter registers under its _total-stripped base name
            base = name[:-len('_total')] if name.endswith('_total') else name
            metric = _existing(self.registry, name) or _existing(self.registry, base)
            if metric is None:
                raise
            logger.debug("reusing already registered metric %s", name)
            return metric

    def record_refresh(self, feed: str, outcome: str, duration: float | None = None) -> None:
        self.refresh_total.labels(feed=feed, outcome=outcome).inc()
        if duration is not None:
            self.refresh_duration.labels(feed=feed).observe(duration)
        if outcome == 'ok':
            self.last_success.labels(feed=feed).set(time.time())

    def record_stages(self, feed: str, stages: dict[str, int]) -> None:
        for stage, count in stages.items():
            if count:
                self.records_total.labels(feed=feed, stage=stage).inc(count)


_instance: FeedMetrics | None = None
_lock = threading.Lock()


def get_feed_metrics() -> FeedMetrics:
    global _instance
    if _instance is not None:
        return _instance
    with _lock:
        if _instance is None:
            _instance = FeedMetrics()
        return _instance


def reset_feed_metrics() -> None:
    global _instance
    with _lock:
        _instance = None
