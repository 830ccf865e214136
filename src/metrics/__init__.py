"""Prometheus instrumentation for expiry-board."""

from .feed_metrics import FeedMetrics, get_feed_metrics, reset_feed_metrics

__all__ = ["FeedMetrics", "get_feed_metrics", "reset_feed_metrics"]
