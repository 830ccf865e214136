"""Typed protocols for the Prometheus instruments held by FeedMetrics.

They cover only the calls the refresher makes (labels/inc/observe/set) so
FeedMetrics attributes can be annotated structurally and tests can swap in
plain stand-ins without touching prometheus_client.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CounterLike(Protocol):
    def inc(self, amount: float | int = 1) -> None: ...
    def labels(self, *args: Any, **kwargs: str) -> CounterLike: ...


@runtime_checkable
class GaugeLike(Protocol):
    def set(self, value: float | int) -> None: ...
    def labels(self, *args: Any, **kwargs: str) -> GaugeLike: ...


@runtime_checkable
class HistogramLike(Protocol):
    def observe(self, value: float | int) -> None: ...
    def labels(self, *args: Any, **kwargs: str) -> HistogramLike: ...


__all__ = [
    "CounterLike",
    "GaugeLike",
    "HistogramLike",
]
