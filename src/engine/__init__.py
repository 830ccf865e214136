"""Refresh engine: the pure pipeline and the state holder that schedules it."""

from .pipeline import PipelineResult, run_pipeline
from .refresher import ExpiryRefresher, ExpirySnapshot, RefreshOutcome

__all__ = [
    "ExpiryRefresher",
    "ExpirySnapshot",
    "PipelineResult",
    "RefreshOutcome",
    "run_pipeline",
]
