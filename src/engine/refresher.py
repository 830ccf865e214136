from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.errors import ErrorCategory, ErrorSeverity, get_error_handler_lazy
from src.expiry.aggregator import aggregate
from src.expiry.models import ExpiryResultRow
from src.feeds.registry import FeedStrategy
from src.metrics.feed_metrics import FeedMetrics
from src.utils.exceptions import FeedDecodeError, FeedError

from .pipeline import PipelineResult, run_pipeline

logger = logging.getLogger(__name__)

__all__ = ["RefreshOutcome", "ExpirySnapshot", "ExpiryRefresher"]


class RefreshOutcome(str, Enum):
    OK = "ok"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"
    STRUCTURAL_ERROR = "structural_error"
    COALESCED = "coalesced"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ExpirySnapshot:
    """Read-only view handed to the presentation layer."""

    feed: str
    rows: tuple[ExpiryResultRow, ...] = ()
    fetching: bool = False
    last_error: str | None = None
    last_refresh: float | None = None
    last_attempt: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "feed": self.feed,
            "rows": [r.to_dict() for r in self.rows],
            "fetching": self.fetching,
            "last_error": self.last_error,
            "last_refresh": self.last_refresh,
            "last_attempt": self.last_attempt,
        }


class ExpiryRefresher:
    """Background thread that periodically runs the feed pipeline.

    One run fires immediately on start, then one every ``interval`` seconds.
    ``refresh_now()`` is the manual trigger. A trigger that arrives while a
    run is in flight is coalesced (returns without running). A failed run
    keeps the previous rows when ``retain_on_error`` is set, otherwise it
    replaces them with the all-"NO DATA" result; either way ``last_error``
    describes the failure until the next successful run.
    """

    def __init__(
        self,
        feed: FeedStrategy,
        symbols: Sequence[str],
        *,
        interval: float = 60.0,
        retain_on_error: bool = True,
        metrics: FeedMetrics | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.feed = feed
        self.symbols = tuple(symbols)
        self.interval = interval
        self.retain_on_error = retain_on_error
        self.metrics = metrics
        self._clock = clock
        self._lock = threading.RLock()
        self._run_lock = threading.Lock()
        self._snapshot = ExpirySnapshot(feed=feed.name)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="expiry-refresher", daemon=True)

    # ---- lifecycle ------------------------------------------------------
    def start(self) -> None:
        if not self._thread.is_alive() and not self._stop.is_set():
            self._thread.start()
            logger.info("expiry refresher started (feed=%s interval=%ss)", self.feed.name, self.interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)
        logger.info("expiry refresher stopped")

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def snapshot(self) -> ExpirySnapshot:
        with self._lock:
            return self._snapshot

    # ---- triggers -------------------------------------------------------
    def refresh_now(self) -> RefreshOutcome:
        """Run one refresh in the calling thread (manual trigger)."""
        return self._run_once(trigger="manual")

    def _loop(self) -> None:
        while not self._stop.is_set():
            self._run_once(trigger="timer")
            self._stop.wait(self.interval)

    # ---- one run --------------------------------------------------------
    def _run_once(self, *, trigger: str) -> RefreshOutcome:
        if self._stop.is_set():
            return RefreshOutcome.STOPPED
        if not self._run_lock.acquire(blocking=False):
            logger.info("%s refresh coalesced: a run is already in flight", trigger)
            self._record(RefreshOutcome.COALESCED)
            return RefreshOutcome.COALESCED
        try:
            self._update(fetching=True, last_attempt=self._clock())
            t0 = time.perf_counter()
            try:
                payload = self.feed.acquire()
                result = run_pipeline(payload, self.feed.parse, self.symbols, feed=self.feed.name)
            except FeedError as e:
                if self._stop.is_set():
                    return self._discard(trigger)
                outcome = RefreshOutcome(e.outcome)
                self._report(e, trigger, severity=ErrorSeverity.MEDIUM,
                             category=ErrorCategory.DATA_PARSING if isinstance(e, FeedDecodeError) else ErrorCategory.NETWORK)
                self._publish_failure(f"{outcome.value.replace('_', ' ')}: {e}")
                self._record(outcome, time.perf_counter() - t0)
                return outcome
            except Exception as e:
                if self._stop.is_set():
                    return self._discard(trigger)
                self._report(e, trigger, severity=ErrorSeverity.HIGH, category=ErrorCategory.UNKNOWN)
                self._publish_failure(f"unexpected error: {e}")
                self._record(RefreshOutcome.ERROR, time.perf_counter() - t0)
                return RefreshOutcome.ERROR
            if self._stop.is_set():
                return self._discard(trigger)
            outcome = self._publish(result)
            self._record(outcome, time.perf_counter() - t0, result)
            return outcome
        finally:
            self._update(fetching=False)
            self._run_lock.release()

    def _publish(self, result: PipelineResult) -> RefreshOutcome:
        if result.fatal:
            error: str | None = f"feed unusable: {result.fatal}"
            outcome = RefreshOutcome.STRUCTURAL_ERROR
            get_error_handler_lazy().log_error(
                error, ErrorCategory.DATA_VALIDATION, ErrorSeverity.MEDIUM, {"feed": self.feed.name})
        else:
            error = None
            outcome = RefreshOutcome.OK
        self._update(rows=result.rows, last_error=error, last_refresh=self._clock())
        logger.info(
            "refresh %s: feed=%s rows=%s parsed=%s skipped=%s in_scope=%s dropped_dates=%s",
            outcome.value, self.feed.name, len(result.rows), len(result.parsed.records),
            result.parsed.skipped, result.in_scope, result.dropped,
        )
        return outcome

    def _discard(self, trigger: str) -> RefreshOutcome:
        logger.info("refresher stopped during %s run; discarding result", trigger)
        return RefreshOutcome.STOPPED

    def _publish_failure(self, message: str) -> None:
        if self.retain_on_error:
            self._update(last_error=message)
        else:
            self._update(rows=tuple(aggregate([], self.symbols)), last_error=message)

    def _report(self, e: Exception, trigger: str, *, severity: ErrorSeverity, category: ErrorCategory) -> None:
        get_error_handler_lazy().handle_error(
            e,
            category=category,
            severity=severity,
            component="engine.refresher",
            function_name="_run_once",
            message=f"{trigger} refresh failed: {e}",
            context={"feed": self.feed.name, "retain_on_error": self.retain_on_error},
        )

    def _record(self, outcome: RefreshOutcome, duration: float | None = None,
                result: PipelineResult | None = None) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.record_refresh(self.feed.name, outcome.value, duration)
            if result is not None:
                self.metrics.record_stages(self.feed.name, result.stages())
        except Exception:  # pragma: no cover - metrics never break a refresh
            logger.debug("metrics update failed", exc_info=True)

    def _update(self, **changes: Any) -> None:
        with self._lock:
            current = self._snapshot
            self._snapshot = ExpirySnapshot(
                feed=current.feed,
                rows=changes.get("rows", current.rows),
                fetching=changes.get("fetching", current.fetching),
                last_error=changes.get("last_error", current.last_error),
                last_refresh=changes.get("last_refresh", current.last_refresh),
                last_attempt=changes.get("last_attempt", current.last_attempt),
            )
