import threading
import time

from prometheus_client import CollectorRegistry

from src.engine.refresher import ExpiryRefresher, RefreshOutcome
from src.errors import get_error_count
from src.expiry.models import NO_DATA
from src.feeds.registry import build_feed
from src.utils.exceptions import FeedTransportError
from tests.fixtures import (
    BlockingAcquirer,
    FailingAcquirer,
    SequenceAcquirer,
    csv_text,
    decode_failure,
    make_refresher,
    make_settings,
)

GOOD = csv_text("CE,NIFTY,2025-11-25", "PE,NIFTY,2025-12-30", "CE,SENSEX,2025-11-20")


def _expiries(snap):
    return [(r.symbol, r.display_text) for r in snap.rows]


class TestRefreshNow:
    def test_successful_run_publishes_rows(self):
        r = make_refresher(GOOD, clock=lambda: 1000.0)
        assert r.refresh_now() is RefreshOutcome.OK
        snap = r.snapshot()
        assert _expiries(snap) == [
            ("NIFTY", "25-11-2025"), ("NIFTY", "30-12-2025"),
            ("BANKNIFTY", NO_DATA),
            ("SENSEX", "20-11-2025"),
        ]
        assert snap.last_error is None
        assert snap.last_refresh == 1000.0
        assert snap.fetching is False

    def test_initial_snapshot_is_empty(self):
        snap = make_refresher(GOOD).snapshot()
        assert snap.rows == ()
        assert snap.last_refresh is None
        assert snap.feed == "csv"

    def test_transport_error_retains_previous_rows(self):
        acq = SequenceAcquirer(GOOD, FeedTransportError("feed responded with HTTP 503", status=503))
        r = make_refresher(acquire=acq)
        r.refresh_now()
        before = r.snapshot().rows
        assert r.refresh_now() is RefreshOutcome.TRANSPORT_ERROR
        snap = r.snapshot()
        assert snap.rows == before
        assert snap.last_error.startswith("transport error:")
        assert "503" in snap.last_error

    def test_error_clears_rows_when_not_retaining(self):
        acq = SequenceAcquirer(GOOD, FeedTransportError("boom"))
        r = make_refresher(acquire=acq, settings=make_settings(retain_on_error=False))
        r.refresh_now()
        assert r.refresh_now() is RefreshOutcome.TRANSPORT_ERROR
        assert [t for _, t in _expiries(r.snapshot())] == [NO_DATA] * 3

    def test_decode_error_outcome(self):
        r = make_refresher(acquire=decode_failure())
        assert r.refresh_now() is RefreshOutcome.DECODE_ERROR
        assert r.snapshot().last_error.startswith("decode error:")

    def test_unexpected_exception_is_contained(self):
        r = make_refresher(acquire=FailingAcquirer(RuntimeError("kaboom")))
        assert r.refresh_now() is RefreshOutcome.ERROR
        assert r.snapshot().last_error == "unexpected error: kaboom"
        assert r.snapshot().fetching is False

    def test_structural_failure_is_visible(self):
        r = make_refresher("wrong,header,row\n1,2,3\n")
        assert r.refresh_now() is RefreshOutcome.STRUCTURAL_ERROR
        snap = r.snapshot()
        assert "missing required columns" in snap.last_error
        assert [t for _, t in _expiries(snap)] == [NO_DATA] * 3
        assert get_error_count() >= 1

    def test_success_clears_last_error(self):
        acq = SequenceAcquirer(FeedTransportError("down"), GOOD)
        r = make_refresher(acquire=acq)
        r.refresh_now()
        assert r.snapshot().last_error
        assert r.refresh_now() is RefreshOutcome.OK
        assert r.snapshot().last_error is None

    def test_oversized_epoch_drops_one_record_not_the_run(self):
        payload = [
            {"instrument_type": "CE", "underlying_symbol": "NIFTY", "expiry": "2025-11-25"},
            {"instrument_type": "PE", "underlying_symbol": "NIFTY", "expiry": 10**400},
        ]
        r = make_refresher(payload, settings=make_settings(feed="json", symbols=("NIFTY",)))
        assert r.refresh_now() is RefreshOutcome.OK
        assert _expiries(r.snapshot()) == [("NIFTY", "25-11-2025")]

    def test_schemeless_url_is_transport_error(self):
        settings = make_settings(url="example.com/feed.csv")
        r = ExpiryRefresher(build_feed(settings), settings.symbols)
        assert r.refresh_now() is RefreshOutcome.TRANSPORT_ERROR
        assert "unsupported feed URL" in r.snapshot().last_error

    def test_metrics_recorded(self):
        registry = CollectorRegistry()
        r = make_refresher(GOOD, registry=registry)
        r.refresh_now()
        assert registry.get_sample_value("eb_refresh_total", {"feed": "csv", "outcome": "ok"}) == 1.0
        assert registry.get_sample_value("eb_records_total", {"feed": "csv", "stage": "in_scope"}) == 3.0
        assert registry.get_sample_value("eb_last_success_timestamp_seconds", {"feed": "csv"}) > 0


class TestConcurrency:
    def test_overlapping_trigger_is_coalesced(self):
        acq = BlockingAcquirer(GOOD)
        r = make_refresher(acquire=acq)
        results = []
        t = threading.Thread(target=lambda: results.append(r.refresh_now()))
        t.start()
        try:
            assert acq.entered.wait(2.0)
            assert r.snapshot().fetching is True
            assert r.refresh_now() is RefreshOutcome.COALESCED
        finally:
            acq.release()
            t.join(5.0)
        assert results == [RefreshOutcome.OK]
        assert acq.calls == 1
        assert r.snapshot().fetching is False

    def test_result_arriving_after_stop_is_discarded(self):
        acq = BlockingAcquirer(GOOD)
        r = make_refresher(acquire=acq)
        results = []
        t = threading.Thread(target=lambda: results.append(r.refresh_now()))
        t.start()
        assert acq.entered.wait(2.0)
        r.stop()
        acq.release()
        t.join(5.0)
        assert results == [RefreshOutcome.STOPPED]
        assert r.snapshot().rows == ()

    def test_failure_arriving_after_stop_leaves_snapshot_alone(self):
        acq = BlockingAcquirer(error=FeedTransportError("connection reset"))
        r = make_refresher(acquire=acq, settings=make_settings(retain_on_error=False))
        results = []
        t = threading.Thread(target=lambda: results.append(r.refresh_now()))
        t.start()
        assert acq.entered.wait(2.0)
        r.stop()
        acq.release()
        t.join(5.0)
        assert results == [RefreshOutcome.STOPPED]
        snap = r.snapshot()
        assert snap.rows == ()
        assert snap.last_error is None

    def test_no_runs_after_stop(self):
        r = make_refresher(GOOD)
        r.stop()
        assert r.refresh_now() is RefreshOutcome.STOPPED


class TestLifecycle:
    def test_start_runs_immediately_then_stops(self):
        r = make_refresher(GOOD)
        r.start()
        try:
            deadline = time.time() + 5.0
            while r.snapshot().last_refresh is None and time.time() < deadline:
                time.sleep(0.01)
            assert r.snapshot().last_refresh is not None
            assert r.running
        finally:
            r.stop()
        assert not r.running

    def test_timer_fires_repeatedly(self):
        acq = SequenceAcquirer(GOOD)
        r = make_refresher(acquire=acq, interval=0.01)
        r.start()
        try:
            deadline = time.time() + 5.0
            while acq.calls < 3 and time.time() < deadline:
                time.sleep(0.01)
        finally:
            r.stop()
        assert acq.calls >= 3

    def test_constructor_defaults(self):
        r = ExpiryRefresher(build_feed(make_settings(), acquire=lambda: GOOD), ["NIFTY"])
        assert r.interval == 60.0
        assert r.retain_on_error is True
        assert r.metrics is None
        assert r.refresh_now() is RefreshOutcome.OK
