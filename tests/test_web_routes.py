import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from src.web.dashboard.app import create_app
from tests.fixtures import FailingAcquirer, csv_text, make_refresher, make_settings

GOOD = csv_text("CE,NIFTY,2025-11-25", "PE,NIFTY,2025-12-30", "FUT,SENSEX,2025-11-20")


def _client(refresher, registry=None, settings=None):
    app = create_app(
        settings or make_settings(),
        refresher,
        autostart=False,
        metrics_registry=registry if registry is not None else CollectorRegistry(),
    )
    return TestClient(app)


@pytest.fixture
def client():
    with _client(make_refresher(GOOD)) as c:
        yield c


def test_expiries_before_first_run(client):
    r = client.get("/api/expiries")
    assert r.status_code == 200
    body = r.json()
    assert body["rows"] == []
    assert body["fetching"] is False
    assert body["last_error"] is None


def test_manual_refresh_then_read(client):
    r = client.post("/api/refresh")
    assert r.status_code == 200
    assert r.json()["outcome"] == "ok"
    rows = client.get("/api/expiries").json()["rows"]
    assert rows == [
        {"symbol": "NIFTY", "expiry": "25-11-2025"},
        {"symbol": "NIFTY", "expiry": "30-12-2025"},
        {"symbol": "BANKNIFTY", "expiry": "NO DATA"},
        {"symbol": "SENSEX", "expiry": "NO DATA"},
    ]
    assert "X-Request-ID" in r.headers


def test_failed_refresh_reports_error():
    with _client(make_refresher(acquire=FailingAcquirer())) as c:
        body = c.post("/api/refresh").json()
        assert body["outcome"] == "transport_error"
        assert "503" in body["last_error"]
        health = c.get("/health").json()
        assert health["status"] == "error"
        assert c.get("/healthz").status_code == 503


def test_records_returns_unfiltered_rows(client):
    r = client.get("/api/records")
    assert r.status_code == 200
    assert r.json()[2] == {"instrument_type": "FUT", "underlying_symbol": "SENSEX", "expiry": "2025-11-20"}


def test_records_is_get_only(client):
    assert client.post("/api/records").status_code == 405


def test_records_transport_failure():
    with _client(make_refresher(acquire=FailingAcquirer())) as c:
        r = c.get("/api/records")
        assert r.status_code == 502
        assert r.json()["outcome"] == "transport_error"


def test_records_unusable_feed():
    with _client(make_refresher("x,y,z\n")) as c:
        r = c.get("/api/records")
        assert r.status_code == 502
        assert r.json()["outcome"] == "structural_error"


def test_health_and_version(client):
    assert client.get("/health").json()["status"] == "empty"
    assert client.get("/healthz").status_code == 503
    client.post("/api/refresh")
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/healthz").status_code == 204
    assert client.get("/api/version").json()["version"]
    info = client.get("/api/info").json()
    assert info["settings"]["feed"] == "csv"


def test_metrics_endpoint_uses_app_registry():
    reg = CollectorRegistry()
    with _client(make_refresher(GOOD, registry=reg), registry=reg) as c:
        c.post("/api/refresh")
        text = c.get("/metrics").text
        assert 'eb_refresh_total{feed="csv",outcome="ok"} 1.0' in text


def test_metrics_disabled(monkeypatch, client):
    monkeypatch.setenv("EB_METRICS_ENABLED", "0")
    assert client.get("/metrics").status_code == 404


def test_errors_endpoint_reports_failed_refresh():
    with _client(make_refresher(acquire=FailingAcquirer())) as c:
        assert c.get("/api/errors").json()["summary"]["total_errors"] == 0
        c.post("/api/refresh")
        body = c.get("/api/errors").json()
        assert body["summary"]["by_category"] == {"network": 1}
        assert body["summary"]["by_type"] == {"FeedTransportError": 1}
        assert body["recent"][-1]["component"] == "engine.refresher"
        assert body["recent"][-1]["context"]["feed"] == "csv"
        assert c.get("/api/errors", params={"limit": 0}).status_code == 422
