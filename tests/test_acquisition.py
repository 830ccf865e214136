import gzip
import http.client
import urllib.error

import pytest

from src.feeds import acquisition
from src.feeds.acquisition import (
    decode_json,
    decode_text,
    fetch_bytes,
    fetch_json,
    fetch_text,
    has_http_scheme,
    maybe_gunzip,
    read_local_bytes,
)
from src.utils.exceptions import FeedDecodeError, FeedTransportError
from tests.fixtures import DummyResponse, gzip_json_payload, json_payload

ITEM = {"instrument_type": "CE", "underlying_symbol": "NIFTY", "expiry": 1764009000000}


@pytest.fixture
def captured(monkeypatch):
    """Patch urlopen; tests set captured['response'] or captured['error']."""
    state: dict = {}

    def fake_urlopen(req, timeout=None):
        state["url"] = req.full_url
        state["headers"] = dict(req.header_items())
        state["timeout"] = timeout
        if "error" in state:
            raise state["error"]
        return state["response"]

    monkeypatch.setattr(acquisition.urllib.request, "urlopen", fake_urlopen)
    return state


class TestFetchBytes:
    def test_returns_body_and_sends_user_agent(self, captured):
        captured["response"] = DummyResponse(b"payload")
        assert fetch_bytes("https://feed.example/instruments.csv", timeout=3.0) == b"payload"
        assert captured["timeout"] == 3.0
        assert captured["headers"]["User-agent"].startswith("expiry-board/")

    def test_empty_url_is_transport_error(self):
        with pytest.raises(FeedTransportError, match="no feed URL"):
            fetch_bytes("")

    def test_non_2xx_status(self, captured):
        captured["response"] = DummyResponse(b"", status=204)
        assert fetch_bytes("https://feed.example/x") == b""
        captured["response"] = DummyResponse(b"moved", status=302)
        with pytest.raises(FeedTransportError) as ei:
            fetch_bytes("https://feed.example/x")
        assert ei.value.status == 302

    def test_http_error(self, captured):
        captured["error"] = urllib.error.HTTPError("https://feed.example/x", 503, "Service Unavailable", None, None)
        with pytest.raises(FeedTransportError) as ei:
            fetch_bytes("https://feed.example/x")
        assert ei.value.status == 503
        assert ei.value.outcome == "transport_error"

    def test_network_error(self, captured):
        captured["error"] = urllib.error.URLError("connection refused")
        with pytest.raises(FeedTransportError, match="connection refused"):
            fetch_bytes("https://feed.example/x")

    def test_timeout(self, captured):
        captured["error"] = TimeoutError("timed out")
        with pytest.raises(FeedTransportError):
            fetch_bytes("https://feed.example/x")


class TestDecoding:
    def test_gzip_json_inflated_by_magic_bytes(self, captured):
        captured["response"] = DummyResponse(gzip_json_payload(ITEM))
        assert fetch_json("https://feed.example/NSE.json.gz") == [ITEM]

    def test_plain_json(self, captured):
        captured["response"] = DummyResponse(json_payload(ITEM))
        assert fetch_json("https://feed.example/NSE.json") == [ITEM]

    def test_text_strips_bom(self, captured):
        captured["response"] = DummyResponse("\ufeffa,b,c\n".encode("utf-8"))
        assert fetch_text("https://feed.example/x.csv") == "a,b,c\n"

    def test_maybe_gunzip_passthrough(self):
        assert maybe_gunzip(b"plain") == b"plain"
        assert maybe_gunzip(gzip.compress(b"zipped")) == b"zipped"

    def test_corrupt_gzip(self):
        with pytest.raises(FeedDecodeError, match="gzip"):
            maybe_gunzip(b"\x1f\x8b\x08\x00garbage")

    def test_invalid_json(self):
        with pytest.raises(FeedDecodeError) as ei:
            decode_json(b"<html>not json</html>")
        assert ei.value.outcome == "decode_error"

    def test_invalid_utf8(self):
        with pytest.raises(FeedDecodeError):
            decode_text(b"\xff\xfe\xfa")


def test_read_local_bytes(tmp_path):
    p = tmp_path / "snap.csv"
    p.write_bytes(b"x")
    assert read_local_bytes(p) == b"x"
    with pytest.raises(FeedTransportError):
        read_local_bytes(tmp_path / "missing.csv")


class TestTransportEdges:
    @pytest.mark.parametrize("url", ["example.com/feed.csv", "ftp://feed.example/x.csv", "file:///etc/passwd", "http://["])
    def test_non_http_url_is_transport_error(self, url):
        with pytest.raises(FeedTransportError, match="unsupported feed URL"):
            fetch_bytes(url)

    def test_truncated_body_is_transport_error(self, captured):
        class _Truncated(DummyResponse):
            def read(self):
                raise http.client.IncompleteRead(b"par", 10)

        captured["response"] = _Truncated(b"")
        with pytest.raises(FeedTransportError, match="network error"):
            fetch_bytes("https://feed.example/x")

    def test_has_http_scheme(self):
        assert has_http_scheme("HTTPS://feed.example/x")
        assert not has_http_scheme("feed.example/x")
