import logging
import sys

import orjson

from src.utils.logging_utils import JsonFormatter


def _record(msg, *args, **extra):
    rec = logging.LogRecord("expiry_board.webapi", logging.INFO, __file__, 1, msg, args, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_json_formatter_renders_message_and_extras():
    line = JsonFormatter().format(_record("access %s", "ok", path="/api/expiries", status=200, dur_ms=1.5))
    payload = orjson.loads(line)
    assert payload["msg"] == "access ok"
    assert payload["level"] == "INFO"
    assert payload["path"] == "/api/expiries"
    assert payload["status"] == 200
    assert "method" not in payload


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad feed")
    except ValueError:
        rec = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
    payload = orjson.loads(JsonFormatter().format(rec))
    assert "ValueError: bad feed" in payload["exc_info"]
