"""Unified logging utilities for expiry-board."""
from __future__ import annotations

import logging
import os
import sys
import time

import orjson

from src.config.env_config import EnvConfig

DEFAULT_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'

SUPPRESSED_LOGGERS = [
    'urllib3', 'google.auth', 'gspread', 'uvicorn.access',
]

# Extra attributes copied into JSON lines when present on the record
JSON_EXTRA_FIELDS = ("path", "method", "status", "dur_ms", "cid", "feed", "outcome")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'ts': getattr(record, 'created', time.time()),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'msg': record.getMessage(),
        }
        for k in JSON_EXTRA_FIELDS:
            v = getattr(record, k, None)
            if v is not None:
                payload[k] = v
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode('utf-8')


def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT,
                  json_console: bool | None = None) -> logging.Logger:
    """Configure root logging.

    Console handler uses ``fmt`` (or JSON lines when ``json_console`` is true,
    defaulting to EB_JSON_LOGS). The optional file handler always uses the
    detailed DEFAULT_FORMAT. Calling again replaces previously installed handlers.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if json_console is None:
        json_console = EnvConfig.get_bool('EB_JSON_LOGS', False)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)
    console.setFormatter(JsonFormatter() if json_console else logging.Formatter(fmt))
    root.addHandler(console)

    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
            fh = logging.FileHandler(log_file, encoding='utf-8')
            fh.setLevel(log_level)
            fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root.addHandler(fh)
        except OSError as e:
            root.error("Failed to create log file handler for %s: %s", log_file, e)

    for name in SUPPRESSED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


__all__ = ["DEFAULT_FORMAT", "JsonFormatter", "setup_logging"]
