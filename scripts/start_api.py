#!/usr/bin/env python3
"""Resilient starter for the expiry-board FastAPI server.

- Loads .env (feed URL, spreadsheet credentials, EB_* settings).
- Tries a list of candidate ports and starts on the first free one.
- Optional --reload for dev inner loop.

Usage:
    python scripts/start_api.py --ports 8080 8081 --reload
"""
from __future__ import annotations

import argparse
import os
import socket
import sys

import uvicorn
from dotenv import load_dotenv

# Ensure project root is on sys.path so 'src.*' imports work even when
# uvicorn reload changes the working directory.
_SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_SCRIPT_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from src.config.env_config import get_log_file, get_log_level  # noqa: E402
from src.utils.logging_utils import setup_logging  # noqa: E402


def is_port_free(port: int, host: str = "127.0.0.1") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.3)
        return s.connect_ex((host, port)) != 0


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--ports", nargs="*", type=int, default=[8080, 8081])
    ap.add_argument("--reload", action="store_true")
    args = ap.parse_args()

    load_dotenv()
    setup_logging(level=get_log_level(), log_file=get_log_file())

    candidates = list(args.ports) if args.ports else [8080, 8081]
    port = next((p for p in candidates if is_port_free(p, host=args.host)), None)
    if port is None:
        print(f"error: all candidate ports busy: {candidates}", file=sys.stderr)
        return 2

    cfg = uvicorn.Config(
        "src.web.dashboard.app:app",
        host=args.host,
        port=port,
        reload=bool(args.reload),
        log_level="info",
    )
    print(f"Starting expiry-board API on http://{args.host}:{port}")
    uvicorn.Server(cfg).run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
