#!/usr/bin/env python3
"""
Print the next two expiries per symbol from one pass over the active feed.

Usage:
    python -m src.tools.print_expiries                       # feed from EB_* env / .env
    python -m src.tools.print_expiries --feed json --url https://.../NSE.json.gz
    python -m src.tools.print_expiries --feed csv --file snapshot.csv --json

Exit codes: 0 ok, 1 transport/decode failure, 2 feed structurally unusable,
3 configuration error.
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys

from dotenv import load_dotenv

from src.config.env_config import get_log_file, get_log_level
from src.config.feed_settings import FEED_KINDS, FeedSettings
from src.engine.pipeline import PipelineResult, run_pipeline
from src.feeds.acquisition import read_local_bytes
from src.feeds.registry import build_decoder, build_feed, require_source_url
from src.utils.exceptions import ConfigError, FeedError
from src.utils.logging_utils import setup_logging

logger = logging.getLogger("expiry_board.cli")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Print the next two option expiries per symbol")
    ap.add_argument("--feed", choices=FEED_KINDS, help="feed strategy (default: EB_FEED)")
    ap.add_argument("--url", help="feed URL (default: EB_FEED_URL)")
    ap.add_argument("--file", help="read the payload from a local snapshot instead of the network")
    ap.add_argument("--symbols", nargs="*", help="ordered symbol whitelist (default: EB_SYMBOLS)")
    ap.add_argument("--json", action="store_true", help="emit JSON instead of a table")
    ap.add_argument("--log-level", default=None)
    return ap.parse_args(argv)


def _settings(args: argparse.Namespace) -> FeedSettings:
    settings = FeedSettings.from_env()
    overrides = {}
    if args.feed:
        overrides["feed"] = args.feed
    if args.url:
        overrides["url"] = args.url
    if args.symbols:
        overrides["symbols"] = tuple(args.symbols)
    return dataclasses.replace(settings, **overrides) if overrides else settings


def run(settings: FeedSettings, file: str | None = None) -> PipelineResult:
    acquire = None
    if file:
        decode = build_decoder(settings.feed)

        def acquire():
            return decode(read_local_bytes(file))
    elif settings.feed in ("csv", "json"):
        require_source_url(settings)
    feed = build_feed(settings, acquire=acquire)
    return run_pipeline(feed.acquire(), feed.parse, settings.symbols, feed=feed.name)


def render_table(result: PipelineResult) -> str:
    width = max([len("SYMBOL")] + [len(r.symbol) for r in result.rows])
    lines = [f"{'SYMBOL'.ljust(width)}  EXPIRY", f"{'-' * width}  ----------"]
    lines += [f"{r.symbol.ljust(width)}  {r.display_text}" for r in result.rows]
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    setup_logging(level=args.log_level or get_log_level(), log_file=get_log_file())
    try:
        settings = _settings(args)
        result = run(settings, args.file)
    except ConfigError as e:
        logger.error("configuration error: %s", e)
        return 3
    except FeedError as e:
        logger.error("%s: %s", e.outcome, e)
        return 1

    if args.json:
        print(json.dumps({
            "feed": result.feed,
            "rows": [r.to_dict() for r in result.rows],
            "stages": result.stages(),
            "fatal": result.fatal,
        }, indent=2))
    else:
        print(render_table(result))
    if result.fatal:
        logger.error("feed unusable: %s", result.fatal)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
