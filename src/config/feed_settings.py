#!/usr/bin/env python3
"""FeedSettings

Centralized parsing of environment-driven feed configuration.

Flags:
  EB_FEED -> feed
  EB_FEED_URL / EB_FEED_PROXY_PREFIX -> url / proxy_prefix
  EB_FEED_TIMEOUT_SEC -> timeout
  EB_SYMBOLS -> symbols (ordered whitelist)
  EB_REFRESH_INTERVAL_SEC -> refresh_interval
  EB_CSV_DELIMITER / EB_CSV_COLUMNS -> delimited-text layout
  EB_JSON_FIELDS -> JSON-array field names
  EB_SHEET_COLUMNS -> tabular field names
  EB_RETAIN_ON_ERROR -> retain_on_error
  GOOGLE_SHEET_ID / G_SHEET_CLIENT_EMAIL / G_SHEET_PRIVATE_KEY -> credentials

Design notes:
- Parsing is tolerant: invalid values fall back to defaults with a warning.
- Access pattern: settings = FeedSettings.from_env(); pass into the pipeline
  and the refresher. Nothing below src.engine reads os.environ directly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar

from src.config.env_config import DEFAULT_SYMBOLS, EnvConfig, get_symbols

logger = logging.getLogger(__name__)

FEED_KINDS = ("csv", "json", "sheet")


@dataclass(frozen=True, slots=True)
class SheetCredentials:
    """Service-account credentials for the spreadsheet feed."""

    sheet_id: str = ""
    client_email: str = ""
    private_key: str = ""

    ENV_MAP: ClassVar[dict[str, str]] = {
        'sheet_id': 'GOOGLE_SHEET_ID',
        'client_email': 'G_SHEET_CLIENT_EMAIL',
        'private_key': 'G_SHEET_PRIVATE_KEY',
    }

    @classmethod
    def from_env(cls) -> SheetCredentials:
        kw = {attr: EnvConfig.get_str(env_name, '').strip() for attr, env_name in cls.ENV_MAP.items()}
        # Keys pasted into env files carry literal "\n" sequences
        kw['private_key'] = kw['private_key'].replace('\\n', '\n')
        return cls(**kw)

    def missing(self) -> list[str]:
        """Return the env names of absent credentials (empty when complete)."""
        return [env_name for attr, env_name in self.ENV_MAP.items() if not getattr(self, attr)]

    @property
    def complete(self) -> bool:
        return not self.missing()


def _fixed_list(key: str, default: list[str], size: int) -> tuple[str, ...]:
    values = EnvConfig.get_list(key, default)
    if len(values) != size:
        logger.warning("%s expects %s comma-separated names, got %s; using default %s", key, size, values, default)
        return tuple(default)
    return tuple(values)


@dataclass(frozen=True, slots=True)
class FeedSettings:
    feed: str = "csv"
    url: str = ""
    proxy_prefix: str = ""
    timeout: float = 10.0
    symbols: tuple[str, ...] = tuple(DEFAULT_SYMBOLS)
    refresh_interval: int = 60
    csv_delimiter: str = ","
    csv_columns: tuple[str, str, str] = ("instrument_type", "underlying_symbol", "expiry_date")
    json_fields: tuple[str, str, str] = ("instrument_type", "underlying_symbol", "expiry")
    sheet_columns: tuple[str, str] = ("Symbol", "Expiry Date")
    retain_on_error: bool = True
    credentials: SheetCredentials = field(default_factory=SheetCredentials)

    @property
    def source_url(self) -> str:
        """Feed URL with the optional proxy prefix applied."""
        if not self.url:
            return ""
        return f"{self.proxy_prefix}{self.url}" if self.proxy_prefix else self.url

    @classmethod
    def from_env(cls) -> FeedSettings:
        feed = EnvConfig.get_str('EB_FEED', 'csv').strip().lower()
        if feed not in FEED_KINDS:
            logger.warning("Unknown EB_FEED=%s; falling back to csv", feed)
            feed = 'csv'
        delimiter = EnvConfig.get_str('EB_CSV_DELIMITER', ',')
        if len(delimiter) != 1:
            logger.warning("EB_CSV_DELIMITER must be a single character, got %r; using ','", delimiter)
            delimiter = ','
        return cls(
            feed=feed,
            url=EnvConfig.get_str('EB_FEED_URL', '').strip(),
            proxy_prefix=EnvConfig.get_str('EB_FEED_PROXY_PREFIX', '').strip(),
            timeout=max(0.1, EnvConfig.get_float('EB_FEED_TIMEOUT_SEC', 10.0)),
            symbols=tuple(get_symbols()),
            refresh_interval=max(1, EnvConfig.get_int('EB_REFRESH_INTERVAL_SEC', 60)),
            csv_delimiter=delimiter,
            csv_columns=_fixed_list('EB_CSV_COLUMNS', ["instrument_type", "underlying_symbol", "expiry_date"], 3),  # type: ignore[arg-type]
            json_fields=_fixed_list('EB_JSON_FIELDS', ["instrument_type", "underlying_symbol", "expiry"], 3),  # type: ignore[arg-type]
            sheet_columns=_fixed_list('EB_SHEET_COLUMNS', ["Symbol", "Expiry Date"], 2),  # type: ignore[arg-type]
            retain_on_error=EnvConfig.get_bool('EB_RETAIN_ON_ERROR', True),
            credentials=SheetCredentials.from_env(),
        )

    def as_dict(self) -> dict:
        return {
            'feed': self.feed,
            'url': self.url,
            'proxy_prefix': self.proxy_prefix,
            'timeout': self.timeout,
            'symbols': list(self.symbols),
            'refresh_interval': self.refresh_interval,
            'csv_delimiter': self.csv_delimiter,
            'csv_columns': list(self.csv_columns),
            'json_fields': list(self.json_fields),
            'sheet_columns': list(self.sheet_columns),
            'retain_on_error': self.retain_on_error,
            'sheet_credentials_missing': self.credentials.missing(),
        }


__all__ = ["FEED_KINDS", "FeedSettings", "SheetCredentials"]
