"""Centralized environment variable access with validation and type coercion.

This module provides a single source of truth for all environment variable access
in expiry-board. It ensures consistent parsing, validation, and default handling.

Usage:
    from src.config.env_config import EnvConfig

    # Integer values
    interval = EnvConfig.get_int('EB_REFRESH_INTERVAL_SEC', 60)

    # Boolean values
    retain = EnvConfig.get_bool('EB_RETAIN_ON_ERROR', True)

    # String values
    log_level = EnvConfig.get_str('EB_LOG_LEVEL', 'INFO')

    # Float values
    timeout = EnvConfig.get_float('EB_FEED_TIMEOUT_SEC', 10.0)
"""
from __future__ import annotations

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SYMBOLS = ["NIFTY", "BANKNIFTY", "FINNIFTY", "MIDCPNIFTY", "SENSEX", "BANKEX"]


class EnvConfig:
    """Centralized environment variable access with validation."""

    # Cache for parsed values to avoid repeated parsing
    _cache: dict[str, Any] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the cache (useful for testing)."""
        cls._cache.clear()

    @classmethod
    def get_int(cls, key: str, default: int) -> int:
        """Get integer environment variable with validation.

        Args:
            key: Environment variable name
            default: Default value if not set or invalid

        Returns:
            Integer value or default

        Example:
            interval = EnvConfig.get_int('EB_REFRESH_INTERVAL_SEC', 60)
        """
        cache_key = f"{key}:int:{default}"
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        value_str = os.environ.get(key, str(default))
        try:
            if not value_str or value_str.strip() == '':
                result = default
            else:
                result = int(value_str)
            cls._cache[cache_key] = result
            return result
        except (ValueError, TypeError) as e:
            logger.warning(
                "Invalid integer value for %s='%s', using default=%s. Error: %s", key, value_str, default, e
            )
            cls._cache[cache_key] = default
            return default

    @classmethod
    def get_bool(cls, key: str, default: bool = False) -> bool:
        """Get boolean environment variable with consistent parsing.

        Truthy values: '1', 'true', 'yes', 'on' (case-insensitive)
        Falsy values: '0', 'false', 'no', 'off'

        An unset or empty variable yields the default.
        """
        cache_key = f"{key}:bool:{default}"
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        value_str = os.environ.get(key, '')
        if not value_str or value_str.strip() == '':
            cls._cache[cache_key] = default
            return default

        result = value_str.strip().lower() in ('1', 'true', 'yes', 'on')
        cls._cache[cache_key] = result
        return result

    @classmethod
    def get_str(cls, key: str, default: str = '') -> str:
        """Get string environment variable.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            String value or default
        """
        cache_key = f"{key}:str:{default}"
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        result = os.environ.get(key, default)
        cls._cache[cache_key] = result
        return result

    @classmethod
    def get_float(cls, key: str, default: float) -> float:
        """Get float environment variable with validation.

        Example:
            timeout = EnvConfig.get_float('EB_FEED_TIMEOUT_SEC', 10.0)
        """
        cache_key = f"{key}:float:{default}"
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        value_str = os.environ.get(key, str(default))
        try:
            if not value_str or value_str.strip() == '':
                result = default
            else:
                result = float(value_str)
            cls._cache[cache_key] = result
            return result
        except (ValueError, TypeError) as e:
            logger.warning(
                "Invalid float value for %s='%s', using default=%s. Error: %s", key, value_str, default, e
            )
            cls._cache[cache_key] = default
            return default

    @classmethod
    def get_list(cls, key: str, default: list[str] | None = None, separator: str = ',') -> list[str]:
        """Get list of strings from environment variable (comma-separated by default).

        Order is preserved; blank items are dropped.

        Example:
            symbols = EnvConfig.get_list('EB_SYMBOLS', ['NIFTY', 'BANKNIFTY'])
        """
        if default is None:
            default = []

        cache_key = f"{key}:list:{separator}:{','.join(default)}"
        if cache_key in cls._cache:
            return list(cls._cache[cache_key])

        value_str = os.environ.get(key, '')
        if not value_str or value_str.strip() == '':
            cls._cache[cache_key] = list(default)
            return list(default)

        result = [item.strip() for item in value_str.split(separator) if item.strip()]
        cls._cache[cache_key] = result
        return list(result)

    @classmethod
    def get_path(cls, key: str, default: str = '') -> str:
        """Get filesystem path from environment variable (separators normalized)."""
        cache_key = f"{key}:path:{default}"
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        path_str = os.environ.get(key, default)
        result = os.path.normpath(path_str) if path_str else default
        cls._cache[cache_key] = result
        return result


# Convenience functions for common patterns
def get_symbols() -> list[str]:
    """Get the ordered symbol whitelist (repeated names kept once, first position wins)."""
    return list(dict.fromkeys(EnvConfig.get_list('EB_SYMBOLS', DEFAULT_SYMBOLS)))


def get_log_level() -> str:
    """Get log level (default: INFO)."""
    return EnvConfig.get_str('EB_LOG_LEVEL', 'INFO').upper()


def get_log_file() -> str | None:
    """Get optional log file path (default: console only)."""
    return EnvConfig.get_path('EB_LOG_FILE', '') or None


def is_metrics_enabled() -> bool:
    """Check if Prometheus metrics are enabled (default: True)."""
    return EnvConfig.get_bool('EB_METRICS_ENABLED', True)


__all__ = [
    'DEFAULT_SYMBOLS',
    'EnvConfig',
    'get_symbols',
    'get_log_level',
    'get_log_file',
    'is_metrics_enabled',
]
