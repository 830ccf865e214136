"""expiry-board exception hierarchy.

A small exception tree for categorizing failures across the service. Use
these to communicate intent up the stack and pick the user-facing message
and metric outcome for a failed refresh.
"""
from __future__ import annotations


class ExpiryBoardError(Exception):
    """Base class for all expiry-board exceptions."""


class ConfigError(ExpiryBoardError):
    """Configuration-related issues (unknown feed, missing URL)."""


class FeedError(ExpiryBoardError):
    """Base class for failures obtaining a usable feed payload."""

    outcome = "error"


class FeedTransportError(FeedError):
    """Non-success HTTP response or a network/auth failure talking to the feed."""

    outcome = "transport_error"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class FeedDecodeError(FeedError):
    """Payload arrived but could not be decoded into the expected shape."""

    outcome = "decode_error"


class FeedStructureError(FeedError):
    """Decoded payload lacks required columns/fields (feed unusable this run)."""

    outcome = "structural_error"


__all__ = [
    "ExpiryBoardError",
    "ConfigError",
    "FeedError",
    "FeedTransportError",
    "FeedDecodeError",
    "FeedStructureError",
]
