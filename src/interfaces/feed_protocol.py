"""
Feed Protocol - function-shaped contracts for feed strategies.

A feed is two callables composed at configuration time, not a class
hierarchy: an acquirer producing the native payload and a parser turning
that payload into a FeedParseResult. Any plain function with the right
signature satisfies these protocols.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from src.expiry.models import FeedParseResult


class FeedAcquirer(Protocol):
    """Fetch the feed's native payload (text, decoded JSON, or row mappings)."""

    def __call__(self) -> Any: ...


class FeedParser(Protocol):
    """Turn a native payload into raw instrument records."""

    def __call__(self, payload: Any) -> "FeedParseResult": ...


__all__ = ["FeedAcquirer", "FeedParser"]
