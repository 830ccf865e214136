"""
Interfaces package for expiry-board.

This package contains Protocol definitions used throughout the codebase to
break circular dependencies via dependency inversion.

Key Principles:
- Protocols are import-free (only use typing and stdlib)
- No runtime dependencies on other src modules
- Can be imported anywhere without circular risk

Usage:
    from src.interfaces import ErrorHandlerProtocol, FeedParser
"""

from .error_handler_protocol import ErrorCategory, ErrorHandlerProtocol, ErrorSeverity
from .feed_protocol import FeedAcquirer, FeedParser

__all__ = [
    "ErrorCategory",
    "ErrorHandlerProtocol",
    "ErrorSeverity",
    "FeedAcquirer",
    "FeedParser",
]
