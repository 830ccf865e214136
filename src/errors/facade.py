"""
Error Handler Facade - Lazy singleton access for error handling.

This facade defers importing the concrete error handler until first use, so
low-level modules (feeds, engine) can report errors without importing
src.error_handling at module import time.

Usage:
    from src.errors import get_error_handler_lazy, ErrorCategory, ErrorSeverity

    handler = get_error_handler_lazy()
    try:
        payload = acquire()
    except FeedTransportError as e:
        handler.handle_error(e, ErrorCategory.NETWORK, ErrorSeverity.MEDIUM)
"""

import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.interfaces import ErrorHandlerProtocol

# Re-export enums for convenience (no circular risk)
from src.interfaces.error_handler_protocol import ErrorCategory, ErrorSeverity

# Singleton state
_error_handler_instance: "ErrorHandlerProtocol | None" = None
_error_handler_lock = threading.Lock()


def get_error_handler_lazy() -> "ErrorHandlerProtocol":
    """
    Get error handler singleton with lazy initialization.

    Thread-safe with double-checked locking.
    """
    global _error_handler_instance

    # Fast path: already initialized
    if _error_handler_instance is not None:
        return _error_handler_instance

    with _error_handler_lock:
        if _error_handler_instance is not None:
            return _error_handler_instance

        # Import only when needed (breaks circular deps)
        from src.error_handling import get_error_handler

        _error_handler_instance = get_error_handler()
        return _error_handler_instance


def reset_error_handler_lazy() -> None:
    """
    Reset the lazy singleton (for testing).

    Should not be used in production code.
    """
    global _error_handler_instance
    with _error_handler_lock:
        _error_handler_instance = None


# Convenience helpers that delegate to the singleton
def handle_error(
    error: Exception,
    category: ErrorCategory,
    severity: ErrorSeverity,
    context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> Any:
    """
    Handle an error (convenience wrapper).

    Extra keyword arguments (component, function_name, message, should_log)
    are passed through to the handler.
    """
    return get_error_handler_lazy().handle_error(error, category, severity, context=context, **kwargs)


def log_error(
    message: str,
    category: ErrorCategory,
    severity: ErrorSeverity,
    context: dict[str, Any] | None = None
) -> None:
    """Log an error message without an exception (convenience wrapper)."""
    get_error_handler_lazy().log_error(message, category, severity, context)


def get_error_count(category: ErrorCategory | None = None) -> int:
    """Get count of handled errors (convenience wrapper)."""
    return get_error_handler_lazy().get_error_count(category)
