"""
Error Handler Protocol - Interface for error handling and routing.

Breaks circular dependency between:
- src.error_handling (implementation)
- src.feeds / src.engine (emit errors)
- src.metrics (tracks errors)

This protocol allows any module to declare dependency on error handling
without importing the concrete implementation.
"""

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ErrorCategory(Enum):
    """Error categories for classification."""
    NETWORK = "network"
    DATA_PARSING = "data_parsing"
    DATA_VALIDATION = "data_validation"
    CONFIGURATION = "configuration"
    RESOURCE = "resource"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@runtime_checkable
class ErrorHandlerProtocol(Protocol):
    """
    Protocol for error handling and routing.

    Usage:
        def refresh(error_handler: ErrorHandlerProtocol) -> None:
            try:
                payload = acquire()
            except FeedTransportError as e:
                error_handler.handle_error(
                    e,
                    category=ErrorCategory.NETWORK,
                    severity=ErrorSeverity.MEDIUM,
                    component="engine.refresher",
                )
    """

    def handle_error(
        self,
        exception: Exception,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        component: str = "",
        function_name: str = "",
        message: str = "",
        context: dict[str, Any] | None = None,
        should_log: bool = True,
        should_reraise: bool = False,
    ) -> Any:
        """
        Handle an error with categorization and routing.

        Args:
            exception: The exception to handle
            category: Error category for classification
            severity: Error severity level
            component: Dotted component name where the error surfaced
            function_name: Function name where the error surfaced
            message: Human-readable summary (defaults to str(exception))
            context: Optional context dict (feed, url, ...)
            should_log: Whether to emit a log record
            should_reraise: Whether to re-raise after recording
        """
        ...

    def log_error(
        self,
        message: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        context: dict[str, Any] | None = None
    ) -> None:
        """Log an error message without an exception."""
        ...

    def get_error_count(self, category: ErrorCategory | None = None) -> int:
        """Get count of errors handled, optionally for one category."""
        ...


__all__ = ["ErrorHandlerProtocol", "ErrorCategory", "ErrorSeverity"]
