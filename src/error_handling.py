"""
Centralized Error Handling for expiry-board

Classifies, logs, counts and keeps a bounded history of errors raised while
acquiring and parsing feeds, so the HTTP surface can report them and tests
can assert on what was routed where.
"""

import logging
import threading
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.interfaces.error_handler_protocol import ErrorCategory, ErrorSeverity


@dataclass
class ErrorInfo:
    """Error information captured for one handled exception."""

    exception: Exception
    category: ErrorCategory
    severity: ErrorSeverity

    component: str = ""
    function_name: str = ""
    message: str = ""

    traceback_str: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    thread_id: str = ""

    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert ErrorInfo to dictionary for serialization."""
        return {
            "exception_type": type(self.exception).__name__,
            "exception_message": str(self.exception),
            "category": self.category.value,
            "severity": self.severity.value,
            "component": self.component,
            "function_name": self.function_name,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "thread_id": self.thread_id,
            "context": self.context,
        }


class ErrorHandler:
    """Centralized error handling and logging."""

    def __init__(self, max_errors: int = 500):
        self.logger = logging.getLogger("expiry_board.errors")
        self.errors: list[ErrorInfo] = []
        self.max_errors = max_errors
        self._lock = threading.Lock()

        self.error_counts: dict[str, int] = {}
        self.category_counts: dict[ErrorCategory, int] = {}
        self.severity_counts: dict[ErrorSeverity, int] = {}

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
    ) -> ErrorInfo:
        """
        Record an error, log it at a severity-mapped level and optionally re-raise.

        Returns:
            ErrorInfo describing the handled error
        """
        error_info = ErrorInfo(
            exception=exception,
            category=category,
            severity=severity,
            component=component,
            function_name=function_name,
            message=message or str(exception),
            traceback_str="".join(traceback.format_exception(exception)),
            thread_id=str(threading.current_thread().ident),
            context=context or {},
        )

        with self._lock:
            self.errors.append(error_info)
            if len(self.errors) > self.max_errors:
                self.errors.pop(0)

            exc_type = type(exception).__name__
            self.error_counts[exc_type] = self.error_counts.get(exc_type, 0) + 1
            self.category_counts[category] = self.category_counts.get(category, 0) + 1
            self.severity_counts[severity] = self.severity_counts.get(severity, 0) + 1

        if should_log:
            self._log_error(error_info)

        if should_reraise:
            raise exception

        return error_info

    def log_error(
        self,
        message: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Log an error message without an exception."""
        self.handle_error(RuntimeError(message), category, severity, message=message, context=context)

    def _log_error(self, error_info: ErrorInfo) -> None:
        prefix = f"[{error_info.category.value.upper()}] {error_info.component}.{error_info.function_name}"
        if error_info.context:
            fmt, args = "%s: %s | Context: %s", (prefix, error_info.message, error_info.context)
        else:
            fmt, args = "%s: %s", (prefix, error_info.message)

        if error_info.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(fmt, *args, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.HIGH:
            self.logger.error(fmt, *args, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(fmt, *args)
        else:
            self.logger.info(fmt, *args)

    def get_error_count(self, category: ErrorCategory | None = None) -> int:
        with self._lock:
            if category is None:
                return sum(self.category_counts.values())
            return self.category_counts.get(category, 0)

    def get_recent_errors(self, count: int = 50) -> list[ErrorInfo]:
        """Get recent errors for monitoring."""
        with self._lock:
            return self.errors[-count:] if self.errors else []

    def get_error_summary(self) -> dict[str, Any]:
        """Get error summary statistics."""
        with self._lock:
            return {
                "total_errors": len(self.errors),
                "by_type": dict(self.error_counts),
                "by_category": {cat.value: count for cat, count in self.category_counts.items()},
                "by_severity": {sev.value: count for sev, count in self.severity_counts.items()},
            }


_global_error_handler: ErrorHandler | None = None
_global_lock = threading.Lock()


def get_error_handler() -> ErrorHandler:
    """Get the process-wide error handler, creating it on first use."""
    global _global_error_handler
    with _global_lock:
        if _global_error_handler is None:
            _global_error_handler = ErrorHandler()
        return _global_error_handler


def initialize_error_handler(max_errors: int = 500) -> ErrorHandler:
    """Replace the process-wide error handler (startup and tests)."""
    global _global_error_handler
    with _global_lock:
        _global_error_handler = ErrorHandler(max_errors=max_errors)
        return _global_error_handler


__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorInfo",
    "ErrorHandler",
    "get_error_handler",
    "initialize_error_handler",
]
