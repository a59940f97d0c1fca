"""
Error Handling Utilities for the Snowfall Overlay

Consistent reporting for the few places where the overlay touches the
outside world:
1. Drawing surface creation (terminal / display capabilities)
2. Preference persistence (small JSON file on disk)
3. Configuration loading
4. Platform checks in the terminal demo

Everything else in the overlay is in-memory computation and does not go
through this module.

USAGE:
    from snowfall.utils.error_handling import handle_error, ErrorCategory

    try:
        surface = host.create_surface(width, height)
    except SurfaceUnavailableError as e:
        handle_error(e, "snow overlay init", ErrorCategory.SURFACE)
"""

import logging
import threading
import time
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class SnowfallError(Exception):
    """Base class for all overlay errors."""


class SurfaceUnavailableError(SnowfallError):
    """The drawing surface or its 2D context could not be created."""


class ConfigError(SnowfallError):
    """Configuration is malformed or violates a constraint."""


class ErrorCategory(Enum):
    """Where an error came from."""
    SURFACE = "surface"            # Drawing surface / display context
    CONFIG = "configuration"       # Config file or environment values
    PERSISTENCE = "persistence"    # Preference file reads and writes
    PLATFORM = "platform"          # Missing terminal support (no curses)
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """How much of the overlay an error costs."""
    INFO = "info"
    WARNING = "warning"      # Preference lost or ignored, snow still runs
    ERROR = "error"          # Snow unavailable, host keeps running
    CRITICAL = "critical"    # Process is going down


@dataclass
class ErrorContext:
    """One reported error and what the overlay was doing at the time."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    additional_context: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Dedup key: same category, error type and operation count as one."""
        return f"{self.category.value}:{type(self.error).__name__}:{self.operation}"

    def format_log_message(self) -> str:
        lines = [
            f"[{self.severity.value.upper()}] {self.operation} failed "
            f"({self.category.value}): {type(self.error).__name__}: {self.error}",
        ]
        for key, value in self.additional_context.items():
            lines.append(f"  {key}: {value}")

        # Only errors that were actually raised carry a traceback
        if self.error.__traceback__ is not None:
            trace = traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            )
            lines.extend(f"  {line}" for line in ''.join(trace).splitlines() if line.strip())
        return '\n'.join(lines)


class ErrorAggregator:
    """
    Keeps recent reported errors and counts repeats.

    A repeat of the same key inside the dedup window is counted but not
    stored, so a read-only preference file does not flood the log every
    time the user toggles.
    """

    def __init__(self, max_errors: int = 200, dedup_window_seconds: float = 60):
        self._lock = threading.Lock()
        self._max_errors = max_errors
        self._dedup_window = dedup_window_seconds
        self._errors: List[ErrorContext] = []
        self._counts: Dict[str, int] = {}
        self._first_seen: Dict[str, float] = {}

    def add_error(self, context: ErrorContext) -> bool:
        """Record an error. False if it was a repeat inside the window."""
        now = time.monotonic()
        with self._lock:
            seen = self._first_seen.get(context.key)
            if seen is not None and now - seen < self._dedup_window:
                self._counts[context.key] += 1
                return False

            self._first_seen[context.key] = now
            self._counts[context.key] = 1
            self._errors.append(context)
            del self._errors[:-self._max_errors]
            return True

    def get_error_summary(self) -> Dict[str, Any]:
        with self._lock:
            by_category: Dict[str, int] = {}
            by_severity: Dict[str, int] = {}
            for ctx in self._errors:
                by_category[ctx.category.value] = by_category.get(ctx.category.value, 0) + 1
                by_severity[ctx.severity.value] = by_severity.get(ctx.severity.value, 0) + 1
            return {
                'total_errors': len(self._errors),
                'by_category': by_category,
                'by_severity': by_severity,
                'deduplicated_counts': dict(self._counts),
                'operations': [ctx.operation for ctx in self._errors],
            }

    def clear(self):
        with self._lock:
            self._errors.clear()
            self._counts.clear()
            self._first_seen.clear()


_global_aggregator = ErrorAggregator()


def get_error_aggregator() -> ErrorAggregator:
    """Get the global error aggregator instance."""
    return _global_aggregator


def determine_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    if isinstance(error, (SystemExit, KeyboardInterrupt)):
        return ErrorSeverity.CRITICAL
    if category == ErrorCategory.PERSISTENCE:
        return ErrorSeverity.WARNING
    if category in (ErrorCategory.SURFACE, ErrorCategory.CONFIG, ErrorCategory.PLATFORM):
        return ErrorSeverity.ERROR
    if isinstance(error, FileNotFoundError):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
) -> ErrorContext:
    """
    Log and record an error.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error
        severity: Severity level (derived from category if not provided)
        additional_context: Extra key/value details for the log
        reraise: Whether to re-raise the exception after handling

    Returns:
        ErrorContext describing the error
    """
    context = ErrorContext(
        error=error,
        category=category,
        severity=severity or determine_severity(error, category),
        operation=operation,
        additional_context=additional_context or {},
    )

    level = _LOG_LEVELS[context.severity]
    if _global_aggregator.add_error(context):
        logger.log(level, context.format_log_message())
    else:
        logger.log(level, f"[DEDUPLICATED] {operation}: {type(error).__name__}: {error}")

    if reraise:
        raise error

    return context
