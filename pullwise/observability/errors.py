"""
Error capture for gracefully degraded analyses.

A detector that fails on one file must not fail the whole analysis. The
engine hands the exception to the tracker, which keeps a record (with the
offending path as context) and logs it, and the file contributes no issues.
"""

import logging
import threading
import traceback
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pullwise.config import Settings

logger = logging.getLogger(__name__)


class ErrorSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return getattr(logging, self.name)


@dataclass
class ErrorRecord:
    """A captured exception."""

    error_id: str
    severity: ErrorSeverity
    exception_type: str
    exception_message: str
    traceback: str
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        severity: ErrorSeverity,
        context: Optional[Dict[str, Any]],
    ) -> "ErrorRecord":
        return cls(
            error_id=str(uuid.uuid4()),
            severity=severity,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            traceback="".join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )),
            context=dict(context or {}),
        )


class ErrorTracker:
    """
    Keeps captured errors in memory and logs each one.

    When tracking is disabled the exception is only logged.
    """

    def __init__(self, settings: Settings):
        self.enabled = settings.ERROR_TRACKING_ENABLED
        self._errors: List[ErrorRecord] = []
        self._lock = threading.Lock()

        logger.info("Error tracker ready", extra={"tracking_enabled": self.enabled})

    def capture_exception(
        self,
        exception: BaseException,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Record an exception.

        Args:
            exception: Exception raised by a detector
            severity: How bad it is
            context: Extra fields, such as the file path

        Returns:
            str: Error ID, or "" when tracking is disabled
        """
        if not self.enabled:
            logger.log(
                severity.log_level,
                f"Unhandled error: {type(exception).__name__}: {exception}",
                extra={"error_context": context},
            )
            return ""

        record = ErrorRecord.from_exception(exception, severity, context)
        with self._lock:
            self._errors.append(record)

        logger.log(
            severity.log_level,
            f"Error captured: {record.exception_type}: {record.exception_message}",
            extra={"error_id": record.error_id, "error_context": context},
            exc_info=exception,
        )
        return record.error_id

    def get_errors(
        self,
        severity: Optional[ErrorSeverity] = None,
        limit: int = 100,
    ) -> List[ErrorRecord]:
        """Captured errors, newest first."""
        with self._lock:
            errors = list(reversed(self._errors))

        if severity:
            errors = [e for e in errors if e.severity == severity]
        return errors[:limit]


_tracker: Optional[ErrorTracker] = None


def get_error_tracker() -> ErrorTracker:
    """
    Process-wide tracker.

    Raises:
        RuntimeError: If setup_error_tracking() has not run
    """
    if _tracker is None:
        raise RuntimeError("Error tracker not initialized. Call setup_error_tracking() first.")
    return _tracker


def setup_error_tracking(settings: Settings) -> ErrorTracker:
    """Create the process-wide tracker."""
    global _tracker
    _tracker = ErrorTracker(settings)
    return _tracker


def capture_exception(
    exception: BaseException,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Capture through the process-wide tracker, or just log when there is none.

    Returns:
        str: Error ID, or "" when nothing was recorded
    """
    try:
        tracker = get_error_tracker()
    except RuntimeError:
        logger.error(
            f"Error tracker not initialized. Exception: {exception}",
            extra={"error_context": context},
            exc_info=exception,
        )
        return ""

    return tracker.capture_exception(exception, severity=severity, context=context)
