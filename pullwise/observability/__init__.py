"""
Observability module for logging, metrics, and error tracking.

This module provides:
- Structured logging setup
- Analysis and cache metrics collection
- Error tracking for gracefully degraded analyses
"""

from pullwise.observability.logging import LogContext, get_log_context, setup_logging
from pullwise.observability.metrics import (
    MetricNames,
    MetricsCollector,
    get_metrics_collector,
    setup_metrics,
)
from pullwise.observability.errors import (
    ErrorTracker,
    capture_exception,
    get_error_tracker,
    setup_error_tracking,
)

__all__ = [
    "setup_logging",
    "get_log_context",
    "LogContext",
    "MetricNames",
    "MetricsCollector",
    "get_metrics_collector",
    "setup_metrics",
    "ErrorTracker",
    "capture_exception",
    "get_error_tracker",
    "setup_error_tracking",
]
