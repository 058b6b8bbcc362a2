"""Tests for logging, metrics and error tracking."""

import json
import logging

import pytest

from pullwise.config import Settings
from pullwise.observability.errors import ErrorSeverity, ErrorTracker
from pullwise.observability.logging import (
    ContextFormatter,
    JSONFormatter,
    LogContext,
    get_log_context,
)
from pullwise.observability.metrics import MetricNames, MetricsCollector, MetricType


def _record(message="Analysis completed", **extra):
    record = logging.LogRecord("pullwise.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogging:

    def test_log_context_nests_and_restores(self):
        with LogContext(change_key="42"):
            with LogContext(branch="main"):
                assert get_log_context() == {"change_key": "42", "branch": "main"}
            assert get_log_context() == {"change_key": "42"}
        assert get_log_context() == {}

    def test_json_formatter_includes_context_and_extra(self):
        with LogContext(change_key="42", branch="main"):
            payload = json.loads(JSONFormatter().format(_record(issue_count=3)))

        assert payload["message"] == "Analysis completed"
        assert payload["change_key"] == "42"
        assert payload["branch"] == "main"
        assert payload["issue_count"] == 3

    def test_context_formatter_appends_fields(self):
        line = ContextFormatter(fmt="%(message)s").format(_record(path="src/a.py"))

        assert line == "Analysis completed [path=src/a.py]"


class TestMetrics:

    def test_counters_and_totals(self):
        collector = MetricsCollector(Settings(_env_file=None))

        collector.record_counter(MetricNames.CACHE_HIT)
        collector.record_counter(MetricNames.CACHE_HIT)
        collector.record_gauge("cache.size", 4)

        assert collector.total(MetricNames.CACHE_HIT) == 2
        assert len(collector.get_metrics(metric_type=MetricType.GAUGE)) == 1

    def test_timer_context(self):
        collector = MetricsCollector(Settings(_env_file=None))

        with collector.timer_context(MetricNames.ANALYSIS_DURATION_MS):
            pass

        timers = collector.get_metrics(MetricNames.ANALYSIS_DURATION_MS, MetricType.TIMER)
        assert len(timers) == 1
        assert timers[0].value >= 0

    def test_export_and_clear(self):
        collector = MetricsCollector(Settings(_env_file=None))
        collector.record_counter(MetricNames.ANALYSIS_STARTED)

        exported = collector.export_metrics()
        collector.clear_metrics()

        assert exported[0]["name"] == MetricNames.ANALYSIS_STARTED
        assert collector.get_metrics() == []


class TestErrorTracker:

    def test_captures_exception_with_context(self):
        tracker = ErrorTracker(Settings(_env_file=None))

        try:
            raise ValueError("bad patch")
        except ValueError as e:
            error_id = tracker.capture_exception(e, context={"path": "src/a.py"})

        errors = tracker.get_errors()
        assert error_id
        assert errors[0].error_id == error_id
        assert errors[0].exception_type == "ValueError"
        assert errors[0].context == {"path": "src/a.py"}

    def test_disabled_tracker_only_logs(self, caplog):
        tracker = ErrorTracker(Settings(_env_file=None, ERROR_TRACKING_ENABLED=False))

        with caplog.at_level(logging.ERROR):
            assert tracker.capture_exception(RuntimeError("boom")) == ""

        assert tracker.get_errors() == []
        assert "boom" in caplog.text

    @pytest.mark.parametrize("severity", [ErrorSeverity.WARNING, ErrorSeverity.CRITICAL])
    def test_severity_filter(self, severity):
        tracker = ErrorTracker(Settings(_env_file=None))
        tracker.capture_exception(RuntimeError("a"), severity=severity)
        tracker.capture_exception(RuntimeError("b"))

        assert [e.exception_message for e in tracker.get_errors(severity=severity)] == ["a"]
