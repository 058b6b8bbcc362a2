"""
In-process metrics for analyses and the result cache.

Samples are kept in memory, grouped by name, so callers (and tests) can
ask how many analyses ran, how often the cache answered, and how long
computations took.
"""

import logging
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, DefaultDict, Dict, Iterator, List, Optional

from pullwise.config import Settings

logger = logging.getLogger(__name__)

Tags = Optional[Dict[str, str]]


class MetricType(str, Enum):
    """Kinds of samples."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMER = "timer"


@dataclass
class Metric:
    """A single recorded sample."""

    name: str
    metric_type: MetricType
    value: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tags: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.metric_type.value,
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
            "tags": dict(self.tags),
        }


class MetricNames:
    """Names recorded by the analysis engine."""

    ANALYSIS_STARTED = "analysis.started"
    ANALYSIS_COMPLETED = "analysis.completed"
    ANALYSIS_DURATION_MS = "analysis.duration_ms"
    ANALYSIS_ISSUES = "analysis.issues"
    ANALYSIS_FILE_FAILED = "analysis.file_failed"

    CACHE_HIT = "analysis.cache_hit"
    CACHE_MISS = "analysis.cache_miss"
    CACHE_CLEARED = "cache.cleared"


class MetricsCollector:
    """
    Thread-safe in-memory sample store.

    Analyses of different pull requests run on different threads, so every
    write goes through one lock. A disabled collector accepts and drops
    every sample.
    """

    def __init__(self, settings: Settings):
        self.enabled = settings.ENABLE_METRICS
        self._samples: DefaultDict[str, List[Metric]] = defaultdict(list)
        self._order: List[Metric] = []
        self._lock = threading.Lock()

        logger.info("Metrics collector ready", extra={"metrics_enabled": self.enabled})

    def _record(self, name: str, metric_type: MetricType, value: float, tags: Tags) -> None:
        if not self.enabled:
            return

        sample = Metric(name=name, metric_type=metric_type, value=value, tags=tags or {})
        with self._lock:
            self._samples[name].append(sample)
            self._order.append(sample)

    def record_counter(self, name: str, value: float = 1.0, tags: Tags = None) -> None:
        """Add ``value`` to a counter."""
        self._record(name, MetricType.COUNTER, value, tags)

    def record_gauge(self, name: str, value: float, tags: Tags = None) -> None:
        """Store a point-in-time reading."""
        self._record(name, MetricType.GAUGE, value, tags)

    def record_timer(self, name: str, duration_ms: float, tags: Tags = None) -> None:
        """Store a duration in milliseconds."""
        self._record(name, MetricType.TIMER, duration_ms, tags)

    @contextmanager
    def timer_context(self, name: str, tags: Tags = None) -> Iterator[None]:
        """Time the enclosed block, recording even when it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record_timer(name, (time.perf_counter() - started) * 1000, tags)

    def get_metrics(
        self,
        name: Optional[str] = None,
        metric_type: Optional[MetricType] = None,
    ) -> List[Metric]:
        """
        Recorded samples in recording order.

        Args:
            name: Only samples with this name
            metric_type: Only samples of this type

        Returns:
            List[Metric]: Matching samples
        """
        with self._lock:
            samples = list(self._samples.get(name, ())) if name else list(self._order)

        if metric_type:
            samples = [s for s in samples if s.metric_type == metric_type]
        return samples

    def total(self, name: str) -> float:
        """Sum of every sample recorded under ``name``."""
        return sum(s.value for s in self.get_metrics(name))

    def clear_metrics(self) -> None:
        with self._lock:
            self._samples.clear()
            self._order.clear()

    def export_metrics(self) -> List[Dict[str, Any]]:
        """Samples as plain dicts, ready for JSON."""
        return [s.to_dict() for s in self.get_metrics()]


_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """
    Process-wide collector.

    Raises:
        RuntimeError: If setup_metrics() has not run
    """
    if _collector is None:
        raise RuntimeError("Metrics collector not initialized. Call setup_metrics() first.")
    return _collector


def setup_metrics(settings: Settings) -> MetricsCollector:
    """Create the process-wide collector."""
    global _collector
    _collector = MetricsCollector(settings)
    return _collector
