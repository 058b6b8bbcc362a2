"""
Shared dependencies for dependency injection.

This module provides the process-wide analysis engine for FastAPI routes.
The engine owns its cache explicitly; routes never touch module state.
"""

from typing import Optional

from pullwise.analysis.engine import AnalysisEngine
from pullwise.config import settings
from pullwise.observability.metrics import MetricsCollector, get_metrics_collector


_engine: Optional[AnalysisEngine] = None


def _metrics_or_none() -> Optional[MetricsCollector]:
    try:
        return get_metrics_collector()
    except RuntimeError:
        return None


def get_analysis_engine() -> AnalysisEngine:
    """
    Provides the shared analysis engine.

    Returns:
        AnalysisEngine: Engine whose cache is shared by all requests.
    """
    global _engine
    if _engine is None:
        _engine = AnalysisEngine(settings=settings, metrics=_metrics_or_none())
    return _engine


def reset_analysis_engine() -> None:
    """Drop the shared engine and its cache."""
    global _engine
    _engine = None
