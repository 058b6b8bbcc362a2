"""Shared test fixtures for the Pullwise analysis engine."""

import pytest

from pullwise.analysis.diff_parser import DiffLineClassifier
from pullwise.analysis.engine import AnalysisEngine
from pullwise.config import Settings
from pullwise.observability.metrics import MetricsCollector
from pullwise.schemas import FileChange, FileStatus


def patch(*lines: str, marker: str = "+") -> str:
    """Build patch text where every line carries the same marker."""
    return "\n".join(f"{marker}{line}" for line in lines)


def make_file(path: str, content: str = "", status: FileStatus = FileStatus.MODIFIED, **kwargs) -> FileChange:
    """Build a FileChange, counting added/removed lines unless given."""
    added = sum(1 for l in content.split("\n") if l.startswith("+")) if content else 0
    removed = sum(1 for l in content.split("\n") if l.startswith("-")) if content else 0
    kwargs.setdefault("additions", added)
    kwargs.setdefault("deletions", removed)
    kwargs.setdefault("changes", kwargs["additions"] + kwargs["deletions"])
    return FileChange(path=path, status=status, content=content, **kwargs)


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def metrics(settings):
    """Enabled in-memory metrics collector."""
    return MetricsCollector(settings)


@pytest.fixture
def engine(settings, metrics):
    """Fresh engine with a private cache."""
    return AnalysisEngine(settings=settings, metrics=metrics)


@pytest.fixture
def classify():
    """Classify patch text into lines."""
    classifier = DiffLineClassifier()
    return classifier.classify
