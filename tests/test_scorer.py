"""Tests for the PR quality score."""

import pytest

from pullwise.review.scorer import calculate_quality_score, explain_score
from pullwise.schemas import AnalysisMetrics, AnalysisResult, IssueCounts


def _result(errors=0, warnings=0, suggestions=0, complexity=0.0) -> AnalysisResult:
    return AnalysisResult(metrics=AnalysisMetrics(
        complexity=complexity,
        issues=IssueCounts(errors=errors, warnings=warnings, suggestions=suggestions),
    ))


def test_clean_result_is_excellent():
    score = calculate_quality_score(_result())

    assert score.total == 100.0
    assert score.level == "excellent"


def test_penalties():
    score = calculate_quality_score(_result(errors=1, warnings=1, suggestions=2, complexity=15.0))

    assert score.error_penalty == 10
    assert score.warning_penalty == 5
    assert score.suggestion_penalty == 4
    assert score.complexity_penalty == 10.0
    assert score.total == 71.0
    assert score.level == "good"


@pytest.mark.parametrize("errors, level", [
    (2, "excellent"),
    (3, "good"),
    (5, "fair"),
    (7, "poor"),
])
def test_levels(errors, level):
    assert calculate_quality_score(_result(errors=errors)).level == level


def test_total_never_negative():
    score = calculate_quality_score(_result(errors=50))

    assert score.total == 0.0
    assert score.level == "poor"


def test_explanation_lists_penalties():
    text = explain_score(calculate_quality_score(_result(warnings=2)))

    assert "GOOD" not in text
    assert "EXCELLENT (90.0/100)" in text
    assert "- Warnings: -10.0" in text
