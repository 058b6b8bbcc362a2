"""Tests for the complexity analyzer."""

import pytest

from conftest import patch
from pullwise.analysis.complexity import ComplexityAnalyzer, ComplexityBand
from pullwise.schemas import IssueSeverity, IssueType


@pytest.fixture
def analyzer():
    return ComplexityAnalyzer(low_max=3, medium_max=7, high_max=15)


def _conjunction(operands: int) -> str:
    return "const ok = " + " && ".join(f"v{i}" for i in range(operands)) + ";"


def test_base_complexity_is_one(analyzer, classify):
    score = analyzer.measure(classify(patch("const x = 1;")))

    assert score.value == 1
    assert score.band == ComplexityBand.LOW


def test_counts_each_decision_point(analyzer):
    assert analyzer.count_decision_points("if (a && b || c) {") == 3
    assert analyzer.count_decision_points("} else if (x) {") == 2
    assert analyzer.count_decision_points("for (const x of xs) {") == 1
    assert analyzer.count_decision_points("const y = ok ? 1 : 2;") == 1
    assert analyzer.count_decision_points("} catch (err) {") == 1


def test_only_added_lines_count(analyzer, classify):
    lines = classify("-if (a && b) {\n if (c) {\n+done();")

    assert analyzer.measure(lines).value == 1


@pytest.mark.parametrize("value, band", [
    (1, ComplexityBand.LOW),
    (3, ComplexityBand.LOW),
    (4, ComplexityBand.MEDIUM),
    (7, ComplexityBand.MEDIUM),
    (8, ComplexityBand.HIGH),
    (15, ComplexityBand.HIGH),
    (16, ComplexityBand.CRITICAL),
])
def test_band_boundaries(analyzer, value, band):
    assert analyzer.classify(value) == band


def test_critical_complexity_is_an_error(analyzer, classify):
    issues = analyzer.analyze(classify(patch(_conjunction(17))), "src/rules.js")

    assert len(issues) == 1
    assert issues[0].type == IssueType.ERROR
    assert issues[0].severity == IssueSeverity.HIGH
    assert issues[0].message == "High cyclomatic complexity detected (17)"
    assert issues[0].line == 1


def test_high_complexity_is_a_warning(analyzer, classify):
    issues = analyzer.analyze(classify(patch(_conjunction(10))), "f")

    assert len(issues) == 1
    assert issues[0].type == IssueType.WARNING
    assert issues[0].severity == IssueSeverity.MEDIUM
    assert "(10)" in issues[0].message


def test_medium_complexity_is_not_reported(analyzer, classify):
    assert analyzer.analyze(classify(patch(_conjunction(7))), "f") == []
