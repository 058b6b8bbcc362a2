"""
Quality scoring for analyzed pull requests.

Condenses an AnalysisResult into a single 0-100 quality score, the figure
the history store keeps for trend reporting.
"""

import logging
from dataclasses import dataclass

from pullwise.schemas import AnalysisResult

logger = logging.getLogger(__name__)

# Penalty per issue of each type
ERROR_PENALTY = 10
WARNING_PENALTY = 5
SUGGESTION_PENALTY = 2

# Change complexity tolerated before it starts costing points
COMPLEXITY_ALLOWANCE = 10
COMPLEXITY_PENALTY = 2


@dataclass
class QualityScore:
    """Overall quality score for a PR."""

    total: float  # 0.0-100.0
    level: str  # "excellent", "good", "fair", "poor"

    # Component penalties
    error_penalty: float
    warning_penalty: float
    suggestion_penalty: float
    complexity_penalty: float

    def __str__(self) -> str:
        return f"Quality: {self.level.upper()} ({self.total:.1f}/100)"

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "level": self.level,
            "error_penalty": self.error_penalty,
            "warning_penalty": self.warning_penalty,
            "suggestion_penalty": self.suggestion_penalty,
            "complexity_penalty": self.complexity_penalty,
        }


def calculate_quality_score(result: AnalysisResult) -> QualityScore:
    """
    Calculate the quality score of an analysis result.

    Score is 0-100 where:
    - 80-100: Excellent
    - 60-79: Good
    - 40-59: Fair
    - 0-39: Poor

    Args:
        result: AnalysisResult from the engine

    Returns:
        QualityScore with the penalty breakdown
    """
    counts = result.metrics.issues

    error_penalty = counts.errors * ERROR_PENALTY
    warning_penalty = counts.warnings * WARNING_PENALTY
    suggestion_penalty = counts.suggestions * SUGGESTION_PENALTY
    complexity_penalty = max(0.0, result.metrics.complexity - COMPLEXITY_ALLOWANCE) * COMPLEXITY_PENALTY

    total = 100 - error_penalty - warning_penalty - suggestion_penalty - complexity_penalty
    total = max(0.0, min(100.0, total))

    if total >= 80:
        level = "excellent"
    elif total >= 60:
        level = "good"
    elif total >= 40:
        level = "fair"
    else:
        level = "poor"

    return QualityScore(
        total=round(total, 2),
        level=level,
        error_penalty=error_penalty,
        warning_penalty=warning_penalty,
        suggestion_penalty=suggestion_penalty,
        complexity_penalty=round(complexity_penalty, 2),
    )


def explain_score(score: QualityScore) -> str:
    """
    Generate human-readable explanation of a quality score.

    Args:
        score: Calculated QualityScore

    Returns:
        Explanation text
    """
    parts = [
        f"Overall Quality: {score.level.upper()} ({score.total:.1f}/100)",
        "",
        "Penalties:",
        f"- Errors: -{score.error_penalty:.1f}",
        f"- Warnings: -{score.warning_penalty:.1f}",
        f"- Suggestions: -{score.suggestion_penalty:.1f}",
        f"- Complexity: -{score.complexity_penalty:.1f}",
    ]
    return "\n".join(parts)
