"""
Complexity analyzer module.

Approximates cyclomatic complexity of newly added code:
- Counts decision points per added line
- Classifies the total into a severity band
- Reports high and critical bands as file-level issues

This is a count-based proxy restricted to added lines, not a control-flow
graph computation over whole functions.
"""

import re
import logging
from typing import List, Optional
from dataclasses import dataclass
from enum import Enum

from pullwise.analysis.diff_parser import ClassifiedLine, LineRole
from pullwise.config import settings
from pullwise.schemas import Issue, IssueSeverity, IssueType

logger = logging.getLogger(__name__)


class ComplexityBand(Enum):
    """Complexity severity bands."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ComplexityScore:
    """Complexity of the added lines of one file."""
    value: int
    band: ComplexityBand


class ComplexityAnalyzer:
    """
    Heuristic cyclomatic complexity over added lines.

    Starts at 1 for the base path and adds one per branch, loop, catch,
    ternary and short-circuit operator occurrence.
    """

    # Each occurrence adds one. "else if (" also matches the plain "if (" pattern.
    DECISION_PATTERNS = [
        re.compile(r'\bif\s*\('),
        re.compile(r'\belse\s+if\s*\('),
        re.compile(r'\bswitch\s*\('),
        re.compile(r'\bcase\s+'),
        re.compile(r'\bfor\s*\('),
        re.compile(r'\bwhile\s*\('),
        re.compile(r'\bdo\s*\{'),
        re.compile(r'\bcatch\s*\('),
        re.compile(r'\?[^:]*:'),
        re.compile(r'&&'),
        re.compile(r'\|\|'),
    ]

    def __init__(
        self,
        low_max: Optional[int] = None,
        medium_max: Optional[int] = None,
        high_max: Optional[int] = None,
    ):
        """
        Initialize complexity analyzer.

        Args:
            low_max: Highest score in the low band (uses config default if None)
            medium_max: Highest score in the medium band
            high_max: Highest score in the high band; anything above is critical
        """
        self.low_max = settings.COMPLEXITY_LOW_MAX if low_max is None else low_max
        self.medium_max = settings.COMPLEXITY_MEDIUM_MAX if medium_max is None else medium_max
        self.high_max = settings.COMPLEXITY_HIGH_MAX if high_max is None else high_max

    def measure(self, lines: List[ClassifiedLine]) -> ComplexityScore:
        """
        Compute the complexity score of a classified patch.

        Args:
            lines: Classified patch lines for one file

        Returns:
            ComplexityScore: Score and band
        """
        complexity = 1
        for line in lines:
            if line.role != LineRole.ADDED:
                continue
            complexity += self.count_decision_points(line.content)

        return ComplexityScore(value=complexity, band=self.classify(complexity))

    def count_decision_points(self, code: str) -> int:
        """Count decision points on a single line of code."""
        return sum(len(pattern.findall(code)) for pattern in self.DECISION_PATTERNS)

    def classify(self, complexity: int) -> ComplexityBand:
        """Map a complexity score to its band."""
        if complexity <= self.low_max:
            return ComplexityBand.LOW
        elif complexity <= self.medium_max:
            return ComplexityBand.MEDIUM
        elif complexity <= self.high_max:
            return ComplexityBand.HIGH
        return ComplexityBand.CRITICAL

    def analyze(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        """
        Report high or critical complexity as a single file-level issue.

        Args:
            lines: Classified patch lines for one file
            path: File path

        Returns:
            List[Issue]: Zero or one issue
        """
        score = self.measure(lines)

        if score.band not in (ComplexityBand.HIGH, ComplexityBand.CRITICAL):
            return []

        critical = score.band == ComplexityBand.CRITICAL
        logger.debug(
            "High complexity in added code",
            extra={"path": path, "complexity": score.value, "band": score.band.value},
        )

        return [Issue(
            type=IssueType.ERROR if critical else IssueType.WARNING,
            severity=IssueSeverity.HIGH if critical else IssueSeverity.MEDIUM,
            file=path,
            line=1,
            message=f"High cyclomatic complexity detected ({score.value})",
            suggestion="Break down complex logic into smaller functions for better maintainability and testability",
        )]
