"""
Pattern issue detectors.

Detects issues in newly added code using lexical rule tables:
- Security patterns (secrets, injection, XSS, weak crypto, ...)
- Performance patterns (nested iteration, timers, serialization cycles, ...)
- Change heuristics (API integrations, state management, large functions)
- Breaking changes, inferred from removed declaration lines

Matching is purely textual. False positives and negatives are accepted in
exchange for running uniformly over any text-based source language.
"""

import logging
from typing import List, Optional, Sequence

from pullwise.analysis.diff_parser import ClassifiedLine, LineRole
from pullwise.analysis.rules import (
    BREAKING_CHANGE_MARKERS,
    CHANGE_RULES,
    FUNCTION_START_PATTERN,
    IMPORT_LINE_PATTERN,
    PERFORMANCE_RULES,
    SECURITY_RULES,
    Rule,
)
from pullwise.config import settings
from pullwise.schemas import Issue, IssueSeverity, IssueType

logger = logging.getLogger(__name__)


class PatternDetector:
    """
    Runs an ordered rule table over the added lines of a file.

    Every rule is tested against every added line and every match emits one
    issue, so a single line can produce several issues.
    """

    name = "pattern"

    def __init__(self, rules: Sequence[Rule]):
        """
        Initialize detector.

        Args:
            rules: Ordered rule table
        """
        self.rules = tuple(rules)

    def detect(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        """
        Detect issues in a classified patch.

        Args:
            lines: Classified patch lines for one file
            path: File path reported on each issue

        Returns:
            List[Issue]: Issues in line order, rule order within a line
        """
        issues = []
        for line in lines:
            if line.role != LineRole.ADDED:
                continue
            issues.extend(self._match_line(line, path))

        if issues:
            logger.debug(
                f"{self.name} detector matched",
                extra={"path": path, "issue_count": len(issues)},
            )
        return issues

    def _match_line(self, line: ClassifiedLine, path: str) -> List[Issue]:
        return [
            self._issue_for(rule, line, path)
            for rule in self.rules
            if rule.matches(line.content)
        ]

    @staticmethod
    def _issue_for(rule: Rule, line: ClassifiedLine, path: str) -> Issue:
        return Issue(
            type=rule.issue_type,
            severity=rule.severity,
            file=path,
            line=line.diff_line_index,
            message=rule.message,
            suggestion=rule.suggestion,
        )


class SecurityDetector(PatternDetector):
    """Flags secrets, injection shapes and unsafe primitives as high-severity errors."""

    name = "security"

    def __init__(self, rules: Sequence[Rule] = SECURITY_RULES):
        super().__init__(rules)


class PerformanceDetector(PatternDetector):
    """Flags performance anti-patterns and excessive import fan-in."""

    name = "performance"

    def __init__(
        self,
        rules: Sequence[Rule] = PERFORMANCE_RULES,
        import_threshold: Optional[int] = None,
    ):
        super().__init__(rules)
        if import_threshold is None:
            import_threshold = settings.IMPORT_FAN_IN_THRESHOLD
        self.import_threshold = import_threshold

    def detect(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        issues = super().detect(lines, path)

        fan_in = self._check_import_fan_in(lines, path)
        if fan_in:
            issues.append(fan_in)

        return issues

    def _check_import_fan_in(
        self,
        lines: List[ClassifiedLine],
        path: str,
    ) -> Optional[Issue]:
        """Emit one issue at the import that reaches the threshold."""
        count = 0
        for line in lines:
            if line.role != LineRole.ADDED:
                continue
            if IMPORT_LINE_PATTERN.match(line.content):
                count += 1
                if count == self.import_threshold:
                    return Issue(
                        type=IssueType.SUGGESTION,
                        severity=IssueSeverity.MEDIUM,
                        file=path,
                        line=line.diff_line_index,
                        message="Many imports detected - potential bundle size issue",
                        suggestion="Consider code splitting or lazy loading for rarely used imports",
                    )
        return None


class ChangeHeuristicsDetector(PatternDetector):
    """
    Highlights changes that deserve reviewer attention.

    Besides the change rule table, tracks braces from a function opener to
    report functions longer than the configured limit.
    """

    name = "change"

    def __init__(
        self,
        rules: Sequence[Rule] = CHANGE_RULES,
        max_function_lines: Optional[int] = None,
    ):
        super().__init__(rules)
        if max_function_lines is None:
            max_function_lines = settings.LARGE_FUNCTION_LINES
        self.max_function_lines = max_function_lines

    def detect(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        issues = []
        in_function = False
        function_start = 0
        brace_depth = 0

        for line in lines:
            if line.role != LineRole.ADDED:
                continue
            code = line.content

            if not in_function and FUNCTION_START_PATTERN.search(code):
                in_function = True
                function_start = line.index
                brace_depth = 0

            if in_function:
                brace_depth += code.count("{") - code.count("}")
                if brace_depth <= 0:
                    in_function = False
                    if line.index - function_start > self.max_function_lines:
                        issues.append(Issue(
                            type=IssueType.SUGGESTION,
                            severity=IssueSeverity.MEDIUM,
                            file=path,
                            line=function_start + 1,
                            message="Large function added",
                            suggestion="Consider breaking down this function into smaller, more focused functions",
                        ))

            issues.extend(self._match_line(line, path))

        return issues


class BreakingChangeDetector:
    """
    Detects likely breaking API changes from removed lines.

    Reports at most one issue per file: removing a type, interface or class
    declaration, or a line touching props or required/optional markers.
    """

    name = "breaking_change"

    def __init__(self, markers: Sequence[str] = BREAKING_CHANGE_MARKERS):
        self.markers = tuple(markers)

    def detect(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        for line in lines:
            if line.role != LineRole.REMOVED:
                continue
            if any(marker in line.content for marker in self.markers):
                logger.debug(
                    "Breaking change marker removed",
                    extra={"path": path, "diff_line": line.diff_line_index},
                )
                return [Issue(
                    type=IssueType.WARNING,
                    severity=IssueSeverity.HIGH,
                    file=path,
                    line=1,
                    message="Potentially breaking changes detected",
                    suggestion="Consider updating version number and documenting breaking changes",
                )]
        return []
