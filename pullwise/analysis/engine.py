"""
Diff analysis engine.

Combines every detector into one AnalysisResult per (change, branch):
- Per-file detection over the classified patch
- Change grouping and PR-level heuristics over the whole file set
- Aggregate metrics
- Memoization until the caller invalidates the entry
"""

import logging
from typing import List, Optional, Sequence, Union

from pullwise.analysis.cache import AnalysisCache, CacheKey
from pullwise.analysis.complexity import ComplexityAnalyzer
from pullwise.analysis.detectors import (
    BreakingChangeDetector,
    ChangeHeuristicsDetector,
    PerformanceDetector,
    SecurityDetector,
)
from pullwise.analysis.diff_parser import DiffLineClassifier
from pullwise.analysis.duplication import DuplicationDetector
from pullwise.analysis.grouping import (
    ChangeGrouper,
    ChangeStats,
    infer_change_kinds,
    pull_request_issues,
)
from pullwise.analysis.impact import FileImpactScorer
from pullwise.config import Settings, settings as default_settings
from pullwise.observability.errors import capture_exception
from pullwise.observability.logging import LogContext
from pullwise.observability.metrics import MetricNames, MetricsCollector
from pullwise.schemas import (
    AnalysisMetrics,
    AnalysisResult,
    CommitSummary,
    FileChange,
    Issue,
    IssueCounts,
    IssueType,
)

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """
    Lexical static-analysis engine for pull request diffs.

    Synchronous and deterministic: the result depends only on the input
    files and commits. Instances may be shared across threads; the cache
    guarantees at most one computation per key.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[AnalysisCache] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize engine.

        Args:
            settings: Thresholds and weights (global settings if None)
            cache: Result cache (a private in-memory cache if None)
            metrics: Optional metrics collector
        """
        self.settings = settings or default_settings
        self.cache = cache if cache is not None else AnalysisCache()
        self.metrics = metrics

        s = self.settings
        self.classifier = DiffLineClassifier()
        self.breaking_detector = BreakingChangeDetector()
        self.change_detector = ChangeHeuristicsDetector(
            max_function_lines=s.LARGE_FUNCTION_LINES,
        )
        self.security_detector = SecurityDetector()
        self.performance_detector = PerformanceDetector(
            import_threshold=s.IMPORT_FAN_IN_THRESHOLD,
        )
        self.complexity_analyzer = ComplexityAnalyzer(
            low_max=s.COMPLEXITY_LOW_MAX,
            medium_max=s.COMPLEXITY_MEDIUM_MAX,
            high_max=s.COMPLEXITY_HIGH_MAX,
        )
        self.duplication_detector = DuplicationDetector(
            window=s.DUPLICATION_WINDOW,
            min_distance=s.DUPLICATION_MIN_DISTANCE,
        )
        self.grouper = ChangeGrouper(
            directory_threshold=s.DIRECTORY_FILE_THRESHOLD,
            test_markers=s.TEST_PATH_MARKERS,
        )
        self.impact_scorer = FileImpactScorer(
            test_weight=s.TEST_FILE_WEIGHT,
            style_weight=s.STYLE_FILE_WEIGHT,
            doc_weight=s.DOC_FILE_WEIGHT,
            max_impact=s.MAX_FILE_IMPACT,
            test_markers=s.TEST_PATH_MARKERS,
        )

    def analyze(
        self,
        change_key: str,
        branch: str,
        files: Sequence[FileChange],
        commits: Sequence[CommitSummary] = (),
        description: str = "",
    ) -> AnalysisResult:
        """
        Analyze a pull request, returning the cached result when present.

        Args:
            change_key: Pull request identifier
            branch: Head branch name
            files: Changed files with their patches
            commits: Commit summaries
            description: Pull request description

        Returns:
            AnalysisResult: Issues and metrics; the same instance on repeat calls
        """
        key = CacheKey(str(change_key), str(branch))

        cached = self.cache.get(key)
        if cached is not None:
            self._count(MetricNames.CACHE_HIT)
            logger.debug("Analysis cache hit", extra={"cache_key": str(key)})
            return cached

        def compute() -> AnalysisResult:
            self._count(MetricNames.CACHE_MISS)
            return self._run(key, files, commits, description)

        return self.cache.get_or_compute(key, compute)

    def clear_cache(self, key: Optional[Union[CacheKey, tuple]] = None) -> int:
        """
        Invalidate one cached result, or all of them.

        Args:
            key: (change_key, branch) pair; None clears everything

        Returns:
            int: Number of entries removed
        """
        if key is not None and not isinstance(key, CacheKey):
            key = CacheKey(*key)
        removed = self.cache.clear(key)
        self._count(MetricNames.CACHE_CLEARED, removed)
        return removed

    def clear_change(self, change_key: str) -> int:
        """Invalidate every branch cached for one change."""
        removed = self.cache.clear_change(str(change_key))
        self._count(MetricNames.CACHE_CLEARED, removed)
        return removed

    def _run(
        self,
        key: CacheKey,
        files: Sequence[FileChange],
        commits: Sequence[CommitSummary],
        description: str,
    ) -> AnalysisResult:
        with LogContext(change_key=key.change_key, branch=key.branch):
            self._count(MetricNames.ANALYSIS_STARTED)
            if self.metrics:
                with self.metrics.timer_context(MetricNames.ANALYSIS_DURATION_MS):
                    result = self._compute(files, commits, description)
            else:
                result = self._compute(files, commits, description)

            self._count(MetricNames.ANALYSIS_COMPLETED)
            self._count(MetricNames.ANALYSIS_ISSUES, len(result.issues))
            logger.info(
                "Analysis completed",
                extra={
                    "file_count": len(files),
                    "issue_count": len(result.issues),
                    "errors": result.metrics.issues.errors,
                    "warnings": result.metrics.issues.warnings,
                    "suggestions": result.metrics.issues.suggestions,
                },
            )
            return result

    def _compute(
        self,
        files: Sequence[FileChange],
        commits: Sequence[CommitSummary],
        description: str,
    ) -> AnalysisResult:
        issues: List[Issue] = []
        stats = ChangeStats(file_count=len(files))
        impact_total = 0.0

        kinds = infer_change_kinds(commits)

        for file in files:
            if not file.content:
                continue

            stats.added_lines += file.additions
            stats.removed_lines += file.deletions

            issues.extend(self.analyze_file(file))
            impact_total += self.impact_scorer.score(file)

        groups = self.grouper.group(files)
        issues.extend(self.grouper.summarize(groups, files, kinds))

        issues.extend(pull_request_issues(
            stats,
            kinds,
            description=description,
            many_files_threshold=self.settings.MANY_FILES_THRESHOLD,
            large_change_lines=self.settings.LARGE_CHANGE_LINES,
        ))

        return AnalysisResult(
            issues=issues,
            metrics=self.calculate_metrics(issues, len(files), impact_total),
        )

    def analyze_file(self, file: FileChange) -> List[Issue]:
        """
        Run every per-file detector over one file's patch.

        A detector failure is captured and the file contributes no issues.

        Args:
            file: Changed file

        Returns:
            List[Issue]: Issues in detector order
        """
        try:
            lines = self.classifier.classify(file.content)
            if not lines:
                return []

            issues: List[Issue] = []
            issues.extend(self.breaking_detector.detect(lines, file.path))
            issues.extend(self.change_detector.detect(lines, file.path))
            issues.extend(self.security_detector.detect(lines, file.path))
            issues.extend(self.performance_detector.detect(lines, file.path))
            issues.extend(self.complexity_analyzer.analyze(lines, file.path))
            issues.extend(self.duplication_detector.detect(lines, file.path))
            return issues
        except Exception as e:
            self._count(MetricNames.ANALYSIS_FILE_FAILED)
            capture_exception(e, context={"path": file.path})
            return []

    @staticmethod
    def calculate_metrics(
        issues: Sequence[Issue],
        file_count: int,
        impact_total: float,
    ) -> AnalysisMetrics:
        """
        Derive aggregate metrics.

        coverage is not clamped: more than 20 issues produce a negative value.
        """
        counts = IssueCounts(
            errors=sum(1 for i in issues if i.type == IssueType.ERROR),
            warnings=sum(1 for i in issues if i.type == IssueType.WARNING),
            suggestions=sum(1 for i in issues if i.type == IssueType.SUGGESTION),
        )
        return AnalysisMetrics(
            complexity=round(impact_total, 2),
            coverage=100 - 5 * len(issues),
            duplications=min(100, file_count * 20),
            issues=counts,
        )

    def _count(self, name: str, value: float = 1.0) -> None:
        if self.metrics:
            self.metrics.record_counter(name, value)
