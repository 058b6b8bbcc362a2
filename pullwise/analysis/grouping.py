"""
Change grouping module.

Looks at the pull request as a whole instead of file by file:
- Infers the kind of change from commit messages
- Partitions files into addition, removal and directory groups
- Derives summary issues (overly broad areas, features without tests)
- Applies PR-level size and description heuristics
"""

import re
import logging
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass, field
from enum import Enum

from pullwise.config import settings
from pullwise.schemas import (
    CommitSummary,
    FileChange,
    FileStatus,
    Issue,
    IssueSeverity,
    IssueType,
)

logger = logging.getLogger(__name__)

SUMMARY_FILE = "multiple files"


class ChangeKind(str, Enum):
    """Kind of change, following conventional commit types."""
    FEATURE = "feat"
    FIX = "fix"
    REFACTOR = "refactor"
    DOCS = "docs"
    STYLE = "style"
    TEST = "test"
    CHORE = "chore"
    PERF = "perf"


CONVENTIONAL_COMMIT_PATTERN = re.compile(
    r'^(feat|fix|refactor|docs|style|test|chore|perf)(\(.*?\))?:'
)

# Fallback substring hints, checked in order when no conventional prefix exists.
KEYWORD_HINTS = [
    (("fix", "bug"), ChangeKind.FIX),
    (("add", "new"), ChangeKind.FEATURE),
    (("refactor",), ChangeKind.REFACTOR),
    (("test",), ChangeKind.TEST),
    (("docs", "documentation"), ChangeKind.DOCS),
]


def infer_change_kinds(commits: Sequence[CommitSummary]) -> List[ChangeKind]:
    """
    Infer change kinds from commit messages.

    Conventional commit prefixes win; otherwise keyword hints apply.
    Messages that match neither contribute nothing.

    Args:
        commits: Commit summaries in PR order

    Returns:
        List[ChangeKind]: Unique kinds in first-seen order
    """
    kinds: List[ChangeKind] = []

    def add(kind: ChangeKind):
        if kind not in kinds:
            kinds.append(kind)

    for commit in commits:
        message = (commit.message or "").strip().lower()
        if not message:
            continue

        match = CONVENTIONAL_COMMIT_PATTERN.match(message)
        if match:
            add(ChangeKind(match.group(1)))
            continue

        for keywords, kind in KEYWORD_HINTS:
            if any(keyword in message for keyword in keywords):
                add(kind)

    return kinds


@dataclass
class ChangeGroup:
    """A named partition of changed files."""
    name: str
    description: str
    files: List[FileChange] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return self.name.startswith("directory:")


class ChangeGrouper:
    """
    Groups related file changes and derives summary issues.

    Groups are an intermediate product; only the issues derived from them
    reach the analysis result.
    """

    def __init__(
        self,
        directory_threshold: Optional[int] = None,
        test_markers: Optional[Sequence[str]] = None,
    ):
        """
        Initialize grouper.

        Args:
            directory_threshold: Files allowed in one directory group before warning
            test_markers: Path substrings that identify test files
        """
        if directory_threshold is None:
            directory_threshold = settings.DIRECTORY_FILE_THRESHOLD
        if test_markers is None:
            test_markers = settings.TEST_PATH_MARKERS
        self.directory_threshold = directory_threshold
        self.test_markers = tuple(test_markers)

    @staticmethod
    def top_level_directory(path: str) -> str:
        """First path segment; a root-level file is its own segment."""
        return path.split("/")[0]

    def group(self, files: Sequence[FileChange]) -> List[ChangeGroup]:
        """
        Partition files into groups.

        Args:
            files: All changed files

        Returns:
            List[ChangeGroup]: addition, removal, then directory groups
        """
        groups = []

        added = [f for f in files if f.status == FileStatus.ADDED]
        removed = [f for f in files if f.status == FileStatus.REMOVED]

        if added:
            groups.append(ChangeGroup("addition", "New files added", added))
        if removed:
            groups.append(ChangeGroup("removal", "Files removed", removed))

        by_directory: Dict[str, List[FileChange]] = {}
        for file in files:
            by_directory.setdefault(self.top_level_directory(file.path), []).append(file)

        for directory, dir_files in by_directory.items():
            if len(dir_files) > 1:
                groups.append(ChangeGroup(
                    f"directory:{directory}",
                    f"Changes in {directory} directory",
                    dir_files,
                ))

        return groups

    def is_test_path(self, path: str) -> bool:
        return any(marker in path for marker in self.test_markers)

    def summarize(
        self,
        groups: Sequence[ChangeGroup],
        files: Sequence[FileChange],
        kinds: Sequence[ChangeKind],
    ) -> List[Issue]:
        """
        Derive summary issues from groups and inferred change kinds.

        Args:
            groups: Output of group()
            files: All changed files
            kinds: Inferred change kinds

        Returns:
            List[Issue]: Summary issues
        """
        issues = []

        if any(g.is_directory and len(g.files) > self.directory_threshold for g in groups):
            issues.append(Issue(
                type=IssueType.WARNING,
                severity=IssueSeverity.MEDIUM,
                file=SUMMARY_FILE,
                line=1,
                message="Large number of files changed in a single directory",
                suggestion="Consider breaking down changes into smaller, focused PRs",
            ))

        has_tests = any(self.is_test_path(f.path) for f in files)
        if ChangeKind.FEATURE in kinds and not has_tests:
            issues.append(Issue(
                type=IssueType.SUGGESTION,
                severity=IssueSeverity.MEDIUM,
                file=SUMMARY_FILE,
                line=1,
                message="New feature added without tests",
                suggestion="Consider adding tests for the new feature",
            ))

        logger.debug(
            "Change groups summarized",
            extra={
                "groups": [g.name for g in groups],
                "kinds": [k.value for k in kinds],
                "summary_issues": len(issues),
            },
        )

        return issues


@dataclass
class ChangeStats:
    """Size of the analyzed part of a pull request."""
    added_lines: int = 0
    removed_lines: int = 0
    file_count: int = 0

    @property
    def total_lines(self) -> int:
        return self.added_lines + self.removed_lines


def pull_request_issues(
    stats: ChangeStats,
    kinds: Sequence[ChangeKind],
    description: str = "",
    many_files_threshold: Optional[int] = None,
    large_change_lines: Optional[int] = None,
) -> List[Issue]:
    """
    PR-level heuristics on overall size and description.

    Args:
        stats: Aggregate change statistics
        kinds: Inferred change kinds
        description: Pull request description
        many_files_threshold: File count above which splitting is suggested
        large_change_lines: Line count above which the change set is flagged

    Returns:
        List[Issue]: PR-level issues
    """
    if many_files_threshold is None:
        many_files_threshold = settings.MANY_FILES_THRESHOLD
    if large_change_lines is None:
        large_change_lines = settings.LARGE_CHANGE_LINES

    issues = []

    if stats.file_count > many_files_threshold:
        issues.append(Issue(
            type=IssueType.SUGGESTION,
            severity=IssueSeverity.MEDIUM,
            file=SUMMARY_FILE,
            line=1,
            message="Large number of files modified",
            suggestion="Consider breaking down the changes into multiple smaller PRs",
        ))

    if stats.total_lines > large_change_lines:
        issues.append(Issue(
            type=IssueType.WARNING,
            severity=IssueSeverity.MEDIUM,
            file=SUMMARY_FILE,
            line=1,
            message="Large change set",
            suggestion="Consider splitting the changes or providing more detailed documentation",
        ))

    if ChangeKind.REFACTOR in kinds and "refactor" not in (description or "").lower():
        issues.append(Issue(
            type=IssueType.SUGGESTION,
            severity=IssueSeverity.LOW,
            file="PR description",
            line=1,
            message="Refactoring changes present but not described in PR description",
            suggestion="Add context about the refactoring changes in the PR description",
        ))

    return issues
