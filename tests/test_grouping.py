"""Tests for change kind inference, grouping and PR-level heuristics."""

import pytest

from conftest import make_file
from pullwise.analysis.grouping import (
    SUMMARY_FILE,
    ChangeGrouper,
    ChangeKind,
    ChangeStats,
    infer_change_kinds,
    pull_request_issues,
)
from pullwise.schemas import CommitSummary, FileStatus, IssueSeverity, IssueType


def _commits(*messages):
    return [CommitSummary(message=m) for m in messages]


@pytest.fixture
def grouper():
    return ChangeGrouper(directory_threshold=5, test_markers=["test", "spec"])


class TestInferChangeKinds:

    def test_conventional_prefix(self):
        assert infer_change_kinds(_commits("feat(ui): add button")) == [ChangeKind.FEATURE]

    def test_conventional_prefix_wins_over_keywords(self):
        assert infer_change_kinds(_commits("fix: add missing guard")) == [ChangeKind.FIX]

    def test_keyword_fallback(self):
        assert infer_change_kinds(_commits("Fix crash on startup")) == [ChangeKind.FIX]
        assert infer_change_kinds(_commits("add new docs page")) == [
            ChangeKind.FEATURE,
            ChangeKind.DOCS,
        ]

    def test_unique_in_first_seen_order(self):
        kinds = infer_change_kinds(_commits(
            "refactor: split module",
            "feat: export helper",
            "refactor: rename",
        ))

        assert kinds == [ChangeKind.REFACTOR, ChangeKind.FEATURE]

    def test_unrecognized_and_empty_messages(self):
        assert infer_change_kinds(_commits("bump version", "")) == []
        assert infer_change_kinds([CommitSummary(message=None)]) == []


class TestChangeGrouper:

    def test_groups(self, grouper):
        files = [
            make_file("src/a.py", status=FileStatus.ADDED),
            make_file("src/b.py", status=FileStatus.REMOVED),
            make_file("README.md"),
        ]

        groups = grouper.group(files)

        assert [g.name for g in groups] == ["addition", "removal", "directory:src"]
        assert [f.path for f in groups[2].files] == ["src/a.py", "src/b.py"]

    def test_single_file_directory_is_not_a_group(self, grouper):
        assert grouper.group([make_file("lib/x.py"), make_file("src/y.py")]) == []

    def test_directory_over_threshold_warns_once(self, grouper):
        files = [make_file(f"src/m{i}.py") for i in range(6)]
        files += [make_file(f"lib/m{i}.py") for i in range(6)]

        issues = grouper.summarize(grouper.group(files), files, [])

        assert len(issues) == 1
        assert issues[0].type == IssueType.WARNING
        assert issues[0].severity == IssueSeverity.MEDIUM
        assert issues[0].file == SUMMARY_FILE
        assert issues[0].message == "Large number of files changed in a single directory"

    def test_directory_at_threshold(self, grouper):
        files = [make_file(f"src/m{i}.py") for i in range(5)]

        assert grouper.summarize(grouper.group(files), files, []) == []

    def test_feature_without_tests(self, grouper):
        files = [make_file("src/login.py")]

        issues = grouper.summarize(grouper.group(files), files, [ChangeKind.FEATURE])

        assert [i.message for i in issues] == ["New feature added without tests"]
        assert issues[0].type == IssueType.SUGGESTION

    def test_feature_with_tests(self, grouper):
        files = [make_file("src/login.py"), make_file("tests/test_login.py")]

        assert grouper.summarize(grouper.group(files), files, [ChangeKind.FEATURE]) == []


class TestPullRequestIssues:

    def test_small_change_has_no_issues(self):
        stats = ChangeStats(added_lines=10, removed_lines=2, file_count=2)

        assert pull_request_issues(stats, [], many_files_threshold=10, large_change_lines=500) == []

    def test_many_files(self):
        stats = ChangeStats(file_count=11)

        issues = pull_request_issues(stats, [], many_files_threshold=10, large_change_lines=500)

        assert [i.message for i in issues] == ["Large number of files modified"]
        assert issues[0].type == IssueType.SUGGESTION

    def test_large_change_set(self):
        stats = ChangeStats(added_lines=400, removed_lines=101, file_count=1)

        issues = pull_request_issues(stats, [], many_files_threshold=10, large_change_lines=500)

        assert [i.message for i in issues] == ["Large change set"]
        assert issues[0].type == IssueType.WARNING

    def test_undescribed_refactor(self):
        issues = pull_request_issues(ChangeStats(), [ChangeKind.REFACTOR], description="Tidy up")

        assert len(issues) == 1
        assert issues[0].file == "PR description"
        assert issues[0].severity == IssueSeverity.LOW

    def test_described_refactor(self):
        issues = pull_request_issues(
            ChangeStats(),
            [ChangeKind.REFACTOR],
            description="Refactors the session handling",
        )

        assert issues == []
