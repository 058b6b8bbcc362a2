"""
Data models shared by the analysis engine and its callers.

These Pydantic models define the input a provider client hands to the engine
(file changes and commit summaries) and the result contract consumed by the
persistence layer and the dashboard.
"""

from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileStatus(str, Enum):
    """Status of a file in a pull request."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


class IssueType(str, Enum):
    """Kind of finding."""
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class IssueSeverity(str, Enum):
    """Severity of a finding."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FileChange(BaseModel):
    """A single changed file as reported by the hosting provider."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Path of the file after the change")
    status: FileStatus = Field(default=FileStatus.MODIFIED)
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changes: int = Field(default=0, ge=0)
    content: str = Field(
        default="",
        description="Diff text for the file, lines prefixed with '+', '-' or ' '",
    )
    previous_path: Optional[str] = Field(default=None)

    @field_validator("content", mode="before")
    @classmethod
    def coerce_missing_content(cls, v):
        """Providers omit the patch for binary or oversized files."""
        if v is None:
            return ""
        return v


class CommitSummary(BaseModel):
    """Commit metadata used to infer the kind of change."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(default="")
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    sha: Optional[str] = Field(default=None)

    @field_validator("message", mode="before")
    @classmethod
    def coerce_missing_message(cls, v):
        if v is None:
            return ""
        return v


class Issue(BaseModel):
    """
    A single finding produced by a detector.

    ``line`` is the 1-based position of the triggering line inside the
    supplied diff text. It is not reconstructed from hunk headers, so it is
    an index into the patch and not a line number in the real file.
    Summary-level issues use line 1.
    """

    model_config = ConfigDict(frozen=True)

    type: IssueType
    severity: IssueSeverity
    file: str
    line: int = Field(..., ge=1)
    message: str
    suggestion: Optional[str] = None


class IssueCounts(BaseModel):
    """Issue totals by type."""

    model_config = ConfigDict(frozen=True)

    errors: int = 0
    warnings: int = 0
    suggestions: int = 0


class AnalysisMetrics(BaseModel):
    """Aggregate metrics for one analysis."""

    model_config = ConfigDict(frozen=True)

    complexity: float = Field(default=0.0, description="Sum of file impact scores")
    coverage: int = Field(
        default=100,
        description="100 minus 5 per issue; intentionally not clamped at zero",
    )
    duplications: int = Field(default=0, description="min(100, 20 per file)")
    issues: IssueCounts = Field(default_factory=IssueCounts)


class AnalysisResult(BaseModel):
    """
    Complete output of the diff analysis engine.

    Immutable all the way down: cached results are shared between callers.
    """

    model_config = ConfigDict(frozen=True)

    issues: Tuple[Issue, ...] = Field(default=())
    metrics: AnalysisMetrics = Field(default_factory=AnalysisMetrics)

    def get_issues_by_type(self, issue_type: IssueType) -> List[Issue]:
        """Filter issues by type."""
        return [issue for issue in self.issues if issue.type == issue_type]
