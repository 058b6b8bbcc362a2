"""
File impact scoring.

Weights how much each file's change should count toward the overall change
magnitude. Tests, stylesheets and documentation weigh less than code.
"""

import logging
from typing import Optional, Sequence

from pullwise.config import settings
from pullwise.schemas import FileChange

logger = logging.getLogger(__name__)


class FileImpactScorer:
    """
    Scores a file as (additions + deletions) / 10 times its category weights.

    Categories are not exclusive: a markdown file under a test directory
    gets both the test and the documentation weight. Each file is capped
    before scores are summed.
    """

    STYLE_EXTENSIONS = (".css", ".scss")
    DOC_EXTENSIONS = (".md",)
    DOC_PATH_MARKERS = ("docs",)

    def __init__(
        self,
        test_weight: Optional[float] = None,
        style_weight: Optional[float] = None,
        doc_weight: Optional[float] = None,
        max_impact: Optional[float] = None,
        test_markers: Optional[Sequence[str]] = None,
    ):
        self.test_weight = settings.TEST_FILE_WEIGHT if test_weight is None else test_weight
        self.style_weight = settings.STYLE_FILE_WEIGHT if style_weight is None else style_weight
        self.doc_weight = settings.DOC_FILE_WEIGHT if doc_weight is None else doc_weight
        self.max_impact = settings.MAX_FILE_IMPACT if max_impact is None else max_impact
        self.test_markers = tuple(
            settings.TEST_PATH_MARKERS if test_markers is None else test_markers
        )

    def is_test_file(self, path: str) -> bool:
        return any(marker in path for marker in self.test_markers)

    def is_style_file(self, path: str) -> bool:
        return path.endswith(self.STYLE_EXTENSIONS)

    def is_doc_file(self, path: str) -> bool:
        return (
            any(marker in path for marker in self.DOC_PATH_MARKERS)
            or path.endswith(self.DOC_EXTENSIONS)
        )

    def score(self, file: FileChange) -> float:
        """
        Impact score for a single file.

        Args:
            file: Changed file

        Returns:
            float: Weighted score, at most max_impact
        """
        impact = (file.additions + file.deletions) / 10

        if self.is_test_file(file.path):
            impact *= self.test_weight
        if self.is_style_file(file.path):
            impact *= self.style_weight
        if self.is_doc_file(file.path):
            impact *= self.doc_weight

        return min(self.max_impact, impact)
