"""
Duplication detector module.

Finds repeated blocks of added code by hashing a sliding window of
consecutive added lines. Matching is exact after trimming whitespace; there
is no fuzzy or normalized comparison.
"""

import hashlib
import logging
from typing import Dict, List, Optional

from pullwise.analysis.diff_parser import ClassifiedLine, LineRole
from pullwise.config import settings
from pullwise.schemas import Issue, IssueSeverity, IssueType

logger = logging.getLogger(__name__)


class DuplicationDetector:
    """
    Sliding-window duplicate block detector.

    Each window of ``window`` consecutive non-blank added lines is digested
    and its starting position recorded. A window whose digest was last seen
    more than ``min_distance`` positions earlier is reported; overlapping or
    adjacent repeats are not.
    """

    def __init__(
        self,
        window: Optional[int] = None,
        min_distance: Optional[int] = None,
    ):
        self.window = settings.DUPLICATION_WINDOW if window is None else window
        self.min_distance = (
            settings.DUPLICATION_MIN_DISTANCE if min_distance is None else min_distance
        )

    @staticmethod
    def digest(block: str) -> str:
        """Short deterministic digest of a block of code."""
        return hashlib.sha256(block.encode("utf-8")).hexdigest()[:16]

    def detect(self, lines: List[ClassifiedLine], path: str) -> List[Issue]:
        """
        Detect duplicated blocks in the added lines of a file.

        Args:
            lines: Classified patch lines for one file
            path: File path

        Returns:
            List[Issue]: One suggestion per repeated block occurrence
        """
        added = [
            (line, line.content.strip())
            for line in lines
            if line.role == LineRole.ADDED and line.content.strip()
        ]

        issues = []
        seen: Dict[str, List[int]] = {}

        for start in range(len(added) - self.window + 1):
            block = "\n".join(text for _, text in added[start:start + self.window])
            key = self.digest(block)

            occurrences = seen.setdefault(key, [])
            if occurrences and start - occurrences[-1] > self.min_distance:
                first_line = added[start][0]
                issues.append(Issue(
                    type=IssueType.SUGGESTION,
                    severity=IssueSeverity.MEDIUM,
                    file=path,
                    line=first_line.diff_line_index,
                    message="Potential code duplication detected",
                    suggestion="Consider extracting this code into a reusable function or utility",
                ))
            occurrences.append(start)

        if issues:
            logger.debug(
                "Duplicate blocks found",
                extra={"path": path, "duplicates": len(issues)},
            )

        return issues
