"""
Diff line classifier.

Splits the per-file patch text supplied by the provider into:
- Added lines
- Removed lines
- Context lines

Hunk headers are not interpreted. Each line keeps its position inside the
patch text, and that position is what issues report as their line.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class LineRole(Enum):
    """Role of a line in a patch."""
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


@dataclass(frozen=True)
class ClassifiedLine:
    """A single patch line with its marker stripped."""
    index: int
    role: LineRole
    content: str

    @property
    def diff_line_index(self) -> int:
        """1-based position inside the patch text."""
        return self.index + 1


class DiffLineClassifier:
    """
    Classifies patch lines by their leading marker.

    Only a leading '+' makes a line "added" and only a leading '-' makes it
    "removed"; everything else, including hunk headers, is context.
    """

    ADDED_MARKER = "+"
    REMOVED_MARKER = "-"

    def classify(self, content: Optional[str]) -> List[ClassifiedLine]:
        """
        Classify every physical line of a patch.

        Args:
            content: Patch text for one file

        Returns:
            List[ClassifiedLine]: One entry per line, in text order
        """
        if not content or not isinstance(content, str):
            return []

        lines = []
        for index, raw in enumerate(content.split("\n")):
            if raw.startswith(self.ADDED_MARKER):
                lines.append(ClassifiedLine(index, LineRole.ADDED, raw[1:]))
            elif raw.startswith(self.REMOVED_MARKER):
                lines.append(ClassifiedLine(index, LineRole.REMOVED, raw[1:]))
            else:
                lines.append(ClassifiedLine(index, LineRole.CONTEXT, raw))

        logger.debug(
            "Classified patch lines",
            extra={
                "line_count": len(lines),
                "added": sum(1 for l in lines if l.role == LineRole.ADDED),
            }
        )

        return lines

    @staticmethod
    def added_lines(lines: List[ClassifiedLine]) -> List[ClassifiedLine]:
        """Get all added lines."""
        return [line for line in lines if line.role == LineRole.ADDED]

    @staticmethod
    def removed_lines(lines: List[ClassifiedLine]) -> List[ClassifiedLine]:
        """Get all removed lines."""
        return [line for line in lines if line.role == LineRole.REMOVED]
