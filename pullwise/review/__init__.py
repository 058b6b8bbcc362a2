"""
Review output module.

This module provides quality scoring of analysis results for the
dashboard and the history store.
"""

from pullwise.review.scorer import QualityScore, calculate_quality_score, explain_score

__all__ = [
    "QualityScore",
    "calculate_quality_score",
    "explain_score",
]
