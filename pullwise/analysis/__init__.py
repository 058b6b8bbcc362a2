"""
Analysis package for Pullwise.

This package contains the diff-based static-analysis engine:
- Line classification of per-file patches
- Lexical security, performance and change detectors
- Complexity and duplication analysis
- Change grouping and file impact scoring
- The aggregating, caching engine
"""

from pullwise.analysis.cache import AnalysisCache, CacheKey
from pullwise.analysis.diff_parser import DiffLineClassifier
from pullwise.analysis.engine import AnalysisEngine

__all__ = ["AnalysisCache", "AnalysisEngine", "CacheKey", "DiffLineClassifier"]
