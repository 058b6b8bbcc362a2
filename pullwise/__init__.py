"""
Pullwise: diff-based static analysis for pull requests.
"""

__version__ = "1.0.0"
