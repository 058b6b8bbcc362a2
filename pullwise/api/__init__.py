"""
API package for Pullwise.

This package contains all API route handlers.
"""

from pullwise.api import analysis, health

__all__ = ["analysis", "health"]
