"""
Operations package for template manipulation.

This package contains classes that handle bulk operations on templates,
kept apart from the template classes themselves.
"""

from .batch import BatchOperations

__all__ = [
    "BatchOperations",
]
