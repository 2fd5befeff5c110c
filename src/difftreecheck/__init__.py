"""Differential tests for dulwich tree diffs.

Walks the first-parent history of a repository, diffs every consecutive
pair of commits with both ``git diff-tree`` and dulwich, and reports any
pair on which the two disagree.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
