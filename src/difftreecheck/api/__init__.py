"""HTTP API for running diff-tree comparisons."""

from .. import __version__

__all__ = ["__version__"]
