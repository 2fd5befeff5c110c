"""Service layer for the diff-tree harness API."""

from .compare import CompareService

__all__ = ["CompareService"]
