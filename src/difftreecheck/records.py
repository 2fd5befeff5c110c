"""Canonical per-pair diff record shared by both backends."""

from dataclasses import dataclass, field
from typing import List, Tuple

from .pairing import CommitPair


@dataclass
class DiffRecord:
    """Name-status lines for one commit pair, in ``"<status>\\t<path>"`` form."""

    older: str
    newer: str
    lines: List[str] = field(default_factory=list)

    @property
    def pair(self) -> CommitPair:
        return CommitPair(self.older, self.newer)

    def sorted_lines(self) -> List[str]:
        return sorted(self.lines)

    def key(self) -> Tuple[str, str, Tuple[str, ...]]:
        """Order-insensitive identity used for equality checks."""
        return (self.older, self.newer, tuple(self.sorted_lines()))

    def __str__(self) -> str:
        prefix = f"{self.older} {self.newer} "
        return "".join(f"{prefix}{line}\n" for line in self.lines)
