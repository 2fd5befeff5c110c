"""Order-insensitive comparison of two backends' diff records."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

from .normalize import display_path
from .records import DiffRecord

logger = logging.getLogger(__name__)

SEPARATOR = "=================================="


def records_equal(a: DiffRecord, b: DiffRecord) -> bool:
    """Field-by-field equality: endpoints, then lines regardless of order."""
    return a.older == b.older and a.newer == b.newer and a.sorted_lines() == b.sorted_lines()


def _multiset_difference(a: Sequence[str], b: Sequence[str]) -> List[str]:
    return sorted((Counter(a) - Counter(b)).elements())


@dataclass
class Divergence:
    """One position where the two backends disagree."""

    index: int
    reference: DiffRecord
    library: DiffRecord

    @property
    def only_in_reference(self) -> List[str]:
        return _multiset_difference(self.reference.lines, self.library.lines)

    @property
    def only_in_library(self) -> List[str]:
        return _multiset_difference(self.library.lines, self.reference.lines)

    def format(self, reference_name: str = "git", library_name: str = "dulwich") -> str:
        reference = DiffRecord(self.reference.older, self.reference.newer, self.reference.sorted_lines())
        library = DiffRecord(self.library.older, self.library.newer, self.library.sorted_lines())
        parts = [
            SEPARATOR,
            f"{reference_name.upper()}:",
            str(reference).rstrip("\n"),
            f"{library_name.upper()}:",
            str(library).rstrip("\n"),
        ]
        if self.reference.pair != self.library.pair:
            parts.append(
                f"endpoints differ: {reference_name}=({self.reference.pair}) "
                f"{library_name}=({self.library.pair})"
            )
        for name, lines in (
            (reference_name, self.only_in_reference),
            (library_name, self.only_in_library),
        ):
            for line in lines:
                parts.append(f"only in {name}: {_describe(line)}")
        parts.append(SEPARATOR)
        return "\n".join(p for p in parts if p) + "\n"


def _describe(line: str) -> str:
    status, _, path = line.partition("\t")
    if path.startswith('"'):
        return f"{line} ({status} {display_path(path)})"
    return line


@dataclass
class ComparisonResult:
    """Outcome of comparing two record sequences."""

    passed: bool
    reason: str = ""
    divergences: List[Divergence] = field(default_factory=list)
    compared: int = 0

    def report(self, reference_name: str = "git", library_name: str = "dulwich") -> str:
        """Text report: the reason, then every divergent pair side by side."""
        chunks = [self.reason] if self.reason else []
        chunks.extend(d.format(reference_name, library_name) for d in self.divergences)
        return "\n".join(chunks)


def compare_records(
    reference: Sequence[DiffRecord],
    library: Sequence[DiffRecord],
) -> ComparisonResult:
    """Compare position-aligned records, collecting every divergent pair."""
    if len(reference) != len(library):
        reason = f"different lengths ({len(reference)}, {len(library)})"
        logger.warning("Record sequences differ in length", extra={"reason": reason})
        return ComparisonResult(passed=False, reason=reason)

    divergences = [
        Divergence(index=i, reference=a, library=b)
        for i, (a, b) in enumerate(zip(reference, library))
        if not records_equal(a, b)
    ]
    if divergences:
        logger.info(
            "Backends diverged",
            extra={"divergent_pairs": len(divergences), "pairs": len(reference)},
        )
        reason = f"{len(divergences)} of {len(reference)} pairs differ"
    else:
        reason = ""
    return ComparisonResult(
        passed=not divergences,
        reason=reason,
        divergences=divergences,
        compared=len(reference),
    )
