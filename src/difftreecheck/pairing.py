"""Turn a first-parent commit listing into the pairs to diff."""

from typing import List, NamedTuple, Sequence

from .errors import InsufficientHistoryError


class CommitPair(NamedTuple):
    """Two consecutive first-parent commits, ``older`` being the parent."""

    older: str
    newer: str

    def __str__(self) -> str:
        return f"{self.older} {self.newer}"


def pair_commits(commits: Sequence[str]) -> List[CommitPair]:
    """Pair consecutive commits of a newest-first listing, oldest pair first.

    ``["h4", "h3", "h2", "h1"]`` yields ``[("h1", "h2"), ("h2", "h3"), ("h3", "h4")]``.
    """
    if len(commits) < 2:
        raise InsufficientHistoryError(len(commits))

    return [
        CommitPair(older=commits[i + 1], newer=commits[i])
        for i in range(len(commits) - 2, -1, -1)
    ]
