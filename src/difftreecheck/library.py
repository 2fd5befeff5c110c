"""Library backend: tree diffs computed in-process with dulwich."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from dulwich.diff_tree import TreeChange, tree_changes
from dulwich.errors import NotGitRepository
from dulwich.objects import Commit
from dulwich.objectspec import AmbiguousShortId, parse_commit
from dulwich.repo import Repo

from .errors import (
    EmptyRepositoryError,
    RepositoryNotFoundError,
    TreeDiffError,
    TreeResolutionError,
)
from .pairing import CommitPair
from .vcs import ProgressCallback

logger = logging.getLogger(__name__)


@dataclass
class LibraryDiff:
    """Typed dulwich changes for one pair."""

    pair: CommitPair
    changes: List[TreeChange] = field(default_factory=list)


class DulwichBackend:
    """Opens a repository with dulwich and diffs commit trees."""

    name = "dulwich"

    def __init__(self, path: Path):
        self.path = Path(path)
        try:
            self.repo = Repo(str(self.path))
        except NotGitRepository as e:
            raise RepositoryNotFoundError(str(self.path), str(e)) from e

    def close(self) -> None:
        self.repo.close()

    def __enter__(self) -> "DulwichBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _commit(self, sha: str) -> Commit:
        # parse_commit also expands abbreviated ids
        try:
            obj = parse_commit(self.repo, sha.encode("ascii"))
        except AmbiguousShortId as e:
            raise TreeResolutionError(sha, f"ambiguous short id ({len(e.options)} matches)") from e
        except (KeyError, UnicodeEncodeError) as e:
            raise TreeResolutionError(sha, f"object not found ({e})") from e
        except ValueError as e:
            # newer dulwich releases refuse non-commit objects themselves
            raise TreeResolutionError(sha, f"not a commit ({e})") from e
        if not isinstance(obj, Commit):
            raise TreeResolutionError(sha, f"object is a {obj.type_name.decode()}, not a commit")
        return obj

    def _first_parent(self, commit: Commit) -> Optional[Commit]:
        """Return the first parent, or None once the walk has to stop."""
        if not commit.parents:
            return None
        try:
            parent = self.repo[commit.parents[0]]
        except KeyError:
            logger.debug(
                "First parent not found, stopping walk",
                extra={"commit": commit.id.decode("ascii")},
            )
            return None
        return parent if isinstance(parent, Commit) else None

    def list_commits(self) -> List[str]:
        """Return the first-parent history from HEAD, newest first."""
        try:
            head = self.repo.head()
        except KeyError as e:
            raise EmptyRepositoryError(0) from e

        current: Optional[Commit] = self._commit(head.decode("ascii"))
        commits = []
        while current is not None:
            commits.append(current.id.decode("ascii"))
            current = self._first_parent(current)

        if len(commits) < 2:
            raise EmptyRepositoryError(len(commits))
        return commits

    def tree(self, sha: str) -> bytes:
        """Return the root tree id of commit ``sha``."""
        return self._commit(sha).tree

    def diff_pair(self, pair: CommitPair) -> LibraryDiff:
        """Return the dulwich changes between the two commits of ``pair``."""
        old_tree = self.tree(pair.older)
        new_tree = self.tree(pair.newer)
        try:
            # change_type_same keeps regular<->symlink as a single modify
            changes = list(
                tree_changes(self.repo.object_store, old_tree, new_tree, change_type_same=True)
            )
        except (KeyError, ValueError, TypeError) as e:
            raise TreeDiffError(pair, str(e)) from e
        return LibraryDiff(pair=pair, changes=changes)

    def diff_pairs(
        self,
        pairs: Sequence[CommitPair],
        progress: Optional[ProgressCallback] = None,
    ) -> List[LibraryDiff]:
        """Diff every pair in order; ``progress`` is called with each index."""
        diffs = []
        for i, pair in enumerate(pairs):
            if progress:
                progress(i)
            diffs.append(self.diff_pair(pair))
        return diffs
