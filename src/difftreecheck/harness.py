"""Orchestration of a full comparison run.

The run is strictly sequential so that the timing of each phase means
something: acquire the repository, run the git pass (history + one
``diff-tree`` per pair), run the dulwich pass over its own history
discovery (or the same override list), then compare the normalized
records position by position.
"""

import logging
import sys
import time
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, TextIO, Union

from .compare import ComparisonResult, compare_records
from .config import HarnessConfig
from .errors import HarnessError
from .library import DulwichBackend
from .normalize import normalize_library_all, normalize_reference_all
from .pairing import pair_commits
from .records import DiffRecord
from .vcs import GitBackend, git_version
from .workspace import RepositoryWorkspace

logger = logging.getLogger(__name__)

Backend = Union[GitBackend, DulwichBackend]


class DotProgress:
    """Prints one dot per ``batch`` processed pairs."""

    def __init__(self, batch: int, stream: Optional[TextIO] = None):
        self.batch = batch
        self.stream = stream or sys.stdout

    def __call__(self, index: int) -> None:
        if index % self.batch == 0:
            self.stream.write(".")
            self.stream.flush()

    def finish(self) -> None:
        self.stream.write("\n")
        self.stream.flush()


@dataclass
class PhaseStats:
    """Timing of one backend pass."""

    backend: str
    commits: int
    pairs: int
    used_override: bool
    list_seconds: float
    diff_seconds: float

    @property
    def pairs_per_second(self) -> float:
        if self.diff_seconds <= 0:
            return 0.0
        return self.pairs / self.diff_seconds

    def to_dict(self) -> dict:
        data = asdict(self)
        data["pairs_per_second"] = round(self.pairs_per_second, 2)
        data["list_seconds"] = round(self.list_seconds, 3)
        data["diff_seconds"] = round(self.diff_seconds, 3)
        return data


@dataclass
class BackendRun:
    records: List[DiffRecord]
    stats: PhaseStats


@dataclass
class HarnessResult:
    """Everything a run produced."""

    comparison: ComparisonResult
    reference: PhaseStats
    library: PhaseStats
    git_version: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.comparison.passed


def _run_pass(
    backend: Backend,
    config: HarnessConfig,
    normalize: Callable[[list], List[DiffRecord]],
    show_progress: bool,
) -> BackendRun:
    label = backend.name.upper()
    try:
        list_seconds = 0.0
        if config.commits_override:
            logger.info("%s: using internal list of commits", label)
            commits = list(config.commits_override)
        else:
            logger.info("%s: getting list of commits...", label)
            start = time.perf_counter()
            commits = backend.list_commits()
            list_seconds = time.perf_counter() - start
            logger.info("%s: took %.2f seconds", label, list_seconds)

        pairs = pair_commits(commits)
        logger.info("%s: number of difftree operations to perform: %d", label, len(pairs))

        logger.info("%s: calling difftree on all commits...", label)
        progress = DotProgress(config.progress_batch) if show_progress else None
        start = time.perf_counter()
        raw = backend.diff_pairs(pairs, progress=progress)
        records = normalize(raw)
        diff_seconds = time.perf_counter() - start
        if progress:
            progress.finish()
    except HarnessError as e:
        e.backend = backend.name
        e.details.setdefault("backend", backend.name)
        raise

    stats = PhaseStats(
        backend=backend.name,
        commits=len(commits),
        pairs=len(pairs),
        used_override=bool(config.commits_override),
        list_seconds=list_seconds,
        diff_seconds=diff_seconds,
    )
    logger.info("%s: took %.2f seconds", label, diff_seconds)
    logger.info("%s: difftree speed = %.2f diffs per second", label, stats.pairs_per_second)
    return BackendRun(records=records, stats=stats)


def run_reference_pass(path: Path, config: HarnessConfig, show_progress: bool = False) -> BackendRun:
    """History and name-status diffs from the git CLI."""
    return _run_pass(GitBackend(path, config), config, normalize_reference_all, show_progress)


def run_library_pass(path: Path, config: HarnessConfig, show_progress: bool = False) -> BackendRun:
    """History and tree diffs from dulwich."""
    try:
        backend = DulwichBackend(path)
    except HarnessError as e:
        e.backend = DulwichBackend.name
        raise
    with backend:
        return _run_pass(backend, config, normalize_library_all, show_progress)


def resolve_override(path: Path, config: HarnessConfig) -> HarnessConfig:
    """Return ``config`` with every pinned commit expanded to its full id.

    Both passes then key their records on the same endpoints, whatever
    abbreviation the caller used.
    """
    if not config.commits_override:
        return config

    backend = GitBackend(path, config)
    try:
        resolved = tuple(backend.resolve_commit(c) for c in config.commits_override)
    except HarnessError as e:
        e.backend = backend.name
        e.details.setdefault("backend", backend.name)
        raise

    logger.debug("Resolved pinned commits", extra={"commits": list(resolved)})
    return replace(config, commits_override=resolved)


def run_harness(config: HarnessConfig, show_progress: bool = False) -> HarnessResult:
    """Acquire the repository, run both passes and compare them."""
    with RepositoryWorkspace(config) as workspace:
        path = workspace.acquire()
        version = git_version()
        logger.info("Using git %s", version, extra={"repo": str(path)})
        config = resolve_override(path, config)

        reference = run_reference_pass(path, config, show_progress)
        library = run_library_pass(path, config, show_progress)

    comparison = compare_records(reference.records, library.records)
    logger.info(
        "Comparison finished",
        extra={"passed": comparison.passed, "pairs": len(reference.records)},
    )
    return HarnessResult(
        comparison=comparison,
        reference=reference.stats,
        library=library.stats,
        git_version=version,
    )
