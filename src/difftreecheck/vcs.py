"""Reference backend: name-status tree diffs computed by the git CLI."""

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import GIT_CONFIG_LOCKS, HarnessConfig
from .errors import (
    BackendInvocationError,
    CommandTimeoutError,
    EmptyRepositoryError,
    GitVersionUnsupportedError,
)
from .pairing import CommitPair

logger = logging.getLogger(__name__)

# diff-tree learned --end-of-options in 2.24
MINIMUM_GIT_VERSION = (2, 24)

ProgressCallback = Callable[[int], None]


@dataclass
class RawDiff:
    """Unparsed ``git diff-tree --name-status`` output for one pair."""

    pair: CommitPair
    lines: List[str] = field(default_factory=list)


def git_version(timeout: int = 10) -> str:
    """Return the installed git version, validating the minimum requirement."""
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        raise GitVersionUnsupportedError("unavailable") from e

    # Extract version number from "git version 2.34.1"
    match = re.search(r"git version (\d+)\.(\d+)(?:\.(\d+))?", result.stdout)
    if not match:
        raise GitVersionUnsupportedError("unknown")

    major, minor = int(match.group(1)), int(match.group(2))
    version_str = match.group(0).split()[-1]
    if (major, minor) < MINIMUM_GIT_VERSION:
        raise GitVersionUnsupportedError(version_str)
    return version_str


def split_output(stdout: str) -> List[str]:
    """Split command output into lines, dropping empty ones."""
    return [line for line in stdout.split("\n") if line]


class GitBackend:
    """Runs git in a repository and collects raw name-status lines."""

    name = "git"

    def __init__(self, path: Path, config: HarnessConfig):
        """Initialize with the repository root and configuration."""
        self.path = Path(path)
        self.config = config

    def _run_git(
        self,
        args: List[str],
        pair: Optional[CommitPair] = None,
    ) -> subprocess.CompletedProcess:
        """Run git command with proper environment and error handling."""
        # Enforce deterministic git behavior across platforms
        cmd = ["git"]
        for key, value in GIT_CONFIG_LOCKS:
            cmd += ["-c", f"{key}={value}"]
        cmd += args
        try:
            return subprocess.run(
                cmd,
                cwd=self.path,
                env=self.config.git_env,
                timeout=self.config.git_timeout,
                check=True,
                capture_output=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(f"git {args[0]}", self.config.git_timeout) from e
        except subprocess.CalledProcessError as e:
            raise BackendInvocationError(args, e.stderr or str(e), pair=pair) from e
        except OSError as e:
            raise BackendInvocationError(args, str(e), pair=pair) from e

    def list_commits(self) -> List[str]:
        """Return the first-parent history from HEAD, newest first."""
        result = self._run_git(["rev-list", "--first-parent", "HEAD"])
        commits = split_output(result.stdout)
        if len(commits) < 2:
            raise EmptyRepositoryError(len(commits))
        return commits

    def resolve_commit(self, commit: str) -> str:
        """Expand a possibly abbreviated commit id to the full object id."""
        # ids are validated as hex by HarnessConfig, so none can start with "-"
        result = self._run_git(["rev-parse", "--verify", f"{commit}^{{commit}}"])
        return result.stdout.strip()

    def diff_pair(self, pair: CommitPair) -> RawDiff:
        """Return the name-status lines between the two commits of ``pair``."""
        result = self._run_git(
            [
                "diff-tree",
                "--name-status",
                "-r",
                "--no-renames",
                "--end-of-options",
                pair.older,
                pair.newer,
            ],
            pair=pair,
        )
        return RawDiff(pair=pair, lines=split_output(result.stdout))

    def diff_pairs(
        self,
        pairs: Sequence[CommitPair],
        progress: Optional[ProgressCallback] = None,
    ) -> List[RawDiff]:
        """Diff every pair in order; ``progress`` is called with each index."""
        diffs = []
        for i, pair in enumerate(pairs):
            if progress:
                progress(i)
            logger.debug("diff-tree", extra={"older": pair.older, "newer": pair.newer})
            diffs.append(self.diff_pair(pair))
        return diffs
