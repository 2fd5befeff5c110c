"""Configuration management for the diff-tree harness."""

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

REMOTE_SCHEMES = ("http://", "https://", "git://")

# Abbreviated or full object ids; anything else could be read as a git option
COMMIT_PATTERN = re.compile(r"^[0-9a-f]{7,40}$")

# Passed as ``-c`` pairs to every git invocation; the repository's own
# .git/config is still read, so these must win over it
GIT_CONFIG_LOCKS = (
    ("core.autocrlf", "false"),
    ("core.quotepath", "true"),
    ("color.ui", "false"),
)


@dataclass(frozen=True)
class HarnessConfig:
    """Configuration for one comparison run."""

    # Local path or remote URL
    repo: str

    # Fixed commit list used by both backends instead of history discovery
    commits_override: Tuple[str, ...] = ()

    # One progress dot per batch of processed pairs
    progress_batch: int = 100

    # Per git invocation, in seconds
    git_timeout: int = 300

    # Output options
    json_output_path: Optional[str] = None

    # Workspace options
    keep_workdir: bool = False
    keep_on_error: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # Normalize lists passed by callers into an immutable tuple
        commits = tuple(c.strip().lower() for c in self.commits_override)
        object.__setattr__(self, "commits_override", commits)

        if len(commits) == 1:
            raise ValueError("commits_override needs at least 2 commits")
        if any(not c for c in commits):
            raise ValueError("commits_override cannot contain empty hashes")
        for commit in commits:
            if not COMMIT_PATTERN.match(commit):
                raise ValueError(f"commits_override entry is not a hex commit id: {commit!r}")
        if self.progress_batch <= 0:
            raise ValueError("progress_batch must be positive")
        if self.git_timeout <= 0:
            raise ValueError("git_timeout must be positive")

    @property
    def is_remote(self) -> bool:
        """Whether the repository has to be cloned first."""
        return self.repo.startswith(REMOTE_SCHEMES)

    @property
    def git_env(self) -> Dict[str, str]:
        """Get Git environment variables for deterministic output."""
        env = os.environ.copy()

        # Use platform-appropriate null device
        null_device = "NUL" if os.name == "nt" else "/dev/null"

        env.update(
            {
                "LC_ALL": "C",
                "GIT_CONFIG_GLOBAL": null_device,
                "GIT_CONFIG_SYSTEM": null_device,
                "GIT_TERMINAL_PROMPT": "0",
                "GIT_ASKPASS": "echo",
                "SSH_ASKPASS": "echo",
                "GCM_INTERACTIVE": "never",
            }
        )
        return env

    def to_provenance_dict(self) -> Dict[str, Any]:
        """Convert config to provenance dictionary for output."""
        return {
            "repo": self.repo,
            "commits_override": list(self.commits_override),
            "rename_detection": {"enabled": False},
            "env_locks": dict(GIT_CONFIG_LOCKS, LC_ALL="C"),
        }
