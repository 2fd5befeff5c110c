"""Repository acquisition: a local path, or a throwaway clone of a URL."""

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from .config import HarnessConfig
from .errors import CloneFailedError, CommandTimeoutError, RepositoryNotFoundError

logger = logging.getLogger(__name__)


class RepositoryWorkspace:
    """Provides the repository root for the run and cleans up clones."""

    def __init__(self, config: HarnessConfig):
        """Initialize with configuration."""
        self.config = config
        self.path: Optional[Path] = None
        self.workdir: Optional[Path] = None

    def __enter__(self) -> "RepositoryWorkspace":
        """Context manager entry."""
        if self.config.is_remote:
            self.workdir = Path(tempfile.mkdtemp(prefix="difftreecheck_"))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit with cleanup."""
        if self.workdir and self.workdir.exists():
            if self.config.keep_workdir or (exc_type and self.config.keep_on_error):
                logger.info("Keeping work directory", extra={"workdir": str(self.workdir)})
                return
            shutil.rmtree(self.workdir, ignore_errors=True)

    def acquire(self) -> Path:
        """Return the repository root, cloning first for remote URLs."""
        if self.config.is_remote:
            if not self.workdir:
                raise RuntimeError("Workdir not initialized")
            self._clone()
            self.path = self.workdir
        else:
            path = Path(self.config.repo).expanduser()
            if not path.is_dir():
                raise RepositoryNotFoundError(self.config.repo, "no such directory")
            self.path = path
        return self.path

    def _clone(self) -> None:
        logger.info("Cloning repository", extra={"repo": self.config.repo})
        try:
            subprocess.run(
                [
                    "git",
                    "-c",
                    "core.autocrlf=false",
                    "clone",
                    self.config.repo,
                    ".",  # clone into the already-created empty workdir
                ],
                cwd=self.workdir,
                env=self.config.git_env,
                timeout=self.config.git_timeout,
                check=True,
                capture_output=True,
                text=True,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError("git clone", self.config.git_timeout) from e
        except subprocess.CalledProcessError as e:
            reason = str(e)
            if e.stderr:
                reason = f"{reason}: stderr={e.stderr.strip()!r}"
            raise CloneFailedError(self.config.repo, reason) from e
        except OSError as e:
            raise CloneFailedError(self.config.repo, str(e)) from e
