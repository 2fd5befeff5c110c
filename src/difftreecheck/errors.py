"""Error definitions and handling for the diff-tree harness."""

from typing import Any, Dict, List, Optional, Sequence


class HarnessError(Exception):
    """Base exception for harness errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        # Set by the harness to the backend pass that raised
        self.backend: Optional[str] = None

    def describe(self) -> str:
        """Message prefixed with the failing backend, for the terminal."""
        if self.backend:
            return f"{self.backend}: {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


def _pair_details(pair: Optional[Sequence[str]]) -> Dict[str, Any]:
    if pair is None:
        return {}
    return {"older": pair[0], "newer": pair[1]}


class InsufficientHistoryError(HarnessError):
    """Fewer than two commits were given to pair up."""

    def __init__(self, count: int, code: str = "INSUFFICIENT_HISTORY", message: str = ""):
        super().__init__(
            code=code,
            message=message or f"Need at least 2 commits to diff, got {count}",
            details={"commits": count},
        )


class EmptyRepositoryError(InsufficientHistoryError):
    """History discovery found fewer than two commits."""

    def __init__(self, count: int):
        super().__init__(
            count,
            code="EMPTY_REPOSITORY",
            message=f"The repo has less than 2 commits ({count} found)",
        )


class BackendInvocationError(HarnessError):
    """The reference git process failed or could not be started."""

    def __init__(
        self,
        command: List[str],
        stderr: str,
        pair: Optional[Sequence[str]] = None,
    ):
        if pair is not None:
            message = f"cannot diff-tree {pair[0]} and {pair[1]}: {stderr.strip()}"
        else:
            message = f"git {' '.join(command)} failed: {stderr.strip()}"
        details = _pair_details(pair)
        details.update({"command": command, "stderr": stderr})
        super().__init__(
            code="BACKEND_INVOCATION_FAILED",
            message=message,
            details=details,
        )


class TreeResolutionError(HarnessError):
    """A hash does not resolve to a commit with a tree."""

    def __init__(self, commit: str, reason: str):
        super().__init__(
            code="TREE_RESOLUTION_FAILED",
            message=f"Cannot resolve {commit} to a commit tree: {reason}",
            details={"commit": commit, "reason": reason},
        )


class TreeDiffError(HarnessError):
    """The library tree diff failed for a pair."""

    def __init__(self, pair: Sequence[str], reason: str):
        details = _pair_details(pair)
        details["reason"] = reason
        super().__init__(
            code="TREE_DIFF_FAILED",
            message=f"cannot get changes between {pair[0]} and {pair[1]}: {reason}",
            details=details,
        )


class RepositoryNotFoundError(HarnessError):
    """Path does not hold a git repository."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code="REPOSITORY_NOT_FOUND",
            message=f"Not a git repository: {path}",
            details={"path": path, "reason": reason},
        )


class CloneFailedError(HarnessError):
    """Repository clone operation failed."""

    def __init__(self, repo_url: str, reason: str):
        super().__init__(
            code="CLONE_FAILED",
            message=f"Failed to clone repository: {reason}",
            details={"repo_url": repo_url, "reason": reason},
        )


class GitVersionUnsupportedError(HarnessError):
    """Git version is not supported."""

    def __init__(self, detected_version: str, required_version: str = "2.24"):
        super().__init__(
            code="GIT_VERSION_UNSUPPORTED",
            message=f"Git version {detected_version} is not supported. "
            f"Minimum required: {required_version}",
            details={
                "detected_version": detected_version,
                "required_version": required_version,
            },
        )


class CommandTimeoutError(HarnessError):
    """A git invocation timed out."""

    def __init__(self, operation: str, timeout_seconds: int):
        super().__init__(
            code="COMMAND_TIMEOUT",
            message=f"Timeout during {operation} after {timeout_seconds}s",
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )
