"""Pydantic models for the harness API requests and responses."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..config import COMMIT_PATTERN, REMOTE_SCHEMES


class CompareRequest(BaseModel):
    """Request model for the compare endpoint."""

    repo: str = Field(
        ...,
        description="Repository URL (http/https/git) or absolute local path",
        examples=["https://github.com/git/git.git"],
    )
    commits: List[str] = Field(
        default_factory=list,
        description="Pinned commit list, newest first; empty to walk first-parent history",
        examples=[["18d0fec24027ac226dc2c4df2b955eef2a16462a", "bb831db6774aaa733199360dc7af6f3ce375fc20"]],
    )
    git_timeout: int = Field(
        300,
        description="Timeout for each git invocation, in seconds",
        ge=1,
        le=3600,
    )

    @field_validator("repo")
    @classmethod
    def repo_must_be_valid(cls, v):
        """Accept supported URL schemes and absolute paths."""
        v = v.strip()
        if not v:
            raise ValueError("repo cannot be empty")
        if not (v.startswith(REMOTE_SCHEMES) or v.startswith("/") or (len(v) > 2 and v[1] == ":")):
            raise ValueError("repo must be an http(s)/git URL or an absolute path")
        return v

    @field_validator("commits")
    @classmethod
    def commits_must_be_valid(cls, v):
        """Pinned lists need at least two hex ids of 7 to 40 characters."""
        v = [c.strip().lower() for c in v]
        if len(v) == 1:
            raise ValueError("commits must list at least 2 hashes")
        for commit in v:
            if not COMMIT_PATTERN.match(commit):
                raise ValueError(f"commit must be a 7 to 40 character hex id: {commit!r}")
        return v


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., examples=["healthy"])
    version: str = Field(..., examples=["1.0.0"])
    git_available: bool = Field(..., examples=[True])
    git_version: Optional[str] = Field(None, examples=["2.34.1"])


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(..., examples=["1.0.0"])
    api_version: str = Field(..., examples=["v1"])
    git_version: Optional[str] = Field(None, examples=["2.34.1"])
    dulwich_version: str = Field(..., examples=["0.22.1"])
    supported_features: list = Field(
        default_factory=lambda: [
            "first_parent_history",
            "commit_override",
            "type_change_detection",
            "non_ascii_path_quoting",
        ]
    )
