"""Meta endpoints for the harness API."""

import logging
from typing import Optional

from fastapi import APIRouter

from ... import __version__
from ...errors import GitVersionUnsupportedError
from ...serialize import dulwich_version
from ...vcs import git_version
from ..models import HealthResponse, VersionResponse

router = APIRouter(tags=["meta"])

logger = logging.getLogger(__name__)


def _get_git_version() -> Optional[str]:
    """Return the installed git version if it is usable."""
    try:
        return git_version(timeout=5)
    except GitVersionUnsupportedError as exc:
        logger.debug("git version check failed", extra={"reason": exc.message})
    return None


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    version = _get_git_version()
    logger.info(
        "Health check invoked",
        extra={"git_available": version is not None, "git_version": version},
    )
    return HealthResponse(
        status="healthy",
        version=__version__,
        git_available=version is not None,
        git_version=version,
    )


@router.get("/version", response_model=VersionResponse)
def version_info() -> VersionResponse:
    """Version information endpoint."""
    version = _get_git_version()
    logger.info("Version endpoint invoked", extra={"git_version": version})
    return VersionResponse(
        version=__version__,
        api_version="v1",
        git_version=version,
        dulwich_version=dulwich_version(),
    )


@router.get("/", include_in_schema=False)
def root() -> dict:
    """Root endpoint providing basic API metadata."""
    return {
        "name": "difftreecheck API",
        "version": __version__,
        "description": "Differential testing of dulwich tree diffs against git diff-tree",
        "endpoints": {
            "compare": "POST /compare - Compare both backends over a repository",
            "health": "GET /health - Health check",
            "version": "GET /version - Version information",
            "docs": "GET /docs - API documentation",
        },
    }
