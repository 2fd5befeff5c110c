"""Comparison routes for the harness API."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ..models import CompareRequest
from ..services import CompareService

router = APIRouter(tags=["compare"])

logger = logging.getLogger(__name__)

compare_service = CompareService()


@router.post("/compare")
def compare(request: CompareRequest) -> Dict[str, Any]:
    """Diff every first-parent pair with git and dulwich and compare."""
    logger.info(
        "Received compare request",
        extra={"repo": request.repo, "pinned_commits": len(request.commits)},
    )

    try:
        result = compare_service.process_compare_request(
            repo=request.repo,
            commits=request.commits,
            git_timeout=request.git_timeout,
        )
        logger.info(
            "Compare request completed",
            extra={
                "repo": request.repo,
                "ok": result.get("ok"),
                "passed": result.get("data", {}).get("passed"),
            },
        )
        return result

    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Compare request failed", extra={"repo": request.repo})
        raise HTTPException(
            status_code=500,
            detail={
                "ok": False,
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": f"Failed to run comparison: {str(exc)}",
                    "details": {"exception_type": type(exc).__name__},
                },
            },
        ) from exc
