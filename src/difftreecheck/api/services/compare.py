"""Service layer for the harness API."""

import logging
from typing import Any, Dict, List, Optional

from ...config import HarnessConfig
from ...errors import HarnessError
from ...harness import run_harness
from ...serialize import ResultSerializer

logger = logging.getLogger(__name__)


class CompareService:
    """Runs one comparison and wraps the outcome in an envelope."""

    def process_compare_request(
        self,
        repo: str,
        commits: Optional[List[str]] = None,
        git_timeout: int = 300,
    ) -> Dict[str, Any]:
        """Run the harness and return the success or error envelope."""
        logger.info(
            "Processing compare request",
            extra={"repo": repo, "pinned_commits": len(commits or [])},
        )

        config: Optional[HarnessConfig] = None
        try:
            config = HarnessConfig(
                repo=repo,
                commits_override=tuple(commits or ()),
                git_timeout=git_timeout,
            )
            result = run_harness(config)

            serializer = ResultSerializer(config)
            payload = serializer.serialize_result(result)

            logger.info(
                "Comparison finished",
                extra={
                    "repo": repo,
                    "passed": result.passed,
                    "divergences": len(result.comparison.divergences),
                },
            )
            return serializer.create_success_envelope(payload)

        except HarnessError as exc:
            logger.warning(
                "Known harness error",
                extra={"repo": repo, "code": exc.code, "backend": exc.backend},
            )
            return ResultSerializer(config).error_envelope_for(exc)

        except ValueError as exc:
            logger.warning("Invalid compare request", extra={"repo": repo})
            return ResultSerializer(config).create_error_envelope(
                "INVALID_REQUEST", str(exc)
            )
