"""Deterministic serialization of harness results."""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import dulwich

from .compare import Divergence
from .config import HarnessConfig
from .errors import HarnessError
from .harness import HarnessResult

logger = logging.getLogger(__name__)


def dulwich_version() -> str:
    return ".".join(str(part) for part in dulwich.__version__)


class ResultSerializer:
    """Handles deterministic JSON serialization with stable ordering."""

    def __init__(self, config: Optional[HarnessConfig] = None):
        """Initialize with the run configuration, if there is one."""
        self.config = config

    def serialize_result(self, result: HarnessResult) -> Dict[str, Any]:
        """Serialize a finished run to a deterministic dictionary."""
        logger.debug(
            "Serializing result",
            extra={"passed": result.passed, "divergences": len(result.comparison.divergences)},
        )

        provenance = self.config.to_provenance_dict() if self.config else {}
        provenance["git_version"] = result.git_version
        provenance["dulwich_version"] = dulwich_version()

        divergences = [self._serialize_divergence(d) for d in result.comparison.divergences]
        divergences.sort(key=lambda d: d["index"])

        payload = {
            "provenance": provenance,
            "passed": result.passed,
            "reason": result.comparison.reason,
            "pairs_compared": result.comparison.compared,
            "backends": {
                result.reference.backend: result.reference.to_dict(),
                result.library.backend: result.library.to_dict(),
            },
            "divergences": divergences,
        }

        checksum = self._compute_checksum(payload)
        payload["provenance"]["checksum"] = checksum

        logger.debug("Serialization finished", extra={"checksum": checksum})
        return payload

    def _serialize_divergence(self, divergence: Divergence) -> Dict[str, Any]:
        return {
            "index": divergence.index,
            "git": {
                "older": divergence.reference.older,
                "newer": divergence.reference.newer,
                "lines": divergence.reference.sorted_lines(),
            },
            "dulwich": {
                "older": divergence.library.older,
                "newer": divergence.library.newer,
                "lines": divergence.library.sorted_lines(),
            },
            "only_in_git": divergence.only_in_reference,
            "only_in_dulwich": divergence.only_in_library,
        }

    def _compute_checksum(self, payload: Dict[str, Any]) -> str:
        """Compute SHA-256 checksum of the payload, ignoring timings."""
        stable = {
            key: value
            for key, value in payload.items()
            if key not in ("provenance", "backends")
        }
        stable["provenance"] = {
            k: v for k, v in payload["provenance"].items() if k != "checksum"
        }
        # Timings vary between identical runs
        stable["backends"] = {
            name: {k: v for k, v in stats.items() if k in ("commits", "pairs", "used_override")}
            for name, stats in payload["backends"].items()
        }
        json_bytes = json.dumps(
            stable,
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8", errors="replace")
        return hashlib.sha256(json_bytes).hexdigest()

    def to_json_string(self, envelope: Dict[str, Any]) -> str:
        """Convert an envelope to a pretty-printed JSON string."""
        return json.dumps(envelope, ensure_ascii=False, sort_keys=True, indent=2)

    def create_success_envelope(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create success envelope around payload."""
        return {"ok": True, "data": payload}

    def create_error_envelope(
        self,
        error_code: str,
        error_message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create error envelope."""
        logger.debug("Creating error envelope", extra={"code": error_code})
        error_data: Dict[str, Any] = {
            "code": error_code,
            "message": error_message,
        }
        if details:
            error_data["details"] = details

        return {"ok": False, "error": error_data}

    def error_envelope_for(self, exc: Exception) -> Dict[str, Any]:
        """Error envelope for a harness error or an unexpected exception."""
        if isinstance(exc, HarnessError):
            return self.create_error_envelope(exc.code, exc.describe(), exc.details)
        return self.create_error_envelope(
            "INTERNAL_ERROR",
            f"Internal error: {exc}",
            {"exception_type": type(exc).__name__},
        )
