"""Application-wide settings and environment loading."""

import logging
import os
import re
from typing import Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()
logger.debug("Environment variables loaded from .env if present")

DEFAULT_PROGRESS_BATCH = 100


def get_commits_override() -> Tuple[str, ...]:
    """Return the pinned commit list from DIFFTREECHECK_COMMITS, newest first."""
    raw = os.getenv("DIFFTREECHECK_COMMITS", "")
    commits = tuple(c for c in re.split(r"[,\s]+", raw) if c)
    if commits:
        logger.debug("Commit override configured", extra={"commits": len(commits)})
    return commits


def get_progress_batch() -> int:
    """Return the progress batch size from DIFFTREECHECK_PROGRESS_BATCH."""
    raw = os.getenv("DIFFTREECHECK_PROGRESS_BATCH")
    if not raw:
        return DEFAULT_PROGRESS_BATCH
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid DIFFTREECHECK_PROGRESS_BATCH", extra={"value": raw})
        return DEFAULT_PROGRESS_BATCH
