"""Logging setup shared by the CLI and the API."""

import logging
import os
import sys
from typing import Optional, TextIO

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# dulwich logs every pack it opens at DEBUG
_NOISY_LOGGERS = ("dulwich",)


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Configure application-wide logging once.

    Log records go to stderr so that stdout only carries progress dots and
    the SUCCESS/FAIL report.
    """
    if logging.getLogger().handlers:
        return

    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=log_level, format=_LOG_FORMAT, stream=stream or sys.stderr)

    if log_level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
