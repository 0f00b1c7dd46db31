"""Verbosity-controlled logging for docforest.

Ingestion and merging report what they did at two extra levels: CHANGES
(extension merges, ingestion totals, generated files) and CHECKS (skipped
records, per-title match checks).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

LOGGER_NAME = "docforest"

CHANGES_LEVEL = 25
CHECKS_LEVEL = 15

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

# CLI -v count -> logger threshold; anything unknown falls back to errors only
VERBOSITY_LEVELS = {
    0: logging.ERROR,
    1: CHANGES_LEVEL,
    2: CHECKS_LEVEL,
    3: logging.DEBUG,
}


class DocforestLogger(logging.Logger):
    """Logger with changes() and checks() between the standard levels."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a merge, an ingestion total or generated output."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a skipped record or an extension match check."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> DocforestLogger:
    """Return the shared docforest logger."""
    logging.setLoggerClass(DocforestLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, DocforestLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Point the docforest logger at a stream with the given verbosity.

    Reconfiguring replaces the previous handler. Messages are written bare,
    without level prefixes.

    Args:
        verbosity: 0=errors, 1=changes, 2=checks, 3=debug
        stream: Output stream, sys.stderr by default
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(VERBOSITY_LEVELS.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)
