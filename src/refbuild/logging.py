"""Logging for reference-build lookups.

A history walk decides build by build whether an older build can serve as
the reference. Each decision is logged at DEBUG on ``refbuild.history``:
builds skipped for their outcome, skipped for a missing or failed
analysis action, and the build finally accepted. Store loading logs the
lines it ignores in ``analysis.jsonl`` on ``refbuild.store``.

The CLI sends these records to the console only with ``-v``; ``--log-file``
keeps the full trail regardless of the console level, so a surprising
reference can be explained after the fact.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "refbuild"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"


def _console_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the ``refbuild`` logger.

    The console handler logs at INFO by default, DEBUG with *verbose* and
    WARNING with *quiet* (*verbose* wins if both are set). When *log_file*
    is given, every record down to DEBUG is also appended to it, which is
    where the per-build skip decisions of a history walk end up.

    Calling this again replaces the handlers installed by the previous call.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(_console_level(verbose=verbose, quiet=quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``refbuild.<name>`` child logger."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
