"""Logging setup for berth."""

import os
import sys

from loguru import logger

VERBOSE_ENV = "BERTH_VERBOSE"
QUIET_ENV = "BERTH_QUIET"

# Records bound with ``notice=True`` pass the quiet filter.
NOTICE = "notice"


def log_level(verbose: bool = False, quiet: bool = False) -> str:
    """Sink level for the given verbosity flags; verbose wins over quiet."""
    if verbose:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return "WARNING"


def setup_logging(verbose: bool = False, quiet: bool = False) -> int:
    """Replace loguru's default sink with one on standard error.

    The flags are mirrored into ``BERTH_VERBOSE`` / ``BERTH_QUIET`` so that
    consoles created later pick them up. Quiet mode still shows warnings
    bound with ``notice=True``, such as commands let through by warn mode.

    Returns:
        The id of the added sink
    """
    if verbose:
        os.environ[VERBOSE_ENV] = "1"
    if quiet:
        os.environ[QUIET_ENV] = "1"

    threshold = logger.level(log_level(verbose, quiet)).no

    def show(record) -> bool:
        return record["level"].no >= threshold or bool(record["extra"].get(NOTICE))

    logger.remove()
    return logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        filter=show,
        format="<level>{level: <8}</level> | {message}",
    )
