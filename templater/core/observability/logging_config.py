"""
Logging configuration — set up once by the CLI.

Every module logs through ``logging.getLogger(__name__)``; only the
``templater`` package logger is configured here, so embedding
applications keep control of the root logger.

Level precedence:
    CLI flag  >  TEMPLATER_LOG_LEVEL  >  WARNING

File output is opt-in through TEMPLATER_LOG_FILE (and
TEMPLATER_LOG_FILE_LEVEL, defaulting to the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

PACKAGE_LOGGER = "templater"

ENV_LEVEL = "TEMPLATER_LOG_LEVEL"
ENV_FILE = "TEMPLATER_LOG_FILE"
ENV_FILE_LEVEL = "TEMPLATER_LOG_FILE_LEVEL"

# Console output is terse until DEBUG; receipts already carry a marker.
_FMT_CONSOLE = "%(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the file handler (default: ``level``).

    Returns:
        The configured ``templater`` logger.
    """
    console_level = parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    fmt = _FMT_DEBUG if console_level <= logging.DEBUG else _FMT_CONSOLE
    console.setFormatter(logging.Formatter(fmt, datefmt=_DATEFMT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console)

    effective = console_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        effective = min(effective, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT))
        logger.addHandler(fh)

    logger.setLevel(effective)
    return logger


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value (unknown → WARNING)."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
