"""
Logging configuration — set up once by the CLI entrypoint.

Every module logs through ``logging.getLogger(__name__)``; this module
only decides where records go and how they look.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  STAMPEDE_LOG_LEVEL  >  WARNING

A copy of the log can go to a file via STAMPEDE_LOG_FILE, with its own
level in STAMPEDE_LOG_FILE_LEVEL (defaults to the console level).
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "STAMPEDE_LOG_LEVEL"
ENV_LOG_FILE = "STAMPEDE_LOG_FILE"
ENV_LOG_FILE_LEVEL = "STAMPEDE_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# WARNING and up: the message is all the user needs
_FMT_MINIMAL = "%(message)s"

# INFO: step progress, timestamped
_FMT_VERBOSE = "%(asctime)s %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG and file output: full diagnostic with logger and line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # handlers may outlive the stream they were bound to (test runners)
    logging.raiseExceptions = False


def setup_from_environment(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """``setup_logging`` driven by CLI flags plus STAMPEDE_* variables.

    Returns:
        The console level name that was applied.
    """
    level = resolve_level(debug=debug, verbose=verbose, quiet=quiet)
    setup_logging(
        level=level,
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )
    return level


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (unknown → WARNING)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
