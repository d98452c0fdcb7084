"""
Logging configuration, set up once by the CLI entrypoint.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  MARZNODE_LOG_LEVEL  >  WARNING

The log file is MARZNODE_LOG_FILE, else ``marznode.log`` inside the
installation directory when that directory exists. It records at
MARZNODE_LOG_FILE_LEVEL (default INFO) regardless of the console level.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

LOG_LEVEL_ENV = "MARZNODE_LOG_LEVEL"
LOG_FILE_ENV = "MARZNODE_LOG_FILE"
LOG_FILE_LEVEL_ENV = "MARZNODE_LOG_FILE_LEVEL"

_FMT_MINIMAL = "%(message)s"
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_FMT_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_SHORT = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] = os.environ,
) -> str:
    """Console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env.get(LOG_LEVEL_ENV, "WARNING")


def resolve_log_file(default: Path, env: Mapping[str, str] = os.environ) -> str | None:
    """MARZNODE_LOG_FILE, else ``default`` when its directory exists."""
    explicit = env.get(LOG_FILE_ENV)
    if explicit:
        return explicit
    if default.parent.is_dir():
        return str(default)
    return None


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name.
        log_file: Optional path to a log file. An unwritable path is
            reported on the console and otherwise ignored.
        log_file_level: Level for the file; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DETAIL, _DATEFMT_SHORT
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_SHORT
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.warning("Cannot open log file %s: %s", log_file, e)
        else:
            fh.setLevel(file_level)
            fh.setFormatter(logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_FILE))
            root.addHandler(fh)
            root_level = min(root_level, file_level)

    root.setLevel(root_level)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name to its numeric constant; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
