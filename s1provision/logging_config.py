"""Logging setup for the command-line tool."""
from __future__ import annotations
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_log_level(name: str) -> int:
    """Map a level name (trace, debug, info, warn, error, fatal, ...) to a logging level.

    Raises:
        ValueError: If the name is not a known level
    """
    level = LOG_LEVELS.get((name or "").strip().lower())
    if level is None:
        raise ValueError(f"unknown log level '{name}'; use one of {', '.join(LOG_LEVELS)}")
    return level


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send s1provision logs to stderr at the given level."""
    if isinstance(level, str):
        level = parse_log_level(level)
    root = logging.getLogger("s1provision")
    root.setLevel(level)
    if not any(getattr(handler, "_s1provision", False) for handler in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._s1provision = True
        root.addHandler(handler)
