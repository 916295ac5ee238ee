"""Logging setup shared by the command line entry points."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s [%(levelname)s] (%(name)s): %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _CliHandler(logging.StreamHandler):
    """stderr handler installed by configure_logging."""


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO") -> None:
    """Send ftdbook log records to stderr at the given level.

    Calling this more than once replaces the previously installed handler, so
    the CLI can raise verbosity after parsing its arguments.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger("ftdbook")
    for handler in list(root.handlers):
        if isinstance(handler, _CliHandler):
            root.removeHandler(handler)

    handler = _CliHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
