"""Custom exceptions for ftdbook."""

from __future__ import annotations

import logging
from typing import Iterator

logger = logging.getLogger(__name__)


class FtdbookError(Exception):
    """Base exception for ftdbook operations."""


class ConfigError(FtdbookError):
    """Raised when book.toml is missing required structure or invalid."""


class ParseError(FtdbookError):
    """Error during content parsing."""


class SummaryParseError(ParseError):
    """SUMMARY.md does not follow the expected structure.

    Attributes:
        line: 1-based line of the offending event.
        column: Column of the offending event on that line.
        reason: The bare message without location.
    """

    def __init__(self, reason: str, *, line: int, column: int) -> None:
        super().__init__(
            f"failed to parse SUMMARY.md line {line}, column {column}: {reason}"
        )
        self.reason = reason
        self.line = line
        self.column = column


class BookLoadError(FtdbookError):
    """Error while reading SUMMARY.md or chapter files from disk."""


class ChapterNotFoundError(BookLoadError):
    """A chapter referenced by SUMMARY.md does not exist on disk."""


class RenderError(FtdbookError):
    """Error while writing rendered output."""


def iter_error_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield an exception followed by each of its causes, outermost first."""
    current: BaseException | None = exc
    while current is not None:
        yield current
        current = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )


def log_error_chain(exc: BaseException) -> None:
    """Log an error and everything that caused it."""
    chain = list(iter_error_chain(exc))
    logger.error("Error: %s", chain[0])
    for cause in chain[1:]:
        logger.error("\tCaused By: %s", cause)
