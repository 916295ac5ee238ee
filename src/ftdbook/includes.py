"""Expand ``{{#include}}`` directives in chapter content.

Supported forms, with paths relative to the chapter's directory:

- ``{{#include file}}``: the whole file.
- ``{{#include file:10}}``: line 10 only.
- ``{{#include file:2:10}}``, ``{{#include file:2:}}``, ``{{#include file::10}}``:
  an inclusive, 1-based line range, open at either end.
- ``{{#include file:name}}``: the lines between ``ANCHOR: name`` and
  ``ANCHOR_END: name``.

``{{#rustdoc_include ...}}`` takes the same arguments but keeps the rest of
the file as ``# ``-prefixed hidden lines. A directive written as
``\\{{#include ...}}`` is left in place without the backslash.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ftdbook.exceptions import BookLoadError
from ftdbook.schemas import Book, BookItem, Chapter
from ftdbook.string_utils import (
    take_anchored_lines,
    take_lines,
    take_rustdoc_include_anchored_lines,
    take_rustdoc_include_lines,
)

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 10

_DIRECTIVE = re.compile(
    r"\\\{\{#[^}]*\}\}"
    r"|\{\{\s*#(?P<kind>include|rustdoc_include)\s+(?P<args>[^}]+?)\s*\}\}"
)


def expand_includes(content: str, base_dir: Path | str, depth: int = 0) -> str:
    """Replace include directives in ``content`` with the referenced text.

    Included text is expanded too, relative to its own directory, up to
    ``MAX_INCLUDE_DEPTH`` levels.

    Raises:
        BookLoadError: If an included file cannot be read.
    """
    base_dir = Path(base_dir)

    def replace(match: re.Match[str]) -> str:
        kind = match.group("kind")
        if kind is None:
            return match.group(0)[1:]

        path, _, selector = match.group("args").partition(":")
        target = base_dir / path
        try:
            text = target.read_text(encoding="utf-8")
        except OSError as exc:
            raise BookLoadError(f"Could not read file for link {match.group(0)} ({target})") from exc

        included = _select_lines(text, selector, rustdoc=kind == "rustdoc_include")
        if depth + 1 >= MAX_INCLUDE_DEPTH:
            logger.error("Stack depth exceeded in %s. Check for cyclic includes", target)
            return included
        return expand_includes(included, target.parent, depth + 1)

    return _DIRECTIVE.sub(replace, content)


def _select_lines(text: str, selector: str, *, rustdoc: bool) -> str:
    start_text, has_end, end_text = selector.partition(":")
    if start_text and not start_text.isdigit():
        if rustdoc:
            return take_rustdoc_include_anchored_lines(text, selector)
        return take_anchored_lines(text, selector)

    start = max(int(start_text) - 1, 0) if start_text else None
    if has_end:
        end = int(end_text) if end_text.isdigit() else None
    else:
        # a single number selects one line
        end = start + 1 if start is not None else None

    if rustdoc:
        return take_rustdoc_include_lines(text, start, end)
    return take_lines(text, start, end)


def expand_book_includes(book: Book, src_dir: Path | str) -> None:
    """Expand include directives in every chapter of ``book`` in place."""
    src_dir = Path(src_dir)

    def expand(item: BookItem) -> None:
        if isinstance(item, Chapter) and item.path is not None:
            logger.debug("Expanding includes in %s", item.path)
            item.content = expand_includes(item.content, src_dir / item.path.parent)

    book.for_each_mut(expand)
