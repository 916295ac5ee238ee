"""Load a book from its source directory."""

from __future__ import annotations

import logging
from pathlib import Path

from ftdbook.config import SUMMARY_FILE_NAME, BuildConfig
from ftdbook.exceptions import BookLoadError, ChapterNotFoundError, FtdbookError
from ftdbook.schemas import Book, BookItem, Chapter, Link, PartTitle, Separator, Summary, SummaryItem
from ftdbook.string_utils import bracket_escape
from ftdbook.summary_parser import parse_summary

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def load_book(src_dir: Path | str, config: BuildConfig) -> Book:
    """Load a book into memory from its source directory.

    Args:
        src_dir: Directory holding SUMMARY.md and the chapter files.
        config: Build settings; only ``create_missing`` is used here.

    Returns:
        The loaded book.

    Raises:
        BookLoadError: If SUMMARY.md cannot be read or parsed, a chapter
            cannot be read, or a missing chapter cannot be created. The
            underlying error is chained as the cause.
    """
    src_dir = Path(src_dir)
    summary_md = src_dir / SUMMARY_FILE_NAME

    try:
        summary_content = summary_md.read_text(encoding="utf-8")
    except OSError as exc:
        raise BookLoadError(f"Couldn't open SUMMARY.md in {str(src_dir)!r} directory") from exc

    try:
        summary = parse_summary(summary_content)
    except FtdbookError as exc:
        raise BookLoadError(f"Summary parsing failed for file={str(summary_md)!r}") from exc

    if config.create_missing:
        try:
            create_missing(src_dir, summary)
        except BookLoadError as exc:
            raise BookLoadError("Unable to create missing chapters") from exc

    return load_book_from_disk(summary, src_dir)


def create_missing(src_dir: Path | str, summary: Summary) -> None:
    """Create a stub file for every linked chapter that does not exist yet.

    Each new file holds a single heading with the chapter's name.

    Raises:
        BookLoadError: If a file or its parent directory cannot be created.
    """
    src_dir = Path(src_dir)
    items: list[SummaryItem] = [
        *summary.prefix_chapters,
        *summary.numbered_chapters,
        *summary.suffix_chapters,
    ]

    while items:
        item = items.pop()
        if not isinstance(item, Link):
            continue

        if item.location is not None:
            filename = src_dir / item.location
            if not filename.exists():
                logger.debug("Creating missing file %s", filename)
                try:
                    filename.parent.mkdir(parents=True, exist_ok=True)
                    filename.write_text(f"# {bracket_escape(item.name)}\n", encoding="utf-8")
                except OSError as exc:
                    raise BookLoadError(f"Unable to create missing file: {filename}") from exc

        items.extend(item.nested_items)


def load_book_from_disk(summary: Summary, src_dir: Path | str) -> Book:
    """Build a :class:`Book` from a parsed summary, reading chapters from disk."""
    src_dir = Path(src_dir)
    logger.debug("Loading the book from disk")

    book = Book()
    for item in (*summary.prefix_chapters, *summary.numbered_chapters, *summary.suffix_chapters):
        book.push_item(_load_summary_item(item, src_dir, []))
    return book


def _load_summary_item(item: SummaryItem, src_dir: Path, parent_names: list[str]) -> BookItem:
    if isinstance(item, Link):
        return _load_chapter(item, src_dir, parent_names)
    if isinstance(item, PartTitle):
        return PartTitle(title=item.title)
    return Separator()


def _load_chapter(link: Link, src_dir: Path, parent_names: list[str]) -> Chapter:
    if link.location is not None:
        logger.debug("Loading %s (%s)", link.name, link.location)
        location = link.location if link.location.is_absolute() else src_dir / link.location

        if not location.is_file():
            raise ChapterNotFoundError(f"Chapter file not found, {link.location}")
        try:
            content = location.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BookLoadError(f'Unable to read "{link.name}" ({location})') from exc

        if content.startswith(_BOM):
            content = content[len(_BOM):]

        try:
            stripped = location.relative_to(src_dir)
        except ValueError as exc:
            raise BookLoadError(
                f"Chapter {location} is not inside the source directory {src_dir}"
            ) from exc

        chapter = Chapter.new(link.name, content, stripped, parent_names)
    else:
        chapter = Chapter.new_draft(link.name, parent_names)

    chapter.number = link.number.model_copy(deep=True) if link.number is not None else None

    sub_item_parents = [*parent_names, link.name]
    chapter.sub_items = [
        _load_summary_item(item, src_dir, sub_item_parents) for item in link.nested_items
    ]
    return chapter
