"""ftdbook: build FTD doc-site packages from Markdown books."""

from ftdbook.book_loader import create_missing, load_book, load_book_from_disk
from ftdbook.config import BuildConfig, load_config
from ftdbook.exceptions import (
    BookLoadError,
    ChapterNotFoundError,
    ConfigError,
    FtdbookError,
    ParseError,
    RenderError,
    SummaryParseError,
)
from ftdbook.ftd import render_markdown, render_markdown_with_path, transpile
from ftdbook.includes import expand_book_includes, expand_includes
from ftdbook.renderer import FtdRenderer, build_book
from ftdbook.schemas import (
    Book,
    BookItem,
    Chapter,
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryItem,
)
from ftdbook.summary_parser import parse_summary

__all__ = [
    "Book",
    "BookItem",
    "BookLoadError",
    "BuildConfig",
    "Chapter",
    "ChapterNotFoundError",
    "ConfigError",
    "FtdRenderer",
    "FtdbookError",
    "Link",
    "ParseError",
    "PartTitle",
    "RenderError",
    "SectionNumber",
    "Separator",
    "Summary",
    "SummaryItem",
    "SummaryParseError",
    "build_book",
    "create_missing",
    "expand_book_includes",
    "expand_includes",
    "load_book",
    "load_book_from_disk",
    "load_config",
    "parse_summary",
    "render_markdown",
    "render_markdown_with_path",
    "transpile",
]
