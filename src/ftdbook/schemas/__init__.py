"""Shared schemas for ftdbook."""

from ftdbook.schemas.book import Book, BookItem, BookItems, Chapter
from ftdbook.schemas.summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryItem,
)

__all__ = [
    "Book",
    "BookItem",
    "BookItems",
    "Chapter",
    "Link",
    "PartTitle",
    "SectionNumber",
    "Separator",
    "Summary",
    "SummaryItem",
]
