"""In-memory book tree."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Annotated, Callable, Iterator, Literal, Union

from pydantic import BaseModel, Field

from ftdbook.schemas.summary import PartTitle, SectionNumber, Separator


class Chapter(BaseModel):
    """A single chapter, usually mapping to one file on disk.

    Attributes:
        name: The chapter's name.
        content: Raw Markdown content; empty for draft chapters.
        number: Section number, if the chapter is numbered.
        sub_items: Nested items.
        path: Location relative to the book's source directory, ``None`` for
            draft chapters.
        source_path: Original source file relative to the source directory.
        parent_names: Names of every chapter above this one, root first.
    """

    kind: Literal["chapter"] = "chapter"
    name: str
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list["BookItem"] = Field(default_factory=list)
    path: Path | None = None
    source_path: Path | None = None
    parent_names: list[str] = Field(default_factory=list)

    @classmethod
    def new(
        cls,
        name: str,
        content: str,
        path: Path | str,
        parent_names: list[str] | None = None,
    ) -> "Chapter":
        """Create a chapter backed by a source file."""
        path = Path(path)
        return cls(
            name=name,
            content=content,
            path=path,
            source_path=path,
            parent_names=list(parent_names or []),
        )

    @classmethod
    def new_draft(cls, name: str, parent_names: list[str] | None = None) -> "Chapter":
        """Create a draft chapter that has no source file and no content."""
        return cls(name=name, parent_names=list(parent_names or []))

    def is_draft_chapter(self) -> bool:
        return self.path is None

    def __str__(self) -> str:
        if self.number is not None:
            return f"{self.number} {self.name}"
        return self.name


BookItem = Annotated[Union[Chapter, Separator, PartTitle], Field(discriminator="kind")]


class BookItems:
    """Depth-first iterator over the items of a book.

    Prefer ``Book.iter()`` to building this directly.
    """

    def __init__(self, items: list[BookItem]) -> None:
        self._items: deque[BookItem] = deque(items)

    def __iter__(self) -> "BookItems":
        return self

    def __next__(self) -> BookItem:
        if not self._items:
            raise StopIteration
        item = self._items.popleft()
        if isinstance(item, Chapter):
            # pushing to the back instead would make this breadth-first
            self._items.extendleft(reversed(item.sub_items))
        return item


class Book(BaseModel):
    """A dumb tree structure representing a book.

    Items are read through ``iter()`` and changed through ``for_each_mut()``,
    which owns the traversal order so callers never mutate a tree they are
    iterating over.
    """

    sections: list[BookItem] = Field(default_factory=list)

    def iter(self) -> BookItems:
        """Get a depth-first iterator over the items in the book."""
        return BookItems(self.sections)

    def __iter__(self) -> BookItems:  # type: ignore[override]
        return self.iter()

    def for_each_mut(self, func: Callable[[BookItem], None]) -> None:
        """Apply ``func`` to every item, children before their chapter."""
        _for_each_mut(func, self.sections)

    def push_item(self, item: BookItem) -> "Book":
        """Append a top-level item and return the book for chaining."""
        self.sections.append(item)
        return self

    def chapters(self) -> Iterator[Chapter]:
        """Depth-first iterator over chapters only."""
        for item in self.iter():
            if isinstance(item, Chapter):
                yield item


def _for_each_mut(func: Callable[[BookItem], None], items: list[BookItem]) -> None:
    for item in items:
        if isinstance(item, Chapter):
            _for_each_mut(func, item.sub_items)
        func(item)


Chapter.model_rebuild()
