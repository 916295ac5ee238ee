"""SUMMARY.md models."""

from __future__ import annotations

from functools import total_ordering
from pathlib import Path
from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, Field, RootModel


@total_ordering
class SectionNumber(RootModel[list[int]]):
    """A section number like "1.2.3.", a thin wrapper around a list of ints."""

    root: list[int] = Field(default_factory=list)

    def append_child(self, index: int) -> "SectionNumber":
        """Number of the ``index``-th (0-based) child of this section."""
        return SectionNumber([*self.root, index + 1])

    def render(self) -> str:
        if not self.root:
            return "0"
        return "".join(f"{part}." for part in self.root)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self) -> Iterator[int]:  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, index: int) -> int:
        return self.root[index]

    def __setitem__(self, index: int, value: int) -> None:
        self.root[index] = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SectionNumber):
            return self.root == other.root
        return NotImplemented

    def __lt__(self, other: "SectionNumber") -> bool:
        if not isinstance(other, SectionNumber):
            return NotImplemented
        return self.root < other.root


class Link(BaseModel):
    """A chapter entry in SUMMARY.md, roughly ``[Some section](./path/to/file.md)``.

    Attributes:
        name: The name of the chapter.
        location: Location of the chapter source relative to the book's
            source directory. ``None`` marks a draft chapter.
        number: Section number, only set for numbered chapters.
        nested_items: Items nested below this chapter.
    """

    kind: Literal["link"] = "link"
    name: str
    location: Path | None = None
    number: SectionNumber | None = None
    nested_items: list["SummaryItem"] = Field(default_factory=list)


class Separator(BaseModel):
    """A separator (``---``)."""

    kind: Literal["separator"] = "separator"


class PartTitle(BaseModel):
    """A part title (a level one heading between numbered lists)."""

    kind: Literal["part_title"] = "part_title"
    title: str


SummaryItem = Annotated[Union[Link, Separator, PartTitle], Field(discriminator="kind")]


class Summary(BaseModel):
    """The parsed SUMMARY.md, specifying how the book should be laid out.

    Attributes:
        title: Optional title heading of SUMMARY.md.
        prefix_chapters: Chapters before the main text (e.g. an introduction).
        numbered_chapters: The numbered chapters, possibly broken into parts.
        suffix_chapters: Items which come after the main text.
    """

    title: str | None = None
    prefix_chapters: list[SummaryItem] = Field(default_factory=list)
    numbered_chapters: list[SummaryItem] = Field(default_factory=list)
    suffix_chapters: list[SummaryItem] = Field(default_factory=list)

    def iter_items(self) -> Iterator[SummaryItem]:
        """Top-level items in prefix, numbered, suffix order."""
        yield from self.prefix_chapters
        yield from self.numbered_chapters
        yield from self.suffix_chapters


Link.model_rebuild()
