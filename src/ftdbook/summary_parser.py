"""Parse SUMMARY.md into a :class:`Summary`.

The grammar is deliberately small. SUMMARY.md consists of:

1. An optional title, a single level one heading.
2. Prefix chapters: plain links and separators before the first list.
3. Numbered chapters: one or more parts, each optionally introduced by a
   level one heading and made of (nested) lists whose items contain exactly
   one link. Links with an empty target are draft chapters.
4. Suffix chapters: links and separators after the last list.

Anything else is skipped. Only a suffix followed by a list and a list item
that is not a link are errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

from ftdbook.exceptions import FtdbookError, ParseError, SummaryParseError
from ftdbook.markdown_events import (
    Event,
    EventKind,
    TagKind,
    iter_events,
    normalize_newlines,
)
from ftdbook.schemas import Link, PartTitle, SectionNumber, Separator, Summary, SummaryItem

logger = logging.getLogger(__name__)


def parse_summary(summary: str) -> Summary:
    """Parse the text of a SUMMARY.md file.

    Raises:
        ParseError: If the text does not follow the SUMMARY.md structure. The
            located :class:`SummaryParseError` is the exception's cause.
    """
    return SummaryParser(summary).parse()


class EventCursor:
    """An event iterator with room for exactly one pushed-back event."""

    def __init__(self, events: Iterable[Event]) -> None:
        self._events = iter(events)
        self._back: Event | None = None
        self.offset = 0

    def next(self) -> Event | None:
        if self._back is not None:
            event, self._back = self._back, None
            return event
        event = next(self._events, None)
        if event is not None:
            self.offset = event.offset
        return event

    def push_back(self, event: Event) -> None:
        assert self._back is None, "only one event can be pushed back"
        self._back = event


class SummaryParser:
    """Recursive-descent parser over the SUMMARY.md event stream.

    A parser instance holds the state of one parse and is used once.
    """

    def __init__(self, text: str) -> None:
        self.src = normalize_newlines(text)
        self.cursor = EventCursor(iter_events(self.src))
        # Root items emitted so far; numbering continues across parts.
        self._root_items = 0

    def parse(self) -> Summary:
        title = self._parse_title()
        prefix_chapters = self._with_context(
            "There was an error parsing the prefix chapters",
            lambda: self._parse_affix(is_prefix=True),
        )
        numbered_chapters = self._with_context(
            "There was an error parsing the numbered chapters", self._parse_parts
        )
        suffix_chapters = self._with_context(
            "There was an error parsing the suffix chapters",
            lambda: self._parse_affix(is_prefix=False),
        )
        return Summary(
            title=title,
            prefix_chapters=prefix_chapters,
            numbered_chapters=numbered_chapters,
            suffix_chapters=suffix_chapters,
        )

    def current_location(self) -> tuple[int, int]:
        """Line and column of the most recently read event."""
        previous_text = self.src[: self.cursor.offset]
        line = previous_text.count("\n") + 1
        start_of_line = max(previous_text.rfind("\n"), 0)
        column = len(previous_text[start_of_line:])
        return line, column

    def _with_context(
        self, context: str, parse: Callable[[], list[SummaryItem]]
    ) -> list[SummaryItem]:
        try:
            return parse()
        except FtdbookError as exc:
            raise ParseError(context) from exc

    def _parse_error(self, message: str) -> SummaryParseError:
        line, column = self.current_location()
        return SummaryParseError(message, line=line, column=column)

    def _parse_title(self) -> str | None:
        while True:
            event = self.cursor.next()
            if event is None:
                return None
            if event.is_heading_start(1):
                logger.debug("Found a h1 in the SUMMARY")
                return _stringify_events(self._collect_until(lambda ev: ev.is_heading_end(1)))
            if event.kind is EventKind.HTML:
                # e.g. a comment above the title
                continue
            self.cursor.push_back(event)
            return None

    def _parse_affix(self, *, is_prefix: bool) -> list[SummaryItem]:
        items: list[SummaryItem] = []
        logger.debug("Parsing %s items", "prefix" if is_prefix else "suffix")

        while True:
            event = self.cursor.next()
            if event is None:
                break
            if event.is_start(TagKind.LIST) or event.is_heading_start(1):
                if not is_prefix:
                    raise self._parse_error("Suffix chapters cannot be followed by a list")
                # start of the numbered chapters
                self.cursor.push_back(event)
                break
            if event.is_start(TagKind.LINK):
                items.append(self._parse_link(event.tag.dest))
            elif event.kind is EventKind.RULE:
                items.append(Separator())

        return items

    def _parse_parts(self) -> list[SummaryItem]:
        parts: list[SummaryItem] = []
        root_number = SectionNumber()

        while True:
            event = self.cursor.next()
            if event is None:
                break
            if event.is_start(TagKind.PARAGRAPH):
                # start of the suffix chapters
                self.cursor.push_back(event)
                break
            if event.is_heading_start(1):
                logger.debug("Found a h1 in the SUMMARY")
                title: str | None = _stringify_events(
                    self._collect_until(lambda ev: ev.is_heading_end(1))
                )
            else:
                self.cursor.push_back(event)
                title = None

            numbered_chapters = self._parse_numbered(root_number)
            if title is not None:
                parts.append(PartTitle(title=title))
            parts.extend(numbered_chapters)

        return parts

    def _parse_link(self, href: str) -> Link:
        href = href.replace("%20", " ")
        name = _stringify_events(self._collect_until(lambda ev: ev.is_end(TagKind.LINK)))
        return Link(name=name, location=Path(href) if href else None)

    def _parse_numbered(self, root_number: SectionNumber) -> list[SummaryItem]:
        items: list[SummaryItem] = []
        # The first paragraph start only opens the list; any later one starts
        # a new part or the suffix chapters.
        first = True

        while True:
            event = self.cursor.next()
            if event is None:
                break

            if event.is_start(TagKind.PARAGRAPH):
                if not first:
                    self.cursor.push_back(event)
                    break
            elif event.is_heading_start(1):
                # a new part
                self.cursor.push_back(event)
                break
            elif event.is_start(TagKind.LIST):
                self.cursor.push_back(event)
                bunch_of_items = self._parse_nested_numbered(root_number)
                # numbering continues across lists split by rules or parts
                _update_section_numbers(bunch_of_items, 0, self._root_items)
                self._root_items += len(bunch_of_items)
                items.extend(bunch_of_items)
            elif event.kind is EventKind.START:
                logger.debug("Skipping contents of %s", event.tag.kind.value)
                closing = Event.end(event.tag)
                while True:
                    skipped = self.cursor.next()
                    if skipped is None or skipped == closing:
                        break
            elif event.kind is EventKind.RULE:
                items.append(Separator())

            first = False

        return items

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        logger.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []

        while True:
            event = self.cursor.next()
            if event is None or event.is_end(TagKind.LIST):
                break
            if event.is_start(TagKind.ITEM):
                items.append(self._parse_nested_item(parent, len(items)))
            elif event.is_start(TagKind.LIST):
                # the opening list itself, not a nested one
                if not items:
                    continue
                last_link = _get_last_link(items)
                last_link.nested_items = self._parse_nested_numbered(last_link.number)

        return items

    def _parse_nested_item(self, parent: SectionNumber, num_existing_items: int) -> Link:
        while True:
            event = self.cursor.next()
            if event is not None and event.is_start(TagKind.PARAGRAPH):
                continue
            if event is not None and event.is_start(TagKind.LINK):
                link = self._parse_link(event.tag.dest)
                link.number = parent.append_child(num_existing_items)
                logger.debug(
                    "Found chapter: %s %s (%s)",
                    link.number,
                    link.name,
                    link.location if link.location is not None else "[draft]",
                )
                return link

            logger.warning("Expected a start of a link, actually got %r", event)
            raise self._parse_error(
                "The link items for nested chapters must only contain a hyperlink"
            )

    def _collect_until(self, is_delimiter: Callable[[Event], bool]) -> list[Event]:
        events: list[Event] = []
        while True:
            event = self.cursor.next()
            if event is None:
                logger.debug("Reached end of stream without finding the closing event")
                break
            if is_delimiter(event):
                break
            events.append(event)
        return events


def _update_section_numbers(sections: list[SummaryItem], level: int, by: int) -> None:
    for section in sections:
        if isinstance(section, Link):
            if section.number is not None:
                section.number[level] += by
            _update_section_numbers(section.nested_items, level, by)


def _get_last_link(items: list[SummaryItem]) -> Link:
    for item in reversed(items):
        if isinstance(item, Link):
            return item
    raise ParseError(
        "Unable to get last link because the list of SummaryItems doesn't contain any Links"
    )


def _stringify_events(events: list[Event]) -> str:
    """Plain text of a list of events, dropping all styling."""
    parts: list[str] = []
    for event in events:
        if event.kind in {EventKind.TEXT, EventKind.CODE}:
            parts.append(event.text)
        elif event.kind is EventKind.SOFT_BREAK:
            parts.append(" ")
    return "".join(parts)
