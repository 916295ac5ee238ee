"""Convert Markdown chapters to FTD markup for the ``ds`` doc-site package.

The converter walks the flat event stream once. Each event produces an
emission and updates two pieces of state: which construct (heading,
paragraph or link) is open, and whether that construct is still waiting for
its text. Only headings, paragraphs, inline links, images and text produce
markup; lists, emphasis, tables, code blocks and the like are passed over.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Iterator

from ftdbook.config import OUTPUT_EXTENSION
from ftdbook.links import adjust_links
from ftdbook.markdown_events import (
    Event,
    EventKind,
    LinkType,
    TagKind,
    clean_codeblock_headers,
    iter_events,
    wrap_tables,
)

logger = logging.getLogger(__name__)

HEADING_PREFIX = "-- ds.h{level}: "
PARAGRAPH_PREFIX = "-- ds.markdown: "
IMAGE_TEMPLATE = (
    "-- ds.image: \n"
    "                src: $assets.files{image_url}\n"
    "                align: center"
)


class MarkdownConstruct(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LINK = "link"


def render_markdown(text: str, curly_quotes: bool = False) -> str:
    """Render a chapter's Markdown to FTD."""
    return render_markdown_with_path(text, curly_quotes, None)


def transpile(
    markdown: str, curly_quotes: bool = False, source_path: Path | str | None = None
) -> str:
    """Render Markdown to FTD, rewriting links relative to ``source_path``."""
    return render_markdown_with_path(markdown, curly_quotes, source_path)


def iter_chapter_events(
    text: str, curly_quotes: bool = False, path: Path | str | None = None
) -> Iterator[Event]:
    """Chapter events after code-block cleanup, link fixing and table wrapping."""
    for event in iter_events(text, curly_quotes=curly_quotes):
        event = clean_codeblock_headers(event)
        event = adjust_links(event, path)
        yield from wrap_tables(event)


def render_markdown_with_path(
    text: str, curly_quotes: bool = False, path: Path | str | None = None
) -> str:
    """Render Markdown to FTD.

    ``path`` is the chapter location relative to the book root. It is only
    passed for the print page so that links there lead back to the chapter
    they were written in.
    """
    rendered: list[str] = []
    current_tag: MarkdownConstruct | None = None
    tag_started = False
    pending = ""

    for event in iter_chapter_events(text, curly_quotes, path):
        emission, current_tag, tag_started = render_event(event, current_tag, tag_started)

        if tag_started:
            pending = emission
            continue

        if current_tag is MarkdownConstruct.LINK:
            rendered.append(f"{emission}{pending}\n")
        elif current_tag is MarkdownConstruct.HEADING:
            rendered.append(f"{pending}{emission}\n")
        else:
            rendered.append(f"{pending}\n{emission}")
        pending = ""

    return "".join(rendered)


def render_event(
    event: Event,
    current_tag: MarkdownConstruct | None,
    tag_started: bool,
) -> tuple[str, MarkdownConstruct | None, bool]:
    """Emission for one event plus the updated ``(current_tag, tag_started)``."""
    if event.kind is EventKind.START:
        return _render_start(event, current_tag)

    if event.kind is EventKind.TEXT:
        return _render_text(event.text, current_tag), current_tag, False

    if event.kind is EventKind.END:
        logger.debug("End: %s", event.tag.kind.value)
        return "", current_tag, False

    logger.debug("No markup for %s event", event.kind.value)
    return "", current_tag, tag_started


def _render_start(
    event: Event, current_tag: MarkdownConstruct | None
) -> tuple[str, MarkdownConstruct | None, bool]:
    tag = event.tag

    if tag.kind is TagKind.HEADING:
        return HEADING_PREFIX.format(level=tag.level), MarkdownConstruct.HEADING, True

    if tag.kind is TagKind.PARAGRAPH:
        return PARAGRAPH_PREFIX, MarkdownConstruct.PARAGRAPH, True

    if tag.kind is TagKind.LINK:
        if tag.link_type is LinkType.INLINE:
            parsed_url = tag.dest.replace(f".{OUTPUT_EXTENSION}", "")
            return f"(/{parsed_url}/)", MarkdownConstruct.LINK, True
        logger.debug("No markup for %s link to %s", tag.link_type.value, tag.dest)
        return "", current_tag, True

    if tag.kind is TagKind.IMAGE:
        image_url = tag.dest.replace("/", ".")
        return IMAGE_TEMPLATE.format(image_url=image_url), current_tag, True

    logger.debug("No markup for %s", tag.kind.value)
    return "", current_tag, True


def _render_text(text: str, current_tag: MarkdownConstruct | None) -> str:
    if current_tag is MarkdownConstruct.HEADING:
        return f" {text}"
    if current_tag is MarkdownConstruct.LINK:
        return f"[{text}]"
    if current_tag is MarkdownConstruct.PARAGRAPH:
        return text
    return ""
