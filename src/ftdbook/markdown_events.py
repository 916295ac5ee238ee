"""Flat Markdown event stream on top of markdown-it-py.

markdown-it produces a token list where inline content is nested under
``inline`` tokens. Both the SUMMARY.md parser and the FTD transpiler want a
single flat stream of start/end/text events instead, so this module walks the
tokens and emits :class:`Event` objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

logger = logging.getLogger(__name__)

TABLE_WRAPPER_OPEN = '<div class="table-wrapper">'
TABLE_WRAPPER_CLOSE = "</div>"

_TASK_CHECKBOX_CLASS = "task-list-item-checkbox"


class EventKind(str, Enum):
    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"
    FOOTNOTE_REFERENCE = "footnote_reference"
    TASK_LIST_MARKER = "task_list_marker"


class TagKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    ITEM = "item"
    LINK = "link"
    IMAGE = "image"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    FOOTNOTE_DEFINITION = "footnote_definition"


class LinkType(str, Enum):
    INLINE = "inline"
    REFERENCE = "reference"
    AUTOLINK = "autolink"


class CodeBlockKind(str, Enum):
    FENCED = "fenced"
    INDENTED = "indented"


@dataclass(frozen=True)
class Tag:
    """A container construct opened by a start event and closed by an end event.

    Only the attributes relevant to ``kind`` are set: ``level`` for headings,
    ``start`` for ordered lists, ``link_type``/``dest``/``title`` for links and
    images, ``code_block_kind``/``info`` for code blocks and ``label`` for
    footnote definitions.
    """

    kind: TagKind
    level: int | None = None
    start: int | None = None
    link_type: LinkType | None = None
    dest: str = ""
    title: str = ""
    code_block_kind: CodeBlockKind | None = None
    info: str = ""
    label: str = ""


@dataclass(frozen=True)
class Event:
    """One item of the flat event stream.

    ``offset`` is the character offset in the source where the event starts;
    it is used for error locations and ignored by equality.
    """

    kind: EventKind
    tag: Tag | None = None
    text: str = ""
    checked: bool = False
    offset: int = field(default=0, compare=False)

    @classmethod
    def start(cls, tag: Tag, offset: int = 0) -> "Event":
        return cls(EventKind.START, tag=tag, offset=offset)

    @classmethod
    def end(cls, tag: Tag, offset: int = 0) -> "Event":
        return cls(EventKind.END, tag=tag, offset=offset)

    @classmethod
    def html(cls, html: str, offset: int = 0) -> "Event":
        return cls(EventKind.HTML, text=html, offset=offset)

    def is_start(self, kind: TagKind | None = None) -> bool:
        return self.kind is EventKind.START and (kind is None or self.tag.kind is kind)

    def is_end(self, kind: TagKind | None = None) -> bool:
        return self.kind is EventKind.END and (kind is None or self.tag.kind is kind)

    def is_heading_start(self, level: int) -> bool:
        return self.is_start(TagKind.HEADING) and self.tag.level == level

    def is_heading_end(self, level: int) -> bool:
        return self.is_end(TagKind.HEADING) and self.tag.level == level

    def with_tag(self, tag: Tag) -> "Event":
        return replace(self, tag=tag)


def _keep_link(url: str) -> str:
    return url


def new_markdown_parser(curly_quotes: bool = False) -> MarkdownIt:
    """Create the Markdown parser used for both SUMMARY.md and chapters.

    Tables, footnotes, strikethrough and task lists are always enabled;
    ``curly_quotes`` turns on typographic quotes and replacements.
    """
    md = MarkdownIt("commonmark", {"typographer": curly_quotes, "store_labels": True})
    md.enable(["table", "strikethrough"])
    if curly_quotes:
        md.enable(["replacements", "smartquotes"])
    md.use(footnote_plugin).use(tasklists_plugin)
    # Destinations are file paths; keep them exactly as written.
    md.normalizeLink = _keep_link
    return md


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def iter_events(text: str, *, curly_quotes: bool = False) -> Iterator[Event]:
    """Parse Markdown and yield a flat event stream."""
    text = normalize_newlines(text)
    tokens = _restore_footnote_positions(new_markdown_parser(curly_quotes).parse(text))
    yield from _EventFlattener(text).flatten(tokens)


def _restore_footnote_positions(tokens: list[Token]) -> list[Token]:
    """Move footnote definitions back to where they were written.

    The footnote plugin collects every definition into one block at the end
    of the document. Each definition is put back before the first top-level
    block that starts after it.
    """
    block_start = next(
        (index for index, token in enumerate(tokens) if token.type == "footnote_block_open"),
        None,
    )
    if block_start is None:
        return tokens

    definitions: list[list[Token]] = []
    for token in tokens[block_start + 1 :]:
        if token.type == "footnote_block_close":
            break
        if token.type == "footnote_open":
            definitions.append([token])
        elif definitions:
            definitions[-1].append(token)

    for definition in definitions:
        line = _definition_line(definition)
        if line != float("inf"):
            # footnote_open has no map of its own
            definition[0].map = [int(line), int(line) + 1]

    pending = sorted(definitions, key=_definition_line)
    restored: list[Token] = []
    for token in tokens[:block_start]:
        if token.level == 0 and token.map:
            while pending and _definition_line(pending[0]) < token.map[0]:
                restored.extend(pending.pop(0))
        restored.append(token)
    for definition in pending:
        restored.extend(definition)
    return restored


def _definition_line(definition: list[Token]) -> float:
    for token in definition:
        if token.map:
            return token.map[0]
    # inline footnotes have no source line
    return float("inf")


class _EventFlattener:
    """Turn markdown-it tokens into events, tracking open tags.

    Every start event pushes its tag (or ``None`` for containers that have no
    event counterpart) so the matching close produces an end event carrying
    the same tag.

    Block tokens only carry line numbers, so block events point at the first
    non-blank character of their first line. Inline tokens carry no position
    at all; they are located by searching the block's source lines for their
    text or markup, moving forward from the previous inline token.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._line_offsets = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_offsets.append(index + 1)
        self._lines = text.split("\n")
        self._stack: list[Tag | None] = []
        self._offset = 0
        self._inline_pos = 0
        self._inline_end = len(text)
        self._in_table_head = False

    def flatten(self, tokens: Iterable[Token]) -> Iterator[Event]:
        for token in tokens:
            if token.map:
                self._offset = self._line_start(token.map[0])
                if token.type == "inline":
                    self._inline_pos = self._line_offset(token.map[0])
                    self._inline_end = self._line_offset(token.map[1])
            yield from self._convert(token)

    def _line_offset(self, line: int) -> int:
        if line >= len(self._line_offsets):
            return len(self._text)
        return self._line_offsets[line]

    def _line_start(self, line: int) -> int:
        if line >= len(self._line_offsets):
            return self._line_offsets[-1]
        source = self._lines[line] if line < len(self._lines) else ""
        indent = len(source) - len(source.lstrip())
        return self._line_offsets[line] + indent

    def _convert_inline(self, children: list[Token] | None) -> Iterator[Event]:
        for child in children or []:
            self._offset = self._locate(child)
            yield from self._convert(child)

    def _locate(self, token: Token) -> int:
        """Find where an inline token starts and move past it."""
        kind = token.type
        if kind == "link_open":
            needle = "<" if token.markup == "autolink" else "["
        elif kind == "link_close":
            needle = ">" if token.markup == "autolink" else "]"
        elif kind == "image":
            needle = "!["
        elif kind == "footnote_ref":
            needle = "[^"
        elif kind in {"softbreak", "hardbreak"}:
            needle = "\n"
        elif kind in {"text", "html_inline"}:
            needle = token.content
        else:
            # emphasis delimiters, code spans and escapes
            needle = token.markup

        found = self._text.find(needle, self._inline_pos, self._inline_end) if needle else -1
        if found < 0:
            # rewritten text such as smart quotes or joined escapes
            return self._inline_pos
        self._inline_pos = found + len(needle)
        if kind == "code_inline":
            closing = self._text.find(token.markup, self._inline_pos, self._inline_end)
            if closing >= 0:
                self._inline_pos = closing + len(token.markup)
        return found

    def _open(self, tag: Tag | None) -> Iterator[Event]:
        self._stack.append(tag)
        if tag is not None:
            yield Event.start(tag, self._offset)

    def _close(self) -> Iterator[Event]:
        tag = self._stack.pop() if self._stack else None
        if tag is not None:
            yield Event.end(tag, self._offset)

    def _convert(self, token: Token) -> Iterator[Event]:
        kind = token.type
        offset = self._offset

        if kind.endswith("_close"):
            if kind == "thead_close":
                self._in_table_head = False
            yield from self._close()
            return

        if kind == "heading_open":
            yield from self._open(Tag(TagKind.HEADING, level=int(token.tag[1:])))
        elif kind == "paragraph_open":
            # tight list items wrap their text in hidden paragraphs
            yield from self._open(None if token.hidden else Tag(TagKind.PARAGRAPH))
        elif kind == "bullet_list_open":
            yield from self._open(Tag(TagKind.LIST))
        elif kind == "ordered_list_open":
            start = token.attrGet("start")
            yield from self._open(Tag(TagKind.LIST, start=int(start) if start else 1))
        elif kind == "list_item_open":
            yield from self._open(Tag(TagKind.ITEM))
        elif kind == "blockquote_open":
            yield from self._open(Tag(TagKind.BLOCKQUOTE))
        elif kind == "table_open":
            yield from self._open(Tag(TagKind.TABLE))
        elif kind == "thead_open":
            self._in_table_head = True
            yield from self._open(Tag(TagKind.TABLE_HEAD))
        elif kind == "tbody_open":
            yield from self._open(None)
        elif kind == "tr_open":
            yield from self._open(None if self._in_table_head else Tag(TagKind.TABLE_ROW))
        elif kind in {"th_open", "td_open"}:
            yield from self._open(Tag(TagKind.TABLE_CELL))
        elif kind in {"fence", "code_block"}:
            if kind == "fence":
                tag = Tag(TagKind.CODE_BLOCK, code_block_kind=CodeBlockKind.FENCED, info=token.info)
            else:
                tag = Tag(TagKind.CODE_BLOCK, code_block_kind=CodeBlockKind.INDENTED)
            yield Event.start(tag, offset)
            if token.content:
                yield Event(EventKind.TEXT, text=token.content, offset=offset)
            yield Event.end(tag, offset)
        elif kind == "hr":
            yield Event(EventKind.RULE, offset=offset)
        elif kind in {"html_block", "html_inline"}:
            if _TASK_CHECKBOX_CLASS in token.content:
                checked = "checked" in token.content.replace(_TASK_CHECKBOX_CLASS, "")
                yield Event(EventKind.TASK_LIST_MARKER, checked=checked, offset=offset)
            else:
                yield Event.html(token.content, offset)
        elif kind == "inline":
            yield from self._convert_inline(token.children)
        elif kind in {"text", "text_special"}:
            if token.content:
                yield Event(EventKind.TEXT, text=token.content, offset=offset)
        elif kind == "code_inline":
            yield Event(EventKind.CODE, text=token.content, offset=offset)
        elif kind == "softbreak":
            yield Event(EventKind.SOFT_BREAK, offset=offset)
        elif kind == "hardbreak":
            yield Event(EventKind.HARD_BREAK, offset=offset)
        elif kind == "link_open":
            yield from self._open(
                Tag(
                    TagKind.LINK,
                    link_type=_link_type(token),
                    dest=str(token.attrGet("href") or ""),
                    title=str(token.attrGet("title") or ""),
                )
            )
        elif kind == "image":
            tag = Tag(
                TagKind.IMAGE,
                link_type=_link_type(token),
                dest=str(token.attrGet("src") or ""),
                title=str(token.attrGet("title") or ""),
            )
            yield Event.start(tag, offset)
            yield from self._convert_inline(token.children)
            yield Event.end(tag, offset)
        elif kind == "em_open":
            yield from self._open(Tag(TagKind.EMPHASIS))
        elif kind == "strong_open":
            yield from self._open(Tag(TagKind.STRONG))
        elif kind == "s_open":
            yield from self._open(Tag(TagKind.STRIKETHROUGH))
        elif kind == "footnote_open":
            yield from self._open(
                Tag(TagKind.FOOTNOTE_DEFINITION, label=_footnote_label(token))
            )
        elif kind == "footnote_ref":
            yield Event(EventKind.FOOTNOTE_REFERENCE, text=_footnote_label(token), offset=offset)
        else:
            logger.debug("Ignoring markdown token %s", kind)
            if token.nesting == 1:
                yield from self._open(None)


def _link_type(token: Token) -> LinkType:
    if token.markup in {"autolink", "linkify"}:
        return LinkType.AUTOLINK
    if token.meta and "label" in token.meta:
        return LinkType.REFERENCE
    return LinkType.INLINE


def _footnote_label(token: Token) -> str:
    meta = token.meta or {}
    label = meta.get("label")
    if label:
        return str(label)
    return str(meta.get("id", 0) + 1)


def clean_codeblock_headers(event: Event) -> Event:
    """Fold whitespace in a fenced code block's info string into commas.

    Spaces and tabs become ``,``; any other whitespace is dropped, so the info
    string can be used as a list of class-like tokens downstream.
    """
    if not event.is_start(TagKind.CODE_BLOCK):
        return event
    if event.tag.code_block_kind is not CodeBlockKind.FENCED:
        return event
    info = "".join(
        "," if char in " \t" else char
        for char in event.tag.info
        if char in " \t" or not char.isspace()
    )
    return event.with_tag(replace(event.tag, info=info))


def wrap_tables(event: Event) -> list[Event]:
    """Surround tables with a wrapper div so they can be styled."""
    if event.is_start(TagKind.TABLE):
        return [Event.html(TABLE_WRAPPER_OPEN, event.offset), event]
    if event.is_end(TagKind.TABLE):
        return [event, Event.html(TABLE_WRAPPER_CLOSE, event.offset)]
    return [event]
