"""Rewrite link destinations so they point at rendered FTD documents."""

from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path, PurePosixPath

from ftdbook.config import OUTPUT_EXTENSION
from ftdbook.markdown_events import Event, EventKind, TagKind

_SCHEME_LINK_RE = re.compile(r"^[a-z][a-z0-9+.-]*:")
_MD_LINK_RE = re.compile(r"(?P<link>.*)\.md(?P<anchor>#.*)?")
# Not a general HTML parser: only the href/src of <a> and <img> tags.
_HTML_LINK_RE = re.compile(r'(<(?:a|img) [^>]*?(?:src|href)=")([^"]+?)"')


def _as_posix(path: Path | str) -> str:
    return str(path).replace("\\", "/")


def fix_link(dest: str, path: Path | str | None = None) -> str:
    """Adjust one link destination.

    ``path`` is the location of the chapter being rendered, relative to the
    book root. It is only given for the aggregate print page, where links have
    to point back at the chapter they came from.

    - ``#fragment`` becomes ``/<path with .ftd>/#fragment`` when ``path`` is
      known and is left alone otherwise.
    - Links with a scheme (``https:``, ``mailto:``...) are left alone.
    - Relative ``.md`` links get the output extension, keeping any anchor,
      and are prefixed with the parent directory of ``path``.
    """
    if dest.startswith("#"):
        if path is None:
            return dest
        base = _as_posix(path)
        if base.endswith(".md"):
            base = f"{base[:-3]}.{OUTPUT_EXTENSION}"
        return f"/{base}/{dest}"

    if _SCHEME_LINK_RE.match(dest):
        return dest

    fixed_link = ""
    if path is not None:
        base = PurePosixPath(_as_posix(path)).parent.as_posix()
        if base not in {"", "."}:
            fixed_link = f"{base}/"
            if dest.startswith("./"):
                dest = dest[2:]

    match = _MD_LINK_RE.search(dest)
    if match:
        fixed_link += f"{match.group('link')}.{OUTPUT_EXTENSION}"
        if match.group("anchor"):
            fixed_link += match.group("anchor")
    else:
        fixed_link += dest
    return fixed_link


def fix_html(html: str, path: Path | str | None = None) -> str:
    """Apply :func:`fix_link` to ``href``/``src`` attributes in raw HTML."""
    return _HTML_LINK_RE.sub(
        lambda match: f'{match.group(1)}{fix_link(match.group(2), path)}"', html
    )


def adjust_links(event: Event, path: Path | str | None = None) -> Event:
    """Rewrite the destination of link, image and raw HTML events."""
    if event.is_start(TagKind.LINK) or event.is_start(TagKind.IMAGE):
        return event.with_tag(replace(event.tag, dest=fix_link(event.tag.dest, path)))
    if event.kind is EventKind.HTML:
        return Event.html(fix_html(event.text, path), event.offset)
    return event
