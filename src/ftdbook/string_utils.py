"""Line-range and anchor helpers for including parts of files in chapters."""

from __future__ import annotations

import re

ANCHOR_START = re.compile(r"ANCHOR:\s*(?P<anchor_name>[\w_-]+)")
ANCHOR_END = re.compile(r"ANCHOR_END:\s*(?P<anchor_name>[\w_-]+)")


def _lines(s: str) -> list[str]:
    """Split on ``\\n`` without a trailing empty line, dropping ``\\r``."""
    if not s:
        return []
    lines = s.split("\n")
    if s.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _in_range(index: int, start: int | None, end: int | None, inclusive: bool) -> bool:
    if start is not None and index < start:
        return False
    if end is None:
        return True
    return index <= end if inclusive else index < end


def take_lines(
    s: str, start: int | None = None, end: int | None = None, *, inclusive: bool = False
) -> str:
    """Take a range of lines from a string.

    Lines are 0-indexed. ``end`` is exclusive unless ``inclusive`` is set, and
    ``None`` leaves that side of the range open.

    Examples:
        >>> take_lines("a\\nb\\nc\\nd", 1, 3)
        'b\\nc'
        >>> take_lines("a\\nb\\nc", 1)
        'b\\nc'
    """
    lines = _lines(s)
    first = start or 0
    if end is None:
        return "\n".join(lines[first:])
    last = end + 1 if inclusive else end
    return "\n".join(lines[first:max(last, first)])


def take_anchored_lines(s: str, anchor: str) -> str:
    """Take the lines between ``ANCHOR: name`` and ``ANCHOR_END: name``.

    Lines holding other anchors are left out; an unterminated anchor runs to
    the end of the input and an unknown anchor yields an empty string.
    """
    retained: list[str] = []
    anchor_found = False

    for line in _lines(s):
        if anchor_found:
            end = ANCHOR_END.search(line)
            if end is not None:
                if end.group("anchor_name") == anchor:
                    break
            elif not ANCHOR_START.search(line):
                retained.append(line)
        else:
            start = ANCHOR_START.search(line)
            if start is not None and start.group("anchor_name") == anchor:
                anchor_found = True

    return "\n".join(retained)


def take_rustdoc_include_lines(
    s: str, start: int | None = None, end: int | None = None, *, inclusive: bool = False
) -> str:
    """Keep lines in the range as-is and prefix every other line with ``# ``.

    The prefixed lines are hidden in rendered code but still part of the
    snippet when it is expanded or compiled.
    """
    output = []
    for index, line in enumerate(_lines(s)):
        if _in_range(index, start, end, inclusive):
            output.append(line)
        else:
            output.append(f"# {line}")
    return "\n".join(output)


def take_rustdoc_include_anchored_lines(s: str, anchor: str) -> str:
    """Keep lines inside the anchor as-is and prefix the rest with ``# ``.

    Anchor comment lines themselves are dropped.
    """
    output: list[str] = []
    within_anchored_section = False

    for line in _lines(s):
        if within_anchored_section:
            end = ANCHOR_END.search(line)
            if end is not None:
                if end.group("anchor_name") == anchor:
                    within_anchored_section = False
            elif not ANCHOR_START.search(line):
                output.append(line)
            continue

        start = ANCHOR_START.search(line)
        if start is not None:
            if start.group("anchor_name") == anchor:
                within_anchored_section = True
        elif not ANCHOR_END.search(line):
            output.append(f"# {line}")

    return "\n".join(output)


def bracket_escape(s: str) -> str:
    """Escape ``<`` and ``>`` as HTML entities."""
    return s.replace("<", "&lt;").replace(">", "&gt;")
