"""Tests for link destination rewriting."""

from __future__ import annotations

from pathlib import Path

import pytest

from ftdbook.links import adjust_links, fix_html, fix_link
from ftdbook.markdown_events import Event, EventKind, LinkType, Tag, TagKind


class TestFixLink:
    """Tests for fix_link."""

    @pytest.mark.parametrize(
        ("dest", "expected"),
        [
            ("intro.md", "intro.ftd"),
            ("guide/intro.md", "guide/intro.ftd"),
            ("intro.md#setup", "intro.ftd#setup"),
            ("image.png", "image.png"),
            ("#section", "#section"),
        ],
    )
    def test_without_path(self, dest: str, expected: str) -> None:
        assert fix_link(dest) == expected

    @pytest.mark.parametrize(
        "dest",
        [
            "https://example.com/page.md",
            "http://example.com",
            "mailto:someone@example.com",
        ],
    )
    def test_scheme_links_untouched(self, dest: str) -> None:
        assert fix_link(dest, Path("guide/intro.md")) == dest

    def test_fragment_with_path(self) -> None:
        assert fix_link("#foo", Path("guide/intro.md")) == "/guide/intro.ftd/#foo"

    def test_relative_link_with_path(self) -> None:
        assert fix_link("other.md#section", Path("guide/intro.md")) == "guide/other.ftd#section"

    def test_dot_relative_link_with_path(self) -> None:
        assert fix_link("./other.md#section", Path("guide/intro.md")) == "guide/other.ftd#section"

    def test_path_at_root_adds_no_prefix(self) -> None:
        assert fix_link("other.md", Path("intro.md")) == "other.ftd"

    def test_string_path(self) -> None:
        assert fix_link("#top", "intro.md") == "/intro.ftd/#top"


class TestFixHtml:
    """Tests for rewriting links in raw HTML."""

    def test_anchor_href(self) -> None:
        html = '<a href="intro.md#part">Intro</a>'

        assert fix_html(html) == '<a href="intro.ftd#part">Intro</a>'

    def test_image_src_with_path(self) -> None:
        html = '<img alt="x" src="diagram.md">'

        assert fix_html(html, Path("guide/intro.md")) == '<img alt="x" src="guide/diagram.ftd">'

    def test_other_tags_untouched(self) -> None:
        html = '<link href="style.md">'

        assert fix_html(html) == html


class TestAdjustLinks:
    """Tests for adjust_links on events."""

    def test_link_event(self) -> None:
        event = Event.start(Tag(TagKind.LINK, link_type=LinkType.INLINE, dest="a.md", title="A"))

        adjusted = adjust_links(event)

        assert adjusted.tag.dest == "a.ftd"
        assert adjusted.tag.title == "A"
        assert adjusted.tag.link_type is LinkType.INLINE

    def test_image_event(self) -> None:
        event = Event.start(Tag(TagKind.IMAGE, link_type=LinkType.INLINE, dest="#x"))

        assert adjust_links(event, Path("a.md")).tag.dest == "/a.ftd/#x"

    def test_html_event(self) -> None:
        event = Event.html('<a href="b.md">b</a>')

        assert adjust_links(event).text == '<a href="b.ftd">b</a>'

    def test_other_events_untouched(self) -> None:
        event = Event(EventKind.TEXT, text="intro.md")

        assert adjust_links(event) is event
