"""Tests for writing the FTD package."""

from __future__ import annotations

from pathlib import Path

import pytest

from ftdbook.book_loader import load_book
from ftdbook.config import BuildConfig
from ftdbook.exceptions import RenderError
from ftdbook.renderer import FtdRenderer, build_book, copy_files_except_ext
from ftdbook.schemas import Book, Chapter, PartTitle, Separator


class TestFtdRenderer:
    """Tests for FtdRenderer.render."""

    def test_writes_one_document_per_chapter(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        book = load_book(book_root / "src", BuildConfig())

        FtdRenderer().render(book, out, BuildConfig())

        assert (out / "preface.ftd").read_text() == (
            "-- ds.h1:  Preface\n\n-- ds.markdown: \nWelcome.\n"
        )
        assert (out / "guide" / "intro.ftd").exists()
        assert (out / "guide" / "details.ftd").exists()
        assert (out / "appendix.ftd").exists()
        assert not list(out.rglob("Later*"))

    def test_first_chapter_is_index(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        book = load_book(book_root / "src", BuildConfig())

        FtdRenderer().render(book, out, BuildConfig())

        assert (out / "index.ftd").read_text() == (out / "preface.ftd").read_text()

    def test_index_skips_leading_drafts(self, tmp_path: Path) -> None:
        book = Book(sections=[Chapter.new_draft("Draft"), Chapter.new("Real", "# Real\n", "real.md")])

        FtdRenderer().render(book, tmp_path / "out", BuildConfig())

        assert (tmp_path / "out" / "index.ftd").read_text() == "-- ds.h1:  Real\n\n"

    def test_chapter_links_are_relative(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        book = load_book(book_root / "src", BuildConfig())

        FtdRenderer().render(book, out, BuildConfig())

        intro = (out / "guide" / "intro.ftd").read_text()
        assert "[details](/details/)" in intro

    def test_print_page_points_back_to_chapters(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        book = load_book(book_root / "src", BuildConfig())

        FtdRenderer().render(book, out, BuildConfig())

        printed = (out / "print.ftd").read_text()
        assert printed.startswith("-- ds.h1:  Preface")
        assert "[details](/guide/details/)" in printed
        assert "[top](//guide/intro/#top/)" in printed
        assert printed.index("Preface") < printed.index("Intro") < printed.index("Appendix")

    def test_print_page_can_be_disabled(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        book = load_book(book_root / "src", BuildConfig())

        FtdRenderer().render(book, out, BuildConfig(print_enable=False))

        assert not (out / "print.ftd").exists()

    def test_clears_stale_output(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        (out / "old").mkdir(parents=True)
        (out / "old" / "stale.ftd").write_text("stale")
        (out / "stale.txt").write_text("stale")

        FtdRenderer().render(Book(), out, BuildConfig())

        assert sorted(path.name for path in out.iterdir()) == ["FPM.ftd", "print.ftd"]

    def test_print_md_is_reserved(self, tmp_path: Path) -> None:
        book = Book(sections=[Chapter.new("Print", "# Print\n", "print.md")])

        with pytest.raises(RenderError, match="reserved"):
            FtdRenderer().render(book, tmp_path / "out", BuildConfig())

    def test_copies_assets(self, book_root: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        src = book_root / "src"
        book = load_book(src, BuildConfig())

        FtdRenderer().render(book, out, BuildConfig(), src_dir=src)

        assert (out / "images" / "logo.png").read_bytes() == b"\x89PNG"
        assert not (out / "SUMMARY.md").exists()
        assert not (out / "preface.md").exists()


class TestPackageFile:
    """Tests for FPM.ftd."""

    def test_header(self) -> None:
        config = BuildConfig(package_name="example.org/book", download_base_url="https://x.test")

        content = FtdRenderer().package_file(Book(), config)

        assert content.startswith(
            "-- import: fpm\n"
            "\n"
            "-- fpm.package: example.org/book\n"
            "download-base-url: https://x.test\n"
            "\n"
            "-- fpm.dependency: fifthtry.github.io/doc-site as ds\n"
            "\n"
            "-- fpm.auto-import: ds\n"
            "\n"
            "-- fpm.sitemap:\n"
        )

    def test_sitemap(self, book_root: Path) -> None:
        book = load_book(book_root / "src", BuildConfig())

        entries = FtdRenderer().sitemap(book, BuildConfig())

        assert entries == [
            "# Preface: /",
            "## Intro: /guide/intro/",
            "  ## Details: /guide/details/",
            "## Appendix: /appendix/",
        ]

    def test_sitemap_uses_book_title_and_parts(self) -> None:
        book = Book(
            sections=[
                Chapter.new("Welcome", "", "welcome.md"),
                Separator(),
                PartTitle(title="Reference"),
                Chapter.new("API", "", "api.md"),
            ]
        )

        entries = FtdRenderer().sitemap(book, BuildConfig(title="My Book"))

        assert entries == ["# My Book: /", "# Reference:", "## API: /api/"]


class TestBuildBook:
    """Tests for build_book."""

    def test_builds_into_default_directory(self, book_root: Path) -> None:
        destination = build_book(book_root)

        assert destination == book_root / "book"
        assert (destination / "FPM.ftd").exists()
        assert (destination / "index.ftd").exists()
        assert (destination / "images" / "logo.png").exists()

    def test_dest_dir_override(self, book_root: Path, tmp_path: Path) -> None:
        destination = build_book(book_root, dest_dir=tmp_path / "site")

        assert destination == tmp_path / "site"
        assert (destination / "guide" / "intro.ftd").exists()

    def test_reads_book_toml(self, book_root: Path) -> None:
        (book_root / "book.toml").write_text('[build]\nbuild-dir = "public"\n')

        destination = build_book(book_root)

        assert destination == book_root / "public"
        assert (destination / "preface.ftd").exists()


class TestCopyFilesExceptExt:
    """Tests for asset copying."""

    def test_skips_blacklisted_extensions_and_avoided_dir(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        (src / "nested").mkdir(parents=True)
        (src / "build").mkdir()
        (src / "a.md").write_text("a")
        (src / "b.css").write_text("b")
        (src / "nested" / "c.js").write_text("c")
        (src / "build" / "d.txt").write_text("d")
        out = tmp_path / "out"

        copy_files_except_ext(src, out, avoid_dir=src / "build")

        copied = sorted(path.relative_to(out).as_posix() for path in out.rglob("*") if path.is_file())
        assert copied == ["b.css", "nested/c.js"]

    def test_custom_blacklist(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        src.mkdir()
        (src / "a.md").write_text("a")
        (src / "b.css").write_text("b")
        (src / "c.js").write_text("c")
        out = tmp_path / "out"

        copy_files_except_ext(src, out, ext_blacklist=frozenset({".css"}))

        assert sorted(path.name for path in out.iterdir()) == ["a.md", "c.js"]
