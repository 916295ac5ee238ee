"""Write a loaded book out as an FTD package."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

from ftdbook.book_loader import load_book
from ftdbook.config import OUTPUT_EXTENSION, BuildConfig, load_config
from ftdbook.exceptions import RenderError
from ftdbook.ftd import render_markdown, render_markdown_with_path
from ftdbook.includes import expand_book_includes
from ftdbook.schemas import Book, BookItem, Chapter, PartTitle

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = f"index.{OUTPUT_EXTENSION}"
PRINT_FILE_NAME = f"print.{OUTPUT_EXTENSION}"
PACKAGE_FILE_NAME = f"FPM.{OUTPUT_EXTENSION}"
DOC_SITE_DEPENDENCY = "fifthtry.github.io/doc-site as ds"

# Chapter sources; everything else in the source directory is copied as-is.
_SOURCE_EXTENSIONS = frozenset({".md"})
_RESERVED_PRINT_PATH = Path("print.md")


def write_file(build_dir: Path, filename: Path | str, content: str) -> Path:
    """Write ``content`` below ``build_dir``, creating parent directories."""
    path = build_dir / filename
    logger.debug("Creating %s", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def remove_dir_content(directory: Path) -> None:
    """Delete everything inside ``directory`` but keep the directory itself."""
    for item in directory.iterdir():
        if item.is_dir() and not item.is_symlink():
            shutil.rmtree(item)
        else:
            item.unlink()


def copy_files_except_ext(
    source: Path,
    destination: Path,
    *,
    avoid_dir: Path | None = None,
    ext_blacklist: frozenset[str] = _SOURCE_EXTENSIONS,
) -> None:
    """Recursively copy ``source`` into ``destination``, skipping some extensions.

    ``avoid_dir`` and ``destination`` itself are never descended into, so a
    build directory inside the source directory is not copied into itself.
    """
    if source.resolve() == destination.resolve():
        return

    skipped = {destination.resolve()}
    if avoid_dir is not None:
        skipped.add(avoid_dir.resolve())

    for entry in sorted(source.iterdir()):
        if entry.is_dir():
            if entry.resolve() in skipped:
                continue
            copy_files_except_ext(
                entry, destination / entry.name, avoid_dir=avoid_dir, ext_blacklist=ext_blacklist
            )
        elif entry.suffix not in ext_blacklist:
            logger.debug("Copying %s -> %s", entry, destination / entry.name)
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry, destination / entry.name)


def output_path(path: Path) -> Path:
    """Location of a chapter's rendered document, relative to the build dir."""
    return path.with_suffix(f".{OUTPUT_EXTENSION}")


def _url_path(path: Path) -> str:
    return PurePosixPath(path.as_posix()).with_suffix("").as_posix()


class FtdRenderer:
    """Render every chapter of a book to FTD and write the package files.

    The output directory receives one ``.ftd`` document per chapter, an
    ``index.ftd`` copy of the first chapter, the ``print.ftd`` page with all
    chapters in order, and ``FPM.ftd`` describing the package and its sitemap.
    """

    name = "ftd"

    def render(
        self,
        book: Book,
        destination: Path | str,
        config: BuildConfig,
        src_dir: Path | str | None = None,
    ) -> None:
        """Render ``book`` into ``destination``.

        Args:
            book: The loaded book.
            destination: Output directory. Existing content is removed first.
            config: Build settings.
            src_dir: Source directory; when given, files that are not chapter
                sources (images and the like) are copied to the output.

        Raises:
            RenderError: If a chapter uses a reserved path or the output cannot
                be written.
        """
        destination = Path(destination)
        try:
            self._render(book, destination, config, src_dir)
        except OSError as exc:
            raise RenderError(f"Rendering failed for {destination}") from exc

    def _render(
        self,
        book: Book,
        destination: Path,
        config: BuildConfig,
        src_dir: Path | str | None,
    ) -> None:
        if destination.exists():
            logger.debug("Cleaning %s", destination)
            remove_dir_content(destination)
        destination.mkdir(parents=True, exist_ok=True)

        print_content: list[str] = []
        index_chapter = next(
            (chapter for chapter in book.chapters() if not chapter.is_draft_chapter()), None
        )
        for item in book.iter():
            self.render_item(
                item, destination, config, print_content, is_index=item is index_chapter
            )

        if config.print_enable:
            write_file(destination, PRINT_FILE_NAME, "".join(print_content))

        logger.debug("Writing package file")
        write_file(destination, PACKAGE_FILE_NAME, self.package_file(book, config))

        if src_dir is not None:
            copy_files_except_ext(Path(src_dir), destination, avoid_dir=destination)

    def render_item(
        self,
        item: BookItem,
        destination: Path,
        config: BuildConfig,
        print_content: list[str],
        *,
        is_index: bool = False,
    ) -> None:
        """Render one book item; only non-draft chapters produce output."""
        if not isinstance(item, Chapter) or item.is_draft_chapter():
            return

        path = item.path
        if path == _RESERVED_PRINT_PATH:
            raise RenderError(f"{path.as_posix()} is reserved for internal use")

        content = render_markdown(item.content, config.curly_quotes)
        print_content.append(
            render_markdown_with_path(item.content, config.curly_quotes, path)
        )

        write_file(destination, output_path(path), content)
        if is_index:
            write_file(destination, INDEX_FILE_NAME, content)

    def package_file(self, book: Book, config: BuildConfig) -> str:
        """Contents of FPM.ftd: package header, ``ds`` dependency and sitemap."""
        lines = [
            "-- import: fpm",
            "",
            f"-- fpm.package: {config.package_name}",
            f"download-base-url: {config.download_base_url}",
            "",
            f"-- fpm.dependency: {DOC_SITE_DEPENDENCY}",
            "",
            "-- fpm.auto-import: ds",
            "",
            "-- fpm.sitemap:",
            "",
        ]
        lines.extend(self.sitemap(book, config))
        return "\n".join(lines) + "\n"

    def sitemap(self, book: Book, config: BuildConfig) -> list[str]:
        """Sitemap entries for the book, in reading order.

        The first chapter is the site root. Later chapters link to their
        rendered document and are indented by nesting depth.
        """
        entries: list[str] = []
        first = True
        for item in book.iter():
            if isinstance(item, PartTitle):
                entries.append(f"# {item.title}:")
                continue
            if not isinstance(item, Chapter) or item.is_draft_chapter():
                continue
            if first:
                entries.append(f"# {config.title or item.name}: /")
                first = False
                continue
            indent = "  " * len(item.parent_names)
            entries.append(f"{indent}## {item.name}: /{_url_path(item.path)}/")
        return entries


def build_book(
    root: Path | str,
    config: BuildConfig | None = None,
    dest_dir: Path | str | None = None,
) -> Path:
    """Load the book under ``root``, expand its includes and render it.

    Args:
        root: Book root holding book.toml and the source directory.
        config: Build settings; read from ``root`` when omitted.
        dest_dir: Output directory; defaults to the configured build dir.

    Returns:
        The output directory.
    """
    root = Path(root)
    config = config or load_config(root)
    src_dir = root / config.src
    destination = Path(dest_dir) if dest_dir is not None else root / config.build_dir

    logger.info("Book building has started")
    book = load_book(src_dir, config)
    expand_book_includes(book, src_dir)
    logger.info("Running the %s backend", FtdRenderer.name)
    FtdRenderer().render(book, destination, config, src_dir=src_dir)
    return destination
