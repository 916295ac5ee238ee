"""Command line interface for ftdbook."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ftdbook.config import FTDBOOK_LOG_LEVEL, SUMMARY_FILE_NAME, load_config
from ftdbook.exceptions import BookLoadError, FtdbookError, log_error_chain
from ftdbook.renderer import build_book
from ftdbook.schemas import Link, PartTitle, Separator, SummaryItem
from ftdbook.summary_parser import parse_summary
from ftdbook.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftdbook",
        description="Build an FTD doc-site package from a Markdown book.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    build_p = sub.add_parser("build", help="Build the book")
    build_p.add_argument("root", nargs="?", default=".", help="Book root directory")
    build_p.add_argument("--dest-dir", "-d", help="Output directory (default: <root>/book)")
    build_p.add_argument(
        "--create-missing",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create chapter files listed in SUMMARY.md that do not exist",
    )
    build_p.add_argument(
        "--curly-quotes", action="store_true", default=None, help="Use typographic quotes"
    )
    build_p.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS)

    summary_p = sub.add_parser("summary", help="Print the chapter outline of SUMMARY.md")
    summary_p.add_argument("root", nargs="?", default=".", help="Book root directory")
    summary_p.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS)

    return parser


def cmd_build(args: argparse.Namespace) -> int:
    root = Path(args.root)
    config = load_config(root)
    overrides = {}
    if args.create_missing is not None:
        overrides["create_missing"] = args.create_missing
    if args.curly_quotes is not None:
        overrides["curly_quotes"] = args.curly_quotes
    if overrides:
        config = config.model_copy(update=overrides)

    destination = build_book(root, config, args.dest_dir)
    logger.info("Book written to %s", destination)
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    root = Path(args.root)
    config = load_config(root)
    summary_md = root / config.src / SUMMARY_FILE_NAME
    try:
        text = summary_md.read_text(encoding="utf-8")
    except OSError as exc:
        raise BookLoadError(f"Couldn't open SUMMARY.md in {str(summary_md.parent)!r} directory") from exc

    summary = parse_summary(text)
    if summary.title:
        print(summary.title)
    for item in summary.iter_items():
        for line in _outline(item, 0):
            print(line)
    return 0


def _outline(item: SummaryItem, depth: int) -> list[str]:
    indent = "  " * depth
    if isinstance(item, Separator):
        return [f"{indent}---"]
    if isinstance(item, PartTitle):
        return [f"{indent}# {item.title}"]

    assert isinstance(item, Link)
    label = f"{item.number} {item.name}" if item.number is not None else item.name
    location = item.location.as_posix() if item.location is not None else "draft"
    lines = [f"{indent}{label} ({location})"]
    for child in item.nested_items:
        lines.extend(_outline(child, depth + 1))
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else FTDBOOK_LOG_LEVEL)

    dispatch = {
        "build": cmd_build,
        "summary": cmd_summary,
    }
    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except FtdbookError as exc:
        log_error_chain(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
