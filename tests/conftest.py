"""Test setup for ftdbook."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def reset_ftdbook_logging() -> Iterator[None]:
    """Drop handlers installed by the CLI so tests do not share streams."""
    yield
    logger = logging.getLogger("ftdbook")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def book_root(tmp_path: Path) -> Path:
    """A small book with a nested chapter, a draft and an image."""
    src = tmp_path / "src"
    (src / "guide").mkdir(parents=True)
    (src / "images").mkdir()
    (src / "SUMMARY.md").write_text(
        "# Summary\n"
        "\n"
        "[Preface](preface.md)\n"
        "\n"
        "- [Intro](guide/intro.md)\n"
        "    - [Details](guide/details.md)\n"
        "- [Later]()\n"
        "\n"
        "[Appendix](appendix.md)\n"
    )
    (src / "preface.md").write_text("# Preface\n\nWelcome.\n")
    (src / "guide" / "intro.md").write_text(
        "# Intro\n\nSee [details](details.md) and [top](#top).\n"
    )
    (src / "guide" / "details.md").write_text("## Details\n\nMore.\n")
    (src / "appendix.md").write_text("# Appendix\n")
    (src / "images" / "logo.png").write_bytes(b"\x89PNG")
    return tmp_path
