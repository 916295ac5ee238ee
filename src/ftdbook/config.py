"""Local configuration for ftdbook."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ValidationError

from ftdbook.exceptions import ConfigError


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_SRC_DIR = "src"
DEFAULT_BUILD_DIR = "book"
DEFAULT_PACKAGE_NAME = "wasif1024.github.io/fpm-site"
DEFAULT_DOWNLOAD_BASE_URL = "https://raw.githubusercontent.com/wasif1024/fpm-site/main"
CONFIG_FILE_NAME = "book.toml"
SUMMARY_FILE_NAME = "SUMMARY.md"

# Output markup extension; chapters are written as <name>.ftd.
OUTPUT_EXTENSION = "ftd"

FTDBOOK_SRC_DIR = os.getenv("FTDBOOK_SRC_DIR", DEFAULT_SRC_DIR)
FTDBOOK_BUILD_DIR = os.getenv("FTDBOOK_BUILD_DIR", DEFAULT_BUILD_DIR)
FTDBOOK_CREATE_MISSING = _env_bool("FTDBOOK_CREATE_MISSING", True)
FTDBOOK_CURLY_QUOTES = _env_bool("FTDBOOK_CURLY_QUOTES", False)
FTDBOOK_LOG_LEVEL = os.getenv("FTDBOOK_LOG_LEVEL", "INFO")


class BuildConfig(BaseModel):
    """Settings that control how a book is loaded and rendered.

    Attributes:
        title: Optional book title used for the sitemap root.
        src: Source directory holding SUMMARY.md, relative to the book root.
        build_dir: Output directory, relative to the book root.
        create_missing: Create chapter files referenced by SUMMARY.md that do
            not exist yet.
        curly_quotes: Convert straight quotes to typographic ones.
        print_enable: Write the aggregate print.ftd page.
        package_name: fpm package name written to FPM.ftd.
        download_base_url: fpm download base URL written to FPM.ftd.
    """

    title: str | None = None
    src: Path = Path(DEFAULT_SRC_DIR)
    build_dir: Path = Path(DEFAULT_BUILD_DIR)
    create_missing: bool = True
    curly_quotes: bool = False
    print_enable: bool = True
    package_name: str = DEFAULT_PACKAGE_NAME
    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL

    @classmethod
    def from_env(cls) -> "BuildConfig":
        """Defaults with environment overrides applied."""
        return cls(
            src=Path(FTDBOOK_SRC_DIR),
            build_dir=Path(FTDBOOK_BUILD_DIR),
            create_missing=FTDBOOK_CREATE_MISSING,
            curly_quotes=FTDBOOK_CURLY_QUOTES,
        )


def load_config(root: Path) -> BuildConfig:
    """Load book.toml from a book root, falling back to environment defaults.

    Recognised tables are ``[book]`` (``title``, ``src``), ``[build]``
    (``build-dir``, ``create-missing``) and ``[output.ftd]``
    (``curly-quotes``, ``print``, ``package``, ``download-base-url``).

    Raises:
        ConfigError: If book.toml is not valid TOML or has invalid values.
    """
    config = BuildConfig.from_env()
    config_path = root / CONFIG_FILE_NAME
    if not config_path.exists():
        return config

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_path}") from exc

    book = _table(data, "book")
    build = _table(data, "build")
    output = _table(_table(data, "output"), "ftd")

    overrides: dict[str, object] = {}
    for key, table, field in (
        ("title", book, "title"),
        ("src", book, "src"),
        ("build-dir", build, "build_dir"),
        ("create-missing", build, "create_missing"),
        ("curly-quotes", output, "curly_quotes"),
        ("print", output, "print_enable"),
        ("package", output, "package_name"),
        ("download-base-url", output, "download_base_url"),
    ):
        if key in table:
            overrides[field] = table[key]

    try:
        return config.model_validate({**config.model_dump(), **overrides})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}") from exc


def _table(data: dict, key: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{key}] must be a table, got {type(value).__name__}")
    return value
