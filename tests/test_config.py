"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from ftdbook.config import (
    DEFAULT_BUILD_DIR,
    DEFAULT_PACKAGE_NAME,
    BuildConfig,
    _env_bool,
    load_config,
)
from ftdbook.exceptions import ConfigError


class TestEnvBool:
    """Tests for boolean environment variables."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", " on "])
    def test_truthy(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("FTDBOOK_TEST_FLAG", value)

        assert _env_bool("FTDBOOK_TEST_FLAG", False) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", ""])
    def test_falsy(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("FTDBOOK_TEST_FLAG", value)

        assert _env_bool("FTDBOOK_TEST_FLAG", True) is False

    def test_default_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FTDBOOK_TEST_FLAG", raising=False)

        assert _env_bool("FTDBOOK_TEST_FLAG", True) is True


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_book_toml(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)

        assert config.title is None
        assert config.print_enable is True
        assert config.package_name == DEFAULT_PACKAGE_NAME

    def test_reads_all_tables(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text(
            "[book]\n"
            'title = "My Book"\n'
            'src = "content"\n'
            "\n"
            "[build]\n"
            'build-dir = "out"\n'
            "create-missing = false\n"
            "\n"
            "[output.ftd]\n"
            "curly-quotes = true\n"
            "print = false\n"
            'package = "example.org/book"\n'
            'download-base-url = "https://example.org/raw"\n'
        )

        config = load_config(tmp_path)

        assert config == BuildConfig(
            title="My Book",
            src=Path("content"),
            build_dir=Path("out"),
            create_missing=False,
            curly_quotes=True,
            print_enable=False,
            package_name="example.org/book",
            download_base_url="https://example.org/raw",
        )

    def test_partial_file_keeps_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text('[book]\ntitle = "Only Title"\n')

        config = load_config(tmp_path)

        assert config.title == "Only Title"
        assert config.build_dir == Path(DEFAULT_BUILD_DIR)

    def test_unknown_keys_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text('[book]\nauthors = ["someone"]\n[output.html]\n')

        assert load_config(tmp_path).title is None

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text("[book\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(tmp_path)

    def test_table_must_be_a_table(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text('book = "nope"\n')

        with pytest.raises(ConfigError, match=r"\[book\] must be a table"):
            load_config(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "book.toml").write_text('[build]\ncreate-missing = "sometimes"\n')

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(tmp_path)
