from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from markdown_mode.config import (
    ConfigError,
    FormatOptions,
    apply_overrides,
    build_options,
    load_options,
    validate_options,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".markdown-mode.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_options_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        preserve_code_blocks = false
        preserve_blockquotes = false
        max_consecutive_blank_lines = 2
        max_file_size = 100
        """,
    )

    options = load_options(tmp_path)

    assert options == FormatOptions(
        preserve_code_blocks=False,
        preserve_blockquotes=False,
        max_consecutive_blank_lines=2,
        max_file_size=100,
    )


def test_loads_options_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [markdown-mode]
        max_consecutive_blank_lines = 0
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    options = load_options(nested)

    assert options.max_consecutive_blank_lines == 0
    assert options.preserve_code_blocks is True


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.markdown-mode]
        preserve_blockquotes = false
        """,
    )

    assert load_options(tmp_path).preserve_blockquotes is False


def test_dashed_keys_are_accepted(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max-consecutive-blank-lines = 3
        """,
    )

    assert load_options(tmp_path).max_consecutive_blank_lines == 3


def test_load_options_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max_consecutive_blank_lines = 4
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    assert load_options(nested).max_consecutive_blank_lines == 4


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max_consecutive_blank_lines = 5
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.other]
        value = 1
        """,
    )

    assert load_options(child).max_consecutive_blank_lines == 5


def test_empty_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max_consecutive_blank_lines = 5
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.markdown-mode]
        """,
    )

    assert load_options(child) == FormatOptions()


def test_load_options_returns_defaults_when_missing(tmp_path: Path):
    assert load_options(tmp_path) == FormatOptions()


def test_load_options_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        preserve_code_blocks = false
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()

    assert load_options(nested).preserve_code_blocks is False


def test_load_options_errors_on_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max_consecutive_blank_lines = 1
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError, match="unexpected"):
        load_options(tmp_path)


def test_load_options_errors_on_non_table(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        markdown-mode = 3
        """,
    )

    with pytest.raises(ConfigError):
        load_options(tmp_path)


@pytest.mark.parametrize(
    "options",
    [
        FormatOptions(max_consecutive_blank_lines=-1),
        FormatOptions(max_file_size=0),
        FormatOptions(max_consecutive_blank_lines="1"),  # type: ignore[arg-type]
        FormatOptions(max_consecutive_blank_lines=True),  # type: ignore[arg-type]
        FormatOptions(max_file_size=1.5),  # type: ignore[arg-type]
        FormatOptions(preserve_code_blocks="yes"),  # type: ignore[arg-type]
        FormatOptions(preserve_blockquotes=1),  # type: ignore[arg-type]
    ],
)
def test_validate_options_rejects_invalid_values(options: FormatOptions):
    with pytest.raises(ConfigError):
        validate_options(options)


def test_validate_options_accepts_zero_blank_lines():
    validate_options(FormatOptions(max_consecutive_blank_lines=0))


def test_apply_overrides_ignores_none():
    options = FormatOptions()

    assert apply_overrides(options, max_consecutive_blank_lines=None) is options
    assert apply_overrides(options, preserve_code_blocks=False).preserve_code_blocks is False


def test_build_options_applies_overrides_over_file(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-mode]
        max_consecutive_blank_lines = 3
        preserve_blockquotes = false
        """,
    )

    options = build_options(tmp_path, max_consecutive_blank_lines=0)

    assert options.max_consecutive_blank_lines == 0
    assert options.preserve_blockquotes is False


def test_build_options_validates(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_options(tmp_path, max_consecutive_blank_lines=-2)


def test_build_options_rejects_unknown_override(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_options(tmp_path, header_text="nope")
