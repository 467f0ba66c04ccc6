"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

CONFIG_TABLE = "markdown-mode"
CONFIG_DOTFILE = ".markdown-mode.toml"


@dataclass(frozen=True)
class FormatOptions:
    """Options for the compact and human transforms.

    Attributes:
        preserve_code_blocks: Protect fenced and inline code from reformatting.
            When False, code is reformatted like ordinary text.
        preserve_blockquotes: Protect blockquote runs from reformatting.
        max_consecutive_blank_lines: Longest blank-line run the compact
            transform keeps. Ignored by the human transform.
        max_file_size: Maximum file size in bytes the CLI will process.

    Examples:
        FormatOptions(max_consecutive_blank_lines=0, preserve_blockquotes=False)
    """

    # Protection
    preserve_code_blocks: bool = True
    preserve_blockquotes: bool = True

    # Compact layout
    max_consecutive_blank_lines: int = 1

    # Limits
    max_file_size: int = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_consecutive_blank_lines` must be >= 0")
    """


def load_options(search_path: Path) -> FormatOptions:
    """Load options from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.markdown-mode]`` table from `pyproject.toml` and the
    ``[markdown-mode]`` or ``[tool.markdown-mode]`` table from
    `.markdown-mode.toml` when present. Returns defaults when no configuration
    is found. TOML files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for the lookup.

    Returns:
        FormatOptions: Loaded options with defaults applied when necessary.

    Raises:
        ConfigError: If a table is present but is not a mapping or contains
            unsupported keys.

    Examples:
        load_options(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_options = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_options is not None:
            return pyproject_options

        dotfile_options = _load_from_file(
            current / CONFIG_DOTFILE,
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_options is not None:
            return dotfile_options

        parent = current.parent
        if parent == current:
            break
        current = parent

    return FormatOptions()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> FormatOptions | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_options = _extract_table(data, table_path)
        if raw_options is _MISSING:
            continue
        return _build_options_from_raw(raw_options, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_options_from_raw(
    raw_options: object, config_file: Path, table_path: tuple[str, ...]
) -> FormatOptions:
    table_display = ".".join(table_path)

    if not isinstance(raw_options, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_options:
        return FormatOptions()

    # TOML keys may use dashes, as in `max-consecutive-blank-lines`.
    normalized = {key.replace("-", "_"): value for key, value in raw_options.items()}
    known = {option.name for option in fields(FormatOptions)}
    unknown = sorted(set(normalized) - known)
    if unknown:
        raise ConfigError(
            f"Invalid `[{table_display}]` settings in {config_file}: "
            f"unsupported key(s) {', '.join(unknown)}"
        )

    return FormatOptions(**normalized)


def validate_options(options: FormatOptions) -> None:
    """Validate a `FormatOptions` instance.

    Args:
        options: Options to validate.

    Raises:
        ConfigError: If a flag is not a boolean or a numeric value is not an
            integer in range.

    Examples:
        validate_options(FormatOptions(max_consecutive_blank_lines=2))
    """
    for name in ("preserve_code_blocks", "preserve_blockquotes"):
        if not isinstance(getattr(options, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    _ensure_integers(
        {
            "max_consecutive_blank_lines": options.max_consecutive_blank_lines,
            "max_file_size": options.max_file_size,
        }
    )

    if options.max_consecutive_blank_lines < 0:
        raise ConfigError("`max_consecutive_blank_lines` must be >= 0")
    _ensure_positive({"max_file_size": options.max_file_size})


def apply_overrides(options: FormatOptions, **overrides: object) -> FormatOptions:
    """Apply override values to `FormatOptions`.

    Args:
        options: Base options to update.
        overrides: Values keyed by option name; values set to None are ignored.

    Returns:
        FormatOptions: New options with the overrides applied, or `options`
        itself when nothing changes.

    Raises:
        TypeError: If an override name is not defined on `FormatOptions`.

    Examples:
        updated = apply_overrides(options, max_consecutive_blank_lines=0)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return options
    return replace(options, **changes)


def build_options(search_path: Path, **overrides: object) -> FormatOptions:
    """Load, override, and validate options.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Values keyed by option name; None values are ignored.

    Returns:
        FormatOptions: Validated options.

    Raises:
        ConfigError: If loading or validation fails.

    Examples:
        options = build_options(Path.cwd(), preserve_blockquotes=False)
    """
    options = load_options(search_path)
    try:
        options = apply_overrides(options, **overrides)
    except TypeError as error:
        raise ConfigError(str(error)) from error
    validate_options(options)
    return options


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
