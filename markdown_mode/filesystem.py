"""Reading and rewriting Markdown documents on disk.

A document is stat'ed before and after it is read. The first stat keeps the
access time to restore after a rewrite; the second is the fingerprint the file
must still match when it is replaced.
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MARKDOWN_MODE_MAX_FILE_SIZE"


@dataclass(frozen=True)
class DiskDocument:
    """Text of a Markdown file and the stats needed to rewrite it safely.

    Attributes:
        path: Resolved path of the file.
        text: Content decoded as UTF-8 with line endings untouched.
        initial_stat: Stat taken before reading.
        read_stat: Stat taken after reading.
    """

    path: Path
    text: str
    initial_stat: os.stat_result
    read_stat: os.stat_result


def max_file_size_limit(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the size limit in bytes, honouring `MARKDOWN_MODE_MAX_FILE_SIZE`.

    Raises:
        ValueError: If the variable is set to anything but a positive integer.
    """
    raw = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw is None:
        return default
    if not raw.strip().isdecimal() or int(raw) <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw!r}")
    return int(raw)


def _is_link(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError:
        return False


def resolve_document_path(raw_path: str, base_dir: Path) -> Path:
    """Turn a user-supplied path into the absolute path of a Markdown file.

    The path may not pass through a symlink, must exist, must carry a Markdown
    extension and must lie under `base_dir`.

    Raises:
        ValueError: If any of these checks fails.
    """
    path = Path(raw_path).expanduser()
    if any(_is_link(candidate) for candidate in (path, *path.parents)):
        raise ValueError(f"Symlinks are not supported: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved} is not a Markdown file (expected {', '.join(MARKDOWN_EXTENSIONS)})"
        )
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}")
    return resolved


def _regular_file_stat(path: Path) -> os.stat_result:
    try:
        result = os.lstat(path)
    except OSError as error:
        raise IOError(f"Cannot access {path}: {error}") from error
    if stat.S_ISLNK(result.st_mode):
        raise IOError(f"Symlinks are not supported: {path}")
    if not stat.S_ISREG(result.st_mode):
        raise IOError(f"{path} is not a regular file")
    return result


def _fingerprint(result: os.stat_result) -> tuple[int, int, int, int]:
    return result.st_ino, result.st_dev, result.st_size, result.st_mtime_ns


def _restat_unchanged(path: Path, expected: os.stat_result) -> os.stat_result:
    current = _regular_file_stat(path)
    if _fingerprint(current) != _fingerprint(expected):
        raise IOError(f"{path} changed during processing")
    return current


def load_document(path: Path, max_size: int) -> DiskDocument:
    """Read a Markdown file that is at most `max_size` bytes long.

    Special files are refused before they are opened, so a FIFO never blocks
    the read.

    Raises:
        IOError: If the file is not a regular file, is too large, is not valid
            UTF-8, or changes while it is read.

    Examples:
        document = load_document(Path("README.md").resolve(), 1024 * 1024)
    """
    initial_stat = _regular_file_stat(path)
    if initial_stat.st_size > max_size:
        raise IOError(f"{path} exceeds the maximum allowed size of {max_size} bytes")

    try:
        with open(path, encoding="utf-8", newline="") as handle:
            text = handle.read()
    except UnicodeDecodeError as error:
        raise IOError(f"Invalid UTF-8 in {path}: {error}") from error

    read_stat = _restat_unchanged(path, initial_stat)
    return DiskDocument(path=path, text=text, initial_stat=initial_stat, read_stat=read_stat)


def _copy_ownership(
    source: os.stat_result, target: Path, name: str, warn: Callable[[str], None] | None
) -> None:
    if not hasattr(os, "chown"):
        return
    try:
        os.chown(target, source.st_uid, source.st_gid)
    except PermissionError:
        if warn is not None:
            warn(
                f"Warning: Could not preserve file ownership for {name} "
                "(requires elevated privileges)"
            )


def rewrite_document(
    document: DiskDocument, content: str, warn: Callable[[str], None] | None = None
) -> None:
    """Atomically replace a document's file with `content`.

    The new file keeps the permissions and, where allowed, the owner of the old
    one. Its access time is the one the file had before it was read.

    Args:
        document: Document returned by `load_document`.
        content: Replacement text, written as UTF-8 without newline translation.
        warn: Called with a message when ownership cannot be kept.

    Raises:
        IOError: If the file changed since it was read or cannot be replaced.
    """
    path = document.path
    current = _restat_unchanged(path, document.read_stat)

    descriptor, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(descriptor, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_path, stat.S_IMODE(current.st_mode))
        _copy_ownership(current, temp_path, path.name, warn)
        os.replace(temp_path, path)
    finally:
        temp_path.unlink(missing_ok=True)

    os.utime(path, ns=(document.initial_stat.st_atime_ns, path.stat().st_mtime_ns))
