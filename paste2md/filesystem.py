"""Reading pasted text from disk and writing Markdown back safely."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE

MAX_FILE_SIZE_ENV_VAR = "PASTE2MD_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the input size limit in bytes.

    ``PASTE2MD_MAX_FILE_SIZE`` takes precedence over `default` when set.

    Raises:
        ValueError: If the environment variable holds anything but a positive integer.

    Examples:
        os.environ["PASTE2MD_MAX_FILE_SIZE"] = "65536"
        get_max_file_size()  # 65536
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError:
        limit = 0
    if limit <= 0:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive number of bytes, got {raw_value!r}"
        )
    return limit


def contains_symlink(path: Path) -> bool:
    """Report whether `path` or one of its ancestors is a symbolic link."""

    def _is_link(candidate: Path) -> bool:
        try:
            return candidate.is_symlink()
        except OSError:
            return False

    return any(_is_link(candidate) for candidate in (path, *path.parents))


def normalize_output_path(raw_path: str) -> Path:
    """Turn the ``--output`` argument into an absolute, writable file path.

    Args:
        raw_path: Destination as typed by the user; ``~`` is expanded.

    Returns:
        Path: Resolved destination path.

    Raises:
        ValueError: If the path goes through a symlink, names a directory, or
            sits in a directory that does not exist.

    Examples:
        normalize_output_path("~/notes/today.md")
    """
    destination = Path(raw_path).expanduser()
    if contains_symlink(destination):
        raise ValueError(f"Refusing to write through a symlink: {destination}")

    destination = destination.resolve()
    if destination.is_dir():
        raise ValueError(f"{destination} is a directory, not a file.")
    if not destination.parent.is_dir():
        raise ValueError(f"Output directory {destination.parent} does not exist.")
    return destination


def _regular_file_mode(filepath: Path) -> int:
    try:
        mode = os.lstat(filepath).st_mode
    except OSError as error:
        raise IOError(f"Cannot read {filepath}: {error.strerror or error}") from error

    if stat.S_ISLNK(mode):
        raise IOError(f"Refusing to read through a symlink: {filepath}")
    if not stat.S_ISREG(mode):
        raise IOError(f"{filepath} is not a regular file.")
    return mode


def enforce_size(size: int, max_size: int, source: str):
    """Reject input larger than `max_size` bytes.

    Raises:
        IOError: If `size` exceeds `max_size`.

    Examples:
        enforce_size(len(data), 1024, "stdin")
    """
    if size > max_size:
        raise IOError(f"{source} is {size} bytes, over the {max_size} byte limit.")


def read_text_file(filepath: Path, max_size: int) -> str:
    """Read a UTF-8 text file after checking its type and size.

    Args:
        filepath: File to read.
        max_size: Size limit in bytes.

    Returns:
        str: File contents.

    Raises:
        IOError: If the file is missing, not a regular file, over the size
            limit, unreadable, or not valid UTF-8.
    """
    _regular_file_mode(filepath)
    enforce_size(filepath.stat().st_size, max_size, str(filepath))

    try:
        return filepath.read_text(encoding="UTF-8")
    except UnicodeDecodeError as error:
        raise IOError(f"{filepath} is not valid UTF-8 text (byte {error.start}).") from error
    except OSError as error:
        raise IOError(f"Cannot read {filepath}: {error.strerror or error}") from error


def write_text_atomic(filepath: Path, content: str):
    """Write Markdown to `filepath` so readers never see a partial file.

    The text is written and synced to a sibling temporary file, which then
    replaces the destination. An existing destination keeps its permission
    bits; a new file gets the process umask applied to ``0o666``.

    Raises:
        IOError: If the temporary file cannot be written or moved into place.

    Examples:
        write_text_atomic(Path("notes.md"), "# Notes\\n")
    """
    if filepath.exists():
        permissions = stat.S_IMODE(_regular_file_mode(filepath))
    else:
        umask = os.umask(0)
        os.umask(umask)
        permissions = 0o666 & ~umask

    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{filepath.name}.", dir=filepath.parent)
    except OSError as error:
        raise IOError(f"Cannot write {filepath}: {error.strerror or error}") from error

    try:
        with os.fdopen(fd, "w", encoding="UTF-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_name, permissions)
        os.replace(temp_name, filepath)
    except OSError as error:
        Path(temp_name).unlink(missing_ok=True)
        raise IOError(f"Cannot write {filepath}: {error.strerror or error}") from error
