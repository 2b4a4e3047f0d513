"""Filesystem helpers for html-helper."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_MAX_FILE_SIZE, HTML_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "HTML_HELPER_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed file size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["HTML_HELPER_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def contains_symlink(path: Path) -> bool:
    """Check whether a path or any parent directory is a symlink.

    Examples:
        contains_symlink(Path("/tmp/link/child"))
    """
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def _check_extension(path: Path) -> None:
    if path.suffix.lower() not in HTML_EXTENSIONS:
        error_message = f"{path} is not an HTML file.\n"
        error_message += f"Supported extensions are: {', '.join(HTML_EXTENSIONS)}"
        raise ValueError(error_message)


def _check_inside(path: Path, base_dir: Path) -> None:
    try:
        path.relative_to(base_dir)
    except ValueError as error:
        error_message = f"{path} is outside of the working directory {base_dir}."
        raise ValueError(error_message) from error


def normalize_filepath(raw_path: str, base_dir: Path) -> Path:
    """Resolve and validate an existing HTML filepath under a base directory.

    Args:
        raw_path: User-supplied path (absolute or relative).
        base_dir: Working directory that constrains allowed paths.

    Returns:
        Path: Absolute path to the file.

    Raises:
        ValueError: If the path does not exist, is outside `base_dir`, uses an
            unsupported extension, or traverses a symlink.

    Examples:
        normalize_filepath("site/index.html", Path.cwd())
    """
    path = Path(raw_path).expanduser()

    if contains_symlink(path):
        error_message = f"Symlinks are not supported for security reasons: {path}"
        raise ValueError(error_message)

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        error_message = f"{path} does not exist."
        raise ValueError(error_message) from error
    except OSError as error:
        error_message = f"Error resolving {path}: {error}"
        raise ValueError(error_message) from error

    if not resolved.is_file():
        error_message = f"{resolved} is not a regular file."
        raise ValueError(error_message)

    _check_inside(resolved, base_dir)
    _check_extension(resolved)
    return resolved


def normalize_new_filepath(raw_path: str, base_dir: Path) -> Path:
    """Resolve and validate the path of a file that is about to be created.

    Raises:
        ValueError: If the file already exists, its directory is missing, it
            is outside `base_dir`, uses an unsupported extension, or
            traverses a symlink.
    """
    path = Path(raw_path).expanduser()

    if contains_symlink(path):
        error_message = f"Symlinks are not supported for security reasons: {path}"
        raise ValueError(error_message)

    if path.exists():
        error_message = f"{path} already exists; refusing to overwrite."
        raise ValueError(error_message)

    try:
        parent = path.parent.resolve(strict=True)
    except FileNotFoundError as error:
        error_message = f"Directory {path.parent} does not exist."
        raise ValueError(error_message) from error

    resolved = parent / path.name
    _check_inside(resolved, base_dir)
    _check_extension(resolved)
    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a file while disallowing symlinks.

    Raises:
        IOError: If the path is inaccessible, a symlink, or not a regular file.

    Examples:
        stat_result = collect_file_stat(Path("index.html"))
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if stat.S_ISLNK(stat_result.st_mode):
        error_message = f"Symlinks are not supported: {filepath}."
        raise IOError(error_message)

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def ensure_file_unchanged(
    expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path
):
    """Detect changes between two filesystem snapshots.

    Raises:
        IOError: If inode, device, size, or modification time differ.
    """
    fingerprint_before = (
        getattr(expected_stat, "st_ino", None),
        getattr(expected_stat, "st_dev", None),
        expected_stat.st_size,
        expected_stat.st_mtime_ns,
    )
    fingerprint_after = (
        getattr(current_stat, "st_ino", None),
        getattr(current_stat, "st_dev", None),
        current_stat.st_size,
        current_stat.st_mtime_ns,
    )

    if fingerprint_before != fingerprint_after:
        error_message = f"{filepath} changed during processing; refusing to overwrite."
        raise IOError(error_message)


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Newlines are kept as they are in the file so that rewriting it does not
    change line endings.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_read(Path("index.html")) as handle:
            text = handle.read()
    """
    try:
        return open(filepath, "r", encoding="UTF-8", newline="")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def read_document(filepath: Path, max_size: int) -> tuple[str, os.stat_result]:
    """Read a UTF-8 document after checking its type and size.

    Returns:
        tuple[str, os.stat_result]: The text and the stat taken before reading.

    Raises:
        IOError: If the file is not a readable regular file, is too large, or
            is not valid UTF-8.
    """
    initial_stat = collect_file_stat(filepath)
    enforce_file_size(initial_stat, max_size, filepath)
    try:
        with safe_read(filepath) as handle:
            text = handle.read()
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise IOError(error_message) from error
    return text, initial_stat


def write_document(
    filepath: Path,
    text: str,
    initial_stat: os.stat_result,
    warn: Callable[[str], None] | None = None,
):
    """Atomically replace a file's content.

    The text is written to a temporary file in the same directory, which then
    replaces the original. Permissions, ownership (when allowed) and access
    time are carried over.

    Args:
        filepath: File to rewrite.
        text: New content.
        initial_stat: Stat captured before the file was read; the file must
            not have changed since.
        warn: Optional callback for non-fatal warnings.

    Raises:
        IOError: If the file changed since it was read or cannot be replaced.
    """
    current_stat = collect_file_stat(filepath)
    ensure_file_unchanged(initial_stat, current_stat, filepath)

    permissions = stat.S_IMODE(initial_stat.st_mode)
    uid = getattr(initial_stat, "st_uid", None)
    gid = getattr(initial_stat, "st_gid", None)
    atime_ns = initial_stat.st_atime_ns

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", newline="", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)

            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

            if uid is not None and gid is not None and hasattr(os, "chown"):
                try:
                    os.chown(tmp_file.name, uid, gid)
                except PermissionError:
                    if warn is not None:
                        warn(
                            f"Warning: Could not preserve file ownership for {filepath.name} "
                            "(requires elevated privileges)"
                        )

        os.replace(temp_path, filepath)

        # mtime reflects the rewrite; only atime is restored
        current_stat = filepath.stat()
        os.utime(filepath, ns=(atime_ns, current_stat.st_mtime_ns))
    finally:
        if temp_path is not None:
            try:
                Path(temp_path).unlink(missing_ok=True)
            except OSError:
                pass


def create_document(filepath: Path, text: str):
    """Write a new file, failing if it already exists.

    Raises:
        IOError: If the file exists or cannot be created.
    """
    try:
        with open(filepath, "x", encoding="UTF-8") as handle:
            handle.write(text)
    except FileExistsError as error:
        error_message = f"{filepath} already exists; refusing to overwrite."
        raise IOError(error_message) from error
    except OSError as error:
        error_message = f"Error creating {filepath}: {error}"
        raise IOError(error_message) from error
