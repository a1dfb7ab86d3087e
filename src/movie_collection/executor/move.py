"""File promotion into the library.

promote_file moves a finished artifact to its destination, preferring an
atomic rename and falling back to copy-then-delete (e.g. across devices).

swap_into_place replaces a destination using the .new/.old discipline:
the replacement is fully copied to ``<dest>.new`` before the current file
is renamed to ``<dest>.old``, and only then is ``<dest>.new`` renamed into
place. A crash at any point leaves either the original or its ``.old``
copy on disk.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from movie_collection.exceptions import FileOperationError

logger = logging.getLogger(__name__)


class MoveErrorType(Enum):
    """Categorization of file operation errors."""

    DISK_SPACE = "disk_space"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    CROSS_DEVICE = "cross_device"
    IO_ERROR = "io_error"
    UNKNOWN = "unknown"


_ERRNO_TO_TYPE = {
    errno.ENOSPC: MoveErrorType.DISK_SPACE,
    errno.EACCES: MoveErrorType.PERMISSION,
    errno.EPERM: MoveErrorType.PERMISSION,
    errno.ENOENT: MoveErrorType.NOT_FOUND,
    errno.EXDEV: MoveErrorType.CROSS_DEVICE,
    errno.EIO: MoveErrorType.IO_ERROR,
    errno.EROFS: MoveErrorType.IO_ERROR,
}


def classify_os_error(error: OSError) -> MoveErrorType:
    """Map an OSError to a MoveErrorType by errno."""
    return _ERRNO_TO_TYPE.get(error.errno, MoveErrorType.UNKNOWN)  # type: ignore[arg-type]


def _wrap(error: OSError, action: str) -> FileOperationError:
    error_type = classify_os_error(error)
    logger.error("%s failed (%s): %s", action, error_type.value, error)
    return FileOperationError(f"{action} failed ({error_type.value}): {error}")


def sibling(path: Path, suffix: str) -> Path:
    """``<path><suffix>``, e.g. ``movie.mp4`` -> ``movie.mp4.new``."""
    return path.with_name(path.name + suffix)


def promote_file(source: Path, destination: Path) -> Path:
    """Move source to destination, creating the destination directory.

    Tries os.replace first. If that fails (typically EXDEV across
    filesystems), copies the file and deletes the source.

    Returns:
        The destination path.

    Raises:
        FileOperationError: If neither rename nor copy succeeds.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise _wrap(e, f"Creating {destination.parent}") from e

    try:
        os.replace(source, destination)
        logger.info("Renamed %s -> %s", source, destination)
        return destination
    except OSError as e:
        logger.info(
            "Rename %s -> %s failed (%s), copying instead",
            source,
            destination,
            classify_os_error(e).value,
        )

    try:
        shutil.copyfile(source, destination)
        source.unlink()
    except OSError as e:
        raise _wrap(e, f"Copying {source} -> {destination}") from e

    logger.info("Copied %s -> %s", source, destination)
    return destination


@dataclass(frozen=True)
class SwapResult:
    """Result of swap_into_place."""

    destination: Path
    previous: Path | None = None


def swap_into_place(source: Path, destination: Path) -> SwapResult:
    """Replace destination with a copy of source, keeping the old file.

    Args:
        source: File to copy into place. Left untouched.
        destination: Final location.

    Returns:
        SwapResult; previous is the ``.old`` path when a file was replaced.

    Raises:
        FileOperationError: On any copy or rename failure. Partial states
            (a stray ``.new`` or ``.old``) are left for inspection.
    """
    new_path = sibling(destination, ".new")
    old_path = sibling(destination, ".old")

    try:
        shutil.copyfile(source, new_path)
    except OSError as e:
        raise _wrap(e, f"Copying {source} -> {new_path}") from e

    previous: Path | None = None
    try:
        if destination.exists():
            os.replace(destination, old_path)
            previous = old_path
        os.replace(new_path, destination)
    except OSError as e:
        raise _wrap(e, f"Swapping {new_path} -> {destination}") from e

    logger.info("Swapped %s into %s", source, destination)
    return SwapResult(destination=destination, previous=previous)
