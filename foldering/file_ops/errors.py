"""Error taxonomy for file-system operations.

Gateway code translates raw ``OSError`` values into these classes so callers
can tell "already gone" from "not allowed" from "would overwrite".
"""

from __future__ import annotations

import contextlib
import errno
from collections.abc import Iterator
from pathlib import Path


class FileOpsError(Exception):
    """Base class for every failure surfaced by the explorer."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


class NotFoundError(FileOpsError):
    """Target vanished between listing and action."""


class PermissionDeniedError(FileOpsError):
    """The operating system refused access to the target."""


class NameCollisionError(FileOpsError):
    """An entry with the destination name already exists."""


class UnsupportedOperationError(FileOpsError):
    """Operation is not offered for this kind of entry."""


class OutsideBoundaryError(FileOpsError):
    """Path resolves outside the confinement boundary."""


class SamePathError(FileOpsError):
    """Source and destination are the same entry; nothing to do."""


class InvalidNameError(FileOpsError):
    """Entry name is empty or contains a path separator."""


class NothingToUndoError(FileOpsError):
    """Undo requested with an empty history."""


class FileTooLargeError(FileOpsError):
    """File exceeds the size accepted for in-memory reads."""


_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


def is_permission_error(exc: BaseException) -> bool:
    """Return whether ``exc`` is a permission-denied class failure."""
    if isinstance(exc, (PermissionError, PermissionDeniedError)):
        return True
    return isinstance(exc, OSError) and exc.errno in _PERMISSION_ERRNOS


def translate_os_error(exc: OSError, path: Path | None = None) -> FileOpsError:
    """Map a standard-library ``OSError`` onto the explorer taxonomy."""
    target = path
    if target is None and exc.filename is not None:
        target = Path(exc.filename)
    detail = exc.strerror or str(exc)
    label = f"{target}: {detail}" if target is not None else detail
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(label, target)
    if is_permission_error(exc):
        return PermissionDeniedError(label, target)
    if isinstance(exc, FileExistsError):
        return NameCollisionError(label, target)
    return FileOpsError(label, target)


@contextlib.contextmanager
def os_errors_translated(path: Path | None = None) -> Iterator[None]:
    """Re-raise ``OSError`` from the wrapped block as ``FileOpsError``."""
    try:
        yield
    except OSError as exc:
        raise translate_os_error(exc, path) from exc


__all__ = [
    "FileOpsError",
    "NotFoundError",
    "PermissionDeniedError",
    "NameCollisionError",
    "UnsupportedOperationError",
    "OutsideBoundaryError",
    "SamePathError",
    "InvalidNameError",
    "NothingToUndoError",
    "FileTooLargeError",
    "is_permission_error",
    "translate_os_error",
    "os_errors_translated",
]
