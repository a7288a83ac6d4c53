"""File-system gateway: primitives, listing order, and error taxonomy."""

from __future__ import annotations

from .errors import (
    FileOpsError,
    FileTooLargeError,
    InvalidNameError,
    NameCollisionError,
    NothingToUndoError,
    NotFoundError,
    OutsideBoundaryError,
    PermissionDeniedError,
    SamePathError,
    UnsupportedOperationError,
    is_permission_error,
    os_errors_translated,
    translate_os_error,
)
from .gateway import READ_FILE_MAX_BYTES, FileOpsGateway, LocalFileOps, SearchHit, validate_entry_name
from .listing import (
    DirectoryChild,
    child_sort_key,
    list_directory_children,
    name_sort_key,
    sort_directory_children,
)

__all__ = [
    "FileOpsError",
    "FileTooLargeError",
    "InvalidNameError",
    "NameCollisionError",
    "NothingToUndoError",
    "NotFoundError",
    "OutsideBoundaryError",
    "PermissionDeniedError",
    "SamePathError",
    "UnsupportedOperationError",
    "is_permission_error",
    "os_errors_translated",
    "translate_os_error",
    "READ_FILE_MAX_BYTES",
    "FileOpsGateway",
    "LocalFileOps",
    "SearchHit",
    "validate_entry_name",
    "DirectoryChild",
    "child_sort_key",
    "list_directory_children",
    "name_sort_key",
    "sort_directory_children",
]
