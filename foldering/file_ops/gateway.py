"""File-system primitives consumed by the explorer.

``FileOpsGateway`` is the seam the tree cache, clipboard and undo log talk to.
``LocalFileOps`` implements it on top of ``os``/``shutil``; every call either
returns or raises a ``FileOpsError`` subclass.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .errors import (
    FileOpsError,
    FileTooLargeError,
    InvalidNameError,
    NameCollisionError,
    NotFoundError,
    UnsupportedOperationError,
    os_errors_translated,
)
from .listing import DirectoryChild, list_directory_children, name_sort_key

LOGGER = logging.getLogger(__name__)

READ_FILE_MAX_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class SearchHit:
    """One file-name search match relative to the searched directory."""

    name: str
    path: Path
    is_dir: bool
    size: int | None
    relative_path: str


class FileOpsGateway(Protocol):
    """Atomic file-system primitives used by the explorer."""

    def list_directory(self, path: Path) -> list[DirectoryChild]: ...

    def change_directory_check(self, path: Path, name: str) -> Path | None: ...

    def exists(self, path: Path) -> bool: ...

    def read_file(self, path: Path) -> str | None: ...

    def read_bytes(self, path: Path) -> bytes | None: ...

    def write_file(self, path: Path, content: str) -> None: ...

    def create_file(self, path: Path, content: str | bytes = "") -> None: ...

    def create_directory(self, path: Path) -> None: ...

    def rename_file(self, path: Path, new_name: str) -> Path: ...

    def delete_file(self, path: Path) -> None: ...

    def delete_directory(self, path: Path) -> None: ...

    def copy_file(self, source: Path, destination: Path) -> None: ...

    def move_file(self, source: Path, destination: Path) -> None: ...

    def search_files(self, path: Path, query: str, recursive: bool = False) -> list[SearchHit]: ...


def validate_entry_name(name: str) -> str:
    """Return ``name`` stripped, rejecting empty names and path separators."""
    stripped = name.strip()
    if not stripped or stripped in {".", ".."}:
        raise InvalidNameError("Name cannot be empty.")
    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in stripped for sep in separators):
        raise InvalidNameError(f"Name cannot contain a path separator: {stripped!r}")
    return stripped


class LocalFileOps:
    """``FileOpsGateway`` backed by the local file system."""

    def __init__(self, show_hidden: bool = True, read_max_bytes: int = READ_FILE_MAX_BYTES) -> None:
        self.show_hidden = show_hidden
        self.read_max_bytes = read_max_bytes

    def list_directory(self, path: Path) -> list[DirectoryChild]:
        return list_directory_children(path, show_hidden=self.show_hidden)

    def change_directory_check(self, path: Path, name: str) -> Path | None:
        """Return ``path / name`` when it is an existing directory, else ``None``."""
        target = Path(path) / name
        try:
            return target if target.is_dir() else None
        except OSError as exc:
            LOGGER.warning("Error checking directory %s: %s", target, exc)
            return None

    def exists(self, path: Path) -> bool:
        # lexists: a dangling symlink still occupies its name.
        return os.path.lexists(path)

    def read_file(self, path: Path) -> str | None:
        """Read a text file, ``None`` when missing or a directory."""
        data = self._read_limited(Path(path))
        if data is None:
            return None
        for encoding in ("utf-8", "utf-8-sig"):
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        return data.decode("latin-1")

    def read_bytes(self, path: Path) -> bytes | None:
        """Read the full byte content of a file, ``None`` when missing or a directory."""
        path = Path(path)
        with os_errors_translated(path):
            if not path.exists() or path.is_dir():
                return None
            return path.read_bytes()

    def _read_limited(self, path: Path) -> bytes | None:
        with os_errors_translated(path):
            if not path.exists() or path.is_dir():
                return None
            size = path.stat().st_size
            if size > self.read_max_bytes:
                limit_mb = self.read_max_bytes // (1024 * 1024)
                raise FileTooLargeError(f"File is too large (max {limit_mb} MB): {path}", path)
            return path.read_bytes()

    def write_file(self, path: Path, content: str) -> None:
        """Overwrite an existing file."""
        path = Path(path)
        with os_errors_translated(path):
            if not path.exists():
                raise NotFoundError(f"File does not exist: {path}", path)
            if path.is_dir():
                raise UnsupportedOperationError(f"Cannot write to a directory: {path}", path)
            path.write_text(content, encoding="utf-8")

    def create_file(self, path: Path, content: str | bytes = "") -> None:
        """Create a new file; fails if anything already occupies ``path``."""
        path = Path(path)
        payload = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        with os_errors_translated(path):
            path.parent.mkdir(parents=True, exist_ok=True)
            # "xb" makes the existence check and creation one call.
            with open(path, "xb") as handle:
                handle.write(payload)

    def create_directory(self, path: Path) -> None:
        path = Path(path)
        with os_errors_translated(path):
            if os.path.lexists(path):
                raise NameCollisionError(f"An entry named {path.name!r} already exists.", path)
            path.mkdir(parents=True)

    def rename_file(self, path: Path, new_name: str) -> Path:
        """Rename ``path`` within its directory and return the new path."""
        path = Path(path)
        new_name = validate_entry_name(new_name)
        target = path.parent / new_name
        with os_errors_translated(path):
            if not os.path.lexists(path):
                raise NotFoundError(f"File or folder does not exist: {path}", path)
            if os.path.lexists(target) and not _is_case_only_rename(path, target):
                raise NameCollisionError(f"An entry named {new_name!r} already exists.", target)
            os.rename(path, target)
        return target

    def delete_file(self, path: Path) -> None:
        """Delete a file; a missing file counts as already deleted."""
        path = Path(path)
        with os_errors_translated(path):
            if not os.path.lexists(path):
                return
            if path.is_dir() and not path.is_symlink():
                raise UnsupportedOperationError(f"Use delete_directory for directories: {path}", path)
            path.unlink()

    def delete_directory(self, path: Path) -> None:
        """Recursively delete a directory; a missing one counts as deleted."""
        path = Path(path)
        with os_errors_translated(path):
            if not os.path.lexists(path):
                return
            if not path.is_dir() or path.is_symlink():
                raise UnsupportedOperationError(f"Use delete_file for files: {path}", path)
            shutil.rmtree(path)

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy one file; directories are not copied."""
        source = Path(source)
        destination = Path(destination)
        with os_errors_translated(source):
            if not source.exists():
                raise NotFoundError(f"Source does not exist: {source}", source)
            if source.is_dir():
                raise UnsupportedOperationError(f"Directories cannot be copied: {source}", source)
            if os.path.lexists(destination):
                raise NameCollisionError(
                    f"An entry named {destination.name!r} already exists at the destination.",
                    destination,
                )
            shutil.copy2(source, destination)

    def move_file(self, source: Path, destination: Path) -> None:
        """Move a file or directory to ``destination``."""
        source = Path(source)
        destination = Path(destination)
        with os_errors_translated(source):
            if not os.path.lexists(source):
                raise NotFoundError(f"Source does not exist: {source}", source)
            if os.path.lexists(destination):
                raise NameCollisionError(
                    f"An entry named {destination.name!r} already exists at the destination.",
                    destination,
                )
            shutil.move(str(source), str(destination))

    def search_files(self, path: Path, query: str, recursive: bool = False) -> list[SearchHit]:
        """Find entries whose name contains ``query`` (case-insensitive)."""
        root = Path(path)
        needle = query.casefold()
        hits: list[SearchHit] = []

        def walk(directory: Path) -> None:
            for child in list_directory_children(directory, show_hidden=self.show_hidden):
                if needle in child.name.casefold():
                    hits.append(
                        SearchHit(
                            name=child.name,
                            path=child.path,
                            is_dir=child.is_dir,
                            size=child.size,
                            relative_path=os.path.relpath(child.path, root),
                        )
                    )
                if recursive and child.is_dir:
                    try:
                        walk(child.path)
                    except FileOpsError as exc:
                        LOGGER.warning("Error searching in %s: %s", child.path, exc)

        walk(root)
        hits.sort(key=lambda hit: (not hit.is_dir, name_sort_key(hit.name), hit.relative_path))
        return hits


def _is_case_only_rename(source: Path, target: Path) -> bool:
    """Return whether ``target`` is ``source`` spelled with different case."""
    if source.name == target.name or source.name.casefold() != target.name.casefold():
        return False
    try:
        return os.path.samefile(source, target)
    except OSError:
        return False


__all__ = [
    "READ_FILE_MAX_BYTES",
    "SearchHit",
    "FileOpsGateway",
    "LocalFileOps",
    "validate_entry_name",
]
