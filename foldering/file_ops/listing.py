"""Directory scanning and listing order."""

from __future__ import annotations

import locale
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import is_permission_error, translate_os_error

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryChild:
    """One listed directory entry plus the metadata the tree keeps."""

    name: str
    path: Path
    is_dir: bool
    size: int | None = None


def name_sort_key(name: str) -> str:
    """Locale-aware, case-insensitive collation key for one entry name."""
    folded = name.casefold()
    try:
        return locale.strxfrm(folded)
    except (ValueError, OSError):
        return folded


def child_sort_key(child: DirectoryChild) -> tuple[bool, str, str]:
    """Directories first, then collated name; raw name breaks exact ties."""
    return (not child.is_dir, name_sort_key(child.name), child.name)


def sort_directory_children(children: Iterable[DirectoryChild]) -> list[DirectoryChild]:
    """Return ``children`` in listing order."""
    return sorted(children, key=child_sort_key)


def list_directory_children(directory: Path, show_hidden: bool = True) -> list[DirectoryChild]:
    """Scan ``directory`` and return its children in listing order.

    Entries whose metadata cannot be read are skipped with a warning so one
    inaccessible child never hides its siblings. Failure to open the
    directory itself is raised as a ``FileOpsError``.
    """
    children: list[DirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                name = entry.name
                if not show_hidden and name.startswith("."):
                    continue
                child_path = Path(directory) / name
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    stat = entry.stat(follow_symlinks=False)
                except OSError as exc:
                    if is_permission_error(exc):
                        LOGGER.warning("Permission denied for %s, skipping", child_path)
                    else:
                        LOGGER.warning("Error reading entry %s, skipping: %s", child_path, exc)
                    continue
                children.append(
                    DirectoryChild(
                        name=name,
                        path=child_path,
                        is_dir=is_dir,
                        size=None if is_dir else int(stat.st_size),
                    )
                )
    except OSError as exc:
        raise translate_os_error(exc, Path(directory)) from exc

    return sort_directory_children(children)


__all__ = [
    "DirectoryChild",
    "name_sort_key",
    "child_sort_key",
    "sort_directory_children",
    "list_directory_children",
]
