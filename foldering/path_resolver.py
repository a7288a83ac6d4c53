"""Path arithmetic and confinement-boundary enforcement.

Every path that reaches the tree, clipboard or undo log is normalized here
first. Ascending above the boundary root is rejected, never clamped.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .file_ops import FileOpsError, FileOpsGateway, OutsideBoundaryError

LOGGER = logging.getLogger(__name__)

DEFAULT_CASE_SENSITIVE = sys.platform != "win32"


def normalize_path(path: Path | str) -> Path:
    """Return an absolute, lexically normalized path (symlinks untouched)."""
    return Path(os.path.abspath(os.fspath(path)))


@dataclass(frozen=True)
class ConfinementBoundary:
    """Immutable session root outside of which navigation is disallowed."""

    root: Path
    case_sensitive: bool = DEFAULT_CASE_SENSITIVE
    _root_key: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", normalize_path(self.root))
        object.__setattr__(self, "_root_key", self.key(self.root))

    @classmethod
    def for_root(cls, root: Path | str, case_sensitive: bool | None = None) -> ConfinementBoundary:
        """Build a boundary, defaulting case sensitivity to the platform."""
        if case_sensitive is None:
            case_sensitive = DEFAULT_CASE_SENSITIVE
        return cls(root=Path(root), case_sensitive=case_sensitive)

    def key(self, path: Path | str) -> str:
        """Comparison key for ``path`` honoring the case-sensitivity flag."""
        text = str(normalize_path(path))
        return text if self.case_sensitive else text.casefold()

    def is_root(self, path: Path | str) -> bool:
        return self.key(path) == self._root_key

    def contains(self, path: Path | str) -> bool:
        """Return whether ``path`` is the root or lies below it."""
        candidate = self.key(path)
        if candidate == self._root_key:
            return True
        prefix = self._root_key if self._root_key.endswith(os.sep) else self._root_key + os.sep
        return candidate.startswith(prefix)


class PathResolver:
    """Resolve parent/child moves against a ``ConfinementBoundary``."""

    def __init__(self, boundary: ConfinementBoundary, gateway: FileOpsGateway | None = None) -> None:
        self.boundary = boundary
        self.gateway = gateway

    @property
    def root(self) -> Path:
        return self.boundary.root

    def contains(self, path: Path | str) -> bool:
        return self.boundary.contains(path)

    def same_path(self, left: Path | str, right: Path | str) -> bool:
        return self.boundary.key(left) == self.boundary.key(right)

    def is_within(self, path: Path | str, ancestor: Path | str) -> bool:
        """Return whether ``path`` equals ``ancestor`` or lies below it."""
        path_key = self.boundary.key(path)
        ancestor_key = self.boundary.key(ancestor)
        if path_key == ancestor_key:
            return True
        prefix = ancestor_key if ancestor_key.endswith(os.sep) else ancestor_key + os.sep
        return path_key.startswith(prefix)

    def require_inside(self, path: Path | str) -> Path:
        """Return the normalized ``path`` or raise ``OutsideBoundaryError``."""
        normalized = normalize_path(path)
        if not self.boundary.contains(normalized):
            raise OutsideBoundaryError(f"Path is outside {self.root}: {normalized}", normalized)
        return normalized

    def get_parent(self, path: Path | str) -> Path | None:
        """Return the parent of ``path`` or ``None`` when ascent is not allowed.

        ``None`` for paths outside the boundary and for the boundary root
        itself.
        """
        target = normalize_path(path)
        if not self.boundary.contains(target) or self.boundary.is_root(target):
            return None
        parent = target.parent
        if not self.boundary.contains(parent):
            return None
        return parent

    def change_directory(self, current: Path | str, target_name: str) -> Path | None:
        """Return ``current / target_name`` if it is an existing directory in bounds."""
        current_path = normalize_path(current)
        if not self.boundary.contains(current_path):
            return None
        candidate = normalize_path(current_path / target_name)
        if not self.boundary.contains(candidate):
            return None
        if self.gateway is None:
            return None
        try:
            checked = self.gateway.change_directory_check(candidate.parent, candidate.name)
        except FileOpsError as exc:
            LOGGER.warning("Cannot change directory to %s: %s", candidate, exc)
            return None
        return normalize_path(checked) if checked is not None else None

    def join(self, directory: Path | str, name: str) -> Path:
        return normalize_path(Path(directory) / name)

    def paste_destination(self, destination_dir: Path | str, source: Path | str) -> Path:
        """Destination for pasting ``source`` into ``destination_dir``."""
        return self.join(destination_dir, normalize_path(source).name)

    def relative_label(self, path: Path | str) -> str:
        """Path relative to the boundary root, for status lines."""
        normalized = normalize_path(path)
        if self.boundary.is_root(normalized):
            return "."
        try:
            return os.path.relpath(normalized, self.root)
        except ValueError:
            return str(normalized)


__all__ = [
    "DEFAULT_CASE_SENSITIVE",
    "normalize_path",
    "ConfinementBoundary",
    "PathResolver",
]
