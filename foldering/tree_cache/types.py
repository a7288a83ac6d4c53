"""Node records and patch mutations for the directory tree cache."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class TreeNode:
    """One cached file or directory.

    ``children`` holds child keys in listing order and stays ``None`` until
    the directory has been listed once.
    """

    name: str
    path: Path
    is_dir: bool
    size: int | None = None
    parent: str | None = None
    children: list[str] | None = None
    is_expanded: bool = False
    is_loading: bool = False

    @property
    def is_loaded(self) -> bool:
        return self.children is not None


@dataclass(frozen=True)
class Rename:
    """Entry was renamed in place within its directory."""

    new_name: str


@dataclass(frozen=True)
class Delete:
    """Entry (and its whole subtree) is gone."""


@dataclass(frozen=True)
class Create:
    """New child entry appeared in the patched directory."""

    name: str
    is_dir: bool
    size: int | None = None


TreeMutation = Rename | Delete | Create


__all__ = [
    "TreeNode",
    "Rename",
    "Delete",
    "Create",
    "TreeMutation",
]
