"""Lazily loaded directory tree: node arena, expansion and patching."""

from __future__ import annotations

from .cache import DirectoryTreeCache
from .types import Create, Delete, Rename, TreeMutation, TreeNode

__all__ = [
    "DirectoryTreeCache",
    "TreeNode",
    "TreeMutation",
    "Rename",
    "Delete",
    "Create",
]
