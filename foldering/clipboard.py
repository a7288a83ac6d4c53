"""Single-slot cut/copy staging and paste resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .file_ops import (
    FileOpsGateway,
    NameCollisionError,
    SamePathError,
    UnsupportedOperationError,
)
from .path_resolver import PathResolver, normalize_path

LOGGER = logging.getLogger(__name__)

ClipboardMode = Literal["cut", "copy"]


@dataclass(frozen=True)
class ClipboardEntry:
    """The staged source of the next paste."""

    source_path: Path
    is_dir: bool
    mode: ClipboardMode


@dataclass(frozen=True)
class PastePlan:
    """A resolved paste: what goes where and how."""

    entry: ClipboardEntry
    destination: Path

    @property
    def source(self) -> Path:
        return self.entry.source_path

    @property
    def destination_dir(self) -> Path:
        return self.destination.parent

    @property
    def is_move(self) -> bool:
        return self.entry.mode == "cut"


class ClipboardController:
    """Holds at most one ``ClipboardEntry``; a new cut/copy replaces it."""

    def __init__(self, resolver: PathResolver, gateway: FileOpsGateway) -> None:
        self.resolver = resolver
        self.gateway = gateway
        self._entry: ClipboardEntry | None = None

    @property
    def entry(self) -> ClipboardEntry | None:
        return self._entry

    @property
    def is_empty(self) -> bool:
        return self._entry is None

    def cut(self, path: Path | str, is_dir: bool) -> ClipboardEntry:
        source = self.resolver.require_inside(path)
        if self.resolver.boundary.is_root(source):
            raise UnsupportedOperationError("The root directory cannot be cut.", source)
        self._entry = ClipboardEntry(source_path=source, is_dir=is_dir, mode="cut")
        return self._entry

    def copy(self, path: Path | str, is_dir: bool) -> ClipboardEntry:
        """Stage a file for copying; directories are rejected."""
        source = self.resolver.require_inside(path)
        if is_dir:
            raise UnsupportedOperationError(f"Directories cannot be copied: {source.name}", source)
        self._entry = ClipboardEntry(source_path=source, is_dir=False, mode="copy")
        return self._entry

    def clear(self) -> bool:
        had_entry = self._entry is not None
        self._entry = None
        return had_entry

    def retarget(self, old_path: Path | str, new_path: Path | str) -> bool:
        """Follow a rename of the staged source (or one of its ancestors)."""
        entry = self._entry
        if entry is None or not self.resolver.is_within(entry.source_path, old_path):
            return False
        relative = entry.source_path.relative_to(normalize_path(old_path))
        moved = normalize_path(Path(new_path) / relative)
        self._entry = ClipboardEntry(source_path=moved, is_dir=entry.is_dir, mode=entry.mode)
        return True

    def resolve_paste(self, destination_dir: Path | str) -> PastePlan | None:
        """Resolve where the staged entry would land in ``destination_dir``.

        Returns ``None`` when nothing is staged. Raises ``SamePathError`` when
        the destination is the source itself.
        """
        entry = self._entry
        if entry is None:
            return None
        target_dir = self.resolver.require_inside(destination_dir)
        destination = self.resolver.paste_destination(target_dir, entry.source_path)
        if self.resolver.same_path(destination, entry.source_path):
            raise SamePathError(
                f"{entry.source_path.name} is already in {target_dir}.",
                entry.source_path,
            )
        if entry.is_dir and self.resolver.is_within(target_dir, entry.source_path):
            raise UnsupportedOperationError(
                f"Cannot move {entry.source_path.name} into itself.",
                entry.source_path,
            )
        return PastePlan(entry=entry, destination=normalize_path(destination))

    def perform_paste(self, plan: PastePlan) -> Path:
        """Execute ``plan`` against the gateway and return the new path.

        Name collisions are rejected before any mutation is attempted.
        """
        if self.gateway.exists(plan.destination):
            raise NameCollisionError(
                f"An entry named {plan.destination.name!r} already exists in {plan.destination_dir}.",
                plan.destination,
            )
        if plan.is_move:
            self.gateway.move_file(plan.source, plan.destination)
        else:
            self.gateway.copy_file(plan.source, plan.destination)
        LOGGER.debug("%s %s -> %s", plan.entry.mode, plan.source, plan.destination)
        return plan.destination

    def finish_paste(self, plan: PastePlan) -> bool:
        """Update staging after a confirmed paste; return whether it was cleared."""
        if plan.is_move and self._entry == plan.entry:
            self._entry = None
            return True
        return False

    def paste(self, destination_dir: Path | str) -> Path | None:
        """Resolve, perform and finish a paste in one synchronous step."""
        plan = self.resolve_paste(destination_dir)
        if plan is None:
            return None
        destination = self.perform_paste(plan)
        self.finish_paste(plan)
        return destination


__all__ = [
    "ClipboardMode",
    "ClipboardEntry",
    "PastePlan",
    "ClipboardController",
]
