"""Reversible-action history for rename and delete.

Entries carry the pre-image captured before the mutation was issued and are
pushed only once that mutation succeeded. Undo is best-effort: an entry whose
compensating call fails is dropped and the error is raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .file_ops import FileOpsGateway, NothingToUndoError, UnsupportedOperationError

MAX_UNDO_HISTORY = 100


@dataclass(frozen=True)
class RenameUndo:
    """``old_path`` was renamed to ``path`` (whose name is ``new_name``)."""

    path: Path
    old_path: Path
    new_name: str
    is_dir: bool


@dataclass(frozen=True)
class DeleteUndo:
    """``path`` was deleted; ``content`` holds a file's bytes."""

    path: Path
    is_dir: bool
    content: bytes | None = None


UndoEntry = RenameUndo | DeleteUndo


def describe(entry: UndoEntry) -> str:
    if isinstance(entry, RenameUndo):
        return f"rename {entry.old_path.name} -> {entry.new_name}"
    kind = "folder" if entry.is_dir else "file"
    return f"delete {kind} {entry.path.name}"


class UndoLog:
    """Bounded most-recent-first stack of ``UndoEntry`` values."""

    def __init__(self, gateway: FileOpsGateway, max_entries: int = MAX_UNDO_HISTORY) -> None:
        self.gateway = gateway
        self.max_entries = max(1, max_entries)
        self._entries: list[UndoEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> list[UndoEntry]:
        """Entries, most recent first."""
        return list(reversed(self._entries))

    def peek(self) -> UndoEntry | None:
        return self._entries[-1] if self._entries else None

    def push(self, entry: UndoEntry) -> None:
        self._entries.append(entry)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            del self._entries[:overflow]

    def pop(self) -> UndoEntry:
        if not self._entries:
            raise NothingToUndoError("Nothing to undo.")
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def compensate(self, entry: UndoEntry) -> Path:
        """Issue the inverse gateway call for ``entry``; return the restored path."""
        if isinstance(entry, RenameUndo):
            return self.gateway.rename_file(entry.path, entry.old_path.name)
        if entry.is_dir:
            raise UnsupportedOperationError(
                f"Deleted folder {entry.path.name} cannot be restored.",
                entry.path,
            )
        if entry.content is None:
            raise UnsupportedOperationError(
                f"Contents of {entry.path.name} were not kept and cannot be restored.",
                entry.path,
            )
        self.gateway.create_file(entry.path, entry.content)
        return entry.path

    def undo(self) -> UndoEntry:
        """Pop the newest entry and reverse it.

        The entry is discarded even when its compensating call fails.
        """
        entry = self.pop()
        self.compensate(entry)
        return entry


__all__ = [
    "MAX_UNDO_HISTORY",
    "RenameUndo",
    "DeleteUndo",
    "UndoEntry",
    "describe",
    "UndoLog",
]
