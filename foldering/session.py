"""Event-driven explorer session.

Owns the tree cache, navigator, clipboard and undo log for one confined root
and orders every mutation the same way: validate, run the gateway call
through the task runner, and only on confirmed success patch the cache,
record undo data and notify listeners. A failed call leaves all state as it
was and is reported through ``operation-failed``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .clipboard import ClipboardController, ClipboardEntry, PastePlan
from .context import ExplorerContext
from .events import (
    CLIPBOARD_STATE_CHANGED,
    FOCUS_REQUESTED,
    OPERATION_FAILED,
    RENAME_STARTED,
    SELECTION_CHANGED,
    TREE_CHANGED,
    TREE_MUTATED,
    UNDO_AVAILABILITY_CHANGED,
    EventHub,
)
from .file_ops import (
    FileOpsError,
    FileOpsGateway,
    LocalFileOps,
    NothingToUndoError,
    NotFoundError,
    SearchHit,
    UnsupportedOperationError,
    validate_entry_name,
)
from .navigator import CursorNavigator
from .path_resolver import PathResolver
from .tasks import InlineTaskRunner, PendingCall, TaskRunner
from .tree_cache import Create, Delete, DirectoryTreeCache, Rename, TreeNode
from .undo import MAX_UNDO_HISTORY, DeleteUndo, RenameUndo, UndoEntry, UndoLog, describe

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationFailure:
    """Payload of ``operation-failed``."""

    label: str
    error: BaseException


@dataclass(frozen=True)
class MutationNotice:
    """Payload of ``tree-mutated``."""

    kind: str
    path: Path
    old_path: Path | None = None


@dataclass(frozen=True)
class RenameState:
    """Inline rename in progress for ``path``."""

    path: Path
    original_name: str


class ExplorerSession:
    """One confined explorer view and its mutation pipeline."""

    def __init__(
        self,
        context: ExplorerContext,
        gateway: FileOpsGateway | None = None,
        runner: TaskRunner | None = None,
        events: EventHub | None = None,
        max_undo: int = MAX_UNDO_HISTORY,
    ) -> None:
        self.context = context
        self.gateway = gateway if gateway is not None else LocalFileOps(show_hidden=context.show_hidden)
        self.runner = runner if runner is not None else InlineTaskRunner()
        self.events = events if events is not None else EventHub()
        self.resolver = PathResolver(context.boundary, self.gateway)
        self.cache = DirectoryTreeCache(
            context,
            self.gateway,
            self.runner,
            on_change=self._tree_changed,
            on_error=self._listing_failed,
        )
        self.navigator = CursorNavigator(self.cache, self.events, on_select=self.select_file)
        self.clipboard = ClipboardController(self.resolver, self.gateway)
        self.undo_log = UndoLog(self.gateway, max_entries=max_undo)
        self.selected_file: Path | None = None
        self.renaming: RenameState | None = None
        self.focused = False
        self._closed = False

    @property
    def root(self) -> Path:
        return self.context.root

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> PendingCall | None:
        """Issue the initial listing of the root directory."""
        return self.cache.ensure_expanded(self.root)

    def drain(self) -> int:
        """Apply completed gateway calls; call from the UI loop."""
        return self.runner.drain()

    def close(self) -> None:
        """Tear down the view; late completions are discarded."""
        self._closed = True
        self.cache.invalidate()

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def move_up(self) -> bool:
        return self.navigator.move_up()

    def move_down(self) -> bool:
        return self.navigator.move_down()

    def activate(self) -> PendingCall | None:
        return self.navigator.activate()

    def go_back(self) -> bool:
        return self.navigator.go_back()

    def expand(self, path: Path | str) -> PendingCall | None:
        return self.cache.expand(path)

    def select_file(self, path: Path | None) -> None:
        if path == self.selected_file:
            return
        self.selected_file = path
        self.events.emit(SELECTION_CHANGED, path)

    def clear_selection(self) -> None:
        self.select_file(None)

    # ------------------------------------------------------------------
    # Imperative entry points
    # ------------------------------------------------------------------

    def focus(self) -> None:
        self.focused = True
        self.events.emit(FOCUS_REQUESTED, self.navigator.current_path)

    def refresh(self) -> list[PendingCall]:
        return self.cache.refresh()

    def start_rename_for_path(self, path: Path | str) -> bool:
        """Begin an inline rename of ``path`` and move the cursor onto it."""
        node = self.cache.get(path)
        if node is None or node is self.cache.root:
            return False
        self.navigator.move_to(node.path)
        self.renaming = RenameState(path=node.path, original_name=node.name)
        self.events.emit(RENAME_STARTED, self.renaming)
        return True

    def commit_rename(self, new_name: str) -> PendingCall | None:
        state = self.renaming
        self.renaming = None
        if state is None:
            return None
        if new_name.strip() == state.original_name:
            return None
        return self.rename(state.path, new_name)

    def cancel_rename(self) -> None:
        self.renaming = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def rename(self, path: Path | str, new_name: str) -> PendingCall:
        label = f"rename {path}"
        try:
            node = self._require_mutable_node(path)
            name = validate_entry_name(new_name)
        except FileOpsError as exc:
            return self._rejected(label, exc)
        source = node.path
        is_dir = node.is_dir

        def on_success(new_path: Path) -> None:
            cursor_on_source = self.navigator.current_path == source
            self.cache.patch(source, Rename(new_path.name))
            if cursor_on_source:
                self.navigator.move_to(new_path)
            self.undo_log.push(RenameUndo(path=new_path, old_path=source, new_name=new_path.name, is_dir=is_dir))
            self._follow_rename(source, new_path)
            self.events.emit(TREE_MUTATED, MutationNotice("rename", new_path, old_path=source))
            self.events.emit(UNDO_AVAILABILITY_CHANGED, True)

        return self._submit(label, lambda: self.gateway.rename_file(source, name), on_success)

    def delete(self, path: Path | str) -> PendingCall:
        """Delete an entry; a file's bytes are captured first for undo."""
        label = f"delete {path}"
        try:
            node = self._require_mutable_node(path)
        except FileOpsError as exc:
            return self._rejected(label, exc)
        target = node.path
        is_dir = node.is_dir

        def job() -> tuple[bool, bytes | None]:
            if is_dir:
                self.gateway.delete_directory(target)
                return True, None
            content = self.gateway.read_bytes(target)
            self.gateway.delete_file(target)
            return content is not None, content

        def on_success(outcome: tuple[bool, bytes | None]) -> None:
            existed, content = outcome
            self.cache.patch(target, Delete())
            if existed:
                self.undo_log.push(DeleteUndo(path=target, is_dir=is_dir, content=content))
                self.events.emit(UNDO_AVAILABILITY_CHANGED, True)
            self._forget_path(target)
            self.events.emit(TREE_MUTATED, MutationNotice("delete", target))

        return self._submit(label, job, on_success)

    def create_file(self, directory: Path | str, name: str) -> PendingCall:
        return self._create(directory, name, is_dir=False)

    def create_directory(self, directory: Path | str, name: str) -> PendingCall:
        return self._create(directory, name, is_dir=True)

    def _create(self, directory: Path | str, name: str, is_dir: bool) -> PendingCall:
        label = f"create {name} in {directory}"
        try:
            parent = self.resolver.require_inside(directory)
            clean_name = validate_entry_name(name)
        except FileOpsError as exc:
            return self._rejected(label, exc)
        target = parent / clean_name

        def job() -> None:
            if is_dir:
                self.gateway.create_directory(target)
            else:
                self.gateway.create_file(target, "")

        def on_success(_value: Any) -> None:
            self.cache.patch(parent, Create(clean_name, is_dir=is_dir, size=None if is_dir else 0))
            self.navigator.move_to(target)
            self.events.emit(TREE_MUTATED, MutationNotice("create", target))

        return self._submit(label, job, on_success)

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def cut(self, path: Path | str | None = None) -> ClipboardEntry | None:
        return self._stage("cut", path)

    def copy(self, path: Path | str | None = None) -> ClipboardEntry | None:
        return self._stage("copy", path)

    def _stage(self, mode: str, path: Path | str | None) -> ClipboardEntry | None:
        node = self.navigator.current if path is None else self.cache.get(path)
        if node is None:
            return None
        try:
            if mode == "cut":
                entry = self.clipboard.cut(node.path, node.is_dir)
            else:
                entry = self.clipboard.copy(node.path, node.is_dir)
        except FileOpsError as exc:
            self._report(f"{mode} {node.path}", exc)
            return None
        self.events.emit(CLIPBOARD_STATE_CHANGED, entry)
        return entry

    def paste_target(self) -> Path:
        """Directory a paste lands in: the cursor's directory, else the root."""
        node = self.navigator.current
        if node is None:
            return self.root
        if node.is_dir:
            return node.path
        parent = self.cache.parent_of(node)
        return parent.path if parent is not None else self.root

    def paste(self, destination_dir: Path | str | None = None) -> PendingCall:
        target_dir = destination_dir if destination_dir is not None else self.paste_target()
        label = f"paste into {target_dir}"
        try:
            plan = self.clipboard.resolve_paste(target_dir)
        except FileOpsError as exc:
            return self._rejected(label, exc)
        if plan is None:
            return self._rejected(label, FileOpsError("Nothing to paste."))
        source_node = self.cache.get(plan.source)
        size = source_node.size if source_node is not None else None

        def on_success(destination: Path) -> None:
            self._apply_paste(plan, destination, size)

        return self._submit(label, lambda: self.clipboard.perform_paste(plan), on_success)

    def _apply_paste(self, plan: PastePlan, destination: Path, size: int | None) -> None:
        if plan.is_move:
            self.cache.patch(plan.source, Delete())
        self.cache.patch(
            plan.destination_dir,
            Create(destination.name, is_dir=plan.entry.is_dir, size=None if plan.entry.is_dir else size),
        )
        if self.clipboard.finish_paste(plan):
            self.events.emit(CLIPBOARD_STATE_CHANGED, None)
        if plan.is_move:
            self._clear_selection_within(plan.source)
            self.events.emit(TREE_MUTATED, MutationNotice("move", destination, old_path=plan.source))
        else:
            self.events.emit(TREE_MUTATED, MutationNotice("copy", destination, old_path=plan.source))

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self.undo_log.can_undo

    def undo(self) -> PendingCall:
        """Reverse the most recent rename or delete."""
        label = "undo"
        if not self.undo_log.can_undo:
            return self._rejected(label, NothingToUndoError("Nothing to undo."))
        entry = self.undo_log.pop()
        self.events.emit(UNDO_AVAILABILITY_CHANGED, self.undo_log.can_undo)
        label = f"undo {describe(entry)}"
        if isinstance(entry, DeleteUndo) and entry.is_dir:
            return self._rejected(
                label,
                UnsupportedOperationError(f"Deleted folder {entry.path.name} cannot be restored.", entry.path),
            )

        def on_success(restored: Path) -> None:
            self._apply_undo(entry, restored)

        return self._submit(label, lambda: self.undo_log.compensate(entry), on_success)

    def _apply_undo(self, entry: UndoEntry, restored: Path) -> None:
        if isinstance(entry, RenameUndo):
            cursor_on_entry = self.navigator.current_path == entry.path
            self.cache.patch(entry.path, Rename(restored.name))
            if cursor_on_entry:
                self.navigator.move_to(restored)
            self._follow_rename(entry.path, restored)
            self.events.emit(TREE_MUTATED, MutationNotice("rename", restored, old_path=entry.path))
            return
        size = len(entry.content) if entry.content is not None else None
        self.cache.patch(entry.path.parent, Create(entry.path.name, is_dir=False, size=size))
        self.navigator.move_to(entry.path)
        self.events.emit(TREE_MUTATED, MutationNotice("create", entry.path))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        recursive: bool = True,
        on_result: Callable[[list[SearchHit]], None] | None = None,
    ) -> PendingCall:
        """Search entry names below the root; hits arrive via ``on_result``."""
        root = self.root

        def on_success(hits: list[SearchHit]) -> None:
            if on_result is not None:
                on_result(hits)

        return self._submit(
            f"search {query!r}",
            lambda: self.gateway.search_files(root, query, recursive),
            on_success,
        )

    def set_show_hidden(self, show_hidden: bool) -> list[PendingCall]:
        """Switch dot-entry visibility and re-list loaded directories."""
        if show_hidden == self.context.show_hidden:
            return []
        self.context = replace(self.context, show_hidden=show_hidden)
        if isinstance(self.gateway, LocalFileOps):
            self.gateway.show_hidden = show_hidden
        return self.cache.refresh()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_mutable_node(self, path: Path | str) -> TreeNode:
        normalized = self.resolver.require_inside(path)
        node = self.cache.get(normalized)
        if node is None:
            raise NotFoundError(f"{normalized.name} is not in the tree.", normalized)
        if node is self.cache.root:
            raise UnsupportedOperationError("The root directory cannot be changed.", normalized)
        return node

    def _submit(self, label: str, job: Callable[[], Any], on_success: Callable[[Any], None]) -> PendingCall:
        def on_done(call: PendingCall) -> None:
            if self._closed:
                LOGGER.debug("Discarding result of %s: session closed", label)
                return
            if call.error is not None:
                self._report(label, call.error)
                return
            on_success(call.value)

        return self.runner.submit(job, on_done=on_done, label=label)

    def _rejected(self, label: str, error: FileOpsError) -> PendingCall:
        call = PendingCall(label)
        call.error = error
        call.done = True
        self._report(label, error)
        return call

    def _report(self, label: str, error: BaseException) -> None:
        LOGGER.warning("%s failed: %s", label, error)
        self.events.emit(OPERATION_FAILED, OperationFailure(label, error))

    def _follow_rename(self, old_path: Path, new_path: Path) -> None:
        if self.selected_file is not None and self.resolver.is_within(self.selected_file, old_path):
            relative = self.selected_file.relative_to(old_path)
            self.select_file(new_path / relative if relative.parts else new_path)
        if self.clipboard.retarget(old_path, new_path):
            self.events.emit(CLIPBOARD_STATE_CHANGED, self.clipboard.entry)

    def _clear_selection_within(self, path: Path) -> None:
        if self.selected_file is not None and self.resolver.is_within(self.selected_file, path):
            self.clear_selection()

    def _forget_path(self, path: Path) -> None:
        self._clear_selection_within(path)
        entry = self.clipboard.entry
        if entry is not None and self.resolver.is_within(entry.source_path, path):
            self.clipboard.clear()
            self.events.emit(CLIPBOARD_STATE_CHANGED, None)

    def _tree_changed(self, path: Path) -> None:
        self.navigator.sync()
        self.events.emit(TREE_CHANGED, path)

    def _listing_failed(self, path: Path, error: BaseException) -> None:
        self._report(f"list {path}", error)


__all__ = [
    "OperationFailure",
    "MutationNotice",
    "RenameState",
    "ExplorerSession",
]
