"""Interactive terminal explorer built on ``ExplorerSession``.

``ExplorerApp`` maps key tokens to session operations and keeps the view
state (prompt, status line, preview, search results). ``run_explorer`` is the
raw-mode loop: drain completions, repaint when dirty, read one key.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

from .events import (
    CLIPBOARD_STATE_CHANGED,
    CURSOR_CHANGED,
    OPERATION_FAILED,
    RENAME_STARTED,
    SELECTION_CHANGED,
    TREE_CHANGED,
    TREE_MUTATED,
    UNDO_AVAILABILITY_CHANGED,
)
from .file_ops import SearchHit
from .input import CANCEL, SUBMIT, KeyActionRegistry, LinePrompt, hotkey_bindings, read_key
from .preview import FALLBACK_STYLE, Preview, build_preview
from .render import FrameContext, build_frame, write_frame
from .session import ExplorerSession, MutationNotice, OperationFailure, RenameState
from .tasks import PendingCall
from .terminal import TerminalController
from .ui_theme import DEFAULT_THEME, UITheme

LOGGER = logging.getLogger(__name__)

KEY_POLL_TIMEOUT_MS = 50

_MUTATION_VERBS = {
    "rename": "Renamed",
    "delete": "Deleted",
    "create": "Created",
    "move": "Moved",
    "copy": "Copied",
}


class ExplorerApp:
    """Key handling and view state for one explorer session."""

    def __init__(
        self,
        session: ExplorerSession,
        *,
        hotkeys: Mapping[str, list[str]] | None = None,
        theme: UITheme = DEFAULT_THEME,
        preview_style: str = FALLBACK_STYLE,
        no_color: bool = False,
        on_show_hidden_changed: Callable[[bool], None] | None = None,
    ) -> None:
        self.session = session
        self.theme = theme
        self.preview_style = preview_style
        self.no_color = no_color
        self.on_show_hidden_changed = on_show_hidden_changed
        self.viewport_rows = 20
        self.running = True
        self.dirty = True
        self.prompt: LinePrompt | None = None
        self.status_message = ""
        self.status_is_error = False
        self.preview: Preview | None = None
        self.search_hits: list[SearchHit] | None = None
        self.search_index = 0
        self.search_scroll = 0
        self._reveal_target: Path | None = None
        self._reveal_requested: set[str] = set()
        self._pending_delete: Path | None = None
        self.registry = KeyActionRegistry().bind_all(hotkey_bindings(hotkeys)).on_all(
            {
                "move_up": session.move_up,
                "move_down": session.move_down,
                "page_up": lambda: session.navigator.move_by(-self.viewport_rows),
                "page_down": lambda: session.navigator.move_by(self.viewport_rows),
                "home": session.navigator.move_home,
                "end": session.navigator.move_end,
                "enter": self.activate,
                "go_back": self.go_back,
                "rename": self.start_rename,
                "delete": self.confirm_delete,
                "cut": self.cut,
                "copy": self.copy,
                "paste": self.paste,
                "undo": self.undo,
                "new_file": lambda: self.open_prompt("new_file", "New file:"),
                "new_folder": lambda: self.open_prompt("new_folder", "New folder:"),
                "search": lambda: self.open_prompt("search", "Search:"),
                "refresh": self.refresh,
                "toggle_hidden": self.toggle_hidden,
                "quit": self.quit,
            }
        )
        events = session.events
        for name in (CURSOR_CHANGED, TREE_CHANGED, UNDO_AVAILABILITY_CHANGED):
            events.connect(name, self._mark_dirty)
        events.connect(OPERATION_FAILED, self._on_operation_failed)
        events.connect(TREE_MUTATED, self._on_tree_mutated)
        events.connect(CLIPBOARD_STATE_CHANGED, self._on_clipboard_changed)
        events.connect(RENAME_STARTED, self._on_rename_started)
        events.connect(SELECTION_CHANGED, self._on_selection_changed)

    # ------------------------------------------------------------------
    # Loop hooks
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Apply finished calls and keep the cursor on screen."""
        if self.session.drain():
            self.dirty = True
        self._advance_reveal()
        if self.session.navigator.follow_cursor(self.viewport_rows):
            self.dirty = True

    def handle_key(self, key: str) -> bool:
        """Route one key token; return whether it was consumed."""
        self.dirty = True
        if self.prompt is not None:
            return self._handle_prompt_key(key)
        if self.search_hits is not None:
            return self._handle_search_key(key)
        if self.status_message and not self.status_is_error:
            self.status_message = ""
        handled = self.registry.dispatch(key)
        return handled is not None

    def set_status(self, message: str, *, error: bool = False) -> None:
        self.status_message = message
        self.status_is_error = error
        self.dirty = True

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def activate(self) -> bool:
        self.session.activate()
        return True

    def go_back(self) -> bool:
        """Collapse the cursor directory, else jump to its parent row."""
        session = self.session
        if session.go_back():
            return True
        node = session.navigator.current
        if node is None:
            return False
        parent = session.cache.parent_of(node)
        if parent is None or parent is session.cache.root:
            return False
        return session.navigator.move_to(parent.path)

    def start_rename(self) -> bool:
        path = self.session.navigator.current_path
        if path is None:
            return False
        return self.session.start_rename_for_path(path)

    def confirm_delete(self) -> bool:
        node = self.session.navigator.current
        if node is None:
            return False
        self._pending_delete = node.path
        kind = "folder" if node.is_dir else "file"
        self.open_prompt("confirm_delete", f"Delete {kind} {node.name}? (y/N)")
        return True

    def cut(self) -> bool:
        return self.session.cut() is not None

    def copy(self) -> bool:
        return self.session.copy() is not None

    def paste(self) -> bool:
        self.session.paste()
        return True

    def undo(self) -> bool:
        self.session.undo()
        return True

    def refresh(self) -> bool:
        self.session.refresh()
        self.set_status("Refreshed")
        return True

    def toggle_hidden(self) -> bool:
        show_hidden = not self.session.context.show_hidden
        self.session.set_show_hidden(show_hidden)
        if self.on_show_hidden_changed is not None:
            self.on_show_hidden_changed(show_hidden)
        self.set_status("Showing hidden entries" if show_hidden else "Hiding hidden entries")
        return True

    def quit(self) -> bool:
        self.running = False
        return True

    def open_prompt(self, kind: str, label: str, text: str = "") -> bool:
        self.prompt = LinePrompt(kind=kind, label=label, text=text)
        return True

    def reveal(self, path: Path) -> None:
        """Expand every ancestor of ``path`` then put the cursor on it."""
        self._reveal_target = path
        self._reveal_requested = set()
        self._advance_reveal()

    # ------------------------------------------------------------------
    # Prompt and search modes
    # ------------------------------------------------------------------

    def _handle_prompt_key(self, key: str) -> bool:
        prompt = self.prompt
        assert prompt is not None
        if prompt.kind == "confirm_delete":
            self.prompt = None
            target, self._pending_delete = self._pending_delete, None
            if key in {"y", "Y"} and target is not None:
                self.session.delete(target)
            return True
        outcome = prompt.handle_key(key)
        if outcome == CANCEL:
            self.prompt = None
            if prompt.kind == "rename":
                self.session.cancel_rename()
        elif outcome == SUBMIT:
            self.prompt = None
            self._submit_prompt(prompt)
        return True

    def _submit_prompt(self, prompt: LinePrompt) -> PendingCall | None:
        session = self.session
        if prompt.kind == "rename":
            return session.commit_rename(prompt.text)
        if prompt.kind == "new_file":
            return session.create_file(session.paste_target(), prompt.text)
        if prompt.kind == "new_folder":
            return session.create_directory(session.paste_target(), prompt.text)
        if prompt.kind == "search":
            query = prompt.text.strip()
            if not query:
                return None
            self.set_status(f"Searching for {query!r}…")
            return session.search(query, recursive=True, on_result=self._show_search_results)
        return None

    def _show_search_results(self, hits: list[SearchHit]) -> None:
        self.search_hits = hits
        self.search_index = 0
        self.search_scroll = 0
        self.set_status(f"{len(hits)} match{'es' if len(hits) != 1 else ''}")

    def _handle_search_key(self, key: str) -> bool:
        hits = self.search_hits or []
        if key == "ESC":
            self.search_hits = None
            self.status_message = ""
            return True
        if key in {"UP", "k"}:
            self.search_index = max(0, self.search_index - 1)
        elif key in {"DOWN", "j"}:
            self.search_index = min(max(0, len(hits) - 1), self.search_index + 1)
        elif key == "ENTER":
            self.search_hits = None
            self.status_message = ""
            if hits:
                self.reveal(hits[self.search_index].path)
            return True
        else:
            return False
        if self.search_index < self.search_scroll:
            self.search_scroll = self.search_index
        elif self.search_index >= self.search_scroll + self.viewport_rows:
            self.search_scroll = self.search_index - self.viewport_rows + 1
        return True

    def _advance_reveal(self) -> None:
        target = self._reveal_target
        if target is None:
            return
        session = self.session
        ancestors: list[Path] = []
        parent = session.resolver.get_parent(target)
        while parent is not None:
            ancestors.append(parent)
            parent = session.resolver.get_parent(parent)
        for directory in reversed(ancestors):
            node = session.cache.get(directory)
            if node is None:
                self._finish_reveal(found=False)
                return
            if node.is_expanded:
                continue
            if node.is_loading:
                return
            key = session.cache.key(directory)
            if key in self._reveal_requested:
                self._finish_reveal(found=False)
                return
            self._reveal_requested.add(key)
            session.cache.ensure_expanded(directory)
            if not node.is_expanded:
                return
        self._finish_reveal(found=session.navigator.move_to(target))

    def _finish_reveal(self, found: bool) -> None:
        target = self._reveal_target
        self._reveal_target = None
        self._reveal_requested = set()
        self.dirty = True
        if not found and target is not None:
            self.set_status(f"{target.name} is no longer in the tree", error=True)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _mark_dirty(self, _payload: object = None) -> None:
        self.dirty = True

    def _on_operation_failed(self, failure: OperationFailure) -> None:
        self.set_status(f"{failure.label}: {failure.error}", error=True)

    def _on_tree_mutated(self, mutation: MutationNotice) -> None:
        verb = _MUTATION_VERBS.get(mutation.kind, mutation.kind)
        self.set_status(f"{verb} {mutation.path.name}")

    def _on_clipboard_changed(self, entry: object) -> None:
        clip = self.session.clipboard.entry
        if clip is not None and entry is not None:
            verb = "Cut" if clip.mode == "cut" else "Copied"
            self.set_status(f"{verb} {clip.source_path.name}; paste with the paste key")
        self.dirty = True

    def _on_rename_started(self, state: RenameState) -> None:
        self.open_prompt("rename", "Rename:", state.original_name)
        self.dirty = True

    def _on_selection_changed(self, path: Path | None) -> None:
        self.dirty = True
        if path is None:
            self.preview = None
            return
        session = self.session

        def on_done(call: PendingCall) -> None:
            if session.selected_file != path:
                return
            if call.error is not None:
                LOGGER.warning("Preview of %s failed: %s", path, call.error)
                self.preview = Preview(path=path, lines=[], message=str(call.error))
            else:
                self.preview = call.value
            self.dirty = True

        session.runner.submit(
            lambda: build_preview(session.gateway, path, self.preview_style, no_color=self.no_color),
            on_done=on_done,
            label=f"preview {path}",
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def frame_context(self) -> FrameContext:
        session = self.session
        navigator = session.navigator
        rows = navigator.rows
        clip = session.clipboard.entry
        right = [f"{len(rows)} items"]
        if clip is not None:
            right.append(f"{clip.mode}: {clip.source_path.name}")
        if session.can_undo:
            right.append("undo")
        return FrameContext(
            root=session.root,
            rows=rows,
            cursor_index=navigator.cursor_index,
            scroll_top=navigator.scroll_top,
            theme=self.theme,
            cut_path=clip.source_path if clip is not None and clip.mode == "cut" else None,
            loading_paths={row.node.path for row in rows if row.node.is_loading},
            preview=self.preview,
            status_message=self.status_message,
            status_is_error=self.status_is_error,
            status_right=" │ ".join(right),
            prompt_label=self.prompt.label if self.prompt is not None else None,
            prompt_text=self.prompt.text if self.prompt is not None else "",
            search_hits=self.search_hits,
            search_index=self.search_index,
            search_scroll=self.search_scroll,
        )


def run_explorer(app: ExplorerApp, stdin_fd: int | None = None, stdout_fd: int | None = None) -> None:
    """Run the interactive loop until the quit action."""
    stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
    stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        raise SystemExit("foldering needs an interactive terminal.")
    terminal = TerminalController(stdin_fd, stdout_fd)
    session = app.session
    session.open()
    session.focus()
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while app.running:
            size = terminal.size()
            if size != last_size:
                last_size = size
                app.dirty = True
            columns, lines = size
            # One row for the status line, one for the root header.
            app.viewport_rows = max(1, lines - 2)
            app.tick()
            if app.dirty:
                write_frame(build_frame(app.frame_context(), columns, lines), stdout_fd)
                app.dirty = False
            key = read_key(stdin_fd, timeout_ms=KEY_POLL_TIMEOUT_MS)
            if key:
                app.handle_key(key)
    session.close()


__all__ = ["KEY_POLL_TIMEOUT_MS", "ExplorerApp", "run_explorer"]
