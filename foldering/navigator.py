"""Single-cursor navigation over the flattened view of the tree.

The flattened view is the depth-first pre-order sequence of the root's
descendants whose ancestors are all expanded. The cursor is tracked by key,
so it stays on the same entry when rows above it appear or disappear.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .events import CURSOR_CHANGED, EventHub
from .tasks import PendingCall
from .tree_cache import DirectoryTreeCache, TreeNode


@dataclass(frozen=True)
class VisibleRow:
    """One row of the flattened view."""

    node: TreeNode
    depth: int


def flatten_visible(cache: DirectoryTreeCache) -> list[VisibleRow]:
    """Return visible rows in pre-order; collapsed subtrees contribute nothing."""
    rows: list[VisibleRow] = []
    stack = [(child, 0) for child in reversed(cache.children(cache.root.path))]
    while stack:
        node, depth = stack.pop()
        rows.append(VisibleRow(node=node, depth=depth))
        if node.is_dir and node.is_expanded and node.children:
            stack.extend((child, depth + 1) for child in reversed(cache.children(node.path)))
    return rows


def scroll_to_reveal(scroll_top: int, viewport_height: int, item_top: int, item_height: int = 1) -> int:
    """Return the scroll offset that brings an item into view.

    The offset is unchanged when the item is already fully visible. An item
    clipped at either edge is aligned to that edge.
    """
    if viewport_height <= 0:
        return scroll_top
    item_bottom = item_top + item_height
    view_bottom = scroll_top + viewport_height
    if item_top < scroll_top:
        return max(0, item_top)
    if item_bottom > view_bottom:
        if item_height >= viewport_height:
            return max(0, item_top)
        return max(0, item_bottom - viewport_height)
    return scroll_top


class CursorNavigator:
    """Owns the flattened view and the single active cursor."""

    def __init__(
        self,
        cache: DirectoryTreeCache,
        events: EventHub | None = None,
        on_select: Callable[[Path], None] | None = None,
    ) -> None:
        self.cache = cache
        self.events = events
        self.on_select = on_select
        self.scroll_top = 0
        self._rows: list[VisibleRow] = []
        self._cursor_index = 0
        self._cursor_key: str | None = None
        self.sync()

    @property
    def rows(self) -> list[VisibleRow]:
        return self._rows

    @property
    def cursor_index(self) -> int:
        return self._cursor_index

    @property
    def current(self) -> TreeNode | None:
        if not self._rows:
            return None
        return self._rows[self._cursor_index].node

    @property
    def current_path(self) -> Path | None:
        node = self.current
        return node.path if node is not None else None

    def row_index(self, path: Path | str) -> int | None:
        key = self.cache.key(path)
        for idx, row in enumerate(self._rows):
            if self.cache.key(row.node.path) == key:
                return idx
        return None

    def sync(self) -> None:
        """Recompute the flattened view after the tree changed."""
        self._rows = flatten_visible(self.cache)
        previous_key = self._cursor_key
        if previous_key is not None:
            for idx, row in enumerate(self._rows):
                if self.cache.key(row.node.path) == previous_key:
                    self._cursor_index = idx
                    return
        self._set_index(self._cursor_index)

    def _set_index(self, index: int) -> bool:
        if not self._rows:
            changed = self._cursor_key is not None
            self._cursor_index = 0
            self._cursor_key = None
        else:
            index = max(0, min(index, len(self._rows) - 1))
            key = self.cache.key(self._rows[index].node.path)
            changed = key != self._cursor_key
            self._cursor_index = index
            self._cursor_key = key
        if changed and self.events is not None:
            self.events.emit(CURSOR_CHANGED, self.current_path)
        return changed

    def move_by(self, delta: int) -> bool:
        """Move the cursor ``delta`` rows, clamped at both ends."""
        if not self._rows:
            return False
        return self._set_index(self._cursor_index + delta)

    def move_up(self) -> bool:
        return self.move_by(-1)

    def move_down(self) -> bool:
        return self.move_by(1)

    def move_home(self) -> bool:
        return self._set_index(0)

    def move_end(self) -> bool:
        return self._set_index(len(self._rows) - 1)

    def move_to(self, path: Path | str) -> bool:
        """Place the cursor on ``path`` if it is visible."""
        idx = self.row_index(path)
        if idx is None:
            return False
        self._set_index(idx)
        return True

    def activate(self) -> PendingCall | None:
        """Expand/collapse a directory under the cursor or select a file."""
        node = self.current
        if node is None:
            return None
        if node.is_dir:
            return self.cache.expand(node.path)
        if self.on_select is not None:
            self.on_select(node.path)
        return None

    def go_back(self) -> bool:
        """Collapse the directory under the cursor if it is expanded."""
        node = self.current
        if node is None or not node.is_dir or not node.is_expanded:
            return False
        return self.cache.collapse(node.path)

    def follow_cursor(self, viewport_rows: int) -> bool:
        """Scroll so the cursor row is visible; return whether scroll moved."""
        previous = self.scroll_top
        target = scroll_to_reveal(previous, viewport_rows, self._cursor_index)
        if target == previous:
            return False
        max_top = max(0, len(self._rows) - max(1, viewport_rows))
        self.scroll_top = max(0, min(target, max_top))
        return self.scroll_top != previous


__all__ = [
    "VisibleRow",
    "flatten_visible",
    "scroll_to_reveal",
    "CursorNavigator",
]
