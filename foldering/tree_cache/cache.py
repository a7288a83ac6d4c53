"""Lazily populated in-memory mirror of the confined directory tree.

Nodes live in a flat arena keyed by normalized path; directories keep an
ordered list of child keys. Directory listings are fetched through a task
runner and applied when the owning loop drains completions, so every state
change happens on the loop thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from ..context import ExplorerContext
from ..file_ops import DirectoryChild, FileOpsGateway, UnsupportedOperationError, name_sort_key, sort_directory_children
from ..path_resolver import normalize_path
from ..tasks import PendingCall, TaskRunner
from .types import Create, Delete, Rename, TreeMutation, TreeNode

LOGGER = logging.getLogger(__name__)

ChangeHandler = Callable[[Path], None]
ErrorHandler = Callable[[Path, BaseException], None]


def _node_sort_key(node: TreeNode) -> tuple[bool, str, str]:
    return (not node.is_dir, name_sort_key(node.name), node.name)


class DirectoryTreeCache:
    """Arena of ``TreeNode`` records rooted at the confinement boundary."""

    def __init__(
        self,
        context: ExplorerContext,
        gateway: FileOpsGateway,
        runner: TaskRunner,
        on_change: ChangeHandler | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.context = context
        self.boundary = context.boundary
        self.gateway = gateway
        self.runner = runner
        self.on_change = on_change
        self.on_error = on_error
        self._generation = 0
        # Directories whose in-flight listing predates a patch to their entries.
        self._relist: set[str] = set()
        root = self.boundary.root
        self.root_key = self.key(root)
        self._nodes: dict[str, TreeNode] = {
            self.root_key: TreeNode(name=root.name or str(root), path=root, is_dir=True),
        }

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def key(self, path: Path | str) -> str:
        return self.boundary.key(path)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def root(self) -> TreeNode:
        return self._nodes[self.root_key]

    def get(self, path: Path | str) -> TreeNode | None:
        return self._nodes.get(self.key(path))

    def get_by_key(self, key: str) -> TreeNode | None:
        return self._nodes.get(key)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self.key(path) in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def children(self, path: Path | str) -> list[TreeNode]:
        """Cached children of ``path`` in listing order (empty when unloaded)."""
        node = self.get(path)
        if node is None or node.children is None:
            return []
        return [self._nodes[child_key] for child_key in node.children]

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        if node.parent is None:
            return None
        return self._nodes.get(node.parent)

    def iter_subtree(self, node: TreeNode) -> Iterator[TreeNode]:
        """Yield ``node`` and every cached descendant in pre-order."""
        stack = [node]
        while stack:
            current = stack.pop()
            yield current
            if current.children:
                stack.extend(self._nodes[key] for key in reversed(current.children))

    # ------------------------------------------------------------------
    # Expand / collapse / fetch
    # ------------------------------------------------------------------

    def list_directory(self, path: Path) -> list[DirectoryChild]:
        """Fetch the children of ``path`` in listing order."""
        return sort_directory_children(self.gateway.list_directory(path))

    def expand(self, path: Path | str) -> PendingCall | None:
        """Expand ``path``, or collapse it when it is already expanded.

        A directory is fetched at most once per session; while that fetch is
        outstanding further calls are no-ops. Returns the fetch handle when
        one was issued.
        """
        node = self.get(path)
        if node is None or not node.is_dir:
            return None
        if node.is_loading:
            LOGGER.debug("Expand of %s ignored: listing already in flight", node.path)
            return None
        if node.is_expanded:
            self.collapse(node.path)
            return None
        if node.is_loaded:
            node.is_expanded = True
            self._changed(node.path)
            return None
        return self._fetch(node, expand=True)

    def ensure_expanded(self, path: Path | str) -> PendingCall | None:
        """Expand ``path`` unless it is already expanded or loading."""
        node = self.get(path)
        if node is None or not node.is_dir or node.is_expanded or node.is_loading:
            return None
        return self.expand(node.path)

    def collapse(self, path: Path | str) -> bool:
        node = self.get(path)
        # The root is the container of the view and stays expanded.
        if node is None or not node.is_expanded or node is self.root:
            return False
        node.is_expanded = False
        self._changed(node.path)
        return True

    def refresh(self, path: Path | str | None = None) -> list[PendingCall]:
        """Re-fetch one loaded directory, or the root plus every loaded one."""
        if path is not None:
            node = self.get(path)
            if node is None or not node.is_dir or node.is_loading:
                return []
            if not node.is_loaded:
                return []
            return [self._fetch(node, expand=False)]

        calls: list[PendingCall] = []
        for node in list(self.iter_subtree(self.root)):
            if node.is_dir and not node.is_loading and (node.is_loaded or node.path == self.root.path):
                calls.append(self._fetch(node, expand=node is self.root))
        return calls

    def invalidate(self) -> None:
        """Discard in-flight listings; their completions will be ignored."""
        self._generation += 1
        self._relist.clear()
        for node in self._nodes.values():
            node.is_loading = False

    def _fetch(self, node: TreeNode, expand: bool) -> PendingCall:
        node.is_loading = True
        key = self.key(node.path)
        path = node.path
        generation = self._generation
        self._changed(path)
        return self.runner.submit(
            lambda: self.list_directory(path),
            on_done=lambda call: self._finish_fetch(key, path, generation, expand, call),
            label=f"list {path}",
        )

    def _finish_fetch(
        self,
        key: str,
        path: Path,
        generation: int,
        expand: bool,
        call: PendingCall,
    ) -> None:
        if generation != self._generation:
            LOGGER.debug("Discarding stale listing for %s (generation %d)", path, generation)
            return
        node = self._nodes.get(key)
        if node is None or node.path != path:
            LOGGER.debug("Discarding listing for %s: node no longer cached", path)
            return
        if key in self._relist:
            self._relist.discard(key)
            LOGGER.debug("Re-listing %s: entries changed while it was loading", path)
            self._fetch(node, expand)
            return
        node.is_loading = False
        if call.error is not None:
            LOGGER.warning("Cannot list %s: %s", path, call.error)
            self._changed(path)
            if self.on_error is not None:
                self.on_error(path, call.error)
            return
        self._install_children(node, call.value)
        if expand:
            node.is_expanded = True
        self._changed(path)

    def _install_children(self, node: TreeNode, entries: list[DirectoryChild]) -> None:
        """Reconcile ``node``'s children with a fresh listing."""
        node_key = self.key(node.path)
        previous = set(node.children or ())
        new_keys: list[str] = []
        for entry in entries:
            child_path = normalize_path(entry.path)
            child_key = self.key(child_path)
            existing = self._nodes.get(child_key)
            if existing is not None and existing.is_dir == entry.is_dir and existing.parent == node_key:
                existing.name = entry.name
                existing.path = child_path
                existing.size = entry.size
            else:
                if existing is not None:
                    self._drop_subtree(child_key)
                self._nodes[child_key] = TreeNode(
                    name=entry.name,
                    path=child_path,
                    is_dir=entry.is_dir,
                    size=entry.size,
                    parent=node_key,
                )
            new_keys.append(child_key)
        for stale_key in previous.difference(new_keys):
            self._drop_subtree(stale_key)
        node.children = new_keys

    # ------------------------------------------------------------------
    # Patching after confirmed mutations
    # ------------------------------------------------------------------

    def patch(self, path: Path | str, mutation: TreeMutation) -> bool:
        """Apply a confirmed mutation at ``path`` without re-fetching.

        ``path`` is the renamed/deleted entry, or the directory that gained a
        child for ``Create``. Returns whether the cache changed.
        """
        if isinstance(mutation, Rename):
            changed = self._patch_rename(path, mutation.new_name)
        elif isinstance(mutation, Delete):
            changed = self._patch_delete(path)
        elif isinstance(mutation, Create):
            changed = self._patch_create(path, mutation)
        else:
            raise TypeError(f"unknown tree mutation: {mutation!r}")
        if changed:
            self._changed(normalize_path(path))
        return changed

    def _patch_rename(self, path: Path | str, new_name: str) -> bool:
        node = self.get(path)
        if node is None:
            return False
        if node is self.root:
            raise UnsupportedOperationError("The root directory cannot be renamed.", node.path)
        old_key = self.key(node.path)
        new_path = node.path.parent / new_name
        new_key = self.key(new_path)
        if new_key != old_key and new_key in self._nodes:
            self._detach(new_key)
            self._drop_subtree(new_key)

        parent = self.parent_of(node)
        self._mark_relist(parent)
        mapping = self._rekey_subtree(node, new_path)
        node.name = new_name
        if parent is not None and parent.children is not None:
            parent.children = [mapping.get(child_key, child_key) for child_key in parent.children]
            self._resort(parent)
        return True

    def _patch_delete(self, path: Path | str) -> bool:
        node = self.get(path)
        if node is None:
            return False
        if node is self.root:
            raise UnsupportedOperationError("The root directory cannot be deleted.", node.path)
        self._mark_relist(self.parent_of(node))
        key = self.key(node.path)
        self._detach(key)
        self._drop_subtree(key)
        return True

    def _patch_create(self, directory: Path | str, mutation: Create) -> bool:
        parent = self.get(directory)
        if parent is None or not parent.is_dir or parent.children is None:
            # Unlisted directories pick the entry up on their first fetch.
            return False
        self._mark_relist(parent)
        parent_key = self.key(parent.path)
        child_path = parent.path / mutation.name
        child_key = self.key(child_path)
        existing = self._nodes.get(child_key)
        if existing is not None and existing.is_dir == mutation.is_dir:
            existing.size = mutation.size
            existing.name = mutation.name
        else:
            if existing is not None:
                self._detach(child_key)
                self._drop_subtree(child_key)
            self._nodes[child_key] = TreeNode(
                name=mutation.name,
                path=child_path,
                is_dir=mutation.is_dir,
                size=mutation.size,
                parent=parent_key,
            )
        if child_key not in parent.children:
            parent.children.append(child_key)
        self._resort(parent)
        return True

    # ------------------------------------------------------------------
    # Arena maintenance
    # ------------------------------------------------------------------

    def _mark_relist(self, directory: TreeNode | None) -> None:
        if directory is not None and directory.is_loading:
            self._relist.add(self.key(directory.path))

    def _resort(self, parent: TreeNode) -> None:
        if parent.children is None:
            return
        parent.children.sort(key=lambda child_key: _node_sort_key(self._nodes[child_key]))

    def _detach(self, key: str) -> None:
        node = self._nodes.get(key)
        if node is None or node.parent is None:
            return
        parent = self._nodes.get(node.parent)
        if parent is not None and parent.children is not None and key in parent.children:
            parent.children.remove(key)

    def _drop_subtree(self, key: str) -> None:
        node = self._nodes.get(key)
        if node is None:
            return
        for descendant in list(self.iter_subtree(node)):
            descendant_key = self.key(descendant.path)
            self._nodes.pop(descendant_key, None)
            self._relist.discard(descendant_key)

    def _rekey_subtree(self, node: TreeNode, new_path: Path) -> dict[str, str]:
        """Rewrite paths and keys of ``node`` and its descendants.

        Listings in flight for any member were issued against the old paths and
        are discarded on arrival, so every member stops loading here.
        """
        old_root = node.path
        subtree = list(self.iter_subtree(node))
        mapping: dict[str, str] = {}
        for member in subtree:
            relative = member.path.relative_to(old_root)
            moved = new_path / relative if relative.parts else new_path
            mapping[self.key(member.path)] = self.key(moved)
            member.path = moved
            member.is_loading = False
        for old_key in mapping:
            self._nodes.pop(old_key, None)
            self._relist.discard(old_key)
        for member in subtree:
            member_key = self.key(member.path)
            self._nodes[member_key] = member
            if member is not node and member.parent is not None:
                member.parent = mapping.get(member.parent, member.parent)
            if member.children is not None:
                member.children = [mapping.get(child_key, child_key) for child_key in member.children]
        return mapping

    def _changed(self, path: Path) -> None:
        if self.on_change is not None:
            self.on_change(path)


__all__ = ["DirectoryTreeCache"]
