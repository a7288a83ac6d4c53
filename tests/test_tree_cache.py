"""Directory tree cache: lazy expansion, staleness and in-place patches."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from foldering.context import ExplorerContext
from foldering.file_ops import LocalFileOps, PermissionDeniedError, UnsupportedOperationError
from foldering.tasks import InlineTaskRunner
from foldering.tree_cache import Create, Delete, DirectoryTreeCache, Rename


class CountingFileOps(LocalFileOps):
    """Local gateway that records listing calls and can fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.listed: list[Path] = []
        self.fail_paths: set[Path] = set()

    def list_directory(self, path: Path):
        self.listed.append(Path(path))
        if Path(path) in self.fail_paths:
            raise PermissionDeniedError(f"{path}: Permission denied", Path(path))
        return super().list_directory(path)


class TreeCacheTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "a.txt").write_text("hello", encoding="utf-8")
        (self.root / "B").mkdir()
        (self.root / "B" / "x.txt").write_text("x", encoding="utf-8")
        (self.root / "B" / "C").mkdir()
        self.ops = CountingFileOps()
        self.runner = InlineTaskRunner()
        self.changes: list[Path] = []
        self.errors: list[tuple[Path, BaseException]] = []
        self.cache = DirectoryTreeCache(
            ExplorerContext.for_root(self.root, case_sensitive=True),
            self.ops,
            self.runner,
            on_change=self.changes.append,
            on_error=lambda path, exc: self.errors.append((path, exc)),
        )
        self.root = self.cache.root.path

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def names(self, path: Path) -> list[str]:
        return [node.name for node in self.cache.children(path)]

    def open_root(self) -> None:
        self.cache.expand(self.root)
        self.runner.drain()


class ExpansionTests(TreeCacheTestCase):
    def test_expand_lists_directories_first(self) -> None:
        self.open_root()
        self.assertEqual(self.names(self.root), ["B", "a.txt"])
        self.assertTrue(self.cache.root.is_expanded)
        self.assertEqual(self.cache.get(self.root / "a.txt").size, 5)

    def test_expand_twice_before_completion_fetches_once(self) -> None:
        self.open_root()
        directory = self.root / "B"
        first = self.cache.expand(directory)
        second = self.cache.expand(directory)
        self.runner.drain()

        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(self.ops.listed.count(directory), 1)
        self.assertTrue(self.cache.get(directory).is_expanded)

    def test_collapse_then_expand_reuses_loaded_children(self) -> None:
        self.open_root()
        directory = self.root / "B"
        self.cache.expand(directory)
        self.runner.drain()

        self.assertIsNone(self.cache.expand(directory))
        self.assertFalse(self.cache.get(directory).is_expanded)
        self.assertIsNone(self.cache.expand(directory))
        self.assertTrue(self.cache.get(directory).is_expanded)
        self.assertEqual(self.ops.listed.count(directory), 1)

    def test_root_cannot_be_collapsed(self) -> None:
        self.open_root()
        self.assertFalse(self.cache.collapse(self.root))
        self.assertTrue(self.cache.root.is_expanded)

    def test_files_do_not_expand(self) -> None:
        self.open_root()
        self.assertIsNone(self.cache.expand(self.root / "a.txt"))

    def test_listing_failure_leaves_node_collapsed_and_unloaded(self) -> None:
        self.open_root()
        directory = self.root / "B"
        self.ops.fail_paths.add(directory)

        call = self.cache.expand(directory)
        self.runner.drain()

        node = self.cache.get(directory)
        self.assertFalse(call.ok)
        self.assertFalse(node.is_expanded)
        self.assertFalse(node.is_loaded)
        self.assertFalse(node.is_loading)
        self.assertEqual(len(self.errors), 1)
        self.assertIsInstance(self.errors[0][1], PermissionDeniedError)

    def test_invalidate_discards_stale_completion(self) -> None:
        call = self.cache.expand(self.root)
        self.cache.invalidate()
        self.runner.drain()

        self.assertTrue(call.done)
        self.assertFalse(self.cache.root.is_loaded)
        self.assertFalse(self.cache.root.is_expanded)
        self.assertEqual(self.cache.generation, 1)

    def test_refresh_picks_up_external_changes_and_keeps_expansion(self) -> None:
        self.open_root()
        self.cache.expand(self.root / "B")
        self.runner.drain()
        (self.root / "new.txt").write_text("", encoding="utf-8")
        (self.root / "B" / "x.txt").unlink()

        self.cache.refresh()
        self.runner.drain()

        self.assertEqual(self.names(self.root), ["B", "a.txt", "new.txt"])
        self.assertEqual(self.names(self.root / "B"), ["C"])
        self.assertTrue(self.cache.get(self.root / "B").is_expanded)


class PatchTests(TreeCacheTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.open_root()
        self.cache.expand(self.root / "B")
        self.runner.drain()
        self.changes.clear()

    def test_rename_rekeys_subtree_and_resorts(self) -> None:
        self.assertTrue(self.cache.patch(self.root / "B", Rename("zz")))

        self.assertIsNone(self.cache.get(self.root / "B"))
        renamed = self.cache.get(self.root / "zz")
        self.assertEqual(renamed.name, "zz")
        self.assertTrue(renamed.is_expanded)
        self.assertEqual(self.cache.get(self.root / "zz" / "x.txt").path, self.root / "zz" / "x.txt")
        self.assertEqual(self.names(self.root), ["zz", "a.txt"])
        self.assertEqual(self.changes, [self.root / "B"])

    def test_rename_file_resorts_among_siblings(self) -> None:
        (self.root / "m.txt").write_text("", encoding="utf-8")
        self.cache.refresh(self.root)
        self.runner.drain()

        self.cache.patch(self.root / "a.txt", Rename("z.txt"))

        self.assertEqual(self.names(self.root), ["B", "m.txt", "z.txt"])

    def test_rename_root_is_rejected(self) -> None:
        with self.assertRaises(UnsupportedOperationError):
            self.cache.patch(self.root, Rename("other"))

    def test_delete_drops_subtree(self) -> None:
        self.assertTrue(self.cache.patch(self.root / "B", Delete()))
        self.assertIsNone(self.cache.get(self.root / "B" / "x.txt"))
        self.assertEqual(self.names(self.root), ["a.txt"])

    def test_delete_unknown_path_is_noop(self) -> None:
        self.assertFalse(self.cache.patch(self.root / "missing", Delete()))
        self.assertEqual(self.changes, [])

    def test_create_inserts_in_listing_order(self) -> None:
        self.assertTrue(self.cache.patch(self.root, Create("0-first.txt", is_dir=False, size=0)))
        self.assertTrue(self.cache.patch(self.root, Create("Adir", is_dir=True)))
        self.assertEqual(self.names(self.root), ["Adir", "B", "0-first.txt", "a.txt"])

    def test_create_in_unloaded_directory_is_deferred(self) -> None:
        self.assertFalse(self.cache.patch(self.root / "B" / "C", Create("n.txt", is_dir=False)))
        self.assertIsNone(self.cache.get(self.root / "B" / "C" / "n.txt"))

    def test_rename_during_listing_discards_old_completion(self) -> None:
        directory = self.root / "B" / "C"
        (directory / "inner.txt").write_text("", encoding="utf-8")
        self.cache.expand(directory)
        self.cache.patch(directory, Rename("D"))
        self.runner.drain()

        renamed = self.cache.get(self.root / "B" / "D")
        self.assertFalse(renamed.is_loading)
        self.assertFalse(renamed.is_loaded)
        self.assertIsNone(self.cache.get(directory / "inner.txt"))

    def test_rename_releases_descendant_listing_in_flight(self) -> None:
        nested = self.root / "B" / "C"
        self.cache.expand(nested)
        (self.root / "B").rename(self.root / "Z")
        self.cache.patch(self.root / "B", Rename("Z"))
        self.runner.drain()

        moved = self.cache.get(self.root / "Z" / "C")
        self.assertFalse(moved.is_loading)
        self.assertFalse(moved.is_expanded)
        self.assertIsNotNone(self.cache.expand(moved.path))
        self.runner.drain()
        self.assertTrue(self.cache.get(self.root / "Z" / "C").is_expanded)

    def test_refresh_in_flight_relists_after_rename(self) -> None:
        self.cache.refresh(self.root)
        (self.root / "B").rename(self.root / "Z")
        self.cache.patch(self.root / "B", Rename("Z"))
        self.runner.drain()

        self.assertEqual(self.names(self.root), ["Z", "a.txt"])
        self.assertIsNone(self.cache.get(self.root / "B"))
        renamed = self.cache.get(self.root / "Z")
        self.assertTrue(renamed.is_expanded)
        self.assertEqual(self.names(renamed.path), ["C", "x.txt"])
        self.assertFalse(self.cache.root.is_loading)
        self.assertEqual(self.ops.listed.count(self.root), 3)

    def test_refresh_in_flight_relists_after_delete(self) -> None:
        self.cache.refresh(self.root)
        (self.root / "a.txt").unlink()
        self.cache.patch(self.root / "a.txt", Delete())
        self.runner.drain()

        self.assertEqual(self.names(self.root), ["B"])
        self.assertIsNone(self.cache.get(self.root / "a.txt"))


if __name__ == "__main__":
    unittest.main()
