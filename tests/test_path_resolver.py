"""Confinement-boundary and path arithmetic tests."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from foldering.file_ops import LocalFileOps, OutsideBoundaryError
from foldering.path_resolver import ConfinementBoundary, PathResolver, normalize_path


class ConfinementBoundaryTests(unittest.TestCase):
    def test_contains_root_and_descendants_only(self) -> None:
        boundary = ConfinementBoundary.for_root("/proj", case_sensitive=True)
        self.assertTrue(boundary.contains("/proj"))
        self.assertTrue(boundary.contains("/proj/B/x.txt"))
        self.assertFalse(boundary.contains("/"))
        self.assertFalse(boundary.contains("/project"))
        self.assertFalse(boundary.contains("/proj/../etc"))

    def test_case_insensitive_boundary_folds_case(self) -> None:
        boundary = ConfinementBoundary.for_root("/Proj", case_sensitive=False)
        self.assertTrue(boundary.contains("/proj/a.txt"))
        self.assertTrue(boundary.is_root("/PROJ"))
        self.assertEqual(boundary.key("/PROJ/A.txt"), boundary.key("/proj/a.TXT"))

    def test_case_sensitive_boundary_keeps_case(self) -> None:
        boundary = ConfinementBoundary.for_root("/Proj", case_sensitive=True)
        self.assertFalse(boundary.contains("/proj/a.txt"))
        self.assertNotEqual(boundary.key("/Proj/A.txt"), boundary.key("/Proj/a.txt"))

    def test_root_is_normalized(self) -> None:
        boundary = ConfinementBoundary.for_root("/proj/sub/..", case_sensitive=True)
        self.assertEqual(boundary.root, Path("/proj"))


class PathResolverParentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = PathResolver(ConfinementBoundary.for_root("/proj", case_sensitive=True))

    def test_parent_of_nested_file(self) -> None:
        self.assertEqual(self.resolver.get_parent("/proj/B/x.txt"), Path("/proj/B"))

    def test_parent_of_root_is_none(self) -> None:
        self.assertIsNone(self.resolver.get_parent("/proj"))

    def test_parent_of_direct_child_is_root(self) -> None:
        self.assertEqual(self.resolver.get_parent("/proj/a.txt"), Path("/proj"))

    def test_parent_outside_boundary_is_none(self) -> None:
        for outside in ("/", "/etc/passwd", "/projx/a", "/proj/../other/file"):
            with self.subTest(path=outside):
                self.assertIsNone(self.resolver.get_parent(outside))

    def test_require_inside_rejects_escape(self) -> None:
        with self.assertRaises(OutsideBoundaryError):
            self.resolver.require_inside("/proj/../etc")
        self.assertEqual(self.resolver.require_inside("/proj/./B"), Path("/proj/B"))

    def test_is_within_and_same_path(self) -> None:
        self.assertTrue(self.resolver.is_within("/proj/B/x", "/proj/B"))
        self.assertTrue(self.resolver.is_within("/proj/B", "/proj/B"))
        self.assertFalse(self.resolver.is_within("/proj/Bx", "/proj/B"))
        self.assertTrue(self.resolver.same_path("/proj/B/../a", "/proj/a"))

    def test_relative_label(self) -> None:
        self.assertEqual(self.resolver.relative_label("/proj"), ".")
        self.assertEqual(self.resolver.relative_label("/proj/B/x.txt"), str(Path("B/x.txt")))

    def test_paste_destination_uses_source_name(self) -> None:
        self.assertEqual(
            self.resolver.paste_destination("/proj/B", "/proj/a.txt"),
            Path("/proj/B/a.txt"),
        )


class PathResolverChangeDirectoryTests(unittest.TestCase):
    def test_change_directory_into_existing_child(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "B").mkdir()
            (root / "a.txt").write_text("x", encoding="utf-8")
            resolver = PathResolver(ConfinementBoundary.for_root(root), LocalFileOps())

            self.assertEqual(resolver.change_directory(root, "B"), normalize_path(root / "B"))
            self.assertIsNone(resolver.change_directory(root, "a.txt"))
            self.assertIsNone(resolver.change_directory(root, "missing"))

    def test_change_directory_cannot_escape_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "root"
            root.mkdir()
            (Path(tmp) / "sibling").mkdir()
            resolver = PathResolver(ConfinementBoundary.for_root(root), LocalFileOps())

            self.assertIsNone(resolver.change_directory(root, ".."))
            self.assertIsNone(resolver.change_directory(root, "../sibling"))

    def test_change_directory_without_gateway_is_none(self) -> None:
        resolver = PathResolver(ConfinementBoundary.for_root("/proj", case_sensitive=True))
        self.assertIsNone(resolver.change_directory("/proj", "B"))


if __name__ == "__main__":
    unittest.main()
