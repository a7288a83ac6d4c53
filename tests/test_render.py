"""Frame composition tests for the tree/preview view."""

from __future__ import annotations

import unittest
from pathlib import Path

from foldering.ansi import display_width, strip_ansi
from foldering.file_ops import SearchHit
from foldering.navigator import VisibleRow
from foldering.preview import Preview
from foldering.render import (
    FrameContext,
    build_frame,
    build_status_line,
    format_size_label,
    format_tree_row,
    split_widths,
)
from foldering.tree_cache.types import TreeNode
from foldering.ui_theme import DEFAULT_THEME, PLAIN_THEME, available_theme_names, resolve_theme

ROOT = Path("/work/project")


def _row(name: str, *, is_dir: bool = False, depth: int = 0, expanded: bool = False, size: int | None = None):
    node = TreeNode(name=name, path=ROOT / name, is_dir=is_dir, size=size, is_expanded=expanded)
    return VisibleRow(node=node, depth=depth)


class RowFormattingTests(unittest.TestCase):
    def test_size_label_thresholds(self) -> None:
        self.assertEqual(format_size_label(None), "")
        self.assertEqual(format_size_label(10 * 1024 - 1), "")
        self.assertEqual(format_size_label(10 * 1024), "[10 KB]")
        self.assertEqual(format_size_label(3 * 1024 * 1024), "[3 MB]")

    def test_directory_markers_and_loading_suffix(self) -> None:
        self.assertEqual(format_tree_row(_row("src", is_dir=True), PLAIN_THEME), "▸ src/")
        self.assertEqual(format_tree_row(_row("src", is_dir=True, expanded=True), PLAIN_THEME), "▾ src/")
        self.assertEqual(
            format_tree_row(_row("src", is_dir=True), PLAIN_THEME, loading=True),
            "▸ src/ …",
        )

    def test_file_row_is_indented_by_depth(self) -> None:
        self.assertEqual(format_tree_row(_row("a.txt", depth=2), PLAIN_THEME), "      a.txt")
        self.assertEqual(
            format_tree_row(_row("big.bin", size=20 * 1024), PLAIN_THEME),
            "  big.bin [20 KB]",
        )

    def test_cut_row_uses_cut_color(self) -> None:
        text = format_tree_row(_row("a.txt"), DEFAULT_THEME, is_cut=True)
        self.assertIn(DEFAULT_THEME.tree_cut, text)
        self.assertEqual(strip_ansi(text), "  a.txt")


class LayoutTests(unittest.TestCase):
    def test_status_line_right_aligns_suffix(self) -> None:
        line = build_status_line("Renamed", 20, "3 items")
        self.assertEqual(len(line), 19)
        self.assertTrue(line.startswith("Renamed"))
        self.assertTrue(line.endswith("3 items"))

    def test_narrow_terminal_hides_preview(self) -> None:
        self.assertEqual(split_widths(30), (30, 0))
        tree, preview = split_widths(100)
        self.assertEqual(tree + preview + 1, 100)


class BuildFrameTests(unittest.TestCase):
    def make_context(self, **overrides) -> FrameContext:
        values = dict(
            root=ROOT,
            rows=[_row("src", is_dir=True), _row("a.txt"), _row("b.txt")],
            cursor_index=1,
            scroll_top=0,
            theme=PLAIN_THEME,
        )
        values.update(overrides)
        return FrameContext(**values)

    def test_frame_has_exact_dimensions(self) -> None:
        lines = build_frame(self.make_context(), 60, 8)
        self.assertEqual(len(lines), 8)
        for line in lines[:-1]:
            self.assertEqual(display_width(line), 60)

    def test_header_and_rows_in_tree_column(self) -> None:
        lines = [strip_ansi(line) for line in build_frame(self.make_context(), 60, 8)]
        self.assertTrue(lines[0].startswith("project/"))
        self.assertTrue(lines[1].startswith("▸ src/"))
        self.assertTrue(lines[2].startswith("  a.txt"))

    def test_cursor_row_is_highlighted(self) -> None:
        lines = build_frame(self.make_context(theme=DEFAULT_THEME), 60, 8)
        self.assertIn(DEFAULT_THEME.reverse, lines[2])
        self.assertNotIn(DEFAULT_THEME.reverse, lines[3])

    def test_empty_directory_placeholder(self) -> None:
        lines = [strip_ansi(line) for line in build_frame(self.make_context(rows=[], cursor_index=0), 60, 5)]
        self.assertIn("(empty)", lines[1])

    def test_preview_column_shows_message(self) -> None:
        preview = Preview(path=ROOT / "a.txt", lines=[], message="Binary file not shown.")
        lines = [strip_ansi(line) for line in build_frame(self.make_context(preview=preview), 60, 6)]
        self.assertIn("│a.txt", lines[0])
        self.assertIn("Binary file not shown.", lines[1])

    def test_prompt_replaces_status_line(self) -> None:
        context = self.make_context(status_message="ignored", prompt_label="Rename:", prompt_text="new.txt")
        last = strip_ansi(build_frame(context, 60, 6)[-1])
        self.assertTrue(last.startswith("Rename: new.txt"))
        self.assertNotIn("ignored", last)

    def test_search_results_replace_tree(self) -> None:
        hits = [
            SearchHit(
                name="notes.md",
                path=ROOT / "docs" / "notes.md",
                is_dir=False,
                size=0,
                relative_path="docs/notes.md",
            ),
        ]
        context = self.make_context(search_hits=hits, search_index=0)
        lines = [strip_ansi(line) for line in build_frame(context, 60, 6)]
        self.assertIn("docs/notes.md", lines[1])
        self.assertNotIn("src/", lines[1])

        empty = [strip_ansi(line) for line in build_frame(self.make_context(search_hits=[]), 60, 6)]
        self.assertIn("no matches", empty[1])


class ThemeResolutionTests(unittest.TestCase):
    def test_unknown_names_fall_back_to_default(self) -> None:
        self.assertEqual(resolve_theme("OCEAN").name, "ocean")
        self.assertIs(resolve_theme("neon"), DEFAULT_THEME)
        self.assertIs(resolve_theme(None), DEFAULT_THEME)

    def test_no_color_wins_over_name(self) -> None:
        theme = resolve_theme("ocean", no_color=True)
        self.assertIs(theme, PLAIN_THEME)
        self.assertEqual(theme.reset, "")

    def test_plain_theme_is_not_selectable(self) -> None:
        self.assertEqual(available_theme_names(), ("default", "ocean"))


if __name__ == "__main__":
    unittest.main()
