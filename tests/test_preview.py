"""File preview loading, sanitizing and highlighting."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from foldering.ansi import strip_ansi
from foldering.file_ops import LocalFileOps
from foldering.preview import (
    FALLBACK_STYLE,
    build_preview,
    colorize_source,
    looks_binary,
    normalize_style,
    sanitize_terminal_text,
)


class SanitizeTests(unittest.TestCase):
    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x1b[2Jb\x07"), "a\\x1b[2Jb\\x07")

    def test_tabs_and_newlines_are_kept(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\tb\nc"), "a\tb\nc")

    def test_nul_marks_binary(self) -> None:
        self.assertTrue(looks_binary("abc\x00def"))
        self.assertFalse(looks_binary("plain text"))


class HighlightTests(unittest.TestCase):
    def test_unknown_style_falls_back(self) -> None:
        self.assertEqual(normalize_style("no-such-style"), FALLBACK_STYLE)
        self.assertEqual(normalize_style(None), FALLBACK_STYLE)
        self.assertEqual(normalize_style("default"), "default")

    def test_python_source_gets_colored(self) -> None:
        rendered = colorize_source("def f():\n    return 1\n", Path("x.py"))
        self.assertIn("\x1b[", rendered)
        self.assertEqual(strip_ansi(rendered).splitlines(), ["def f():", "    return 1"])

    def test_no_color_returns_source(self) -> None:
        self.assertEqual(colorize_source("x = 1\n", Path("x.py"), no_color=True), "x = 1\n")

    def test_unknown_extension_uses_plain_lexer(self) -> None:
        rendered = colorize_source("hello\n", Path("notes.unknownext"))
        self.assertEqual(strip_ansi(rendered).strip(), "hello")


class BuildPreviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.ops = LocalFileOps()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_text_file_lines(self) -> None:
        target = self.root / "a.txt"
        target.write_text("one\ntwo\n", encoding="utf-8")

        preview = build_preview(self.ops, target, no_color=True)

        self.assertEqual(preview.lines, ["one", "two"])
        self.assertEqual(preview.message, "")
        self.assertFalse(preview.truncated)

    def test_long_file_is_truncated(self) -> None:
        target = self.root / "long.txt"
        target.write_text("\n".join(str(i) for i in range(10)), encoding="utf-8")

        preview = build_preview(self.ops, target, no_color=True, max_lines=3)

        self.assertEqual(preview.lines, ["0", "1", "2"])
        self.assertTrue(preview.truncated)

    def test_binary_file_shows_message(self) -> None:
        target = self.root / "blob.bin"
        target.write_bytes(b"\x00\x01\x02")
        self.assertEqual(build_preview(self.ops, target).message, "Binary file not shown.")

    def test_missing_file_shows_message(self) -> None:
        preview = build_preview(self.ops, self.root / "gone.txt")
        self.assertEqual(preview.lines, [])
        self.assertIn("gone.txt", preview.message)

    def test_oversized_file_reports_error(self) -> None:
        target = self.root / "big.txt"
        target.write_text("x" * 64, encoding="utf-8")
        preview = build_preview(LocalFileOps(read_max_bytes=8), target)
        self.assertEqual(preview.lines, [])
        self.assertNotEqual(preview.message, "")

    def test_escape_sequences_in_content_are_neutralized(self) -> None:
        target = self.root / "evil.txt"
        target.write_text("safe\x1b]0;title\x07\n", encoding="utf-8")
        preview = build_preview(self.ops, target, no_color=True)
        self.assertEqual(preview.lines, ["safe\\x1b]0;title\\x07"])


if __name__ == "__main__":
    unittest.main()
