"""Width math for styled rows: escapes are free, wide glyphs take two columns."""

import unittest

from foldering import ansi as ansi_mod


class DisplayWidthTests(unittest.TestCase):
    def test_escape_sequences_do_not_count(self) -> None:
        self.assertEqual(ansi_mod.display_width("\033[1;31mabc\033[0m"), 3)

    def test_wide_and_combining_characters(self) -> None:
        self.assertEqual(ansi_mod.display_width("日本"), 4)
        self.assertEqual(ansi_mod.display_width("é"), 1)

    def test_tabs_expand_to_next_stop(self) -> None:
        self.assertEqual(ansi_mod.display_width("ab\tc"), 9)


class ClipAndPadTests(unittest.TestCase):
    def test_clip_keeps_escapes_and_trims_text(self) -> None:
        clipped = ansi_mod.clip_ansi_line("\033[31mabcdef", 3)
        self.assertEqual(clipped, "\033[31mabc")

    def test_wide_glyph_that_does_not_fit_is_dropped(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("a日", 2), "a")

    def test_pad_fills_to_exact_width(self) -> None:
        padded = ansi_mod.pad_ansi_line("\033[32mok\033[0m", 5)
        self.assertEqual(ansi_mod.display_width(padded), 5)
        self.assertTrue(padded.endswith("   "))

    def test_non_positive_width_is_empty(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("abc", 0), "")


if __name__ == "__main__":
    unittest.main()
