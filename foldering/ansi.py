"""Column math for rows that mix SGR escapes with text.

Escapes occupy no columns, tabs run to the next stop, wide glyphs take two
cells and combining marks none.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Cells used by ``ch`` when drawn starting at column ``col``."""
    if ch == "\t":
        return TAB_STOP - col % TAB_STOP
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def _segments(text: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_escape, chunk)``; printable text comes one character at a time."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        yield from ((False, ch) for ch in text[pos : match.start()])
        yield True, match.group(0)
        pos = match.end()
    yield from ((False, ch) for ch in text[pos:])


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Cut ``text`` down to ``max_cols`` cells.

    Escapes before the cut are kept; tabs are written out as spaces.
    """
    if max_cols <= 0:
        return ""
    kept: list[str] = []
    col = 0
    for is_escape, chunk in _segments(text):
        if is_escape:
            kept.append(chunk)
            continue
        if col >= max_cols:
            break
        width = char_display_width(chunk, col)
        if col + width > max_cols:
            break
        kept.append(" " * width if chunk == "\t" else chunk)
        col += width
    return "".join(kept)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip to ``width`` and pad with spaces to exactly ``width`` columns."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "strip_ansi",
    "display_width",
    "clip_ansi_line",
    "pad_ansi_line",
]
