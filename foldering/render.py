"""Frame composition for the tree/preview terminal view.

``build_frame`` turns a ``FrameContext`` into screen rows without touching
explorer state; ``write_frame`` paints them.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .ansi import pad_ansi_line
from .file_ops import SearchHit
from .navigator import VisibleRow
from .preview import Preview
from .ui_theme import DEFAULT_THEME, UITheme

SIZE_LABEL_MIN_BYTES = 10 * 1024
MIN_TREE_WIDTH = 20
TREE_WIDTH_RATIO = 0.4


def format_size_label(size: int | None) -> str:
    """``[N KB]``/``[N MB]`` for files of 10 KB and up, else empty."""
    if size is None or size < SIZE_LABEL_MIN_BYTES:
        return ""
    if size >= 1024 * 1024:
        return f"[{size // (1024 * 1024)} MB]"
    return f"[{size // 1024} KB]"


def format_tree_row(
    row: VisibleRow,
    theme: UITheme = DEFAULT_THEME,
    *,
    is_cut: bool = False,
    loading: bool = False,
) -> str:
    """Render one tree row as ANSI-styled text."""
    node = row.node
    indent = "  " * row.depth
    reset = theme.reset
    name_color = theme.tree_cut if is_cut else (theme.tree_dir if node.is_dir else theme.tree_file)
    if node.is_dir:
        marker = "▾ " if node.is_expanded else "▸ "
        suffix = " …" if loading else ""
        return f"{indent}{theme.tree_marker}{marker}{reset}{name_color}{node.name}/{reset}{suffix}"
    size_label = format_size_label(node.size)
    size_text = f" {theme.tree_size}{size_label}{reset}" if size_label else ""
    return f"{indent}  {name_color}{node.name}{reset}{size_text}"


def format_search_hit(hit: SearchHit, theme: UITheme = DEFAULT_THEME) -> str:
    color = theme.tree_dir if hit.is_dir else theme.tree_file
    suffix = "/" if hit.is_dir else ""
    return f"{theme.tree_marker}· {theme.reset}{color}{hit.relative_path}{suffix}{theme.reset}"


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def split_widths(width: int) -> tuple[int, int]:
    """Return (tree, preview) column widths; one column is the divider."""
    if width < MIN_TREE_WIDTH * 2:
        return max(1, width), 0
    left = max(MIN_TREE_WIDTH, int(width * TREE_WIDTH_RATIO))
    return left, max(0, width - left - 1)


@dataclass
class FrameContext:
    """Everything one frame needs, gathered by the app loop."""

    root: Path
    rows: list[VisibleRow]
    cursor_index: int
    scroll_top: int
    theme: UITheme = DEFAULT_THEME
    cut_path: Path | None = None
    loading_paths: set[Path] = field(default_factory=set)
    preview: Preview | None = None
    status_message: str = ""
    status_is_error: bool = False
    status_right: str = ""
    prompt_label: str | None = None
    prompt_text: str = ""
    search_hits: list[SearchHit] | None = None
    search_index: int = 0
    search_scroll: int = 0


def _tree_lines(context: FrameContext, height: int) -> list[str]:
    theme = context.theme
    header = f"{theme.tree_dir}{context.root.name or context.root}/{theme.reset}"
    lines = [header]
    body_rows = max(0, height - 1)
    if context.search_hits is not None:
        hits = context.search_hits
        if not hits:
            lines.append(f"{theme.divider}no matches{theme.reset}")
        visible = hits[context.search_scroll : context.search_scroll + body_rows]
        for offset, hit in enumerate(visible):
            text = format_search_hit(hit, theme)
            if context.search_scroll + offset == context.search_index:
                text = f"{theme.reverse}{text}{theme.reset}"
            lines.append(text)
        return lines
    if not context.rows:
        lines.append(f"{theme.divider}(empty){theme.reset}")
        return lines
    visible_rows = context.rows[context.scroll_top : context.scroll_top + body_rows]
    for offset, row in enumerate(visible_rows):
        text = format_tree_row(
            row,
            theme,
            is_cut=context.cut_path is not None and row.node.path == context.cut_path,
            loading=row.node.path in context.loading_paths,
        )
        if context.scroll_top + offset == context.cursor_index:
            text = f"{theme.reverse}{text}{theme.reset}"
        lines.append(text)
    return lines


def _preview_lines(context: FrameContext, height: int) -> list[str]:
    preview = context.preview
    theme = context.theme
    if preview is None:
        return []
    lines = [f"{theme.divider}{preview.path.name}{theme.reset}"]
    if preview.message:
        lines.append(preview.message)
        return lines
    lines.extend(preview.lines[: max(0, height - 1)])
    if preview.truncated and len(lines) < height:
        lines.append(f"{theme.divider}… truncated{theme.reset}")
    return lines


def _bottom_line(context: FrameContext, width: int) -> str:
    theme = context.theme
    if context.prompt_label is not None:
        return pad_ansi_line(f"{theme.prompt}{context.prompt_label}{theme.reset} {context.prompt_text}█", width)
    status = build_status_line(context.status_message, width, context.status_right)
    color = theme.status_error if context.status_is_error else theme.status_info
    return f"{color}{status}{theme.reset}"


def build_frame(context: FrameContext, width: int, height: int) -> list[str]:
    """Compose ``height`` screen rows of exactly ``width`` columns."""
    content_rows = max(1, height - 1)
    tree_width, preview_width = split_widths(width)
    tree = _tree_lines(context, content_rows)
    preview = _preview_lines(context, content_rows) if preview_width else []
    divider = f"{context.theme.divider}│{context.theme.reset}"
    out: list[str] = []
    for idx in range(content_rows):
        left = pad_ansi_line(tree[idx] if idx < len(tree) else "", tree_width)
        if preview_width:
            right = pad_ansi_line(preview[idx] if idx < len(preview) else "", preview_width)
            out.append(f"{left}{context.theme.reset}{divider}{right}{context.theme.reset}")
        else:
            out.append(f"{left}{context.theme.reset}")
    out.append(_bottom_line(context, width))
    return out


def write_frame(lines: list[str], fd: int | None = None) -> None:
    payload = "\033[H\033[J" + "\r\n".join(lines)
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, payload.encode("utf-8", errors="replace"))


__all__ = [
    "SIZE_LABEL_MIN_BYTES",
    "format_size_label",
    "format_tree_row",
    "format_search_hit",
    "build_status_line",
    "split_widths",
    "FrameContext",
    "build_frame",
    "write_frame",
]
