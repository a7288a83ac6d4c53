"""Read-only preview of the selected file.

Neutralizes terminal control bytes before highlighting so file content cannot
drive the terminal, then colors it with Pygments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_all_styles
from pygments.util import ClassNotFound

from .file_ops import FileOpsError, FileOpsGateway

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

FALLBACK_STYLE = "monokai"
PREVIEW_MAX_LINES = 2000

_FORMATTERS: dict[str, Terminal256Formatter] = {}


@dataclass(frozen=True)
class Preview:
    """Rendered preview lines for ``path``; ``message`` replaces content."""

    path: Path
    lines: list[str]
    message: str = ""
    truncated: bool = False


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", source)


def looks_binary(source: str) -> bool:
    return "\x00" in source[:8192]


def normalize_style(style: str | None) -> str:
    if style and style in set(get_all_styles()):
        return style
    return FALLBACK_STYLE


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def colorize_source(source: str, path: Path, style: str = FALLBACK_STYLE, no_color: bool = False) -> str:
    """Return ``source`` highlighted for a 256-color terminal."""
    if no_color:
        return source
    try:
        lexer = get_lexer_for_filename(path.name, source)
    except ClassNotFound:
        lexer = TextLexer()
    return highlight(source, lexer, _formatter_for_style(normalize_style(style)))


def build_preview(
    gateway: FileOpsGateway,
    path: Path,
    style: str = FALLBACK_STYLE,
    no_color: bool = False,
    max_lines: int = PREVIEW_MAX_LINES,
) -> Preview:
    """Load and highlight ``path``; read failures become a preview message."""
    try:
        source = gateway.read_file(path)
    except FileOpsError as exc:
        return Preview(path=path, lines=[], message=str(exc))
    if source is None:
        return Preview(path=path, lines=[], message=f"{path.name} is not a readable file.")
    if looks_binary(source):
        return Preview(path=path, lines=[], message="Binary file not shown.")
    lines = source.splitlines()
    truncated = len(lines) > max_lines
    if truncated:
        lines = lines[:max_lines]
    text = sanitize_terminal_text("\n".join(lines))
    rendered = colorize_source(text, path, style, no_color=no_color) if text else ""
    return Preview(path=path, lines=rendered.splitlines(), truncated=truncated)


__all__ = [
    "Preview",
    "FALLBACK_STYLE",
    "PREVIEW_MAX_LINES",
    "sanitize_terminal_text",
    "looks_binary",
    "normalize_style",
    "colorize_source",
    "build_preview",
]
