"""Color palettes for the tree, status line and prompt.

Only explorer chrome is themed; the preview's Pygments style is configured
on its own.
"""

from __future__ import annotations

from dataclasses import dataclass

_RESET = "\033[0m"
_REVERSE = "\033[7m"


def _fg(color: int, *, bold: bool = False, dim: bool = False) -> str:
    """SGR sequence for 256-color foreground ``color``."""
    prefix = "1;" if bold else ("2;" if dim else "")
    return f"\033[{prefix}38;5;{color}m"


@dataclass(frozen=True)
class UITheme:
    """Named ANSI sequences looked up by the renderer."""

    name: str
    divider: str
    reverse: str
    reset: str
    tree_marker: str
    tree_dir: str
    tree_file: str
    tree_size: str
    tree_cut: str
    status_info: str
    status_error: str
    prompt: str


def _palette(name: str, *, accent: int, folder: int, muted: int, info: int, error: int, prompt: int) -> UITheme:
    return UITheme(
        name=name,
        divider=_fg(muted, dim=True),
        reverse=_REVERSE,
        reset=_RESET,
        tree_marker=_fg(accent),
        tree_dir=_fg(folder, bold=True),
        tree_file=_fg(252),
        tree_size=_fg(muted),
        tree_cut=_fg(muted, dim=True),
        status_info=_fg(info),
        status_error=_fg(error, bold=True),
        prompt=_fg(prompt, bold=True),
    )


DEFAULT_THEME = _palette("default", accent=44, folder=33, muted=109, info=81, error=203, prompt=229)
OCEAN_THEME = _palette("ocean", accent=39, folder=45, muted=73, info=153, error=209, prompt=45)
PLAIN_THEME = UITheme("plain", *([""] * 11))

_THEMES: dict[str, UITheme] = {theme.name: theme for theme in (DEFAULT_THEME, OCEAN_THEME)}


def available_theme_names() -> tuple[str, ...]:
    """Names accepted by ``--theme``; ``plain`` comes only from ``--no-color``."""
    return tuple(sorted(_THEMES))


def normalize_theme_name(name: str | None) -> str:
    candidate = str(name or "").strip().lower()
    return candidate if candidate in _THEMES else DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    return PLAIN_THEME if no_color else _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
