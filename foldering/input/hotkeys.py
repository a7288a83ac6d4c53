"""Default explorer hotkeys and user override parsing.

Overrides come from the ``hotkeys`` config key as ``{action: [keys]}``. Key
names may be reader tokens (``UP``, ``CTRL_Z``) or browser-style names
(``ArrowUp``, ``Control+z``); both normalize to reader tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .key_registry import ActionBinding

LOGGER = logging.getLogger(__name__)

DEFAULT_HOTKEYS: dict[str, tuple[str, ...]] = {
    "move_up": ("UP", "k"),
    "move_down": ("DOWN", "j"),
    "page_up": ("PAGE_UP",),
    "page_down": ("PAGE_DOWN",),
    "home": ("HOME", "g"),
    "end": ("END", "G"),
    "enter": ("ENTER", "RIGHT", "z"),
    "go_back": ("LEFT", "x"),
    "rename": ("F2", "e"),
    "delete": ("DELETE", "d"),
    "cut": ("CTRL_X",),
    "copy": ("CTRL_C", "y"),
    "paste": ("CTRL_V", "p"),
    "undo": ("CTRL_Z", "u"),
    "new_file": ("n",),
    "new_folder": ("N",),
    "search": ("/",),
    "refresh": ("F5", "r"),
    "toggle_hidden": (".",),
    "quit": ("q",),
}

_NAMED_KEYS: dict[str, str] = {
    "arrowup": "UP",
    "arrowdown": "DOWN",
    "arrowleft": "LEFT",
    "arrowright": "RIGHT",
    "enter": "ENTER",
    "return": "ENTER",
    "escape": "ESC",
    "esc": "ESC",
    "delete": "DELETE",
    "del": "DELETE",
    "backspace": "BACKSPACE",
    "tab": "TAB",
    "home": "HOME",
    "end": "END",
    "pageup": "PAGE_UP",
    "pagedown": "PAGE_DOWN",
    "page_up": "PAGE_UP",
    "page_down": "PAGE_DOWN",
    "f1": "F1",
    "f2": "F2",
    "f5": "F5",
    "space": " ",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "insert": "INSERT",
}

_MODIFIER_PREFIXES = {"control": "CTRL", "ctrl": "CTRL"}


def normalize_key_name(name: str) -> str | None:
    """Return the reader token for ``name``, or ``None`` when unsupported."""
    text = name.strip()
    if not text:
        return None
    if len(text) == 1:
        return text
    if "+" in text:
        modifier, _, key = text.rpartition("+")
        prefix = _MODIFIER_PREFIXES.get(modifier.strip().lower())
        key = key.strip()
        if prefix is None or len(key) != 1 or not key.isalpha():
            return None
        return f"{prefix}_{key.upper()}"
    upper = text.upper()
    if upper.startswith("CTRL_") and len(upper) == 6 and upper[-1].isalpha():
        return upper
    if upper in {"UP", "DOWN", "LEFT", "RIGHT", "ENTER", "ESC", "DELETE", "HOME", "END", "TAB"}:
        return upper
    return _NAMED_KEYS.get(text.lower())


def resolve_hotkeys(overrides: Mapping[str, list[str]] | None = None) -> dict[str, tuple[str, ...]]:
    """Merge ``overrides`` over the defaults; unknown actions are ignored."""
    table = dict(DEFAULT_HOTKEYS)
    for action, names in (overrides or {}).items():
        if action not in table:
            LOGGER.warning("Ignoring hotkey for unknown action %r", action)
            continue
        tokens = []
        for name in names:
            token = normalize_key_name(name)
            if token is None:
                LOGGER.warning("Ignoring unsupported key %r for %s", name, action)
                continue
            tokens.append(token)
        if tokens:
            table[action] = tuple(tokens)
    return table


def hotkey_bindings(overrides: Mapping[str, list[str]] | None = None) -> list[ActionBinding]:
    return [ActionBinding(action=action, keys=keys) for action, keys in resolve_hotkeys(overrides).items()]


__all__ = [
    "DEFAULT_HOTKEYS",
    "normalize_key_name",
    "resolve_hotkeys",
    "hotkey_bindings",
]
