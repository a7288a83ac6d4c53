"""Keyboard input: raw key decoding, hotkey tables and the line prompt."""

from __future__ import annotations

from .hotkeys import DEFAULT_HOTKEYS, hotkey_bindings, normalize_key_name, resolve_hotkeys
from .key_registry import ActionBinding, KeyActionRegistry
from .prompt import CANCEL, SUBMIT, LinePrompt
from .reader import read_key

__all__ = [
    "DEFAULT_HOTKEYS",
    "hotkey_bindings",
    "normalize_key_name",
    "resolve_hotkeys",
    "ActionBinding",
    "KeyActionRegistry",
    "CANCEL",
    "SUBMIT",
    "LinePrompt",
    "read_key",
]
