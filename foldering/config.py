"""Persistent JSON config helpers.

Stores the start path, hidden-file and case preferences, hotkey overrides and
display styles. All access is defensive: malformed or missing config falls
back to defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

LOGGER = logging.getLogger(__name__)

APP_NAME = "foldering"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_PREVIEW_STYLE = "monokai"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        LOGGER.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        LOGGER.warning("Could not save config %s: %s", CONFIG_PATH, exc)


def _update(key: str, value: object) -> None:
    config = load_config()
    config[key] = value
    save_config(config)


def _load_str(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _load_bool(key: str) -> bool | None:
    value = load_config().get(key)
    return value if isinstance(value, bool) else None


def load_start_path() -> Path | None:
    """Return the persisted start path when it still names a directory."""
    value = _load_str("start_path")
    if value is None:
        return None
    path = Path(value).expanduser()
    try:
        return path if path.is_dir() else None
    except OSError:
        return None


def save_start_path(path: Path) -> None:
    _update("start_path", str(path))


def load_show_hidden() -> bool:
    """Return persisted hidden-file visibility; defaults to ``True``."""
    value = _load_bool("show_hidden")
    return True if value is None else value


def save_show_hidden(show_hidden: bool) -> None:
    _update("show_hidden", bool(show_hidden))


def load_case_sensitive() -> bool | None:
    """Return the persisted case-sensitivity override, ``None`` for platform default."""
    return _load_bool("case_sensitive")


def load_hotkey_overrides() -> dict[str, list[str]]:
    """Load ``{action: [key tokens]}`` overrides.

    A single string is accepted as a one-key list; other shapes are dropped.
    """
    raw = load_config().get("hotkeys")
    if not isinstance(raw, dict):
        return {}
    overrides: dict[str, list[str]] = {}
    for action, keys in raw.items():
        if not isinstance(action, str):
            continue
        if isinstance(keys, str):
            keys = [keys]
        if not isinstance(keys, list):
            continue
        tokens = [key for key in keys if isinstance(key, str) and key]
        if tokens:
            overrides[action] = tokens
    return overrides


def save_hotkey_overrides(overrides: dict[str, list[str]]) -> None:
    _update("hotkeys", {action: list(keys) for action, keys in overrides.items()})


def load_theme_name() -> str | None:
    """Load persisted UI theme name, returning ``None`` when unset/invalid."""
    return _load_str("theme")


def save_theme_name(theme_name: str) -> None:
    stripped = str(theme_name).strip()
    if not stripped:
        return
    _update("theme", stripped)


def load_preview_style() -> str:
    """Pygments style for the preview pane."""
    return _load_str("preview_style") or DEFAULT_PREVIEW_STYLE


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_PREVIEW_STYLE",
    "load_config",
    "save_config",
    "load_start_path",
    "save_start_path",
    "load_show_hidden",
    "save_show_hidden",
    "load_case_sensitive",
    "load_hotkey_overrides",
    "save_hotkey_overrides",
    "load_theme_name",
    "save_theme_name",
    "load_preview_style",
]
