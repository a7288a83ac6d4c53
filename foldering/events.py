"""Explorer events exposed to the surrounding UI."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

LOGGER = logging.getLogger(__name__)

CURSOR_CHANGED = "cursor-changed"
SELECTION_CHANGED = "selection-changed"
TREE_CHANGED = "tree-changed"
TREE_MUTATED = "tree-mutated"
CLIPBOARD_STATE_CHANGED = "clipboard-state-changed"
UNDO_AVAILABILITY_CHANGED = "undo-availability-changed"
OPERATION_FAILED = "operation-failed"
FOCUS_REQUESTED = "focus-requested"
RENAME_STARTED = "rename-started"

EVENT_NAMES = (
    CURSOR_CHANGED,
    SELECTION_CHANGED,
    TREE_CHANGED,
    TREE_MUTATED,
    CLIPBOARD_STATE_CHANGED,
    UNDO_AVAILABILITY_CHANGED,
    OPERATION_FAILED,
    FOCUS_REQUESTED,
    RENAME_STARTED,
)

EventHandler = Callable[[Any], None]


class EventHub:
    """Small publish/subscribe table keyed by event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {name: [] for name in EVENT_NAMES}

    def connect(self, event: str, handler: EventHandler) -> EventHub:
        """Subscribe ``handler`` and return ``self`` for fluent wiring."""
        if event not in self._handlers:
            raise ValueError(f"unknown event: {event}")
        self._handlers[event].append(handler)
        return self

    def disconnect(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        LOGGER.debug("emit %s: %r", event, payload)
        for handler in list(self._handlers[event]):
            handler(payload)


__all__ = [
    "CURSOR_CHANGED",
    "SELECTION_CHANGED",
    "TREE_CHANGED",
    "TREE_MUTATED",
    "CLIPBOARD_STATE_CHANGED",
    "UNDO_AVAILABILITY_CHANGED",
    "OPERATION_FAILED",
    "FOCUS_REQUESTED",
    "RENAME_STARTED",
    "EVENT_NAMES",
    "EventHub",
]
