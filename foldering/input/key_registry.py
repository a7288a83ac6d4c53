"""Key-token to action registry.

Hotkeys are configured per action (``move_up``, ``rename`` ...) and the
registry turns that table around so one key token dispatches one action.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)

ActionHandler = Callable[[], bool | None]


@dataclass(frozen=True)
class ActionBinding:
    """Action name with the key tokens that trigger it."""

    action: str
    keys: tuple[str, ...]


class KeyActionRegistry:
    """Dispatch table from key tokens to named actions and their handlers."""

    def __init__(self) -> None:
        self._actions_by_key: dict[str, str] = {}
        self._handlers: dict[str, ActionHandler] = {}

    def bind(self, binding: ActionBinding) -> KeyActionRegistry:
        """Bind keys to an action; a key already bound elsewhere is taken over."""
        for key in binding.keys:
            previous = self._actions_by_key.get(key)
            if previous is not None and previous != binding.action:
                LOGGER.debug("key %s moves from %s to %s", key, previous, binding.action)
            self._actions_by_key[key] = binding.action
        return self

    def bind_all(self, bindings: Iterable[ActionBinding]) -> KeyActionRegistry:
        for binding in bindings:
            self.bind(binding)
        return self

    def on(self, action: str, handler: ActionHandler) -> KeyActionRegistry:
        self._handlers[action] = handler
        return self

    def on_all(self, handlers: Mapping[str, ActionHandler]) -> KeyActionRegistry:
        self._handlers.update(handlers)
        return self

    def action_for(self, key: str) -> str | None:
        return self._actions_by_key.get(key)

    def keys_for(self, action: str) -> tuple[str, ...]:
        return tuple(key for key, bound in self._actions_by_key.items() if bound == action)

    def dispatch(self, key: str) -> bool | None:
        """Run the handler bound to ``key``; ``None`` when nothing is bound."""
        action = self._actions_by_key.get(key)
        if action is None:
            return None
        handler = self._handlers.get(action)
        if handler is None:
            return None
        return handler()


__all__ = ["ActionBinding", "ActionHandler", "KeyActionRegistry"]
