"""Single-line text prompt used for rename, create and search input."""

from __future__ import annotations

from dataclasses import dataclass

SUBMIT = "submit"
CANCEL = "cancel"


@dataclass
class LinePrompt:
    """Editable one-line buffer with a cursor."""

    kind: str
    label: str
    text: str = ""
    cursor: int = -1

    def __post_init__(self) -> None:
        if self.cursor < 0 or self.cursor > len(self.text):
            self.cursor = len(self.text)

    def handle_key(self, key: str) -> str | None:
        """Apply ``key``; return ``"submit"``, ``"cancel"`` or ``None``."""
        if key == "ENTER":
            return SUBMIT
        if key == "ESC":
            return CANCEL
        if key == "BACKSPACE":
            if self.cursor > 0:
                self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
                self.cursor -= 1
        elif key == "DELETE":
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]
        elif key == "LEFT":
            self.cursor = max(0, self.cursor - 1)
        elif key == "RIGHT":
            self.cursor = min(len(self.text), self.cursor + 1)
        elif key == "HOME":
            self.cursor = 0
        elif key == "END":
            self.cursor = len(self.text)
        elif key == "CTRL_U":
            self.text = self.text[self.cursor :]
            self.cursor = 0
        elif len(key) == 1 and key.isprintable():
            self.text = self.text[: self.cursor] + key + self.text[self.cursor :]
            self.cursor += 1
        return None


__all__ = ["SUBMIT", "CANCEL", "LinePrompt"]
