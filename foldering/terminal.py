"""Raw-mode and alternate-screen lifecycle for the explorer loop."""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"


class TerminalController:
    """Switch the controlling terminal into full-screen raw mode and back.

    The cooked ``termios`` state is captured at construction so it can be
    restored even if the loop dies with an exception.
    """

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._cooked_state = termios.tcgetattr(stdin_fd)
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def size(self) -> tuple[int, int]:
        """Current ``(columns, lines)``; 80x24 when it cannot be queried."""
        measured = shutil.get_terminal_size((80, 24))
        return measured.columns, measured.lines

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)
        self._active = True

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, LEAVE_SCREEN)
        self._active = False
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._cooked_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield self
        finally:
            self.disable_tui_mode()


__all__ = ["ENTER_SCREEN", "LEAVE_SCREEN", "TerminalController"]
