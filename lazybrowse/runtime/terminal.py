"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle and alternate-screen switching, the scoped release
of the terminal around foreground child processes, and Kitty graphics calls
used for inline image previews.
"""

from __future__ import annotations

import base64
import contextlib
import os
import shutil
import termios
import tty
from collections.abc import Iterator
from pathlib import Path


class TerminalController:
    """Manage raw-mode transitions, child-process handoff and kitty image calls."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Bind stdin/stdout descriptors; tty state is captured on first enable."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state: list | None = None
        self.active = False

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        if self._saved_tty_state is None:
            self._saved_tty_state = termios.tcgetattr(self.stdin_fd)
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")
        self.active = True

    def disable_tui_mode(self) -> None:
        """Restore the main screen and the tty state saved on enable."""
        # Show cursor and restore the main screen buffer.
        os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        if self._saved_tty_state is not None:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self.active = False

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)`` of the controlling terminal."""
        size = shutil.get_terminal_size((80, 24))
        return size.columns, size.lines

    def write(self, data: str) -> None:
        """Write ``data`` to the terminal as UTF-8."""
        os.write(self.stdout_fd, data.encode("utf-8", errors="replace"))

    def write_frame(self, frame: str) -> None:
        """Home the cursor and paint a full frame."""
        self.write("\x1b[H" + frame)

    def supports_kitty_graphics(self) -> bool:
        """Return whether the environment appears to support kitty graphics."""
        term = os.environ.get("TERM", "")
        if term == "xterm-kitty":
            return True
        return bool(os.environ.get("KITTY_WINDOW_ID"))

    def kitty_clear_images(self) -> None:
        """Clear all kitty inline images from the current screen."""
        # Delete all images and placements from the current screen.
        os.write(self.stdout_fd, b"\x1b_Ga=d,d=A,q=2;\x1b\\")

    def kitty_draw_png(
        self,
        image_path: Path,
        col: int,
        row: int,
        width_cells: int,
        height_cells: int,
    ) -> None:
        """Draw a PNG via kitty graphics at 1-based cell coordinates."""
        encoded_path = base64.b64encode(str(image_path).encode("utf-8")).decode("ascii")
        payload = (
            f"\x1b7\x1b[{max(1, row)};{max(1, col)}H"
            f"\x1b_Ga=T,t=f,f=100,q=2,c={max(1, width_cells)},r={max(1, height_cells)};{encoded_path}\x1b\\"
            "\x1b8"
        )
        os.write(self.stdout_fd, payload.encode("ascii"))

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Bracket the ``with`` body with TUI enter and exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

    @contextlib.contextmanager
    def suspended(self) -> Iterator[None]:
        """Hand the terminal to a foreground child for the ``with`` body.

        TUI mode is restored on every exit path, including when the body
        raises.
        """
        was_active = self.active
        if was_active:
            self.disable_tui_mode()
        try:
            yield
        finally:
            if was_active:
                self.enable_tui_mode()


__all__ = ["TerminalController"]
