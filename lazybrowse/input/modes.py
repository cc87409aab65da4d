"""Input modes and the editable text buffer owned by the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(Enum):
    NORMAL = "normal"
    SEARCH = "search"
    G_PREFIX = "g_prefix"
    PROMPT = "prompt"
    DELETE_CONFIRM = "delete_confirm"
    HELP = "help"
    PROPERTIES = "properties"
    CHMOD = "chmod"
    FAVORITES = "favorites"
    OPEN_WITH = "open_with"
    SAVED_SEARCHES = "saved_searches"
    COMPRESS = "compress"

    @property
    def is_overlay(self) -> bool:
        """Overlays own all input while active and draw over the preview."""
        return self in OVERLAY_MODES

    @property
    def is_text_entry(self) -> bool:
        return self in TEXT_ENTRY_MODES


OVERLAY_MODES = frozenset(
    {
        Mode.HELP,
        Mode.PROPERTIES,
        Mode.CHMOD,
        Mode.FAVORITES,
        Mode.OPEN_WITH,
        Mode.SAVED_SEARCHES,
        Mode.COMPRESS,
    }
)
TEXT_ENTRY_MODES = frozenset({Mode.SEARCH, Mode.PROMPT, Mode.CHMOD})


class PromptKind(Enum):
    RENAME = "rename"
    NEW_FILE = "new_file"
    NEW_DIR = "new_dir"

    @property
    def label(self) -> str:
        return {
            PromptKind.RENAME: "Rename",
            PromptKind.NEW_FILE: "New file",
            PromptKind.NEW_DIR: "New directory",
        }[self]


@dataclass
class ModeState:
    """Current mode plus the line-edit buffer used by text-entry modes."""

    mode: Mode = Mode.NORMAL
    prompt: PromptKind | None = None
    buffer: str = ""
    cursor: int = 0

    def reset(self, mode: Mode = Mode.NORMAL, prompt: PromptKind | None = None, initial: str = "") -> None:
        self.mode = mode
        self.prompt = prompt
        self.buffer = initial
        self.cursor = len(initial)

    def insert(self, text: str) -> None:
        self.buffer = self.buffer[: self.cursor] + text + self.buffer[self.cursor :]
        self.cursor += len(text)

    def backspace(self) -> None:
        if self.cursor <= 0:
            return
        self.buffer = self.buffer[: self.cursor - 1] + self.buffer[self.cursor :]
        self.cursor -= 1

    def delete(self) -> None:
        if self.cursor >= len(self.buffer):
            return
        self.buffer = self.buffer[: self.cursor] + self.buffer[self.cursor + 1 :]

    def move(self, delta: int) -> None:
        self.cursor = max(0, min(len(self.buffer), self.cursor + delta))

    def home(self) -> None:
        self.cursor = 0

    def end(self) -> None:
        self.cursor = len(self.buffer)


__all__ = [
    "Mode",
    "OVERLAY_MODES",
    "TEXT_ENTRY_MODES",
    "PromptKind",
    "ModeState",
]
