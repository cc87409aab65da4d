"""Reloadable ``(mode, chord) -> action`` binding table."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .actions import ActionKind
from .modes import Mode

logger = logging.getLogger(__name__)

# Modes whose keys are resolved by fixed line-editing or confirmation rules.
UNBINDABLE_MODES = frozenset({Mode.SEARCH, Mode.PROMPT, Mode.CHMOD, Mode.DELETE_CONFIRM})

_CHORD_ALIASES = {
    "SPACE": " ",
    "RETURN": "ENTER",
    "ESCAPE": "ESC",
    "PGUP": "PAGE_UP",
    "PGDN": "PAGE_DOWN",
    "PAGEUP": "PAGE_UP",
    "PAGEDOWN": "PAGE_DOWN",
    "DEL": "DELETE",
    "BS": "BACKSPACE",
}


def normalize_chord(chord: str) -> str:
    """Normalize a configured chord to the token ``read_key`` produces.

    Single characters stay case-sensitive; names like ``ctrl+r`` or
    ``Page-Down`` become ``CTRL_R`` and ``PAGE_DOWN``.
    """
    if len(chord) == 1:
        return chord
    token = chord.strip().upper().replace("+", "_").replace("-", "_")
    return _CHORD_ALIASES.get(token, token)


def _table(entries: Mapping[str, str]) -> dict[str, ActionKind]:
    return {chord: ActionKind(name) for chord, name in entries.items()}


DEFAULT_BINDINGS: dict[Mode, dict[str, ActionKind]] = {
    Mode.NORMAL: _table(
        {
            "q": "quit",
            "j": "move_down",
            "DOWN": "move_down",
            "k": "move_up",
            "UP": "move_up",
            "h": "move_left",
            "LEFT": "move_left",
            "l": "move_right",
            "RIGHT": "move_right",
            "ENTER": "toggle_expand",
            "TAB": "toggle_expand",
            "PAGE_DOWN": "page_down",
            "CTRL_D": "page_down",
            "PAGE_UP": "page_up",
            "CTRL_U": "page_up",
            "g": "g_press",
            "HOME": "go_to_top",
            "G": "go_to_bottom",
            "END": "go_to_bottom",
            "BACKSPACE": "go_parent",
            "-": "go_parent",
            "L": "enter_dir",
            ".": "toggle_hidden",
            "s": "cycle_sort",
            "S": "reverse_sort",
            "CTRL_R": "reload",
            "R": "reload_config",
            "/": "search_start",
            " ": "toggle_selection",
            "ESC": "reset_view",
            "J": "scroll_preview_down",
            "K": "scroll_preview_up",
            "v": "toggle_raw",
            "x": "toggle_hex",
            "<": "shrink_tree",
            ">": "grow_tree",
            "y": "yank_path",
            "e": "open_editor",
            "!": "open_shell",
            "o": "open_with_start",
            "c": "copy_file",
            "X": "cut_file",
            "p": "paste",
            "d": "delete_file",
            "DELETE": "delete_file",
            "r": "rename_start",
            "n": "new_file_start",
            "N": "new_dir_start",
            "i": "show_properties",
            "m": "chmod_start",
            "f": "favorites_open",
            "F": "favorite_add",
            "'": "saved_searches_open",
            "Z": "compress_start",
            "?": "toggle_help",
        }
    ),
    Mode.G_PREFIX: {
        "g": ActionKind.GO_TO_TOP,
        "h": ActionKind.GO_HOME,
        **{str(n): ActionKind.GO_TO_BREADCRUMB for n in range(1, 10)},
    },
    Mode.HELP: _table({"ESC": "toggle_help", "?": "toggle_help", "q": "toggle_help"}),
    Mode.PROPERTIES: _table({"ESC": "overlay_close", "q": "overlay_close", "i": "overlay_close", "ENTER": "overlay_close"}),
    Mode.FAVORITES: _table(
        {
            "j": "favorites_down",
            "DOWN": "favorites_down",
            "k": "favorites_up",
            "UP": "favorites_up",
            "ENTER": "favorites_select",
            "d": "favorites_remove",
            "DELETE": "favorites_remove",
            "a": "favorites_add_current",
            "ESC": "overlay_close",
            "q": "overlay_close",
        }
    ),
    Mode.OPEN_WITH: _table(
        {
            "j": "open_with_down",
            "DOWN": "open_with_down",
            "k": "open_with_up",
            "UP": "open_with_up",
            "ENTER": "open_with_select",
            "ESC": "overlay_close",
            "q": "overlay_close",
        }
    ),
    Mode.SAVED_SEARCHES: {
        **_table(
            {
                "j": "saved_searches_down",
                "DOWN": "saved_searches_down",
                "k": "saved_searches_up",
                "UP": "saved_searches_up",
                "ENTER": "saved_search_select",
                "d": "saved_searches_remove",
                "DELETE": "saved_searches_remove",
                "ESC": "overlay_close",
                "q": "overlay_close",
            }
        ),
        **{str(n): ActionKind.SAVED_SEARCH_SELECT for n in range(1, 10)},
    },
    Mode.COMPRESS: {
        **_table(
            {
                "j": "compress_down",
                "DOWN": "compress_down",
                "k": "compress_up",
                "UP": "compress_up",
                "ENTER": "compress_select",
                "ESC": "overlay_close",
                "q": "overlay_close",
            }
        ),
        **{str(n): ActionKind.COMPRESS_SELECT for n in range(1, 5)},
    },
}


class BindingTable:
    """Per-mode chord lookup with a config overlay on top of defaults."""

    def __init__(self, table: Mapping[Mode, Mapping[str, ActionKind]] | None = None) -> None:
        source = DEFAULT_BINDINGS if table is None else table
        self._table: dict[Mode, dict[str, ActionKind]] = {mode: dict(keys) for mode, keys in source.items()}

    def lookup(self, mode: Mode, chord: str) -> ActionKind | None:
        return self._table.get(mode, {}).get(chord)

    def bind(self, mode: Mode, chord: str, kind: ActionKind) -> None:
        self._table.setdefault(mode, {})[normalize_chord(chord)] = kind

    def chords_for(self, mode: Mode, kind: ActionKind) -> list[str]:
        """Chords bound to ``kind`` in ``mode``, for the help overlay."""
        return [chord for chord, bound in self._table.get(mode, {}).items() if bound is kind]

    def items(self, mode: Mode) -> list[tuple[str, ActionKind]]:
        return list(self._table.get(mode, {}).items())

    @classmethod
    def from_config(cls, raw: object, base: BindingTable | None = None) -> BindingTable:
        """Overlay ``{"normal": {"j": "move_down"}, ...}`` onto the defaults.

        Malformed entries, unknown modes, and unknown action names are
        logged and skipped; they never abort startup.
        """
        table = cls() if base is None else cls(base._table)
        if raw is None:
            return table
        if not isinstance(raw, Mapping):
            logger.warning("ignoring key bindings: expected an object, got %s", type(raw).__name__)
            return table

        for mode_name, entries in raw.items():
            try:
                mode = Mode(str(mode_name))
            except ValueError:
                logger.warning("ignoring bindings for unknown mode %r", mode_name)
                continue
            if mode in UNBINDABLE_MODES:
                logger.warning("ignoring bindings for mode %r: keys are fixed there", mode_name)
                continue
            if not isinstance(entries, Mapping):
                logger.warning("ignoring bindings for mode %r: expected an object", mode_name)
                continue
            for chord, action_name in entries.items():
                if not isinstance(chord, str) or not chord or not isinstance(action_name, str):
                    logger.warning("ignoring malformed binding %r -> %r in mode %r", chord, action_name, mode_name)
                    continue
                kind = ActionKind.from_name(action_name)
                if kind is None:
                    logger.warning("ignoring unknown action %r bound to %r in mode %r", action_name, chord, mode_name)
                    continue
                table.bind(mode, chord, kind)
        return table


__all__ = [
    "UNBINDABLE_MODES",
    "DEFAULT_BINDINGS",
    "normalize_chord",
    "BindingTable",
]
