"""ANSI-aware width measurement and clipping for pane rendering.

Escape sequences pass through untouched and never count toward width, so
highlighted preview lines stay aligned inside their pane.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\x1b[0m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int, start_cols: int = 0) -> str:
    """Return the ``[start_cols, start_cols + max_cols)`` columns of a styled line.

    Escapes before the visible window are kept so colors stay correct; tabs
    expand to spaces.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    shown = 0
    i = 0
    n = len(text)
    while i < n and shown < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        i += 1
        if col + w <= start_cols:
            col += w
            continue
        if ch == "\t":
            spaces = min(w, max_cols - shown)
            out.append(" " * spaces)
            shown += spaces
            col += w
            continue
        if shown + w > max_cols:
            break
        out.append(ch)
        shown += w
        col += w

    return "".join(out)


def fit_ansi_line(text: str, width: int, start_cols: int = 0) -> str:
    """Clip ``text`` and pad it with spaces to exactly ``width`` columns."""
    clipped = clip_ansi_line(text, width, start_cols)
    pad = width - display_width(clipped)
    suffix = RESET if "\x1b" in clipped else ""
    return f"{clipped}{suffix}{' ' * max(0, pad)}"


__all__ = [
    "ANSI_ESCAPE_RE",
    "RESET",
    "char_display_width",
    "strip_ansi",
    "display_width",
    "clip_ansi_line",
    "fit_ansi_line",
]
