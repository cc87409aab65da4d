"""Frame rendering for the two-pane browser.

Builds one full-screen string from ``BrowserApp`` state: a header, the tree
pane, the preview pane (or an overlay drawn over it) and a bottom line for
prompts and status messages.
"""

from __future__ import annotations

import bisect
from datetime import datetime
from typing import TYPE_CHECKING

from .ansi import RESET, fit_ansi_line
from .file_tree_model import ARCHIVE_FORMATS, FileEntry, format_mode
from .input import ActionKind, Mode
from .preview import PreviewMode, PreviewState
from .preview.producers import format_size

if TYPE_CHECKING:
    from .runtime.app import BrowserApp

REVERSE = "\x1b[7m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
BLUE = "\x1b[34m"
RED = "\x1b[31m"
YELLOW = "\x1b[33m"
GREEN = "\x1b[32m"
SEPARATOR = "│"

STATUS_COLORS = {"M": YELLOW, "A": GREEN, "D": RED, "?": DIM, "*": YELLOW}


def tree_row_text(entry: FileEntry) -> str:
    indent = "  " * entry.depth
    if entry.is_dir:
        marker = "▾ " if entry.expanded else "▸ "
    else:
        marker = "  "
    mark = "*" if entry.selected else " "
    name = f"{BLUE}{entry.name}/{RESET}" if entry.is_dir else entry.name
    if entry.is_symlink:
        name = f"{name}{DIM} @{RESET}"
    tag = ""
    if entry.status:
        tag = f"{STATUS_COLORS.get(entry.status, '')}{entry.status}{RESET} "
    return f"{mark}{indent}{marker}{tag}{name}"


def scroll_window(pos: int, offset: int, rows: int, total: int) -> int:
    """Return the first row of a ``rows``-high window over ``total`` rows that shows ``pos``."""
    if pos < offset:
        offset = pos
    elif pos >= offset + rows:
        offset = pos - rows + 1
    return max(0, min(offset, max(0, total - rows)))


def tree_lines(app: BrowserApp, rows: int, width: int) -> list[str]:
    """Render the visible window of the filtered tree starting near ``app.tree_offset``."""
    tree = app.tree
    view = tree.visible_indices()
    if not view:
        empty = "<no matches>" if tree.filter_pattern is not None else "<empty directory>"
        return [fit_ansi_line(f"{DIM}{empty}{RESET}", width)] + [" " * width] * (rows - 1)

    pos = bisect.bisect_left(view, tree.cursor)
    offset = scroll_window(pos, app.tree_offset, rows, len(view))

    out: list[str] = []
    for index in view[offset : offset + rows]:
        text = tree_row_text(tree[index])
        if index == tree.cursor:
            out.append(f"{REVERSE}{fit_ansi_line(text.replace(RESET, RESET + REVERSE), width)}{RESET}")
        else:
            out.append(fit_ansi_line(text, width))
    out.extend([" " * width] * (rows - len(out)))
    return out


def properties_lines(entry: FileEntry) -> list[str]:
    kind = "directory" if entry.is_dir else "file"
    if entry.is_symlink:
        kind = f"symlink to {kind}"
    lines = [
        f"{BOLD}Properties{RESET}",
        "",
        f"Name:        {entry.name}",
        f"Path:        {entry.path}",
        f"Type:        {kind}",
    ]
    if entry.size is not None and not entry.is_dir:
        lines.append(f"Size:        {format_size(entry.size)} ({entry.size} bytes)")
    if entry.mtime_ns is not None:
        modified = datetime.fromtimestamp(entry.mtime_ns / 1_000_000_000)
        lines.append(f"Modified:    {modified:%Y-%m-%d %H:%M:%S}")
    if entry.mode is not None:
        lines.append(f"Permissions: {format_mode(entry.mode)} ({entry.mode & 0o7777:o})")
    if entry.status:
        lines.append(f"Git status:  {entry.status}")
    lines.extend(["", f"{DIM}Esc to close{RESET}"])
    return lines


def help_lines(app: BrowserApp) -> list[str]:
    grouped: dict[ActionKind, list[str]] = {}
    for chord, kind in app.dispatcher.bindings.items(Mode.NORMAL):
        if kind is ActionKind.NONE:
            continue
        grouped.setdefault(kind, []).append("Space" if chord == " " else chord)
    lines = [f"{BOLD}Key bindings{RESET}", ""]
    for kind, chords in grouped.items():
        lines.append(f"{', '.join(chords):<18} {kind.value.replace('_', ' ')}")
    lines.append("")
    lines.append(f"g g top, g h home, g 1-9 breadcrumb   {DIM}Esc/? to close{RESET}")
    return lines


def chmod_lines(app: BrowserApp) -> list[str]:
    entry = app.tree.selected_entry()
    buffer = app.dispatcher.state.buffer
    lines = [f"{BOLD}Change mode{RESET}", ""]
    if entry is not None:
        lines.append(f"Target:  {entry.path}")
        lines.append(f"Current: {format_mode(entry.mode)}")
    try:
        preview = format_mode(int(buffer, 8)) if buffer else ""
    except ValueError:
        preview = "invalid"
    lines.append(f"New:     {buffer}_  {preview}")
    lines.extend(["", f"{DIM}Enter to apply, Esc to cancel{RESET}"])
    return lines


def picker_lines(title: str, items: list[str], cursor: int, empty: str) -> list[str]:
    lines = [f"{BOLD}{title}{RESET}", ""]
    if not items:
        lines.append(f"{DIM}{empty}{RESET}")
    for idx, item in enumerate(items):
        prefix = "> " if idx == cursor else "  "
        lines.append(f"{REVERSE}{prefix}{item}{RESET}" if idx == cursor else f"{prefix}{item}")
    return lines


def overlay_lines(app: BrowserApp) -> list[str] | None:
    mode = app.dispatcher.mode
    if mode is Mode.HELP:
        return help_lines(app)
    if mode is Mode.PROPERTIES:
        entry = app.tree.selected_entry()
        return properties_lines(entry) if entry is not None else None
    if mode is Mode.CHMOD:
        return chmod_lines(app)
    if mode is Mode.FAVORITES:
        return picker_lines(
            "Favorites",
            [str(path) for path in app.favorites],
            app.favorites_cursor,
            "No favorites yet: press a to add the current directory",
        )
    if mode is Mode.OPEN_WITH:
        return picker_lines(
            "Open with",
            [f"{command.name}  {DIM}{command.command}{RESET}" for command in app.config.open_with],
            app.open_with_cursor,
            "No commands configured",
        )
    if mode is Mode.SAVED_SEARCHES:
        items = [
            search.name if search.name == search.query else f"{search.name}  {DIM}{search.query}{RESET}"
            for search in app.saved_searches
        ]
        return picker_lines(
            "Saved searches (1-9 to pick, d to delete)",
            [f"{idx}  {item}" if idx <= 9 else f"   {item}" for idx, item in enumerate(items, start=1)],
            app.saved_searches_cursor,
            "No saved searches: press Ctrl-S while filtering to save one",
        )
    if mode is Mode.COMPRESS:
        count = len(app.tree.selected_paths())
        return picker_lines(
            f"Compress {count} item(s)",
            [f"{idx}  .{fmt}" for idx, fmt in enumerate(ARCHIVE_FORMATS, start=1)],
            app.compress_cursor,
            "",
        )
    return None


def preview_lines(app: BrowserApp, rows: int, width: int) -> list[str]:
    engine = app.engine
    overlay = overlay_lines(app)
    if overlay is not None:
        body = overlay
    elif engine.state is PreviewState.IDLE:
        body = [f"{DIM}Nothing selected{RESET}"]
    elif engine.state in (PreviewState.DEBOUNCING, PreviewState.LOADING):
        body = [f"{DIM}Loading…{RESET}"]
    elif engine.state is PreviewState.FAILED:
        body = [f"{RED}{engine.error_message}{RESET}"]
    else:
        content = engine.content
        assert content is not None
        mode_label = "" if engine.mode is PreviewMode.DEFAULT else f" [{engine.mode.value}]"
        title = f"{BOLD}{content.title}{mode_label}{RESET}"
        if content.truncated:
            title += f" {DIM}(truncated){RESET}"
        body = [title, *content.lines[app.preview_scroll :]]

    out = [fit_ansi_line(line, width) for line in body[:rows]]
    out.extend([" " * width] * (rows - len(out)))
    return out


def bottom_line(app: BrowserApp, width: int) -> str:
    state = app.dispatcher.state
    mode = state.mode
    if mode in (Mode.SEARCH, Mode.PROMPT):
        label = "/" if mode is Mode.SEARCH else f"{state.prompt.label if state.prompt else 'Input'}: "
        before, after = state.buffer[: state.cursor], state.buffer[state.cursor :]
        cursor_char = after[:1] or " "
        text = f"{label}{before}{REVERSE}{cursor_char}{RESET}{after[1:]}"
    elif mode is Mode.DELETE_CONFIRM:
        count = len(app.pending_delete)
        target = app.pending_delete[0].name if count == 1 else f"{count} items"
        text = f"{RED}Delete {target}? [y/N]{RESET}"
    elif mode is Mode.G_PREFIX:
        text = "g-"
    elif app.status_message:
        text = app.status_message
    else:
        clip = ""
        if app.clipboard is not None:
            verb = "cut" if app.clipboard.cut else "copied"
            clip = f"  [{len(app.clipboard.paths)} {verb}]"
        text = f"{DIM}? help  / filter  ' saved searches  q quit{clip}{RESET}"
    return fit_ansi_line(text, width)


def render_frame(app: BrowserApp, width: int, height: int) -> str:
    """Return the full screen for ``app`` as CRLF-joined rows."""
    width = max(20, width)
    height = max(3, height)
    tree_width = max(10, width * app.tree_ratio // 100)
    preview_width = max(1, width - tree_width - 1)
    body_rows = height - 2

    tree = app.tree
    header = f"{BOLD}{tree.root}{RESET}  {DIM}sort: {tree.sort_field.value} {tree.sort_order.value}"
    if tree.filter_pattern is not None:
        header += f"  filter: {tree.filter_pattern}"
    header += RESET

    left = tree_lines(app, body_rows, tree_width)
    right = preview_lines(app, body_rows, preview_width)
    rows = [fit_ansi_line(header, width)]
    rows.extend(f"{l}{DIM}{SEPARATOR}{RESET}{r}" for l, r in zip(left, right))
    rows.append(bottom_line(app, width))
    return "\r\n".join(rows)


def preview_image_geometry(app: BrowserApp, width: int, height: int) -> tuple[int, int, int, int] | None:
    """Cell rectangle ``(col, row, width, height)`` for an inline image, 1-based."""
    content = app.engine.content
    if (
        app.engine.state is not PreviewState.READY
        or content is None
        or content.image is None
        or app.dispatcher.mode.is_overlay
    ):
        return None
    tree_width = max(10, max(20, width) * app.tree_ratio // 100)
    col = tree_width + 2
    first_row = 3 + len(content.lines)
    rows = max(1, height - first_row)
    return col, first_row, max(1, width - col), rows


__all__ = [
    "tree_row_text",
    "properties_lines",
    "help_lines",
    "render_frame",
    "preview_image_geometry",
]
