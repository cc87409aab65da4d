"""Main interactive event loop for the terminal UI.

Each iteration renders when dirty, waits for one key or the tick timeout,
advances the app clock, and runs any queued external requests with the
terminal released. Preview work never blocks here; it is drained in
``BrowserApp.tick``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..input import read_key
from ..render import preview_image_geometry, render_frame
from .app import BrowserApp
from .external import run_suspended
from .terminal import TerminalController

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.1

KittyState = tuple[str, int, int, int, int]


def _sync_kitty_image(
    app: BrowserApp,
    terminal: TerminalController,
    width: int,
    height: int,
    previous: KittyState | None,
) -> KittyState | None:
    content = app.engine.content
    geometry = preview_image_geometry(app, width, height)
    image = content.image if content is not None else None
    desired: KittyState | None = None
    if geometry is not None and image is not None and image.format == "png":
        desired = (str(image.path), *geometry)
    if desired == previous:
        return previous
    if previous is not None:
        terminal.kitty_clear_images()
    if desired is not None:
        _, col, row, cols, rows = desired
        terminal.kitty_draw_png(image.path, col, row, cols, rows)
    return desired


def run_pending_external(app: BrowserApp, terminal: TerminalController) -> bool:
    """Run queued external requests in order; returns whether any ran."""
    ran = False
    while app.pending_external:
        request = app.pending_external.pop(0)
        error = run_suspended(request, terminal)
        app.after_external(request, error)
        ran = True
    return ran


def run_main_loop(
    app: BrowserApp,
    terminal: TerminalController,
    stdin_fd: int,
    tick_seconds: float = DEFAULT_TICK_SECONDS,
    read: Callable[[int, int | None], str] = read_key,
) -> None:
    """Run the browser until a quit action occurs."""
    kitty_enabled = terminal.supports_kitty_graphics()
    kitty_state: KittyState | None = None
    last_size: tuple[int, int] | None = None
    timeout_ms = max(1, int(tick_seconds * 1000))

    with terminal.raw_mode():
        while not app.should_quit:
            width, height = terminal.size()
            if (width, height) != last_size:
                last_size = (width, height)
                app.set_viewport(height)
                app.dirty = True

            if app.dirty:
                terminal.write_frame(render_frame(app, width, height))
                app.dirty = False
                if kitty_enabled:
                    kitty_state = _sync_kitty_image(app, terminal, width, height, kitty_state)

            key = read(stdin_fd, timeout_ms)
            if key:
                app.handle_key(key)
            app.tick()

            if app.pending_external and run_pending_external(app, terminal):
                # the child owned the screen; repaint everything
                terminal.write("\x1b[2J")
                kitty_state = None
                app.dirty = True

    logger.info("main loop finished")


__all__ = [
    "DEFAULT_TICK_SECONDS",
    "run_pending_external",
    "run_main_loop",
]
