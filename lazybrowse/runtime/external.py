"""External process launches and clipboard escapes.

Editors, shells and open-with commands run in the foreground while the TUI
is released. Failures come back as message strings for the status line.
"""

from __future__ import annotations

import base64
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ExternalKind(Enum):
    EDITOR = "editor"
    SHELL = "shell"
    COMMAND = "command"
    CLIPBOARD = "clipboard"


@dataclass(frozen=True)
class ExternalRequest:
    """Work the main loop performs against the terminal or the OS.

    ``command`` is the open-with template for ``COMMAND``; ``text`` is the
    payload for ``CLIPBOARD``.
    """

    kind: ExternalKind
    path: Path | None = None
    command: str = ""
    text: str = ""


class SuspendableTerminal(Protocol):
    def suspended(self): ...

    def write(self, data: str) -> None: ...


def osc52_copy_sequence(text: str) -> str:
    """Encode ``text`` as an OSC 52 clipboard write."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"\x1b]52;c;{encoded}\x07"


def build_command(request: ExternalRequest) -> tuple[list[str], Path | None] | str:
    """Return ``(argv, cwd)`` for ``request`` or an error message."""
    target = request.path
    if request.kind is ExternalKind.EDITOR:
        editor_env = os.environ.get("EDITOR", "").strip()
        if not editor_env:
            return "Cannot edit: $EDITOR is not set."
        cmd = shlex.split(editor_env)
        if not cmd:
            return "Cannot edit: $EDITOR is empty."
        return ([*cmd, str(target)] if target is not None else cmd), None

    if request.kind is ExternalKind.SHELL:
        shell = os.environ.get("SHELL", "").strip() or "/bin/sh"
        cwd = target if target is not None and target.is_dir() else (target.parent if target else None)
        return [shell], cwd

    if request.kind is ExternalKind.COMMAND:
        try:
            parts = shlex.split(request.command)
        except ValueError as exc:
            return f"Invalid command {request.command!r}: {exc}"
        if not parts:
            return "Cannot open: command is empty."
        if target is None:
            return parts, None
        if any("{}" in part for part in parts):
            return [part.replace("{}", str(target)) for part in parts], None
        return [*parts, str(target)], None

    return f"Unsupported external request: {request.kind.value}"


def run_suspended(request: ExternalRequest, terminal: SuspendableTerminal) -> str | None:
    """Run ``request`` with the terminal released; return an error message or ``None``."""
    if request.kind is ExternalKind.CLIPBOARD:
        terminal.write(osc52_copy_sequence(request.text))
        return None

    built = build_command(request)
    if isinstance(built, str):
        return built
    argv, cwd = built

    logger.info("running %s", argv)
    with terminal.suspended():
        try:
            completed = subprocess.run(argv, cwd=cwd, check=False)
        except OSError as exc:
            logger.warning("failed to launch %s: %s", argv[0], exc)
            return f"Failed to launch {argv[0]}: {exc.strerror or exc}"
    if completed.returncode != 0 and request.kind is not ExternalKind.SHELL:
        return f"{argv[0]} exited with status {completed.returncode}"
    return None


__all__ = [
    "ExternalKind",
    "ExternalRequest",
    "osc52_copy_sequence",
    "build_command",
    "run_suspended",
]
