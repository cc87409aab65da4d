"""Preview payloads, requests, and engine states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PreviewMode(Enum):
    """Presentation of one path; part of the cache key."""

    DEFAULT = "default"
    RAW = "raw"
    HEX = "hex"


class PreviewState(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ImageDescriptor:
    """Image metadata sniffed from the file header; pixels are not decoded."""

    path: Path
    format: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class PreviewPayload:
    """Displayable preview content produced off the main loop.

    ``kind`` is one of ``text``, ``directory``, ``hex``, ``image``,
    ``archive``, or ``empty``. ``lines`` may carry ANSI styling.
    """

    kind: str
    lines: tuple[str, ...]
    title: str = ""
    truncated: bool = False
    image: ImageDescriptor | None = None

    @classmethod
    def text(cls, lines: list[str], *, title: str = "", truncated: bool = False) -> PreviewPayload:
        return cls(kind="text", lines=tuple(lines), title=title, truncated=truncated)

    @classmethod
    def message(cls, kind: str, message: str, *, title: str = "") -> PreviewPayload:
        return cls(kind=kind, lines=(message,), title=title)


@dataclass(frozen=True)
class PreviewRequest:
    """One asynchronous preview job tagged with the generation it serves."""

    path: Path
    mode: PreviewMode
    generation: int

    @property
    def key(self) -> tuple[Path, PreviewMode]:
        return (self.path, self.mode)


@dataclass(frozen=True)
class PreviewCompletion:
    """Result of one job: a payload on success, an error message otherwise."""

    request: PreviewRequest
    payload: PreviewPayload | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None and self.error is None


__all__ = [
    "PreviewMode",
    "PreviewState",
    "ImageDescriptor",
    "PreviewPayload",
    "PreviewRequest",
    "PreviewCompletion",
]
