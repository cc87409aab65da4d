"""Typed failures raised by tree, filesystem, and preview operations.

Every failure here is local and recoverable: the runtime turns tree and
filesystem errors into status messages and preview errors into inline text.
"""

from __future__ import annotations

import errno
from pathlib import Path


class BrowserError(Exception):
    """Base class for all lazybrowse failures."""


class IoError(BrowserError):
    """Directory or file access failed (permission, missing path, device)."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)
        self.message = message

    @classmethod
    def from_os_error(cls, path: Path | str, exc: OSError) -> IoError:
        """Wrap ``exc`` in the most specific ``IoError`` subclass."""
        message = exc.strerror or str(exc)
        if isinstance(exc, PermissionError) or exc.errno in {errno.EACCES, errno.EPERM}:
            return PermissionDenied(path, message)
        if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
            return NotFound(path, message)
        return IoError(path, message)


class PermissionDenied(IoError):
    """Access to a path was refused by the operating system."""


class NotFound(IoError):
    """A path disappeared or never existed."""


class NotADirectory(BrowserError):
    """Directory-only tree operation was applied to a file entry."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"{path}: not a directory")
        self.path = Path(path)


class PreviewError(BrowserError):
    """Preview producer failure shown inline in the preview pane."""

    label = "Preview failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def display_message(self) -> str:
        return f"{self.label}: {self.message}"


class UnsupportedType(PreviewError):
    label = "Unsupported file type"


class PreviewIoError(PreviewError):
    label = "Cannot read file"


class ParseError(PreviewError):
    label = "Parse error"


class TooLarge(PreviewError):
    label = "File too large"


__all__ = [
    "BrowserError",
    "IoError",
    "PermissionDenied",
    "NotFound",
    "NotADirectory",
    "PreviewError",
    "UnsupportedType",
    "PreviewIoError",
    "ParseError",
    "TooLarge",
]
