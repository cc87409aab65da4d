"""Directory listing provider used by tree expand/reload."""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from ..errors import IoError
from .types import DirectoryChild


def is_ignored(name: str, ignore_patterns: Iterable[str]) -> bool:
    """Return whether ``name`` matches any glob in ``ignore_patterns``."""
    return any(fnmatch.fnmatch(name, pattern) for pattern in ignore_patterns)


def list_directory_children(
    directory: Path,
    show_hidden: bool,
    ignore_patterns: Iterable[str] = (),
    status_for_path: Callable[[Path], str | None] | None = None,
) -> list[DirectoryChild]:
    """List visible children of ``directory`` with stat metadata.

    Order of the returned list is unspecified; callers sort. Raises
    ``PermissionDenied``/``NotFound``/``IoError`` when the directory itself
    cannot be scanned. Per-child stat failures only drop that child's metadata.
    """
    patterns = tuple(ignore_patterns)
    children: list[DirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                name = child.name
                if not show_hidden and name.startswith("."):
                    continue
                if patterns and is_ignored(name, patterns):
                    continue

                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                try:
                    is_symlink = child.is_symlink()
                except OSError:
                    is_symlink = False

                size: int | None = None
                mtime_ns: int | None = None
                mode: int | None = None
                try:
                    stat = child.stat()
                    mtime_ns = int(stat.st_mtime_ns)
                    mode = int(stat.st_mode)
                    if not is_dir:
                        size = int(stat.st_size)
                except OSError:
                    pass

                child_path = Path(child.path)
                status = status_for_path(child_path) if status_for_path is not None else None
                children.append(
                    DirectoryChild(
                        name=name,
                        path=child_path,
                        is_dir=is_dir,
                        size=size,
                        mtime_ns=mtime_ns,
                        mode=mode,
                        is_symlink=is_symlink,
                        status=status,
                    )
                )
    except OSError as exc:
        raise IoError.from_os_error(directory, exc) from exc
    return children


__all__ = [
    "is_ignored",
    "list_directory_children",
]
