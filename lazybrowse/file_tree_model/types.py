"""Domain datatypes for filesystem-backed tree rows."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DirectoryChild:
    """One listed directory child plus metadata observed from ``stat``."""

    name: str
    path: Path
    is_dir: bool
    size: int | None = None
    mtime_ns: int | None = None
    mode: int | None = None
    is_symlink: bool = False
    status: str | None = None


@dataclass(frozen=True)
class FileEntry:
    """One row of the flat tree: a filesystem snapshot plus UI flags.

    ``depth`` is 0 for children of the tree root. ``expanded`` is only ever
    true for directories. Entries are value objects; flag changes go through
    ``dataclasses.replace``.
    """

    path: Path
    name: str
    depth: int
    is_dir: bool
    expanded: bool = False
    size: int | None = None
    mtime_ns: int | None = None
    mode: int | None = None
    is_symlink: bool = False
    selected: bool = False
    status: str | None = None

    @classmethod
    def from_child(cls, child: DirectoryChild, depth: int) -> FileEntry:
        """Build a collapsed, unselected entry for ``child`` at ``depth``."""
        return cls(
            path=child.path,
            name=child.name,
            depth=depth,
            is_dir=child.is_dir,
            size=child.size,
            mtime_ns=child.mtime_ns,
            mode=child.mode,
            is_symlink=child.is_symlink,
            status=child.status,
        )

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()


__all__ = [
    "DirectoryChild",
    "FileEntry",
]
