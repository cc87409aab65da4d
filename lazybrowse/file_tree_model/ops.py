"""Synchronous filesystem mutations requested from the browser.

These run on the main loop; each is a bounded metadata-level operation.
Any ``OSError`` surfaces as ``IoError`` so the caller can show one status
message and leave the tree untouched.
"""

from __future__ import annotations

import os
import shutil
import tarfile
import zipfile
from collections.abc import Sequence
from pathlib import Path

from ..errors import IoError

ARCHIVE_FORMATS = ("zip", "tar.gz", "tar.bz2", "tar.xz")
_TAR_MODES = {"tar.gz": "w:gz", "tar.bz2": "w:bz2", "tar.xz": "w:xz"}


def unique_dest_path(dest: Path) -> Path:
    """Return ``dest`` or the first free ``<stem>_copy[N]<suffix>`` sibling."""
    if not dest.exists():
        return dest
    stem = dest.stem
    suffix = dest.suffix
    candidate = dest.with_name(f"{stem}_copy{suffix}")
    counter = 2
    while candidate.exists():
        candidate = dest.with_name(f"{stem}_copy{counter}{suffix}")
        counter += 1
    return candidate


def copy_path(source: Path, dest_dir: Path) -> Path:
    """Copy a file or directory tree into ``dest_dir``; returns the new path."""
    target = unique_dest_path(dest_dir / source.name)
    try:
        if source.is_dir() and not source.is_symlink():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target, follow_symlinks=False)
    except OSError as exc:
        raise IoError.from_os_error(source, exc) from exc
    return target


def move_path(source: Path, dest_dir: Path) -> Path:
    """Move ``source`` into ``dest_dir``; returns the new path."""
    target = dest_dir / source.name
    if target == source:
        return source
    target = unique_dest_path(target)
    try:
        shutil.move(str(source), str(target))
    except OSError as exc:
        raise IoError.from_os_error(source, exc) from exc
    return target


def delete_path(target: Path) -> None:
    """Delete a file, symlink, or whole directory tree."""
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
    except OSError as exc:
        raise IoError.from_os_error(target, exc) from exc


def _archive_target(sources: Sequence[Path], dest_dir: Path, fmt: str) -> Path:
    base = sources[0].name if len(sources) == 1 else "archive"
    target = dest_dir / f"{base}.{fmt}"
    counter = 2
    while target.exists():
        target = dest_dir / f"{base}_{counter}.{fmt}"
        counter += 1
    return target


def _zip_tree(archive: zipfile.ZipFile, source: Path) -> None:
    archive.write(source, source.name)
    if not source.is_dir() or source.is_symlink():
        return
    for dirpath, dirnames, filenames in os.walk(source):
        dirnames.sort()
        here = Path(dirpath)
        for name in [*dirnames, *sorted(filenames)]:
            path = here / name
            archive.write(path, path.relative_to(source.parent).as_posix())


def compress_paths(sources: Sequence[Path], dest_dir: Path, fmt: str) -> Path:
    """Pack ``sources`` into a new ``fmt`` archive inside ``dest_dir``.

    Each source is stored under its own name with directories recursed. The
    archive is named after a single source, or ``archive`` for several, and
    never replaces an existing file. A failed write removes the partial
    archive.
    """
    if fmt not in ARCHIVE_FORMATS:
        raise ValueError(f"unsupported archive format: {fmt!r}")
    if not sources:
        raise ValueError("nothing to compress")
    target = _archive_target(sources, dest_dir, fmt)
    try:
        if fmt == "zip":
            with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as archive:
                for source in sources:
                    _zip_tree(archive, source)
        else:
            with tarfile.open(target, _TAR_MODES[fmt]) as archive:
                for source in sources:
                    archive.add(source, arcname=source.name)
    except OSError as exc:
        target.unlink(missing_ok=True)
        raise IoError.from_os_error(target, exc) from exc
    return target


def _validated_name(parent: Path, name: str) -> Path:
    name = name.strip()
    if not name or name in {".", ".."} or "/" in name or os.sep in name:
        raise IoError(parent / name, "invalid name")
    return parent / name


def rename_path(source: Path, new_name: str) -> Path:
    """Rename ``source`` within its directory; refuses to overwrite."""
    target = _validated_name(source.parent, new_name)
    if target == source:
        return source
    if target.exists():
        raise IoError(target, "already exists")
    try:
        source.rename(target)
    except OSError as exc:
        raise IoError.from_os_error(source, exc) from exc
    return target


def create_file(parent: Path, name: str) -> Path:
    target = _validated_name(parent, name)
    try:
        target.touch(exist_ok=False)
    except OSError as exc:
        raise IoError.from_os_error(target, exc) from exc
    return target


def create_directory(parent: Path, name: str) -> Path:
    target = _validated_name(parent, name)
    try:
        target.mkdir()
    except OSError as exc:
        raise IoError.from_os_error(target, exc) from exc
    return target


def parse_octal_mode(text: str) -> int:
    """Parse ``"755"``/``"0644"`` style permission text.

    Raises ``ValueError`` for anything that is not 3-4 octal digits.
    """
    stripped = text.strip()
    if not 3 <= len(stripped) <= 4 or any(ch not in "01234567" for ch in stripped):
        raise ValueError(f"invalid octal mode: {text!r}")
    return int(stripped, 8)


def format_mode(mode: int | None) -> str:
    """Return ``rwxr-xr-x`` style text for permission bits."""
    if mode is None:
        return "?????????"
    out: list[str] = []
    for shift in (6, 3, 0):
        bits = (mode >> shift) & 0o7
        out.append("r" if bits & 0o4 else "-")
        out.append("w" if bits & 0o2 else "-")
        out.append("x" if bits & 0o1 else "-")
    return "".join(out)


def change_mode(target: Path, mode: int) -> None:
    try:
        os.chmod(target, mode)
    except OSError as exc:
        raise IoError.from_os_error(target, exc) from exc


__all__ = [
    "ARCHIVE_FORMATS",
    "compress_paths",
    "unique_dest_path",
    "copy_path",
    "move_path",
    "delete_path",
    "rename_path",
    "create_file",
    "create_directory",
    "parse_octal_mode",
    "format_mode",
    "change_mode",
]
