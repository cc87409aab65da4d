"""Default preview producer: picks a presentation by sniffing the path.

Resolution order for regular files:
1. HEX mode -> byte dump of the first ``MAX_HEX_BYTES``
2. empty file -> placeholder
3. archive suffix -> member listing
4. image signature/extension -> ``ImageDescriptor`` (no decoding)
5. over ``MAX_TEXT_BYTES`` -> ``TooLarge``
6. NUL byte in the sniff window -> byte dump
7. text: JSON pretty-printed in DEFAULT mode, then Pygments highlighting

Producers run on the worker thread and only return values; they never see
UI state or the cache.
"""

from __future__ import annotations

import json
import stat
import struct
import tarfile
import zipfile
from pathlib import Path

from ..errors import IoError, ParseError, PreviewIoError, TooLarge, UnsupportedType
from ..file_tree_model.fs import list_directory_children
from ..file_tree_model.sorting import sort_siblings
from .syntax import DEFAULT_STYLE, colorize_source, decode_text, sanitize_terminal_text
from .types import ImageDescriptor, PreviewMode, PreviewPayload

MAX_TEXT_BYTES = 1024 * 1024
MAX_TEXT_LINES = 1_000
MAX_HEX_BYTES = 4_096
HEX_ROW_BYTES = 16
BINARY_SNIFF_BYTES = 8_192
DIRECTORY_PREVIEW_MAX_ENTRIES = 500
ARCHIVE_PREVIEW_MAX_MEMBERS = 1_000

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
JPEG_SIGNATURE = b"\xff\xd8\xff"
IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".ico", ".tif", ".tiff"})
TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")


def _special_file_kind(mode: int) -> str:
    if stat.S_ISFIFO(mode):
        return "FIFO"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISCHR(mode):
        return "character device"
    if stat.S_ISBLK(mode):
        return "block device"
    return "special file"


def format_size(size: int) -> str:
    """Return a short human-readable byte count."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def hex_dump_lines(data: bytes, offset: int = 0) -> list[str]:
    """Render ``data`` as ``offset  hex bytes  |ascii|`` rows."""
    lines: list[str] = []
    for start in range(0, len(data), HEX_ROW_BYTES):
        chunk = data[start : start + HEX_ROW_BYTES]
        hex_part = " ".join(f"{byte:02x}" for byte in chunk)
        ascii_part = "".join(chr(byte) if 32 <= byte < 127 else "." for byte in chunk)
        lines.append(f"{offset + start:08x}  {hex_part:<{HEX_ROW_BYTES * 3 - 1}}  |{ascii_part}|")
    return lines


def sniff_image(path: Path, header: bytes) -> ImageDescriptor | None:
    """Identify an image from its signature, falling back to the extension."""
    if header.startswith(PNG_SIGNATURE) and len(header) >= 24:
        width, height = struct.unpack(">II", header[16:24])
        return ImageDescriptor(path=path, format="png", width=width, height=height)
    if header[:6] in GIF_SIGNATURES and len(header) >= 10:
        width, height = struct.unpack("<HH", header[6:10])
        return ImageDescriptor(path=path, format="gif", width=width, height=height)
    if header.startswith(JPEG_SIGNATURE):
        return ImageDescriptor(path=path, format="jpeg")
    suffix = path.suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return ImageDescriptor(path=path, format=suffix.lstrip("."))
    return None


def is_archive(path: Path) -> bool:
    name = path.name.lower()
    return name.endswith(".zip") or name.endswith(TAR_SUFFIXES)


def _read_prefix(path: Path, size: int) -> bytes:
    try:
        with path.open("rb") as handle:
            return handle.read(size)
    except OSError as exc:
        raise PreviewIoError(f"{path}: {exc.strerror or exc}") from exc


def directory_preview(path: Path, show_hidden: bool = False) -> PreviewPayload:
    try:
        children = list_directory_children(path, show_hidden)
    except IoError as exc:
        raise PreviewIoError(str(exc)) from exc
    ordered = sort_siblings(children)
    lines: list[str] = []
    for child in ordered[:DIRECTORY_PREVIEW_MAX_ENTRIES]:
        if child.is_dir:
            lines.append(f"{child.name}/")
        elif child.size is not None:
            lines.append(f"{child.name}  ({format_size(child.size)})")
        else:
            lines.append(child.name)
    if not lines:
        lines.append("<empty directory>")
    return PreviewPayload(
        kind="directory",
        lines=tuple(lines),
        title=f"{path.name or path}/ ({len(children)} entries)",
        truncated=len(ordered) > DIRECTORY_PREVIEW_MAX_ENTRIES,
    )


def archive_preview(path: Path) -> PreviewPayload:
    """List archive members without extracting anything."""
    lines: list[str] = []
    total = 0
    try:
        if path.name.lower().endswith(".zip"):
            with zipfile.ZipFile(path) as archive:
                for info in archive.infolist():
                    total += 1
                    if len(lines) < ARCHIVE_PREVIEW_MAX_MEMBERS:
                        lines.append(f"{format_size(info.file_size):>10}  {info.filename}")
        else:
            with tarfile.open(path) as archive:
                for member in archive:
                    total += 1
                    if len(lines) < ARCHIVE_PREVIEW_MAX_MEMBERS:
                        name = f"{member.name}/" if member.isdir() else member.name
                        lines.append(f"{format_size(member.size):>10}  {name}")
    except (zipfile.BadZipFile, tarfile.TarError) as exc:
        raise ParseError(f"{path.name}: {exc}") from exc
    except OSError as exc:
        raise PreviewIoError(f"{path}: {exc.strerror or exc}") from exc
    return PreviewPayload(
        kind="archive",
        lines=tuple(lines) or ("<empty archive>",),
        title=f"{path.name} ({total} members)",
        truncated=total > len(lines),
    )


def hex_preview(path: Path, file_size: int) -> PreviewPayload:
    data = _read_prefix(path, MAX_HEX_BYTES)
    return PreviewPayload(
        kind="hex",
        lines=tuple(hex_dump_lines(data)),
        title=f"{path.name} ({format_size(file_size)}, hex)",
        truncated=file_size > MAX_HEX_BYTES,
    )


def image_preview(image: ImageDescriptor, file_size: int) -> PreviewPayload:
    lines = [f"Image: {image.format.upper()}"]
    if image.width is not None and image.height is not None:
        lines.append(f"Dimensions: {image.width} x {image.height}")
    lines.append(f"Size: {format_size(file_size)}")
    return PreviewPayload(kind="image", lines=tuple(lines), title=image.path.name, image=image)


def format_json(text: str) -> str:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def text_preview(path: Path, data: bytes, mode: PreviewMode, style: str) -> PreviewPayload:
    text = sanitize_terminal_text(decode_text(data))
    if mode is PreviewMode.DEFAULT and path.suffix.lower() == ".json":
        text = format_json(text)
    lines = text.splitlines()
    truncated = len(lines) > MAX_TEXT_LINES
    lines = lines[:MAX_TEXT_LINES]
    if mode is PreviewMode.DEFAULT and lines:
        lines = colorize_source("\n".join(lines), path, style).splitlines()
    title = f"{path.name} ({len(lines)}{'+' if truncated else ''} lines)"
    return PreviewPayload.text(lines, title=title, truncated=truncated)


def build_preview(
    path: Path,
    mode: PreviewMode = PreviewMode.DEFAULT,
    *,
    style: str = DEFAULT_STYLE,
    show_hidden: bool = False,
) -> PreviewPayload:
    """Produce a preview payload for ``path`` or raise a ``PreviewError``."""
    try:
        st = path.stat()
    except OSError as exc:
        raise PreviewIoError(f"{path}: {exc.strerror or exc}") from exc

    if stat.S_ISDIR(st.st_mode):
        return directory_preview(path, show_hidden)
    if not stat.S_ISREG(st.st_mode):
        raise UnsupportedType(f"{path.name} is a {_special_file_kind(st.st_mode)}")

    file_size = int(st.st_size)
    if mode is PreviewMode.HEX:
        return hex_preview(path, file_size)
    if file_size == 0:
        return PreviewPayload.message("empty", "<empty file>", title=path.name)
    if is_archive(path):
        return archive_preview(path)

    header = _read_prefix(path, BINARY_SNIFF_BYTES)
    image = sniff_image(path, header)
    if image is not None:
        return image_preview(image, file_size)
    if file_size > MAX_TEXT_BYTES:
        raise TooLarge(f"{path.name} is {format_size(file_size)} (limit {format_size(MAX_TEXT_BYTES)})")
    if b"\x00" in header:
        if mode is PreviewMode.RAW:
            raise UnsupportedType(f"{path.name} is binary; use the hex view")
        return hex_preview(path, file_size)

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise PreviewIoError(f"{path}: {exc.strerror or exc}") from exc
    return text_preview(path, data, mode, style)


class DefaultPreviewProducer:
    """Producer callable bound to display settings chosen at startup."""

    def __init__(self, style: str = DEFAULT_STYLE, show_hidden: bool = False) -> None:
        self.style = style
        self.show_hidden = show_hidden

    def __call__(self, path: Path, mode: PreviewMode) -> PreviewPayload:
        return build_preview(path, mode, style=self.style, show_hidden=self.show_hidden)


__all__ = [
    "MAX_TEXT_BYTES",
    "MAX_TEXT_LINES",
    "MAX_HEX_BYTES",
    "BINARY_SNIFF_BYTES",
    "PNG_SIGNATURE",
    "format_size",
    "hex_dump_lines",
    "sniff_image",
    "is_archive",
    "build_preview",
    "DefaultPreviewProducer",
]
