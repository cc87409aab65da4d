"""Tests for the default preview producer."""

from __future__ import annotations

import io
import json
import os
import struct
import tarfile
import tempfile
import unittest
import zipfile
from pathlib import Path

from lazybrowse.ansi import strip_ansi
from lazybrowse.errors import ParseError, PreviewIoError, TooLarge, UnsupportedType
from lazybrowse.preview import DefaultPreviewProducer, PreviewMode, build_preview
from lazybrowse.preview.producers import MAX_TEXT_BYTES, MAX_TEXT_LINES, PNG_SIGNATURE, format_size, hex_dump_lines


class BuildPreviewTests(unittest.TestCase):
    def test_text_default_mode_is_highlighted_and_raw_is_plain(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "demo.py"
            path.write_text("def hello():\n    return 1\n", encoding="utf-8")

            highlighted = build_preview(path)
            raw = build_preview(path, PreviewMode.RAW)

            self.assertEqual(highlighted.kind, "text")
            self.assertIn("\x1b[", "".join(highlighted.lines))
            self.assertEqual([strip_ansi(line) for line in highlighted.lines], list(raw.lines))
            self.assertEqual(raw.lines, ("def hello():", "    return 1"))

    def test_long_text_is_truncated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "long.txt"
            path.write_text("line\n" * (MAX_TEXT_LINES + 5), encoding="utf-8")
            payload = build_preview(path, PreviewMode.RAW)
            self.assertTrue(payload.truncated)
            self.assertEqual(len(payload.lines), MAX_TEXT_LINES)

    def test_control_bytes_are_escaped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bell.txt"
            path.write_bytes(b"ring\x07bell\n")
            payload = build_preview(path, PreviewMode.RAW)
            self.assertEqual(payload.lines, ("ring\\x07bell",))

    def test_json_is_pretty_printed_and_malformed_json_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            good = Path(tmp) / "data.json"
            good.write_text(json.dumps({"a": [1, 2]}), encoding="utf-8")
            payload = build_preview(good)
            self.assertIn('  "a": [', [strip_ansi(line) for line in payload.lines])

            bad = Path(tmp) / "broken.json"
            bad.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ParseError):
                build_preview(bad)
            self.assertEqual(build_preview(bad, PreviewMode.RAW).lines, ("{not json",))

    def test_binary_content_falls_back_to_hex(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "blob.dat"
            path.write_bytes(b"AB\x00CD" * 10)
            payload = build_preview(path)
            self.assertEqual(payload.kind, "hex")
            self.assertTrue(payload.lines[0].startswith("00000000  41 42 00 43 44"))
            with self.assertRaises(UnsupportedType):
                build_preview(path, PreviewMode.RAW)

    def test_large_file_is_too_large_except_in_hex_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "big.log"
            with path.open("wb") as handle:
                handle.truncate(MAX_TEXT_BYTES + 1)
                handle.seek(0)
                handle.write(b"text")
            with self.assertRaises(TooLarge):
                build_preview(path)
            payload = build_preview(path, PreviewMode.HEX)
            self.assertEqual(payload.kind, "hex")
            self.assertTrue(payload.truncated)

    def test_empty_file_and_directory_listing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "empty.txt").touch()
            (root / "sub").mkdir()
            (root / ".secret").write_text("s", encoding="utf-8")

            self.assertEqual(build_preview(root / "empty.txt").kind, "empty")

            listing = build_preview(root)
            self.assertEqual(listing.kind, "directory")
            self.assertEqual(listing.lines, ("sub/", "empty.txt  (0 B)"))

            hidden = DefaultPreviewProducer(show_hidden=True)(root, PreviewMode.DEFAULT)
            self.assertIn(".secret  (1 B)", hidden.lines)

    def test_png_dimensions_are_sniffed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pic.png"
            header = PNG_SIGNATURE + struct.pack(">I", 13) + b"IHDR" + struct.pack(">II", 64, 32)
            path.write_bytes(header + b"\x00" * 16)
            payload = build_preview(path)
            self.assertEqual(payload.kind, "image")
            self.assertEqual((payload.image.format, payload.image.width, payload.image.height), ("png", 64, 32))

    def test_archives_list_members(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            zip_path = root / "bundle.zip"
            with zipfile.ZipFile(zip_path, "w") as archive:
                archive.writestr("a.txt", "hello")
                archive.writestr("dir/b.txt", "")
            payload = build_preview(zip_path)
            self.assertEqual(payload.kind, "archive")
            self.assertTrue(payload.lines[0].endswith("a.txt"))
            self.assertEqual(len(payload.lines), 2)

            tar_path = root / "bundle.tar.gz"
            with tarfile.open(tar_path, "w:gz") as archive:
                info = tarfile.TarInfo("only.txt")
                info.size = 3
                archive.addfile(info, io.BytesIO(b"abc"))
            self.assertTrue(build_preview(tar_path).lines[0].endswith("only.txt"))

            broken = root / "broken.zip"
            broken.write_bytes(b"not a zip")
            with self.assertRaises(ParseError):
                build_preview(broken)

    def test_missing_path_and_fifo(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(PreviewIoError):
                build_preview(Path(tmp) / "missing")
            if hasattr(os, "mkfifo"):
                fifo = Path(tmp) / "pipe"
                os.mkfifo(fifo)
                with self.assertRaises(UnsupportedType):
                    build_preview(fifo)


class PreviewHelperTests(unittest.TestCase):
    def test_format_size(self) -> None:
        self.assertEqual(format_size(12), "12 B")
        self.assertEqual(format_size(2048), "2.0 KB")
        self.assertEqual(format_size(3 * 1024 * 1024), "3.0 MB")

    def test_hex_dump_rows_are_aligned(self) -> None:
        lines = hex_dump_lines(bytes(range(20)))
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[1].startswith("00000010  10 11 12 13"))
        self.assertEqual(len(lines[0].split("|")[0]), len(lines[1].split("|")[0]))


if __name__ == "__main__":
    unittest.main()
