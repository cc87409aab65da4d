"""Tests for raw byte to key token decoding."""

from __future__ import annotations

import os
import unittest

from lazybrowse.input import read_key


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        os.close(self.read_fd)
        os.close(self.write_fd)

    def _keys(self, data: bytes, count: int) -> list[str]:
        os.write(self.write_fd, data)
        return [read_key(self.read_fd, 50) for _ in range(count)]

    def test_plain_characters_and_control_keys(self) -> None:
        self.assertEqual(
            self._keys(b"jq\r\t\x7f\x12", 6),
            ["j", "q", "ENTER", "TAB", "BACKSPACE", "CTRL_R"],
        )

    def test_csi_sequences(self) -> None:
        data = b"\x1b[A\x1b[B\x1b[H\x1b[F\x1b[3~\x1b[5~\x1b[6~\x1b[1;2C\x1bOH"
        self.assertEqual(
            self._keys(data, 9),
            ["UP", "DOWN", "HOME", "END", "DELETE", "PAGE_UP", "PAGE_DOWN", "SHIFT_RIGHT", "HOME"],
        )

    def test_lone_escape_and_alt_prefix(self) -> None:
        self.assertEqual(self._keys(b"\x1b", 1), ["ESC"])
        self.assertEqual(self._keys(b"\x1bx", 2), ["ESC", "x"])

    def test_utf8_character(self) -> None:
        self.assertEqual(self._keys("é".encode("utf-8"), 1), ["é"])

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(read_key(self.read_fd, 10), "")


if __name__ == "__main__":
    unittest.main()
