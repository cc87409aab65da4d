"""Tests for full-frame rendering and ANSI clipping."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazybrowse.ansi import clip_ansi_line, display_width, fit_ansi_line, strip_ansi
from lazybrowse.file_tree_model import FileEntry
from lazybrowse.input import Mode
from lazybrowse.preview import ImageDescriptor, PreviewCompletion, PreviewPayload
from lazybrowse.render import preview_image_geometry, render_frame, tree_row_text
from lazybrowse.runtime.app import BrowserApp
from lazybrowse.runtime.config import BrowserConfig


class _Runner:
    def __init__(self) -> None:
        self.submitted = []
        self.finished: list[PreviewCompletion] = []

    def submit(self, request) -> None:
        self.submitted.append(request)

    def drain_results(self) -> list[PreviewCompletion]:
        out, self.finished = self.finished, []
        return out


class AnsiHelpersTests(unittest.TestCase):
    def test_clip_keeps_escapes_and_counts_visible_columns(self) -> None:
        text = "\x1b[31mhello\x1b[0m world"
        self.assertEqual(strip_ansi(clip_ansi_line(text, 7)), "hello w")
        self.assertEqual(display_width(fit_ansi_line(text, 20)), 20)
        self.assertEqual(strip_ansi(clip_ansi_line("abcdef", 3, start_cols=2)), "cde")

    def test_wide_characters_and_tabs(self) -> None:
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(clip_ansi_line("日本語", 3), "日")
        self.assertEqual(clip_ansi_line("a\tb", 10), "a" + " " * 7 + "b")


class RenderFrameTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "src").mkdir()
        (self.root / "notes.txt").write_text("hello\n", encoding="utf-8")
        self.runner = _Runner()
        self.app = BrowserApp.create(self.root, BrowserConfig(git_status=False), runner=self.runner, persist=False, clock=lambda: 0.0)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _rows(self, width: int = 80, height: int = 12) -> list[str]:
        return render_frame(self.app, width, height).split("\r\n")

    def test_frame_has_exact_geometry(self) -> None:
        rows = self._rows()
        self.assertEqual(len(rows), 12)
        for row in rows:
            self.assertEqual(display_width(row), 80)

    def test_render_reads_the_scroll_window_without_moving_it(self) -> None:
        for idx in range(30):
            (self.root / f"f{idx:02}.txt").write_text("x", encoding="utf-8")
        self.app.handle_key("CTRL_R")
        self.app.set_viewport(12)
        self.assertEqual((self.app.tree_rows, self.app.page_rows), (10, 9))
        self.app.handle_key("G")
        offset = self.app.tree_offset
        self.assertEqual(offset, len(self.app.tree) - 10)

        plain = [strip_ansi(row) for row in self._rows(height=6)]
        self.assertEqual(self.app.tree_offset, offset)
        # a shorter frame still shows the cursor row
        self.assertIn("notes.txt", plain[4])

    def test_tree_rows_and_loading_placeholder(self) -> None:
        plain = [strip_ansi(row) for row in self._rows()]
        self.assertIn(str(self.root), plain[0])
        self.assertTrue(plain[1].startswith(" ▸ src/"))
        self.assertIn("notes.txt", plain[2])
        self.assertIn("Loading…", plain[1])

    def test_ready_preview_shows_title_and_lines(self) -> None:
        self.app.handle_key("j")
        self.app.tick(now=10.0)
        request = self.runner.submitted[-1]
        payload = PreviewPayload.text(["hello"], title="notes.txt (1 lines)")
        self.runner.finished.append(PreviewCompletion(request=request, payload=payload))
        self.app.tick(now=10.0)

        plain = [strip_ansi(row) for row in self._rows()]
        self.assertIn("notes.txt (1 lines)", plain[1])
        self.assertIn("hello", plain[2])

    def test_failed_preview_is_inline(self) -> None:
        self.app.tick(now=10.0)
        request = self.runner.submitted[-1]
        self.runner.finished.append(PreviewCompletion(request=request, error="Cannot read file: denied"))
        self.app.tick(now=10.0)
        self.assertIn("Cannot read file: denied", strip_ansi(self._rows()[1]))

    def test_help_overlay_and_prompt_line(self) -> None:
        self.app.handle_key("?")
        plain = [strip_ansi(row) for row in self._rows(width=120, height=40)]
        self.assertIn("Key bindings", plain[1])

        self.app.handle_key("ESC")
        self.app.handle_key("/")
        self.app.handle_key("n")
        self.assertTrue(strip_ansi(self._rows()[-1]).startswith("/n"))

    def test_delete_confirmation_line(self) -> None:
        self.app.handle_key("j")
        self.app.handle_key("d")
        self.assertIs(self.app.dispatcher.mode, Mode.DELETE_CONFIRM)
        self.assertIn("Delete notes.txt? [y/N]", strip_ansi(self._rows()[-1]))

    def test_image_geometry_only_for_ready_images(self) -> None:
        self.assertIsNone(preview_image_geometry(self.app, 80, 24))
        self.app.tick(now=10.0)
        request = self.runner.submitted[-1]
        image = ImageDescriptor(path=self.root / "pic.png", format="png", width=4, height=4)
        payload = PreviewPayload(kind="image", lines=("Image: PNG",), title="pic.png", image=image)
        self.runner.finished.append(PreviewCompletion(request=request, payload=payload))
        self.app.tick(now=10.0)
        self.assertEqual(preview_image_geometry(self.app, 80, 24), (26, 4, 54, 20))


class TreeRowTests(unittest.TestCase):
    def test_selected_marker_status_and_indent(self) -> None:
        entry = FileEntry(path=Path("/r/a/b.py"), name="b.py", depth=2, is_dir=False, selected=True, status="M")
        self.assertEqual(strip_ansi(tree_row_text(entry)), "*" + " " * 6 + "M b.py")


if __name__ == "__main__":
    unittest.main()
