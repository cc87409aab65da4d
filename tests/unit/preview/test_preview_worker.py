"""Tests for the background preview job runner."""

from __future__ import annotations

import threading
import time
import unittest
from pathlib import Path

from lazybrowse.errors import TooLarge
from lazybrowse.preview import PreviewJobRunner, PreviewMode, PreviewPayload, PreviewRequest, run_producer


def _wait_idle(runner: PreviewJobRunner, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while runner.busy and time.monotonic() < deadline:
        time.sleep(0.005)


class RunProducerTests(unittest.TestCase):
    def test_preview_error_becomes_display_message(self) -> None:
        def producer(path, mode):
            raise TooLarge("big.bin is 2.0 MB")

        request = PreviewRequest(Path("/big.bin"), PreviewMode.DEFAULT, 1)
        completion = run_producer(producer, request)
        self.assertFalse(completion.ok)
        self.assertEqual(completion.error, "File too large: big.bin is 2.0 MB")

    def test_unexpected_exception_is_contained(self) -> None:
        def producer(path, mode):
            raise RuntimeError("kaboom")

        request = PreviewRequest(Path("/x"), PreviewMode.DEFAULT, 1)
        with self.assertLogs("lazybrowse.preview.worker", level="ERROR"):
            completion = run_producer(producer, request)
        self.assertEqual(completion.error, "Preview failed: kaboom")


class PreviewJobRunnerTests(unittest.TestCase):
    def test_superseded_pending_request_never_starts(self) -> None:
        started: list[Path] = []
        release = threading.Event()
        first_started = threading.Event()

        def producer(path, mode):
            started.append(path)
            if path.name == "first":
                first_started.set()
                release.wait(5)
            return PreviewPayload.text([path.name])

        runner = PreviewJobRunner(producer)
        runner.submit(PreviewRequest(Path("/first"), PreviewMode.DEFAULT, 1))
        self.assertTrue(first_started.wait(5))
        runner.submit(PreviewRequest(Path("/second"), PreviewMode.DEFAULT, 2))
        runner.submit(PreviewRequest(Path("/third"), PreviewMode.DEFAULT, 3))
        release.set()
        _wait_idle(runner)

        results = runner.drain_results()
        self.assertEqual(started, [Path("/first"), Path("/third")])
        self.assertEqual([c.request.generation for c in results], [1, 3])
        self.assertTrue(all(c.ok for c in results))
        self.assertEqual(runner.drain_results(), [])


if __name__ == "__main__":
    unittest.main()
