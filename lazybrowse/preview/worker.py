"""Background worker that runs preview producers off the main loop."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from queue import Empty, Queue

from ..errors import PreviewError
from .types import PreviewCompletion, PreviewMode, PreviewPayload, PreviewRequest

logger = logging.getLogger(__name__)

PreviewProducer = Callable[[Path, PreviewMode], PreviewPayload]


def run_producer(producer: PreviewProducer, request: PreviewRequest) -> PreviewCompletion:
    """Invoke ``producer`` and fold any failure into a completion value."""
    try:
        payload = producer(request.path, request.mode)
    except PreviewError as exc:
        return PreviewCompletion(request=request, error=exc.display_message())
    except Exception as exc:
        logger.exception("preview producer crashed for %s", request.path)
        return PreviewCompletion(request=request, error=f"Preview failed: {exc}")
    return PreviewCompletion(request=request, payload=payload)


class PreviewJobRunner:
    """Single-threaded latest-request-wins preview scheduler.

    Only one request waits at a time; submitting again replaces it, so a
    request superseded before the worker picks it up is never started.
    Results travel back through a queue that ``drain_results`` empties
    without blocking.
    """

    def __init__(self, producer: PreviewProducer, *, thread_name: str = "lazybrowse-preview") -> None:
        self._producer = producer
        self._thread_name = thread_name
        self._lock = threading.Lock()
        self._pending: PreviewRequest | None = None
        self._running = False
        self._results: Queue[PreviewCompletion] = Queue()

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return
            self._results.put(run_producer(self._producer, request))

    def submit(self, request: PreviewRequest) -> None:
        """Queue ``request``, replacing any request that has not started yet."""
        with self._lock:
            replaced = self._pending
            self._pending = request
            if replaced is not None:
                logger.debug("preview request for %s superseded before start", replaced.path)
            if self._running:
                return
            self._running = True

        worker = threading.Thread(target=self._worker, name=self._thread_name, daemon=True)
        worker.start()

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._running

    def drain_results(self) -> list[PreviewCompletion]:
        """Drain all completed jobs."""
        out: list[PreviewCompletion] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "PreviewProducer",
    "PreviewJobRunner",
    "run_producer",
]
