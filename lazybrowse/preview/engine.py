"""Debounced, cached, generation-tagged preview loading.

The engine follows the tree cursor. A target change bumps the generation
and starts a debounce window; when the window elapses the cache is consulted
first and only a miss dispatches a job, under a freshly incremented
generation. Completions are applied on the main loop, at most once, and only
while their generation is still the live one.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from .cache import PREVIEW_CACHE_DEFAULT_CAPACITY, PreviewCache
from .types import PreviewCompletion, PreviewMode, PreviewPayload, PreviewRequest, PreviewState
from .worker import PreviewJobRunner, PreviewProducer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.08


class PreviewRunner(Protocol):
    def submit(self, request: PreviewRequest) -> None: ...

    def drain_results(self) -> list[PreviewCompletion]: ...


class PreviewEngine:
    """Preview state machine for the current target.

    ``Idle -> Debouncing -> Loading -> Ready | Failed``. A cache hit skips
    ``Loading`` entirely. When ``warm_cache_on_stale`` is set, successful
    completions from superseded generations still populate the cache (never
    over a newer generation) but never touch visible state.
    """

    def __init__(
        self,
        producer: PreviewProducer | None = None,
        *,
        runner: PreviewRunner | None = None,
        capacity: int = PREVIEW_CACHE_DEFAULT_CAPACITY,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        warm_cache_on_stale: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if runner is None:
            if producer is None:
                raise ValueError("PreviewEngine needs a producer or a runner")
            runner = PreviewJobRunner(producer)
        self.runner = runner
        self.cache = PreviewCache(capacity)
        self.debounce_seconds = max(0.0, debounce_seconds)
        self.warm_cache_on_stale = warm_cache_on_stale
        self._clock = clock

        self.state = PreviewState.IDLE
        self.target: Path | None = None
        self.mode = PreviewMode.DEFAULT
        self.generation = 0
        self.content: PreviewPayload | None = None
        self.error_message: str | None = None
        self.jobs_started = 0
        self._deadline: float | None = None

    @property
    def key(self) -> tuple[Path, PreviewMode] | None:
        if self.target is None:
            return None
        return (self.target, self.mode)

    @property
    def deadline(self) -> float | None:
        """Monotonic time at which the pending debounce fires."""
        return self._deadline

    def _restart(self, delay: float) -> None:
        self.generation += 1
        self.state = PreviewState.DEBOUNCING
        self.content = None
        self.error_message = None
        self._deadline = self._clock() + delay

    def select(self, path: Path | None) -> bool:
        """Point the engine at ``path``; returns whether a new cycle started."""
        if path is None:
            was_idle = self.state is PreviewState.IDLE and self.target is None
            self.clear()
            return not was_idle
        if path == self.target and self.state in (
            PreviewState.DEBOUNCING,
            PreviewState.LOADING,
            PreviewState.READY,
        ):
            return False
        self.target = path
        self._restart(self.debounce_seconds)
        return True

    def set_mode(self, mode: PreviewMode) -> bool:
        """Switch presentation; the current target reloads for the new key."""
        if mode is self.mode:
            return False
        self.mode = mode
        if self.target is not None:
            self._restart(0.0)
        return True

    def invalidate(self, path: Path | None = None) -> None:
        """Drop cached previews for ``path`` (all when ``None``).

        The current target reloads on the next tick when it was affected.
        Jobs already in flight for the dropped paths can no longer write to
        the cache.
        """
        if path is None:
            self.cache.clear(self.generation)
        else:
            self.cache.invalidate(path, self.generation)
        if self.target is not None and (path is None or path == self.target):
            self._restart(0.0)

    def clear(self) -> None:
        self.generation += 1
        self.target = None
        self.state = PreviewState.IDLE
        self.content = None
        self.error_message = None
        self._deadline = None

    def _fire(self) -> None:
        assert self.target is not None
        self._deadline = None
        key = (self.target, self.mode)
        cached = self.cache.get(key)
        if cached is not None:
            self.content = cached
            self.state = PreviewState.READY
            return
        self.generation += 1
        request = PreviewRequest(path=self.target, mode=self.mode, generation=self.generation)
        self.state = PreviewState.LOADING
        self.jobs_started += 1
        self.runner.submit(request)

    def tick(self, now: float | None = None) -> bool:
        """Fire an elapsed debounce and apply finished jobs.

        Returns whether visible preview state changed.
        """
        current = self._clock() if now is None else now
        changed = False
        if (
            self.state is PreviewState.DEBOUNCING
            and self._deadline is not None
            and current >= self._deadline
        ):
            self._fire()
            changed = True
        for completion in self.runner.drain_results():
            changed = self.apply_completion(completion) or changed
        return changed

    def apply_completion(self, completion: PreviewCompletion) -> bool:
        """Apply one job result; returns whether it changed visible state."""
        request = completion.request
        if request.generation != self.generation or self.state is not PreviewState.LOADING:
            if self.warm_cache_on_stale and completion.ok:
                assert completion.payload is not None
                self.cache.put(request.key, completion.payload, request.generation)
            logger.debug(
                "dropping stale preview for %s (generation %d, live %d)",
                request.path,
                request.generation,
                self.generation,
            )
            return False

        if completion.ok:
            assert completion.payload is not None
            self.cache.put(request.key, completion.payload, request.generation)
            self.content = completion.payload
            self.error_message = None
            self.state = PreviewState.READY
        else:
            self.content = None
            self.error_message = completion.error or "Preview failed"
            self.state = PreviewState.FAILED
            logger.info("preview failed for %s: %s", request.path, self.error_message)
        return True


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "PreviewRunner",
    "PreviewEngine",
]
