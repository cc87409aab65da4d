"""Preview subsystem: payload producers, LRU cache, worker, and engine."""

from __future__ import annotations

from .cache import PREVIEW_CACHE_DEFAULT_CAPACITY, PreviewCache
from .engine import DEFAULT_DEBOUNCE_SECONDS, PreviewEngine
from .producers import DefaultPreviewProducer, build_preview
from .types import (
    ImageDescriptor,
    PreviewCompletion,
    PreviewMode,
    PreviewPayload,
    PreviewRequest,
    PreviewState,
)
from .worker import PreviewJobRunner, run_producer

__all__ = [
    "PREVIEW_CACHE_DEFAULT_CAPACITY",
    "DEFAULT_DEBOUNCE_SECONDS",
    "PreviewCache",
    "PreviewEngine",
    "DefaultPreviewProducer",
    "build_preview",
    "ImageDescriptor",
    "PreviewCompletion",
    "PreviewMode",
    "PreviewPayload",
    "PreviewRequest",
    "PreviewState",
    "PreviewJobRunner",
    "run_producer",
]
