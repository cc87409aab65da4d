"""Bounded LRU cache of rendered previews keyed by ``(path, mode)``."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path

from .types import PreviewMode, PreviewPayload

PREVIEW_CACHE_DEFAULT_CAPACITY = 10

CacheKey = tuple[Path, PreviewMode]


@dataclass(frozen=True)
class _CacheEntry:
    payload: PreviewPayload
    generation: int


class PreviewCache:
    """Least-recently-used preview store owned by the main loop.

    Every entry remembers the generation that produced it so a late write
    from an older generation never replaces a newer result for the same key.
    Invalidation records a floor: writes tagged at or below the floor for a
    path were produced before the invalidation and are refused.
    """

    def __init__(self, capacity: int = PREVIEW_CACHE_DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("preview cache capacity must be >= 1")
        self.capacity = capacity
        self._entries: OrderedDict[CacheKey, _CacheEntry] = OrderedDict()
        self._path_floors: dict[Path, int] = {}
        self._global_floor = -1

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[CacheKey]:
        """Return keys from least to most recently used."""
        return list(self._entries)

    def get(self, key: CacheKey) -> PreviewPayload | None:
        """Return the cached payload and mark ``key`` most recently used."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.payload

    def peek(self, key: CacheKey) -> PreviewPayload | None:
        """Return the cached payload without touching recency."""
        entry = self._entries.get(key)
        return entry.payload if entry is not None else None

    def generation_of(self, key: CacheKey) -> int | None:
        entry = self._entries.get(key)
        return entry.generation if entry is not None else None

    def put(self, key: CacheKey, payload: PreviewPayload, generation: int) -> bool:
        """Store ``payload`` unless a newer generation already owns ``key``.

        Returns whether the write happened. Evicts least-recently-used keys
        beyond capacity.
        """
        if generation <= self.floor_of(key[0]):
            return False
        existing = self._entries.get(key)
        if existing is not None and existing.generation > generation:
            return False
        self._entries[key] = _CacheEntry(payload=payload, generation=generation)
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)
        return True

    def floor_of(self, path: Path) -> int:
        """Highest generation refused for ``path`` by past invalidations."""
        return max(self._global_floor, self._path_floors.get(path, -1))

    def invalidate(self, path: Path, generation: int | None = None) -> int:
        """Drop every mode cached for ``path``; returns the number removed.

        With ``generation``, later writes for ``path`` tagged at or below it
        are refused.
        """
        stale = [key for key in self._entries if key[0] == path]
        for key in stale:
            del self._entries[key]
        if generation is not None:
            self._path_floors[path] = max(self._path_floors.get(path, -1), generation)
        return len(stale)

    def clear(self, generation: int | None = None) -> None:
        self._entries.clear()
        if generation is not None and generation > self._global_floor:
            self._global_floor = generation
            self._path_floors = {
                path: floor for path, floor in self._path_floors.items() if floor > generation
            }


__all__ = [
    "PREVIEW_CACHE_DEFAULT_CAPACITY",
    "CacheKey",
    "PreviewCache",
]
