"""Sibling ordering for tree entries.

Directories always precede files. Within each kind the active field decides,
and ties fall back to case-insensitive name order.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol, TypeVar


class SortField(Enum):
    NAME = "name"
    SIZE = "size"
    MODIFIED = "modified"
    EXTENSION = "extension"

    def next(self) -> SortField:
        """Return the field after this one, wrapping around."""
        members = list(SortField)
        return members[(members.index(self) + 1) % len(members)]


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def reversed(self) -> SortOrder:
        return SortOrder.DESCENDING if self is SortOrder.ASCENDING else SortOrder.ASCENDING


class _Sortable(Protocol):
    name: str
    is_dir: bool
    size: int | None
    mtime_ns: int | None


T = TypeVar("T", bound=_Sortable)


def _field_key(item: _Sortable, field: SortField) -> object:
    if field is SortField.SIZE:
        return item.size if item.size is not None else -1
    if field is SortField.MODIFIED:
        return item.mtime_ns if item.mtime_ns is not None else 0
    if field is SortField.EXTENSION:
        dot = item.name.rfind(".")
        return item.name[dot + 1 :].casefold() if dot > 0 else ""
    return item.name.casefold()


def sort_siblings(
    items: Iterable[T],
    field: SortField = SortField.NAME,
    order: SortOrder = SortOrder.ASCENDING,
) -> list[T]:
    """Return ``items`` ordered as one sibling group.

    Built from stable passes: name first (tie-breaker), then the active
    field, then the directory/file split.
    """
    ordered = sorted(items, key=lambda item: item.name.casefold())
    descending = order is SortOrder.DESCENDING
    if field is SortField.NAME:
        if descending:
            ordered.reverse()
    else:
        ordered.sort(key=lambda item: _field_key(item, field), reverse=descending)
    ordered.sort(key=lambda item: not item.is_dir)
    return ordered


__all__ = [
    "SortField",
    "SortOrder",
    "sort_siblings",
]
