"""Derived filter views over the flat tree sequence.

A filter is either a bare name pattern or a ``FilterQuery`` parsed from the
search line. Queries combine an optional name substring with ``size:`` and
``date:`` expressions; every part must hold for an entry to match:

    report size:>1M date:7d
    size:100K-2M
    date:2024-01-01..2024-03-31
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from .types import FileEntry

_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
}
_SIZE_RE = re.compile(r"^(\d+)\s*([a-z]*)$")
_DURATION_RE = re.compile(r"^(\d+)([dwm])$")
_DURATION_DAYS = {"d": 1, "w": 7, "m": 30}


def parse_size(text: str) -> int | None:
    """Parse ``512``, ``10K`` or ``3MB`` style sizes into bytes (powers of 1024)."""
    match = _SIZE_RE.match(text.strip().lower())
    if match is None:
        return None
    factor = _SIZE_UNITS.get(match.group(2))
    if factor is None:
        return None
    return int(match.group(1)) * factor


@dataclass(frozen=True)
class SizeFilter:
    """Inclusive byte range; either bound may be open."""

    low: int | None = None
    high: int | None = None

    @classmethod
    def parse(cls, text: str) -> SizeFilter | None:
        """Parse ``>N``, ``<N``, ``=N``, ``N`` or ``A-B``; ``None`` when invalid."""
        expr = text.strip()
        if not expr:
            return None
        op = expr[0]
        if op in "<>=":
            value = parse_size(expr[1:])
            if value is None:
                return None
            if op == ">":
                return cls(low=value + 1)
            if op == "<":
                return cls(high=value - 1) if value > 0 else cls(low=1, high=0)
            return cls(low=value, high=value)
        dash = expr.find("-", 1)
        if dash > 0:
            low = parse_size(expr[:dash])
            high = parse_size(expr[dash + 1 :])
            if low is None or high is None:
                return None
            return cls(low=low, high=high)
        value = parse_size(expr)
        return None if value is None else cls(low=value, high=value)

    def matches(self, entry: FileEntry) -> bool:
        if entry.is_dir or entry.size is None:
            return False
        if self.low is not None and entry.size < self.low:
            return False
        return self.high is None or entry.size <= self.high


def _parse_iso_date(text: str) -> date | None:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class DateFilter:
    """Inclusive range of local modification dates; either bound may be open.

    Relative expressions are resolved against ``today`` when parsed.
    """

    first: date | None = None
    last: date | None = None

    @classmethod
    def parse(cls, text: str, today: date | None = None) -> DateFilter | None:
        expr = text.strip().lower()
        if not expr:
            return None
        today = today or date.today()
        if expr == "today":
            return cls(today, today)
        if expr == "yesterday":
            day = today - timedelta(days=1)
            return cls(day, day)

        match = _DURATION_RE.match(expr)
        if match and int(match.group(1)) > 0:
            days = int(match.group(1)) * _DURATION_DAYS[match.group(2)]
            return cls(first=today - timedelta(days=days))
        if expr.startswith("<"):
            match = _DURATION_RE.match(expr[1:].strip())
            if match and int(match.group(1)) > 0:
                days = int(match.group(1)) * _DURATION_DAYS[match.group(2)]
                return cls(last=today - timedelta(days=days + 1))
            day = _parse_iso_date(expr[1:])
            return None if day is None else cls(last=day - timedelta(days=1))
        if expr.startswith(">"):
            day = _parse_iso_date(expr[1:])
            return None if day is None else cls(first=day + timedelta(days=1))
        if ".." in expr:
            start, _, end = expr.partition("..")
            first, last = _parse_iso_date(start), _parse_iso_date(end)
            if first is None or last is None:
                return None
            return cls(first, last)
        day = _parse_iso_date(expr)
        return None if day is None else cls(day, day)

    def matches(self, entry: FileEntry) -> bool:
        if entry.mtime_ns is None:
            return False
        day = date.fromtimestamp(entry.mtime_ns / 1_000_000_000)
        if self.first is not None and day < self.first:
            return False
        return self.last is None or day <= self.last


@dataclass(frozen=True)
class FilterQuery:
    """Name pattern plus optional size and date predicates.

    ``errors`` lists the expressions that failed to parse; they constrain
    nothing. ``text`` is the search line the query came from. An empty query
    is falsy.
    """

    name: str | re.Pattern[str] | None = None
    size: SizeFilter | None = None
    modified: DateFilter | None = None
    errors: tuple[str, ...] = ()
    text: str = ""

    def __str__(self) -> str:
        return self.text

    def __bool__(self) -> bool:
        return bool(self.name) or self.size is not None or self.modified is not None

    def matches(self, entry: FileEntry) -> bool:
        if self.name and not name_matches(entry.name, self.name):
            return False
        if self.size is not None and not self.size.matches(entry):
            return False
        return self.modified is None or self.modified.matches(entry)


FilterPattern = str | re.Pattern[str] | FilterQuery


def parse_filter_query(text: str, today: date | None = None) -> FilterQuery:
    """Split search-line ``text`` into name words and ``size:``/``date:`` terms."""
    words: list[str] = []
    size: SizeFilter | None = None
    when: DateFilter | None = None
    errors: list[str] = []
    for token in text.split():
        key, sep, value = token.partition(":")
        key = key.lower()
        if sep and key == "size":
            parsed = SizeFilter.parse(value)
            if parsed is None:
                errors.append(token)
            else:
                size = parsed
        elif sep and key == "date":
            parsed_date = DateFilter.parse(value, today)
            if parsed_date is None:
                errors.append(token)
            else:
                when = parsed_date
        else:
            words.append(token)
    return FilterQuery(
        name=" ".join(words) or None,
        size=size,
        modified=when,
        errors=tuple(errors),
        text=" ".join(text.split()),
    )


def name_matches(name: str, pattern: str | re.Pattern[str]) -> bool:
    """Return whether ``name`` matches a substring or compiled pattern."""
    if isinstance(pattern, re.Pattern):
        return pattern.search(name) is not None
    return pattern.casefold() in name.casefold()


def filter_view(entries: Sequence[FileEntry], pattern: FilterPattern | None) -> list[int]:
    """Return indices of ``entries`` visible under ``pattern``.

    Matching entries are visible, and so is every ancestor of a match even
    when the ancestor itself does not match. One forward pass keeps a
    stack of open ancestors; each ancestor is marked at most once, so the
    whole pass stays linear.
    """
    if not pattern:
        return list(range(len(entries)))
    if isinstance(pattern, FilterQuery):
        query = pattern
    else:
        query = FilterQuery(name=pattern)

    visible = [False] * len(entries)
    ancestors: list[int] = []
    for idx, entry in enumerate(entries):
        while ancestors and entries[ancestors[-1]].depth >= entry.depth:
            ancestors.pop()
        if query.matches(entry):
            visible[idx] = True
            for ancestor_idx in reversed(ancestors):
                if visible[ancestor_idx]:
                    break
                visible[ancestor_idx] = True
        if entry.is_dir:
            ancestors.append(idx)
    return [idx for idx, shown in enumerate(visible) if shown]


__all__ = [
    "DateFilter",
    "FilterPattern",
    "FilterQuery",
    "SizeFilter",
    "filter_view",
    "name_matches",
    "parse_filter_query",
    "parse_size",
]
