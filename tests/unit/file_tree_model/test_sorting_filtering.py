"""Tests for sibling ordering and the derived filter view."""

from __future__ import annotations

import unittest
from datetime import date, datetime
from pathlib import Path

from lazybrowse.file_tree_model import (
    DateFilter,
    DirectoryChild,
    FileEntry,
    SizeFilter,
    SortField,
    SortOrder,
    filter_view,
    parse_filter_query,
    parse_size,
    sort_siblings,
)


def _child(name: str, is_dir: bool = False, size: int | None = None, mtime_ns: int | None = None) -> DirectoryChild:
    return DirectoryChild(name=name, path=Path("/r") / name, is_dir=is_dir, size=size, mtime_ns=mtime_ns)


def _entry(name: str, depth: int, is_dir: bool = False, size: int | None = None, day: date | None = None) -> FileEntry:
    mtime_ns = None
    if day is not None:
        mtime_ns = int(datetime(day.year, day.month, day.day, 12).timestamp()) * 1_000_000_000
    return FileEntry(
        path=Path("/r") / name,
        name=name,
        depth=depth,
        is_dir=is_dir,
        expanded=is_dir,
        size=size,
        mtime_ns=mtime_ns,
    )


class SortSiblingsTests(unittest.TestCase):
    def test_descending_name_keeps_directories_first(self) -> None:
        items = [_child("b.txt"), _child("A.txt"), _child("lib", is_dir=True), _child("bin", is_dir=True)]
        ordered = sort_siblings(items, SortField.NAME, SortOrder.DESCENDING)
        self.assertEqual([item.name for item in ordered], ["lib", "bin", "b.txt", "A.txt"])

    def test_size_ties_fall_back_to_name(self) -> None:
        items = [_child("c", size=5), _child("a", size=5), _child("b", size=1)]
        ordered = sort_siblings(items, SortField.SIZE)
        self.assertEqual([item.name for item in ordered], ["b", "a", "c"])

    def test_modified_and_extension_fields(self) -> None:
        items = [_child("new.py", mtime_ns=30), _child("old.md", mtime_ns=10), _child("mid.c", mtime_ns=20)]
        by_time = sort_siblings(items, SortField.MODIFIED, SortOrder.DESCENDING)
        self.assertEqual([item.name for item in by_time], ["new.py", "mid.c", "old.md"])

        by_ext = sort_siblings(items + [_child("Makefile")], SortField.EXTENSION)
        self.assertEqual([item.name for item in by_ext], ["Makefile", "mid.c", "old.md", "new.py"])

    def test_sort_field_cycles(self) -> None:
        self.assertIs(SortField.NAME.next(), SortField.SIZE)
        self.assertIs(SortField.EXTENSION.next(), SortField.NAME)
        self.assertIs(SortOrder.ASCENDING.reversed(), SortOrder.DESCENDING)


class FilterViewTests(unittest.TestCase):
    def test_match_in_nested_directory_shows_whole_ancestor_chain(self) -> None:
        entries = [
            _entry("a", 0, is_dir=True),
            _entry("b", 1, is_dir=True),
            _entry("target.txt", 2),
            _entry("other.txt", 2),
            _entry("c", 1, is_dir=True),
            _entry("z.txt", 0),
        ]
        self.assertEqual(filter_view(entries, "TARGET"), [0, 1, 2])

    def test_sibling_subtrees_do_not_leak_ancestors(self) -> None:
        entries = [
            _entry("a", 0, is_dir=True),
            _entry("x.txt", 1),
            _entry("b", 0, is_dir=True),
            _entry("hit.txt", 1),
        ]
        self.assertEqual(filter_view(entries, "hit"), [2, 3])

    def test_no_match_yields_empty_view(self) -> None:
        entries = [_entry("a", 0, is_dir=True), _entry("x.txt", 1)]
        self.assertEqual(filter_view(entries, "nothing"), [])
        self.assertEqual(filter_view(entries, None), [0, 1])


TODAY = date(2024, 3, 15)


class SizeExpressionTests(unittest.TestCase):
    def test_parse_size_units_are_binary_and_case_insensitive(self) -> None:
        self.assertEqual(parse_size("512"), 512)
        self.assertEqual(parse_size("10K"), 10 * 1024)
        self.assertEqual(parse_size("3mb"), 3 * 1024**2)
        self.assertEqual(parse_size(" 1 G "), 1024**3)
        for bad in ("", "-1", "abc", "1X", "1.5M"):
            with self.subTest(text=bad):
                self.assertIsNone(parse_size(bad))

    def test_operators_and_ranges(self) -> None:
        self.assertEqual(SizeFilter.parse(">1M"), SizeFilter(low=1024**2 + 1))
        self.assertEqual(SizeFilter.parse("<100K"), SizeFilter(high=100 * 1024 - 1))
        self.assertEqual(SizeFilter.parse("=0"), SizeFilter(low=0, high=0))
        self.assertEqual(SizeFilter.parse("42"), SizeFilter(low=42, high=42))
        self.assertEqual(SizeFilter.parse("1M-10M"), SizeFilter(low=1024**2, high=10 * 1024**2))
        for bad in (">", "<x", "1M-", "-5", "abc"):
            with self.subTest(text=bad):
                self.assertIsNone(SizeFilter.parse(bad))

    def test_matching_skips_directories_and_unknown_sizes(self) -> None:
        empty = SizeFilter.parse("=0")
        self.assertTrue(empty.matches(_entry("e.txt", 0, size=0)))
        self.assertFalse(empty.matches(_entry("d", 0, is_dir=True, size=0)))
        self.assertFalse(empty.matches(_entry("u.txt", 0)))
        self.assertFalse(SizeFilter.parse("<0").matches(_entry("e.txt", 0, size=0)))


class DateExpressionTests(unittest.TestCase):
    def test_named_and_relative_days(self) -> None:
        self.assertEqual(DateFilter.parse("today", TODAY), DateFilter(TODAY, TODAY))
        self.assertEqual(DateFilter.parse("Yesterday", TODAY), DateFilter(date(2024, 3, 14), date(2024, 3, 14)))
        self.assertEqual(DateFilter.parse("7d", TODAY), DateFilter(first=date(2024, 3, 8)))
        self.assertEqual(DateFilter.parse("2w", TODAY), DateFilter(first=date(2024, 3, 1)))
        self.assertEqual(DateFilter.parse("1m", TODAY), DateFilter(first=date(2024, 2, 14)))
        self.assertEqual(DateFilter.parse("<7d", TODAY), DateFilter(last=date(2024, 3, 7)))

    def test_absolute_dates(self) -> None:
        self.assertEqual(DateFilter.parse(">2024-01-31", TODAY), DateFilter(first=date(2024, 2, 1)))
        self.assertEqual(DateFilter.parse("<2024-01-01", TODAY), DateFilter(last=date(2023, 12, 31)))
        self.assertEqual(
            DateFilter.parse("2024-01-01..2024-01-31", TODAY),
            DateFilter(date(2024, 1, 1), date(2024, 1, 31)),
        )
        self.assertEqual(DateFilter.parse("2024-02-29", TODAY), DateFilter(date(2024, 2, 29), date(2024, 2, 29)))
        for bad in ("", "0d", "3y", ">7d", "2024-13-01", "2024-01-01..", "soon"):
            with self.subTest(text=bad):
                self.assertIsNone(DateFilter.parse(bad, TODAY))

    def test_bounds_are_inclusive(self) -> None:
        week = DateFilter.parse("7d", TODAY)
        self.assertTrue(week.matches(_entry("a", 0, day=date(2024, 3, 8))))
        self.assertTrue(week.matches(_entry("a", 0, day=TODAY)))
        self.assertFalse(week.matches(_entry("a", 0, day=date(2024, 3, 7))))
        self.assertFalse(week.matches(_entry("a", 0)))


class FilterQueryTests(unittest.TestCase):
    def test_terms_are_split_from_name_words(self) -> None:
        query = parse_filter_query("  report  SIZE:>1K date:today draft ", TODAY)
        self.assertEqual(query.name, "report draft")
        self.assertEqual(query.size, SizeFilter(low=1025))
        self.assertEqual(query.modified, DateFilter(TODAY, TODAY))
        self.assertEqual(query.errors, ())
        self.assertEqual(str(query), "report SIZE:>1K date:today draft")

    def test_invalid_terms_are_collected_and_empty_query_is_falsy(self) -> None:
        query = parse_filter_query("size:big date:", TODAY)
        self.assertEqual(query.errors, ("size:big", "date:"))
        self.assertFalse(query)
        self.assertTrue(parse_filter_query("notes", TODAY))

    def test_predicates_compose_and_force_ancestors_visible(self) -> None:
        entries = [
            _entry("logs", 0, is_dir=True, day=TODAY),
            _entry("old.log", 1, size=4096, day=date(2023, 1, 1)),
            _entry("new.log", 1, size=4096, day=TODAY),
            _entry("tiny.log", 1, size=10, day=TODAY),
            _entry("new.txt", 0, size=4096, day=TODAY),
        ]
        query = parse_filter_query("log size:>1K date:7d", TODAY)
        self.assertEqual(filter_view(entries, query), [0, 2])
        self.assertEqual(filter_view(entries, parse_filter_query("size:>1K", TODAY)), [0, 1, 2, 4])
        self.assertEqual(filter_view(entries, parse_filter_query("", TODAY)), [0, 1, 2, 3, 4])


if __name__ == "__main__":
    unittest.main()
