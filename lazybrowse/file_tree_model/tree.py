"""Flat-sequence file tree with incremental expand/collapse.

The hierarchy lives in one pre-order list of ``FileEntry`` rows tagged with
depth. An expanded directory is followed by the contiguous block of its
visible descendants, so every structural edit is a slice splice or delete.
Mutations list the filesystem first and only then touch ``entries``; a
listing failure leaves the tree exactly as it was.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path

from ..errors import IoError, NotADirectory, NotFound
from .filtering import FilterPattern, filter_view
from .fs import list_directory_children
from .sorting import SortField, SortOrder, sort_siblings
from .types import DirectoryChild, FileEntry

logger = logging.getLogger(__name__)

ListChildren = Callable[..., list[DirectoryChild]]


class FileTree:
    """Ordered, depth-tagged view of a directory hierarchy plus a cursor."""

    def __init__(
        self,
        root: Path,
        *,
        show_hidden: bool = False,
        ignore_patterns: Iterable[str] = (),
        sort_field: SortField = SortField.NAME,
        sort_order: SortOrder = SortOrder.ASCENDING,
        status_for_path: Callable[[Path], str | None] | None = None,
        list_children: ListChildren = list_directory_children,
    ) -> None:
        self.root = Path(root)
        self.show_hidden = show_hidden
        self.ignore_patterns = tuple(ignore_patterns)
        self.sort_field = sort_field
        self.sort_order = sort_order
        self.status_for_path = status_for_path
        self._list_children = list_children
        self._filter: FilterPattern | None = None
        self._view: list[int] | None = None
        self.cursor = 0
        self.entries: list[FileEntry] = self._list(self.root, 0)

    # -- basic access -----------------------------------------------------

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> FileEntry:
        return self.entries[index]

    def selected_entry(self) -> FileEntry | None:
        """Return the entry under the cursor, or ``None`` for an empty tree."""
        if not self.entries:
            return None
        return self.entries[self.cursor]

    def index_of(self, path: Path) -> int | None:
        for idx, entry in enumerate(self.entries):
            if entry.path == path:
                return idx
        return None

    def subtree_end(self, index: int) -> int:
        """Return the index one past the descendant block of ``index``."""
        depth = self.entries[index].depth
        end = index + 1
        while end < len(self.entries) and self.entries[end].depth > depth:
            end += 1
        return end

    def parent_index(self, index: int) -> int | None:
        """Return the index of the directory that contains ``index``."""
        depth = self.entries[index].depth
        if depth == 0:
            return None
        for idx in range(index - 1, -1, -1):
            if self.entries[idx].depth == depth - 1:
                return idx
        return None

    def breadcrumb(self) -> list[Path]:
        """Return the root's ancestor chain, outermost first, ending at root."""
        return [*reversed(self.root.parents), self.root]

    # -- listing helpers --------------------------------------------------

    def _list(self, directory: Path, depth: int) -> list[FileEntry]:
        children = self._list_children(
            directory,
            self.show_hidden,
            ignore_patterns=self.ignore_patterns,
            status_for_path=self.status_for_path,
        )
        ordered = sort_siblings(children, self.sort_field, self.sort_order)
        return [FileEntry.from_child(child, depth) for child in ordered]

    def _build_block(
        self,
        directory: Path,
        depth: int,
        expanded: set[Path],
        selected: set[Path],
    ) -> list[FileEntry]:
        """List ``directory`` and re-expand any child whose path is in ``expanded``.

        Only the listing of ``directory`` itself may raise; a nested directory
        that can no longer be listed is kept collapsed.
        """
        block: list[FileEntry] = []
        for entry in self._list(directory, depth):
            if entry.path in selected:
                entry = replace(entry, selected=True)
            block.append(entry)
            if not (entry.is_dir and entry.path in expanded):
                continue
            try:
                nested = self._build_block(entry.path, depth + 1, expanded, selected)
            except IoError as exc:
                logger.info("Dropping expansion of %s: %s", entry.path, exc)
                continue
            block[-1] = replace(entry, expanded=True)
            block.extend(nested)
        return block

    # -- structural edits -------------------------------------------------

    def expand(self, index: int) -> int:
        """Splice the sorted children of directory ``index`` after it.

        Returns the number of inserted rows (0 when already expanded).
        """
        entry = self.entries[index]
        if not entry.is_dir:
            raise NotADirectory(entry.path)
        if entry.expanded:
            return 0
        children = self._list(entry.path, entry.depth + 1)
        self.entries[index] = replace(entry, expanded=True)
        self.entries[index + 1 : index + 1] = children
        if self.cursor > index:
            self.cursor += len(children)
        self._refresh_view()
        return len(children)

    def collapse(self, index: int) -> int:
        """Remove the descendant block of directory ``index``.

        Returns the number of removed rows. A cursor inside the removed block
        moves to ``index``.
        """
        entry = self.entries[index]
        if not entry.is_dir:
            raise NotADirectory(entry.path)
        end = self.subtree_end(index)
        removed = end - index - 1
        self.entries[index] = replace(entry, expanded=False)
        del self.entries[index + 1 : end]
        if index < self.cursor < end:
            self.cursor = index
        elif self.cursor >= end:
            self.cursor -= removed
        self._refresh_view()
        return removed

    def toggle(self, index: int) -> int:
        """Expand a collapsed directory or collapse an expanded one.

        Returns the signed change in row count.
        """
        if self.entries[index].expanded:
            return -self.collapse(index)
        return self.expand(index)

    def sort(self, field: SortField, order: SortOrder) -> None:
        """Re-order every materialized sibling group under a new comparator."""
        self.sort_field = field
        self.sort_order = order
        cursor_path = self._cursor_path()
        self.entries = self._sorted_range(0, len(self.entries))
        self._restore_cursor(cursor_path, fallback=self.cursor)
        self._refresh_view()

    def _sorted_range(self, start: int, end: int) -> list[FileEntry]:
        heads: list[FileEntry] = []
        blocks: dict[Path, tuple[int, int]] = {}
        idx = start
        while idx < end:
            block_end = idx + 1
            while block_end < end and self.entries[block_end].depth > self.entries[idx].depth:
                block_end += 1
            heads.append(self.entries[idx])
            blocks[self.entries[idx].path] = (idx + 1, block_end)
            idx = block_end

        out: list[FileEntry] = []
        for head in sort_siblings(heads, self.sort_field, self.sort_order):
            out.append(head)
            child_start, child_end = blocks[head.path]
            if child_end > child_start:
                out.extend(self._sorted_range(child_start, child_end))
        return out

    def set_hidden(self, show_hidden: bool) -> None:
        """Change hidden-file visibility and reload; restores the flag on failure."""
        if show_hidden == self.show_hidden:
            return
        previous = self.show_hidden
        self.show_hidden = show_hidden
        try:
            self.reload()
        except IoError:
            self.show_hidden = previous
            raise

    def reload(self, subtree: Path | None = None) -> None:
        """Re-list the root (or an expanded ``subtree``) keeping state by path.

        Expansion, selection, and the cursor follow paths rather than indices;
        rows whose path vanished are dropped.
        """
        if subtree is None or Path(subtree) == self.root:
            start, end = 0, len(self.entries)
            directory, depth = self.root, 0
        else:
            index = self.index_of(Path(subtree))
            if index is None:
                raise NotFound(subtree, "not visible in tree")
            entry = self.entries[index]
            if not entry.is_dir:
                raise NotADirectory(entry.path)
            if not entry.expanded:
                return
            start, end = index + 1, self.subtree_end(index)
            directory, depth = entry.path, entry.depth + 1

        old_block = self.entries[start:end]
        expanded = {entry.path for entry in old_block if entry.expanded}
        selected = {entry.path for entry in old_block if entry.selected}
        cursor_path = self._cursor_path()
        block = self._build_block(directory, depth, expanded, selected)

        self.entries[start:end] = block
        self._restore_cursor(cursor_path, fallback=self.cursor)
        self._refresh_view()

    def navigate_to(self, root: Path) -> None:
        """Replace the tree with a fresh listing of ``root``."""
        root = Path(root)
        entries = self._list(root, 0)
        self.root = root
        self.entries = entries
        self.cursor = 0
        self._filter = None
        self._view = None

    def go_parent(self) -> Path | None:
        """Re-root at the parent directory with the old root expanded.

        Returns the previous root, or ``None`` when already at the top.
        """
        old_root = self.root
        parent = old_root.parent
        if parent == old_root:
            return None
        expanded = {old_root, *(entry.path for entry in self.entries if entry.expanded)}
        selected = {entry.path for entry in self.entries if entry.selected}
        cursor_path = self._cursor_path()
        entries = self._build_block(parent, 0, expanded, selected)

        self.root = parent
        self.entries = entries
        self._filter = None
        self._view = None
        if cursor_path is not None and self.index_of(cursor_path) is not None:
            self._restore_cursor(cursor_path, fallback=0)
        else:
            self._restore_cursor(old_root, fallback=0)
        return old_root

    # -- filter view ------------------------------------------------------

    @property
    def filter_pattern(self) -> FilterPattern | None:
        return self._filter

    def filter(self, pattern: FilterPattern | None) -> list[int]:
        """Return the indices visible under ``pattern`` without storing it."""
        return filter_view(self.entries, pattern)

    def set_filter(self, pattern: FilterPattern | None) -> list[int]:
        """Make ``pattern`` the active view and keep the cursor inside it."""
        self._filter = pattern if pattern else None
        self._refresh_view()
        return self.visible_indices()

    def visible_indices(self) -> list[int]:
        if self._view is None:
            return list(range(len(self.entries)))
        return self._view

    def _refresh_view(self) -> None:
        """Recompute the filter view and snap a hidden cursor to the next visible row."""
        self._view = filter_view(self.entries, self._filter) if self._filter else None
        view = self._view
        if view and self.cursor not in view:
            pos = bisect.bisect_left(view, self.cursor)
            self.cursor = view[min(pos, len(view) - 1)]

    # -- cursor -----------------------------------------------------------

    def _cursor_path(self) -> Path | None:
        entry = self.selected_entry()
        return entry.path if entry is not None else None

    def _restore_cursor(self, path: Path | None, fallback: int) -> None:
        if not self.entries:
            self.cursor = 0
            return
        candidates = [] if path is None else [path, *path.parents]
        for candidate in candidates:
            index = self.index_of(candidate)
            if index is not None:
                self.cursor = index
                return
        self.cursor = max(0, min(fallback, len(self.entries) - 1))

    def set_cursor(self, index: int) -> None:
        if not self.entries:
            self.cursor = 0
            return
        self.cursor = max(0, min(index, len(self.entries) - 1))

    def select_path(self, path: Path) -> bool:
        """Move the cursor onto ``path`` when it is materialized."""
        index = self.index_of(Path(path))
        if index is None:
            return False
        self.cursor = index
        return True

    def move_cursor(self, delta: int) -> bool:
        """Move ``delta`` rows through the visible view; returns whether it moved."""
        view = self.visible_indices()
        if not view:
            return False
        pos = bisect.bisect_left(view, self.cursor)
        if (pos >= len(view) or view[pos] != self.cursor) and delta > 0:
            # a hidden cursor sits between view[pos - 1] and view[pos]
            pos -= 1
        target = view[max(0, min(len(view) - 1, pos + delta))]
        moved = target != self.cursor
        self.cursor = target
        return moved

    def cursor_to_top(self) -> None:
        view = self.visible_indices()
        self.cursor = view[0] if view else 0

    def cursor_to_bottom(self) -> None:
        view = self.visible_indices()
        self.cursor = view[-1] if view else 0

    # -- selection --------------------------------------------------------

    def toggle_selected(self, index: int) -> bool:
        entry = self.entries[index]
        self.entries[index] = replace(entry, selected=not entry.selected)
        return not entry.selected

    def clear_selection(self) -> None:
        for idx, entry in enumerate(self.entries):
            if entry.selected:
                self.entries[idx] = replace(entry, selected=False)

    @property
    def selected_indices(self) -> set[int]:
        return {idx for idx, entry in enumerate(self.entries) if entry.selected}

    def selected_paths(self) -> list[Path]:
        """Return multi-selected paths, or the cursor path when none are marked."""
        marked = [entry.path for entry in self.entries if entry.selected]
        if marked:
            return marked
        cursor_path = self._cursor_path()
        return [cursor_path] if cursor_path is not None else []


__all__ = [
    "FileTree",
]
