"""Browser orchestrator: applies dispatched actions to tree, preview and disk.

``BrowserApp`` owns every piece of mutable session state. It is driven by
``handle_key`` (input) and ``tick`` (time) from the main loop and never
touches the terminal itself; external launches are queued as
``ExternalRequest`` values for the loop to run.
"""

from __future__ import annotations

import bisect
import logging
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..errors import BrowserError, IoError
from ..file_tree_model import (
    ARCHIVE_FORMATS,
    FileEntry,
    FileTree,
    FilterQuery,
    GitStatusProvider,
    change_mode,
    compress_paths,
    copy_path,
    create_directory,
    create_file,
    delete_path,
    move_path,
    parse_filter_query,
    parse_octal_mode,
    rename_path,
)
from ..input import Action, ActionKind, BindingTable, Dispatcher, Mode, PromptKind
from ..preview import DefaultPreviewProducer, PreviewEngine, PreviewMode
from ..preview.engine import PreviewRunner
from ..preview.worker import PreviewProducer
from ..render import scroll_window
from .config import (
    TREE_RATIO_MAX,
    TREE_RATIO_MIN,
    TREE_RATIO_STEP,
    BrowserConfig,
    SavedSearch,
    load_browser_config,
    save_favorites,
    save_saved_searches,
    save_show_hidden,
    save_tree_ratio,
)
from .external import ExternalKind, ExternalRequest

logger = logging.getLogger(__name__)

STATUS_MESSAGE_SECONDS = 3.0
PREVIEW_SCROLL_STEP = 3
# Tree rows assumed until the loop reports the terminal size.
DEFAULT_TREE_ROWS = 22


@dataclass(frozen=True)
class Clipboard:
    paths: tuple[Path, ...]
    cut: bool


class BrowserApp:
    def __init__(
        self,
        tree: FileTree,
        engine: PreviewEngine,
        dispatcher: Dispatcher,
        config: BrowserConfig,
        *,
        status_provider: GitStatusProvider | None = None,
        producer: PreviewProducer | None = None,
        config_loader: Callable[[], BrowserConfig] = load_browser_config,
        persist: bool = True,
        clock: Callable[[], float] = time.monotonic,
        home: Path | None = None,
    ) -> None:
        self.tree = tree
        self.engine = engine
        self.dispatcher = dispatcher
        self.config = config
        self.status_provider = status_provider
        self.producer = producer
        self._config_loader = config_loader
        self.persist = persist
        self._clock = clock
        self.home = home if home is not None else Path.home()

        self.status_message: str | None = None
        self._status_expires_at = 0.0
        self.clipboard: Clipboard | None = None
        self.pending_delete: tuple[Path, ...] = ()
        self.favorites: list[Path] = list(config.favorites)
        self.favorites_cursor = 0
        self.open_with_cursor = 0
        self.saved_searches: list[SavedSearch] = list(config.saved_searches)
        self.saved_searches_cursor = 0
        self.compress_cursor = 0
        self.preview_scroll = 0
        self.tree_offset = 0
        self.tree_ratio = config.tree_ratio
        self.tree_rows = DEFAULT_TREE_ROWS
        self.page_rows = DEFAULT_TREE_ROWS - 1
        self.should_quit = False
        self.dirty = True
        self.pending_external: list[ExternalRequest] = []
        self._synced_path: Path | None = None

        self._handlers: dict[ActionKind, Callable[[Action], None]] = {
            ActionKind.QUIT: self._quit,
            ActionKind.MOVE_UP: lambda _a: self.tree.move_cursor(-1),
            ActionKind.MOVE_DOWN: lambda _a: self.tree.move_cursor(1),
            ActionKind.PAGE_UP: lambda _a: self.tree.move_cursor(-self.page_rows),
            ActionKind.PAGE_DOWN: lambda _a: self.tree.move_cursor(self.page_rows),
            ActionKind.MOVE_LEFT: self._move_left,
            ActionKind.MOVE_RIGHT: self._move_right,
            ActionKind.TOGGLE_EXPAND: self._toggle_expand,
            ActionKind.GO_TO_TOP: lambda _a: self.tree.cursor_to_top(),
            ActionKind.GO_TO_BOTTOM: lambda _a: self.tree.cursor_to_bottom(),
            ActionKind.GO_HOME: lambda _a: self._reroot(self.home),
            ActionKind.GO_PARENT: self._go_parent,
            ActionKind.GO_TO_BREADCRUMB: self._go_to_breadcrumb,
            ActionKind.ENTER_DIR: self._enter_dir,
            ActionKind.TOGGLE_HIDDEN: self._toggle_hidden,
            ActionKind.CYCLE_SORT: self._cycle_sort,
            ActionKind.REVERSE_SORT: self._reverse_sort,
            ActionKind.RELOAD: self._reload,
            ActionKind.TOGGLE_SELECTION: self._toggle_selection,
            ActionKind.RESET_VIEW: self._reset_view,
            ActionKind.FILTER_CHANGED: lambda a: self._apply_filter(a.text),
            ActionKind.SEARCH_START: self._search_start,
            ActionKind.SEARCH_CANCEL: lambda _a: self.tree.set_filter(None),
            ActionKind.SEARCH_CONFIRM: self._search_confirm,
            ActionKind.SEARCH_SAVE: self._search_save,
            ActionKind.SAVED_SEARCHES_OPEN: self._saved_searches_open,
            ActionKind.SAVED_SEARCHES_UP: lambda _a: self._move_saved_searches(-1),
            ActionKind.SAVED_SEARCHES_DOWN: lambda _a: self._move_saved_searches(1),
            ActionKind.SAVED_SEARCHES_REMOVE: self._saved_searches_remove,
            ActionKind.SAVED_SEARCH_SELECT: self._saved_search_select,
            ActionKind.SHOW_PROPERTIES: self._show_properties,
            ActionKind.CHMOD_START: self._chmod_start,
            ActionKind.FAVORITES_OPEN: self._favorites_open,
            ActionKind.FAVORITES_UP: lambda _a: self._move_favorites(-1),
            ActionKind.FAVORITES_DOWN: lambda _a: self._move_favorites(1),
            ActionKind.FAVORITES_REMOVE: self._favorites_remove,
            ActionKind.FAVORITES_ADD_CURRENT: lambda _a: self._add_favorite(self.tree.root),
            ActionKind.FAVORITE_ADD: self._favorite_add,
            ActionKind.FAVORITES_SELECT: self._favorites_select,
            ActionKind.OPEN_WITH_START: self._open_with_start,
            ActionKind.OPEN_WITH_UP: lambda _a: self._move_open_with(-1),
            ActionKind.OPEN_WITH_DOWN: lambda _a: self._move_open_with(1),
            ActionKind.OPEN_WITH_SELECT: self._open_with_select,
            ActionKind.COMPRESS_START: self._compress_start,
            ActionKind.COMPRESS_UP: lambda _a: self._move_compress(-1),
            ActionKind.COMPRESS_DOWN: lambda _a: self._move_compress(1),
            ActionKind.RENAME_START: self._rename_start,
            ActionKind.NEW_FILE_START: lambda _a: self.dispatcher.enter(Mode.PROMPT, PromptKind.NEW_FILE),
            ActionKind.NEW_DIR_START: lambda _a: self.dispatcher.enter(Mode.PROMPT, PromptKind.NEW_DIR),
            ActionKind.DELETE_FILE: self._delete_start,
            ActionKind.DELETE_CANCEL: self._delete_cancel,
            ActionKind.RELOAD_CONFIG: self._reload_config,
            ActionKind.SCROLL_PREVIEW_UP: lambda _a: self._scroll_preview(-PREVIEW_SCROLL_STEP),
            ActionKind.SCROLL_PREVIEW_DOWN: lambda _a: self._scroll_preview(PREVIEW_SCROLL_STEP),
            ActionKind.TOGGLE_RAW: lambda _a: self._toggle_preview_mode(PreviewMode.RAW),
            ActionKind.TOGGLE_HEX: lambda _a: self._toggle_preview_mode(PreviewMode.HEX),
            ActionKind.SHRINK_TREE: lambda _a: self._resize_tree(-TREE_RATIO_STEP),
            ActionKind.GROW_TREE: lambda _a: self._resize_tree(TREE_RATIO_STEP),
            ActionKind.OPEN_EDITOR: self._open_editor,
            ActionKind.OPEN_SHELL: self._open_shell,
            ActionKind.YANK_PATH: self._yank_path,
            ActionKind.COPY_FILE: lambda _a: self._fill_clipboard(cut=False),
            ActionKind.CUT_FILE: lambda _a: self._fill_clipboard(cut=True),
            ActionKind.PASTE: self._paste,
            ActionKind.DELETE_CONFIRM: self._delete_confirm,
            ActionKind.PROMPT_CONFIRM: self._prompt_confirm,
            ActionKind.CHMOD_APPLY: self._chmod_apply,
            ActionKind.COMPRESS_SELECT: self._compress_select,
        }
        self.sync_preview()

    @classmethod
    def create(
        cls,
        root: Path,
        config: BrowserConfig,
        *,
        producer: PreviewProducer | None = None,
        runner: PreviewRunner | None = None,
        persist: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> BrowserApp:
        """Wire a tree, engine and dispatcher for ``root`` from ``config``."""
        status_provider = GitStatusProvider(root, enabled=config.git_status)
        tree = FileTree(
            root,
            show_hidden=config.show_hidden,
            ignore_patterns=config.ignore_patterns,
            status_for_path=status_provider,
        )
        if producer is None and runner is None:
            producer = DefaultPreviewProducer(style=config.syntax_style, show_hidden=config.show_hidden)
        engine = PreviewEngine(
            producer,
            runner=runner,
            capacity=config.cache_capacity,
            debounce_seconds=config.debounce_ms / 1000.0,
            warm_cache_on_stale=config.warm_cache_on_stale,
            clock=clock,
        )
        dispatcher = Dispatcher(BindingTable.from_config(config.keys))
        return cls(
            tree,
            engine,
            dispatcher,
            config,
            status_provider=status_provider,
            producer=producer,
            persist=persist,
            clock=clock,
        )

    # -- driving ----------------------------------------------------------

    def handle_key(self, key: str) -> Action:
        action = self.dispatcher.handle_key(key)
        self.apply(action)
        return action

    def apply(self, action: Action) -> None:
        """Apply one action; filesystem and tree failures become status messages."""
        handler = self._handlers.get(action.kind)
        if handler is not None:
            try:
                handler(action)
            except BrowserError as exc:
                logger.warning("%s failed: %s", action.kind.value, exc)
                self.set_status(str(exc))
        if not action.is_noop:
            self.dirty = True
        self.sync_preview()
        self.follow_cursor()

    def set_viewport(self, height: int) -> None:
        """Size the tree window for a terminal of ``height`` rows."""
        rows = max(1, max(3, height) - 2)
        if rows != self.tree_rows:
            self.tree_rows = rows
            self.page_rows = max(1, rows - 1)
            self.dirty = True
        self.follow_cursor()

    def follow_cursor(self) -> None:
        """Scroll the tree window so the cursor row stays on screen."""
        view = self.tree.visible_indices()
        pos = bisect.bisect_left(view, self.tree.cursor)
        self.tree_offset = scroll_window(pos, self.tree_offset, self.tree_rows, len(view))

    def tick(self, now: float | None = None) -> bool:
        """Advance the preview engine and expire the status message."""
        current = self._clock() if now is None else now
        changed = self.engine.tick(current)
        if self.status_message is not None and current >= self._status_expires_at:
            self.status_message = None
            changed = True
        if changed:
            self.dirty = True
        return changed

    def sync_preview(self, force: bool = False) -> None:
        """Point the preview engine at the cursor path when it changed."""
        path = self.current_path()
        if not force and path == self._synced_path:
            return
        self._synced_path = path
        if self.engine.select(path):
            self.preview_scroll = 0

    def current_path(self) -> Path | None:
        entry = self.current_entry()
        return entry.path if entry is not None else None

    def current_entry(self) -> FileEntry | None:
        entry = self.tree.selected_entry()
        if entry is None:
            return None
        if self.tree.filter_pattern is not None and self.tree.cursor not in self.tree.visible_indices():
            return None
        return entry

    def set_status(self, message: str) -> None:
        self.status_message = message
        self._status_expires_at = self._clock() + STATUS_MESSAGE_SECONDS
        self.dirty = True

    def after_external(self, request: ExternalRequest, error: str | None) -> None:
        """Refresh state after the loop ran ``request`` in the foreground."""
        if error:
            self.set_status(error)
        if request.kind is ExternalKind.CLIPBOARD:
            return
        try:
            self._refresh_tree()
        except IoError as exc:
            self.set_status(str(exc))
        if request.path is not None:
            self.engine.invalidate(request.path)
        self.sync_preview()
        self.follow_cursor()
        self.dirty = True

    # -- tree actions -----------------------------------------------------

    def _quit(self, _action: Action) -> None:
        self.should_quit = True

    def _move_left(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is None:
            return
        if entry.is_dir and entry.expanded:
            self.tree.collapse(self.tree.cursor)
            return
        parent = self.tree.parent_index(self.tree.cursor)
        if parent is not None:
            self.tree.set_cursor(parent)
        else:
            self._go_parent(_action)

    def _move_right(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is None or not entry.is_dir:
            return
        if not entry.expanded:
            self.tree.expand(self.tree.cursor)
        elif self.tree.subtree_end(self.tree.cursor) > self.tree.cursor + 1:
            self.tree.move_cursor(1)

    def _toggle_expand(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is not None and entry.is_dir:
            self.tree.toggle(self.tree.cursor)

    def _reroot(self, path: Path) -> None:
        if self.status_provider is not None:
            self.status_provider.refresh(path)
        try:
            self.tree.navigate_to(path)
        except IoError:
            if self.status_provider is not None:
                self.status_provider.refresh(self.tree.root)
            raise
        self.preview_scroll = 0

    def _go_parent(self, _action: Action) -> None:
        parent = self.tree.root.parent
        if parent == self.tree.root:
            self.set_status("Already at the filesystem root")
            return
        if self.status_provider is not None:
            self.status_provider.refresh(parent)
        try:
            self.tree.go_parent()
        except IoError:
            if self.status_provider is not None:
                self.status_provider.refresh(self.tree.root)
            raise
        self.preview_scroll = 0

    def _go_to_breadcrumb(self, action: Action) -> None:
        crumbs = self.tree.breadcrumb()
        if action.index is None or not 1 <= action.index <= len(crumbs):
            self.set_status(f"No breadcrumb {action.index}")
            return
        self._reroot(crumbs[action.index - 1])

    def _enter_dir(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is not None and entry.is_dir:
            self._reroot(entry.path)

    def _toggle_hidden(self, _action: Action) -> None:
        show_hidden = not self.tree.show_hidden
        self.tree.set_hidden(show_hidden)
        if isinstance(self.producer, DefaultPreviewProducer):
            self.producer.show_hidden = show_hidden
            self.engine.invalidate()
        if self.persist:
            save_show_hidden(show_hidden)
        self.set_status("Hidden files shown" if show_hidden else "Hidden files hidden")

    def _cycle_sort(self, _action: Action) -> None:
        self.tree.sort(self.tree.sort_field.next(), self.tree.sort_order)
        self._sort_status()

    def _reverse_sort(self, _action: Action) -> None:
        self.tree.sort(self.tree.sort_field, self.tree.sort_order.reversed())
        self._sort_status()

    def _sort_status(self) -> None:
        self.set_status(f"Sort: {self.tree.sort_field.value} {self.tree.sort_order.value}")

    def _refresh_tree(self) -> None:
        if self.status_provider is not None:
            self.status_provider.refresh(self.tree.root)
        self.tree.reload()

    def _reload(self, _action: Action) -> None:
        self._refresh_tree()
        self.engine.invalidate()
        self.set_status("Reloaded")

    def _toggle_selection(self, _action: Action) -> None:
        if self.tree.selected_entry() is None:
            return
        self.tree.toggle_selected(self.tree.cursor)
        self.tree.move_cursor(1)

    def _reset_view(self, _action: Action) -> None:
        if self.tree.filter_pattern is not None:
            self.tree.set_filter(None)
        else:
            self.tree.clear_selection()

    def _apply_filter(self, text: str) -> FilterQuery:
        query = parse_filter_query(text)
        self.tree.set_filter(query or None)
        return query

    def _filter_status(self, query: FilterQuery) -> None:
        if query.errors:
            self.set_status(f"Invalid filter term: {', '.join(query.errors)}")
            return
        if not query:
            return
        shown = len(self.tree.visible_indices())
        self.set_status(f"Filter {query.text!r}: {shown} shown")

    def _search_start(self, _action: Action) -> None:
        # edit the active filter in place; cancel clears it
        active = self.tree.filter_pattern
        self.dispatcher.enter(Mode.SEARCH, initial=str(active) if active is not None else "")

    def _search_confirm(self, action: Action) -> None:
        self._filter_status(self._apply_filter(action.text))

    def _search_save(self, action: Action) -> None:
        query = self._apply_filter(action.text)
        if query.errors:
            self._filter_status(query)
            return
        if not query:
            self.set_status("Nothing to save")
            return
        search = SavedSearch(name=query.text, query=query.text)
        for idx, existing in enumerate(self.saved_searches):
            if existing.name == search.name:
                self.saved_searches[idx] = search
                break
        else:
            self.saved_searches.append(search)
        self._save_saved_searches()
        self.set_status(f"Saved search {search.name!r}")

    def _saved_searches_open(self, _action: Action) -> None:
        self.saved_searches_cursor = min(self.saved_searches_cursor, max(0, len(self.saved_searches) - 1))
        self.dispatcher.enter(Mode.SAVED_SEARCHES)

    def _move_saved_searches(self, delta: int) -> None:
        if self.saved_searches:
            limit = len(self.saved_searches) - 1
            self.saved_searches_cursor = max(0, min(limit, self.saved_searches_cursor + delta))

    def _saved_searches_remove(self, _action: Action) -> None:
        if not self.saved_searches:
            return
        removed = self.saved_searches.pop(self.saved_searches_cursor)
        self.saved_searches_cursor = min(self.saved_searches_cursor, max(0, len(self.saved_searches) - 1))
        self._save_saved_searches()
        self.set_status(f"Removed saved search {removed.name!r}")

    def _save_saved_searches(self) -> None:
        if self.persist:
            save_saved_searches(self.saved_searches)

    def _saved_search_select(self, action: Action) -> None:
        idx = action.index - 1 if action.index is not None else self.saved_searches_cursor
        if not 0 <= idx < len(self.saved_searches):
            if action.index is not None:
                self.set_status(f"No saved search {action.index}")
            return
        self.saved_searches_cursor = idx
        self._filter_status(self._apply_filter(self.saved_searches[idx].query))

    # -- overlays and prompts ---------------------------------------------

    def _show_properties(self, _action: Action) -> None:
        if self.tree.selected_entry() is not None:
            self.dispatcher.enter(Mode.PROPERTIES)

    def _chmod_start(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is None:
            return
        initial = f"{entry.mode & 0o7777:o}" if entry.mode is not None else ""
        self.dispatcher.enter(Mode.CHMOD, initial=initial)

    def _rename_start(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is not None:
            self.dispatcher.enter(Mode.PROMPT, PromptKind.RENAME, initial=entry.name)

    def _delete_start(self, _action: Action) -> None:
        paths = tuple(self.tree.selected_paths())
        if not paths:
            return
        self.pending_delete = paths
        self.dispatcher.enter(Mode.DELETE_CONFIRM)

    def _delete_cancel(self, _action: Action) -> None:
        self.pending_delete = ()

    def _favorites_open(self, _action: Action) -> None:
        self.favorites_cursor = min(self.favorites_cursor, max(0, len(self.favorites) - 1))
        self.dispatcher.enter(Mode.FAVORITES)

    def _move_favorites(self, delta: int) -> None:
        if self.favorites:
            self.favorites_cursor = max(0, min(len(self.favorites) - 1, self.favorites_cursor + delta))

    def _add_favorite(self, path: Path) -> None:
        if path in self.favorites:
            self.set_status(f"Already a favorite: {path}")
            return
        self.favorites.append(path)
        self._save_favorites()
        self.set_status(f"Added favorite: {path}")

    def _favorite_add(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        self._add_favorite(entry.path if entry is not None else self.tree.root)

    def _favorites_remove(self, _action: Action) -> None:
        if not self.favorites:
            return
        removed = self.favorites.pop(self.favorites_cursor)
        self.favorites_cursor = min(self.favorites_cursor, max(0, len(self.favorites) - 1))
        self._save_favorites()
        self.set_status(f"Removed favorite: {removed}")

    def _save_favorites(self) -> None:
        if self.persist:
            save_favorites(self.favorites)

    def _favorites_select(self, _action: Action) -> None:
        if not self.favorites:
            return
        target = self.favorites[self.favorites_cursor]
        if target.is_dir():
            self._reroot(target)
            return
        self._reroot(target.parent)
        self.tree.select_path(target)

    def _open_with_start(self, _action: Action) -> None:
        if self.tree.selected_entry() is None or not self.config.open_with:
            return
        self.open_with_cursor = min(self.open_with_cursor, len(self.config.open_with) - 1)
        self.dispatcher.enter(Mode.OPEN_WITH)

    def _move_open_with(self, delta: int) -> None:
        commands = self.config.open_with
        if commands:
            self.open_with_cursor = max(0, min(len(commands) - 1, self.open_with_cursor + delta))

    def _compress_start(self, _action: Action) -> None:
        if self.tree.selected_paths():
            self.dispatcher.enter(Mode.COMPRESS)

    def _move_compress(self, delta: int) -> None:
        self.compress_cursor = max(0, min(len(ARCHIVE_FORMATS) - 1, self.compress_cursor + delta))

    def _reload_config(self, _action: Action) -> None:
        config = self._config_loader()
        self.config = config
        self.dispatcher.bindings = BindingTable.from_config(config.keys)
        self.open_with_cursor = 0
        self.set_status("Configuration reloaded")

    # -- preview ----------------------------------------------------------

    def _scroll_preview(self, delta: int) -> None:
        content = self.engine.content
        limit = max(0, len(content.lines) - 1) if content is not None else 0
        self.preview_scroll = max(0, min(limit, self.preview_scroll + delta))

    def _toggle_preview_mode(self, mode: PreviewMode) -> None:
        target = PreviewMode.DEFAULT if self.engine.mode is mode else mode
        self.engine.set_mode(target)
        self.preview_scroll = 0

    def _resize_tree(self, delta: int) -> None:
        ratio = max(TREE_RATIO_MIN, min(TREE_RATIO_MAX, self.tree_ratio + delta))
        if ratio == self.tree_ratio:
            return
        self.tree_ratio = ratio
        if self.persist:
            save_tree_ratio(ratio)

    # -- external processes -----------------------------------------------

    def _open_editor(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is not None:
            self.pending_external.append(ExternalRequest(ExternalKind.EDITOR, path=entry.path))

    def _open_shell(self, _action: Action) -> None:
        self.pending_external.append(ExternalRequest(ExternalKind.SHELL, path=self._target_directory()))

    def _open_with_select(self, _action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is None or not self.config.open_with:
            return
        command = self.config.open_with[self.open_with_cursor]
        self.pending_external.append(ExternalRequest(ExternalKind.COMMAND, path=entry.path, command=command.command))

    def _yank_path(self, _action: Action) -> None:
        paths = self.tree.selected_paths()
        if not paths:
            return
        text = "\n".join(str(path) for path in paths)
        self.pending_external.append(ExternalRequest(ExternalKind.CLIPBOARD, text=text))
        self.set_status(f"Copied {len(paths)} path(s)" if len(paths) > 1 else f"Copied {paths[0]}")

    # -- filesystem -------------------------------------------------------

    def _target_directory(self) -> Path:
        entry = self.tree.selected_entry()
        if entry is None:
            return self.tree.root
        return entry.path if entry.is_dir else entry.path.parent

    def _after_mutation(self, touched: list[Path]) -> None:
        self._refresh_tree()
        for path in touched:
            self.engine.invalidate(path)
            self.engine.invalidate(path.parent)

    def _fill_clipboard(self, *, cut: bool) -> None:
        paths = tuple(self.tree.selected_paths())
        if not paths:
            return
        self.clipboard = Clipboard(paths=paths, cut=cut)
        self.tree.clear_selection()
        verb = "Cut" if cut else "Copied"
        self.set_status(f"{verb} {len(paths)} item(s)")

    def _paste(self, _action: Action) -> None:
        if self.clipboard is None:
            self.set_status("Clipboard is empty")
            return
        dest = self._target_directory()
        touched: list[Path] = [dest]
        clipboard = self.clipboard
        try:
            for source in clipboard.paths:
                if clipboard.cut:
                    touched.append(source)
                    touched.append(move_path(source, dest))
                else:
                    touched.append(copy_path(source, dest))
        finally:
            if clipboard.cut:
                self.clipboard = None
            self._after_mutation(touched)
        self.set_status(f"Pasted {len(clipboard.paths)} item(s) into {dest}")

    def _delete_confirm(self, _action: Action) -> None:
        paths, self.pending_delete = self.pending_delete, ()
        deleted: list[Path] = []
        try:
            for path in paths:
                delete_path(path)
                deleted.append(path)
        finally:
            self.tree.clear_selection()
            self._after_mutation(deleted)
        self.set_status(f"Deleted {len(deleted)} item(s)")

    def _prompt_confirm(self, action: Action) -> None:
        if action.prompt is PromptKind.RENAME:
            entry = self.tree.selected_entry()
            if entry is None:
                return
            target = rename_path(entry.path, action.text)
            self._after_mutation([entry.path, target])
            self.tree.select_path(target)
            self.set_status(f"Renamed to {target.name}")
            return

        parent = self._target_directory()
        if action.prompt is PromptKind.NEW_DIR:
            target = create_directory(parent, action.text)
        else:
            target = create_file(parent, action.text)
        index = self.tree.index_of(parent)
        if index is not None and not self.tree[index].expanded:
            self.tree.expand(index)
        self._after_mutation([target])
        self.tree.select_path(target)
        self.set_status(f"Created {target.name}")

    def _chmod_apply(self, action: Action) -> None:
        entry = self.tree.selected_entry()
        if entry is None:
            return
        try:
            mode = parse_octal_mode(action.text)
        except ValueError as exc:
            self.set_status(str(exc))
            return
        change_mode(entry.path, mode)
        self._after_mutation([entry.path])
        self.set_status(f"Mode of {entry.name} set to {mode:o}")

    def _compress_select(self, action: Action) -> None:
        idx = action.index - 1 if action.index is not None else self.compress_cursor
        if not 0 <= idx < len(ARCHIVE_FORMATS):
            return
        self.compress_cursor = idx
        sources = self.tree.selected_paths()
        if not sources:
            return
        target = compress_paths(sources, sources[0].parent, ARCHIVE_FORMATS[idx])
        self.tree.clear_selection()
        self._after_mutation([target])
        self.tree.select_path(target)
        self.set_status(f"Compressed {len(sources)} item(s) into {target.name}")


def run_browser(root: Path, config: BrowserConfig) -> None:
    """Build the session for ``root`` and run the interactive loop."""
    from .loop import run_main_loop
    from .terminal import TerminalController

    stdin_fd = sys.stdin.fileno()
    app = BrowserApp.create(root, config)
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    logger.info("browsing %s", root)
    run_main_loop(app, terminal, stdin_fd, tick_seconds=config.tick_ms / 1000.0)


__all__ = [
    "STATUS_MESSAGE_SECONDS",
    "Clipboard",
    "BrowserApp",
    "run_browser",
]
