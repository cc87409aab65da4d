"""Symbolic actions produced by the dispatcher and applied by the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .modes import PromptKind


class ActionCategory(Enum):
    """The single kind of effect the app performs for an action."""

    TREE = "tree"
    MODE = "mode"
    PREVIEW = "preview"
    SUSPEND = "suspend"
    FILESYSTEM = "filesystem"
    NONE = "none"


class ActionKind(Enum):
    # tree
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOGGLE_EXPAND = "toggle_expand"
    GO_TO_TOP = "go_to_top"
    GO_TO_BOTTOM = "go_to_bottom"
    GO_HOME = "go_home"
    GO_PARENT = "go_parent"
    GO_TO_BREADCRUMB = "go_to_breadcrumb"
    ENTER_DIR = "enter_dir"
    TOGGLE_HIDDEN = "toggle_hidden"
    CYCLE_SORT = "cycle_sort"
    REVERSE_SORT = "reverse_sort"
    RELOAD = "reload"
    TOGGLE_SELECTION = "toggle_selection"
    RESET_VIEW = "reset_view"
    FILTER_CHANGED = "filter_changed"
    SEARCH_CANCEL = "search_cancel"
    FAVORITES_SELECT = "favorites_select"
    SAVED_SEARCH_SELECT = "saved_search_select"

    # mode
    G_PRESS = "g_press"
    SEARCH_START = "search_start"
    SEARCH_CONFIRM = "search_confirm"
    TOGGLE_HELP = "toggle_help"
    SHOW_PROPERTIES = "show_properties"
    CHMOD_START = "chmod_start"
    FAVORITES_OPEN = "favorites_open"
    FAVORITES_UP = "favorites_up"
    FAVORITES_DOWN = "favorites_down"
    FAVORITES_REMOVE = "favorites_remove"
    FAVORITES_ADD_CURRENT = "favorites_add_current"
    FAVORITE_ADD = "favorite_add"
    SEARCH_SAVE = "search_save"
    SAVED_SEARCHES_OPEN = "saved_searches_open"
    SAVED_SEARCHES_UP = "saved_searches_up"
    SAVED_SEARCHES_DOWN = "saved_searches_down"
    SAVED_SEARCHES_REMOVE = "saved_searches_remove"
    COMPRESS_START = "compress_start"
    COMPRESS_UP = "compress_up"
    COMPRESS_DOWN = "compress_down"
    OPEN_WITH_START = "open_with_start"
    OPEN_WITH_UP = "open_with_up"
    OPEN_WITH_DOWN = "open_with_down"
    RENAME_START = "rename_start"
    NEW_FILE_START = "new_file_start"
    NEW_DIR_START = "new_dir_start"
    DELETE_FILE = "delete_file"
    OVERLAY_CLOSE = "overlay_close"
    RELOAD_CONFIG = "reload_config"
    SEARCH_INPUT = "search_input"
    SEARCH_BACKSPACE = "search_backspace"
    PROMPT_INPUT = "prompt_input"
    PROMPT_BACKSPACE = "prompt_backspace"
    PROMPT_DELETE = "prompt_delete"
    PROMPT_LEFT = "prompt_left"
    PROMPT_RIGHT = "prompt_right"
    PROMPT_HOME = "prompt_home"
    PROMPT_END = "prompt_end"
    PROMPT_CANCEL = "prompt_cancel"
    DELETE_CANCEL = "delete_cancel"

    # preview
    SCROLL_PREVIEW_UP = "scroll_preview_up"
    SCROLL_PREVIEW_DOWN = "scroll_preview_down"
    TOGGLE_RAW = "toggle_raw"
    TOGGLE_HEX = "toggle_hex"
    SHRINK_TREE = "shrink_tree"
    GROW_TREE = "grow_tree"

    # suspend / external
    OPEN_EDITOR = "open_editor"
    OPEN_SHELL = "open_shell"
    OPEN_WITH_SELECT = "open_with_select"
    YANK_PATH = "yank_path"

    # filesystem
    COPY_FILE = "copy_file"
    CUT_FILE = "cut_file"
    PASTE = "paste"
    DELETE_CONFIRM = "delete_confirm"
    PROMPT_CONFIRM = "prompt_confirm"
    CHMOD_APPLY = "chmod_apply"
    COMPRESS_SELECT = "compress_select"

    QUIT = "quit"
    NONE = "none"

    @classmethod
    def from_name(cls, name: str) -> ActionKind | None:
        """Resolve a binding-source action name.

        Text-input, confirmation, and filter-update kinds are produced by the
        dispatcher itself and cannot be bound.
        """
        try:
            kind = cls(name)
        except ValueError:
            return None
        if kind in NON_BINDABLE:
            return None
        return kind

    @property
    def category(self) -> ActionCategory:
        return _CATEGORIES.get(self, ActionCategory.NONE)


NON_BINDABLE = frozenset(
    {
        ActionKind.FILTER_CHANGED,
        ActionKind.SEARCH_INPUT,
        ActionKind.SEARCH_BACKSPACE,
        ActionKind.SEARCH_CONFIRM,
        ActionKind.SEARCH_CANCEL,
        ActionKind.SEARCH_SAVE,
        ActionKind.PROMPT_INPUT,
        ActionKind.PROMPT_BACKSPACE,
        ActionKind.PROMPT_DELETE,
        ActionKind.PROMPT_LEFT,
        ActionKind.PROMPT_RIGHT,
        ActionKind.PROMPT_HOME,
        ActionKind.PROMPT_END,
        ActionKind.PROMPT_CONFIRM,
        ActionKind.PROMPT_CANCEL,
        ActionKind.DELETE_CONFIRM,
        ActionKind.DELETE_CANCEL,
        ActionKind.CHMOD_APPLY,
    }
)

_TREE = {
    ActionKind.MOVE_UP,
    ActionKind.MOVE_DOWN,
    ActionKind.MOVE_LEFT,
    ActionKind.MOVE_RIGHT,
    ActionKind.PAGE_UP,
    ActionKind.PAGE_DOWN,
    ActionKind.TOGGLE_EXPAND,
    ActionKind.GO_TO_TOP,
    ActionKind.GO_TO_BOTTOM,
    ActionKind.GO_HOME,
    ActionKind.GO_PARENT,
    ActionKind.GO_TO_BREADCRUMB,
    ActionKind.ENTER_DIR,
    ActionKind.TOGGLE_HIDDEN,
    ActionKind.CYCLE_SORT,
    ActionKind.REVERSE_SORT,
    ActionKind.RELOAD,
    ActionKind.TOGGLE_SELECTION,
    ActionKind.RESET_VIEW,
    ActionKind.FILTER_CHANGED,
    ActionKind.SEARCH_CANCEL,
    ActionKind.FAVORITES_SELECT,
    ActionKind.SAVED_SEARCH_SELECT,
}
_PREVIEW = {
    ActionKind.SCROLL_PREVIEW_UP,
    ActionKind.SCROLL_PREVIEW_DOWN,
    ActionKind.TOGGLE_RAW,
    ActionKind.TOGGLE_HEX,
    ActionKind.SHRINK_TREE,
    ActionKind.GROW_TREE,
}
_SUSPEND = {
    ActionKind.OPEN_EDITOR,
    ActionKind.OPEN_SHELL,
    ActionKind.OPEN_WITH_SELECT,
    ActionKind.YANK_PATH,
}
_FILESYSTEM = {
    ActionKind.COPY_FILE,
    ActionKind.CUT_FILE,
    ActionKind.PASTE,
    ActionKind.DELETE_CONFIRM,
    ActionKind.PROMPT_CONFIRM,
    ActionKind.CHMOD_APPLY,
    ActionKind.COMPRESS_SELECT,
}

_CATEGORIES: dict[ActionKind, ActionCategory] = {}
for _kind in ActionKind:
    if _kind in _TREE:
        _CATEGORIES[_kind] = ActionCategory.TREE
    elif _kind in _PREVIEW:
        _CATEGORIES[_kind] = ActionCategory.PREVIEW
    elif _kind in _SUSPEND:
        _CATEGORIES[_kind] = ActionCategory.SUSPEND
    elif _kind in _FILESYSTEM:
        _CATEGORIES[_kind] = ActionCategory.FILESYSTEM
    elif _kind is ActionKind.NONE:
        _CATEGORIES[_kind] = ActionCategory.NONE
    else:
        # quit is a mode transition out of the loop
        _CATEGORIES[_kind] = ActionCategory.MODE
del _kind


@dataclass(frozen=True)
class Action:
    """Self-contained result of one key press.

    ``text`` carries the search/prompt buffer or the typed character,
    ``index`` the breadcrumb or quick-pick number, and ``prompt`` the
    prompt being confirmed.
    """

    kind: ActionKind
    text: str = ""
    index: int | None = None
    prompt: PromptKind | None = None

    @property
    def category(self) -> ActionCategory:
        return self.kind.category

    @property
    def is_noop(self) -> bool:
        return self.kind is ActionKind.NONE


NO_ACTION = Action(ActionKind.NONE)


__all__ = [
    "ActionCategory",
    "ActionKind",
    "NON_BINDABLE",
    "Action",
    "NO_ACTION",
]
