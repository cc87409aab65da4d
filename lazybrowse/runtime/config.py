"""Persistent JSON config helpers.

Stores display preferences, preview tuning, favorites, saved searches,
open-with commands and key bindings. All access is defensive: malformed or missing config falls
back to defaults, and write failures are logged instead of raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lazybrowse"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

TREE_RATIO_DEFAULT = 30
TREE_RATIO_MIN = 15
TREE_RATIO_MAX = 60
TREE_RATIO_STEP = 5
TICK_MS_DEFAULT = 100
DEBOUNCE_MS_DEFAULT = 80
CACHE_CAPACITY_DEFAULT = 10
SYNTAX_STYLE_DEFAULT = "monokai"


@dataclass(frozen=True)
class OpenWithCommand:
    """Named external command; ``{}`` in ``command`` is replaced by the path."""

    name: str
    command: str


DEFAULT_OPEN_WITH = (
    OpenWithCommand("less", "less {}"),
    OpenWithCommand("xdg-open", "xdg-open {}"),
)


@dataclass(frozen=True)
class SavedSearch:
    """Filter line stored under ``name``; re-parsed each time it is applied."""

    name: str
    query: str


@dataclass
class BrowserConfig:
    show_hidden: bool = False
    ignore_patterns: tuple[str, ...] = (".git", "__pycache__")
    tree_ratio: int = TREE_RATIO_DEFAULT
    debounce_ms: int = DEBOUNCE_MS_DEFAULT
    tick_ms: int = TICK_MS_DEFAULT
    cache_capacity: int = CACHE_CAPACITY_DEFAULT
    warm_cache_on_stale: bool = False
    syntax_style: str = SYNTAX_STYLE_DEFAULT
    git_status: bool = True
    favorites: list[Path] = field(default_factory=list)
    saved_searches: list[SavedSearch] = field(default_factory=list)
    open_with: tuple[OpenWithCommand, ...] = DEFAULT_OPEN_WITH
    keys: dict[str, object] = field(default_factory=dict)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged to keep runtime behavior non-fatal when
    config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _int(data: dict[str, object], key: str, default: int, low: int, high: int) -> int:
    """Read an int in ``[low, high]``; booleans and out-of-range values fall back."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if value < low or value > high:
        return default
    return value


def _str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _open_with(value: object) -> tuple[OpenWithCommand, ...]:
    if not isinstance(value, list):
        return DEFAULT_OPEN_WITH
    commands: list[OpenWithCommand] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        name, command = raw.get("name"), raw.get("command")
        if isinstance(name, str) and name and isinstance(command, str) and command.strip():
            commands.append(OpenWithCommand(name, command))
    return tuple(commands) if commands else DEFAULT_OPEN_WITH


def _saved_searches(value: object) -> list[SavedSearch]:
    if not isinstance(value, list):
        return []
    searches: list[SavedSearch] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        name, query = raw.get("name"), raw.get("query")
        if isinstance(name, str) and name and isinstance(query, str) and query.strip():
            searches.append(SavedSearch(name, query))
    return searches


def load_browser_config() -> BrowserConfig:
    data = load_config()
    defaults = BrowserConfig()
    ignore = data.get("ignore_patterns")
    style = data.get("syntax_style")
    keys = data.get("keys")
    return BrowserConfig(
        show_hidden=_bool(data, "show_hidden", defaults.show_hidden),
        ignore_patterns=tuple(_str_list(ignore)) if isinstance(ignore, list) else defaults.ignore_patterns,
        tree_ratio=_int(data, "tree_ratio", defaults.tree_ratio, TREE_RATIO_MIN, TREE_RATIO_MAX),
        debounce_ms=_int(data, "debounce_ms", defaults.debounce_ms, 0, 5_000),
        tick_ms=_int(data, "tick_ms", defaults.tick_ms, 10, 5_000),
        cache_capacity=_int(data, "cache_capacity", defaults.cache_capacity, 1, 1_000),
        warm_cache_on_stale=_bool(data, "warm_cache_on_stale", defaults.warm_cache_on_stale),
        syntax_style=style if isinstance(style, str) and style else defaults.syntax_style,
        git_status=_bool(data, "git_status", defaults.git_status),
        favorites=[Path(item) for item in _str_list(data.get("favorites"))],
        saved_searches=_saved_searches(data.get("saved_searches")),
        open_with=_open_with(data.get("open_with")),
        keys=dict(keys) if isinstance(keys, dict) else {},
    )


def save_show_hidden(show_hidden: bool) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def save_tree_ratio(ratio: int) -> None:
    """Persist the tree pane width percentage, clamped to the allowed range."""
    config = load_config()
    config["tree_ratio"] = max(TREE_RATIO_MIN, min(TREE_RATIO_MAX, int(ratio)))
    save_config(config)


def save_favorites(favorites: list[Path]) -> None:
    config = load_config()
    config["favorites"] = [str(path) for path in favorites]
    save_config(config)


def save_saved_searches(searches: list[SavedSearch]) -> None:
    config = load_config()
    config["saved_searches"] = [{"name": search.name, "query": search.query} for search in searches]
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "TREE_RATIO_DEFAULT",
    "TREE_RATIO_MIN",
    "TREE_RATIO_MAX",
    "TREE_RATIO_STEP",
    "OpenWithCommand",
    "SavedSearch",
    "BrowserConfig",
    "load_config",
    "save_config",
    "load_browser_config",
    "save_show_hidden",
    "save_tree_ratio",
    "save_favorites",
    "save_saved_searches",
]
