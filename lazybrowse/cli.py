"""Command-line front door for lazybrowse.

Parses CLI options, layers them over the persisted config, configures
logging, and dispatches into the interactive browser (or prints a plain
listing when asked to, or when stdin/stdout are not terminals).
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from pathlib import Path

from .errors import IoError
from .file_tree_model import FileTree
from .runtime import run_browser
from .runtime.config import BrowserConfig, load_browser_config
from .runtime.logs import configure_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    parsed = _nonnegative_int(value)
    if parsed == 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazybrowse",
        description="Browse a directory tree with asynchronous file previews.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to browse. Defaults to current directory.")
    parser.add_argument("--show-hidden", action="store_true", default=None, help="Show dotfiles.")
    parser.add_argument("--style", default=None, help="Pygments style name for highlighted previews.")
    parser.add_argument("--debounce-ms", type=_nonnegative_int, default=None, help="Preview debounce in ms.")
    parser.add_argument("--cache-size", type=_positive_int, default=None, help="Preview cache capacity.")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS, type=str.upper, help="Log level.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs here instead of the default.")
    parser.add_argument("--list", action="store_true", help="Print the directory listing and exit.")
    return parser


def apply_overrides(config: BrowserConfig, args: argparse.Namespace) -> BrowserConfig:
    """Return ``config`` with any explicitly passed CLI flags applied."""
    changes: dict[str, object] = {}
    if args.show_hidden:
        changes["show_hidden"] = True
    if args.style:
        changes["syntax_style"] = args.style
    if args.debounce_ms is not None:
        changes["debounce_ms"] = args.debounce_ms
    if args.cache_size is not None:
        changes["cache_capacity"] = args.cache_size
    return dataclasses.replace(config, **changes) if changes else config


def render_listing(root: Path, config: BrowserConfig) -> str:
    """Render the sorted root listing as plain text, one entry per line."""
    tree = FileTree(root, show_hidden=config.show_hidden, ignore_patterns=config.ignore_patterns)
    lines = [f"{entry.name}/" if entry.is_dir else entry.name for entry in tree.entries]
    return "".join(f"{line}\n" for line in lines)


def _interactive() -> bool:
    try:
        return os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())
    except (OSError, ValueError):
        return False


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch lazybrowse on a directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path).expanduser() if args.path else default_path
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")
    root = path.resolve()

    config = apply_overrides(load_browser_config(), args)
    try:
        if args.list or not _interactive():
            sys.stdout.write(render_listing(root, config))
            return
        run_browser(root, config)
    except IoError as exc:
        raise SystemExit(f"lazybrowse: {exc}") from exc


if __name__ == "__main__":
    main()
