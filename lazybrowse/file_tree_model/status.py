"""Version-control status tags for tree rows.

Runs ``git status`` once per tree (re)build and maps absolute paths to a
short tag. Directories containing dirty paths get the ``*`` tag.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DIRTY_DIRECTORY_TAG = "*"
UNTRACKED_TAG = "?"


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, exc)
        return None


def iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    """Split ``git status --porcelain=v1 -z`` output into ``(code, path)`` pairs."""
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if len(token) < 4 or token[2] != " ":
            continue
        code = token[:2]
        records.append((code, token[3:]))
        # Renames and copies carry the source path as an extra token.
        if "R" in code or "C" in code:
            index += 1
    return records


def status_tag(code: str) -> str:
    """Collapse a two-letter porcelain code into one display character."""
    if code == "??":
        return UNTRACKED_TAG
    for ch in code:
        if ch not in {" ", "?"}:
            return ch
    return code.strip() or "M"


def collect_git_status(root: Path, timeout_seconds: float = 0.5) -> dict[Path, str]:
    """Return ``{absolute path: tag}`` for dirty paths under ``root``.

    Returns an empty mapping outside a repository or when git is missing.
    """
    root = root.resolve()
    toplevel = _run_git(root, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if toplevel is None or toplevel.returncode != 0 or not toplevel.stdout.strip():
        return {}
    repo_root = Path(toplevel.stdout.strip()).resolve()

    proc = _run_git(repo_root, ["status", "--porcelain=v1", "-z", "--untracked-files=normal"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return {}

    statuses: dict[Path, str] = {}
    for code, rel_path in iter_porcelain_records(proc.stdout):
        if code == "!!" or not rel_path:
            continue
        target = repo_root / rel_path.rstrip("/")
        statuses[target] = status_tag(code)
        parent = target.parent
        while parent != parent.parent and parent.is_relative_to(repo_root):
            statuses.setdefault(parent, DIRTY_DIRECTORY_TAG)
            if parent == repo_root:
                break
            parent = parent.parent
    return statuses


class GitStatusProvider:
    """Callable status lookup over one cached ``git status`` snapshot."""

    def __init__(self, root: Path, enabled: bool = True) -> None:
        self.enabled = enabled
        self._statuses: dict[Path, str] = {}
        self.refresh(root)

    def refresh(self, root: Path) -> None:
        self._statuses = collect_git_status(root) if self.enabled else {}

    def __call__(self, path: Path) -> str | None:
        if not self._statuses:
            return None
        tag = self._statuses.get(path)
        if tag is None:
            try:
                tag = self._statuses.get(path.resolve())
            except OSError:
                return None
        return tag


__all__ = [
    "collect_git_status",
    "iter_porcelain_records",
    "status_tag",
    "GitStatusProvider",
]
