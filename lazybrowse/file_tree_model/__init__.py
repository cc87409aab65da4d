"""Domain model for the flat file tree.

This package contains non-UI tree primitives:
- entry datatypes and the directory listing provider
- sibling sorting and the derived filter view
- the ``FileTree`` flat-sequence model
- synchronous filesystem mutations and git status tags
"""

from __future__ import annotations

from .filtering import (
    DateFilter,
    FilterPattern,
    FilterQuery,
    SizeFilter,
    filter_view,
    name_matches,
    parse_filter_query,
    parse_size,
)
from .fs import list_directory_children
from .ops import (
    ARCHIVE_FORMATS,
    change_mode,
    compress_paths,
    copy_path,
    create_directory,
    create_file,
    delete_path,
    format_mode,
    move_path,
    parse_octal_mode,
    rename_path,
    unique_dest_path,
)
from .sorting import SortField, SortOrder, sort_siblings
from .status import GitStatusProvider, collect_git_status
from .tree import FileTree
from .types import DirectoryChild, FileEntry

__all__ = [
    "DirectoryChild",
    "FileEntry",
    "FileTree",
    "DateFilter",
    "FilterPattern",
    "FilterQuery",
    "SizeFilter",
    "filter_view",
    "name_matches",
    "parse_filter_query",
    "parse_size",
    "list_directory_children",
    "SortField",
    "SortOrder",
    "sort_siblings",
    "GitStatusProvider",
    "collect_git_status",
    "ARCHIVE_FORMATS",
    "change_mode",
    "compress_paths",
    "copy_path",
    "create_directory",
    "create_file",
    "delete_path",
    "format_mode",
    "move_path",
    "parse_octal_mode",
    "rename_path",
    "unique_dest_path",
]
