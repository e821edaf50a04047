"""Bullet listings for changed files and repository trees."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from ..constants import TREE_FILE_LIMIT
from ..models import ChangedFile, TreeEntry

FileRecord = Union[ChangedFile, Mapping[str, Any]]
TreeRecord = Union[TreeEntry, Mapping[str, Any]]


def format_change_request_files(files: Iterable[FileRecord]) -> str:
    """Render one ``- path (status, +adds/-dels)`` line per changed file."""
    lines = []
    for item in files:
        changed = item if isinstance(item, ChangedFile) else ChangedFile.from_api(item)
        lines.append(
            f"- {changed.path} ({changed.status}, +{changed.additions}/-{changed.deletions})"
        )
    return "\n".join(lines)


def format_tree_files(entries: Iterable[TreeRecord], limit: int = TREE_FILE_LIMIT) -> str:
    """Render up to ``limit`` file paths from a tree listing, skipping directories."""
    lines = []
    for item in entries:
        if len(lines) >= limit:
            break
        entry = item if isinstance(item, TreeEntry) else TreeEntry.from_api(item)
        if entry.is_file:
            lines.append(f"- {entry.path}")
    return "\n".join(lines)


__all__ = ["format_change_request_files", "format_tree_files"]
