"""Changelog entry formatting and construction."""

from .blocks import build_changelog_blocks
from .entries import build_change_request_entry, build_doc_update_context, build_sync_entry
from .formatting import format_change_request_files, format_tree_files

__all__ = [
    "build_change_request_entry",
    "build_changelog_blocks",
    "build_doc_update_context",
    "build_sync_entry",
    "format_change_request_files",
    "format_tree_files",
]
