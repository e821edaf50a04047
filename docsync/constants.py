"""Limits and placeholder text shared across changelog and prompt rendering."""

from __future__ import annotations

# Maximum number of files listed from a repository tree.
TREE_FILE_LIMIT = 50

# Maximum number of documentation files fetched per run.
DOC_FILES_LIMIT = 5

MAX_SUMMARY_LENGTH = 2000
MAX_README_CONTENT_LENGTH = 8000
SHORT_SHA_LENGTH = 7

ROOT_README = "README.md"
CHANGELOG_PAGE_TITLE = "Changelog"
TRUNCATION_MARKER = "[Content truncated...]"

NO_DESCRIPTION_PROVIDED = "No description provided"
NO_REPO_DESCRIPTION = "No description"

DEFAULT_MODEL = "gpt-4o"


__all__ = [
    "CHANGELOG_PAGE_TITLE",
    "DEFAULT_MODEL",
    "DOC_FILES_LIMIT",
    "MAX_README_CONTENT_LENGTH",
    "MAX_SUMMARY_LENGTH",
    "NO_DESCRIPTION_PROVIDED",
    "NO_REPO_DESCRIPTION",
    "ROOT_README",
    "SHORT_SHA_LENGTH",
    "TREE_FILE_LIMIT",
    "TRUNCATION_MARKER",
]
