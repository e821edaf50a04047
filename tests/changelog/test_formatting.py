"""Tests for changed-file and tree listings."""

from __future__ import annotations

from docsync.changelog.formatting import format_change_request_files, format_tree_files
from docsync.models import ChangedFile, TreeEntry


def test_change_request_files_one_line_per_file() -> None:
    files = [
        {"filename": "src/app.py", "status": "modified", "additions": 10, "deletions": 2},
        {"filename": "docs/new.md", "status": "added", "additions": 40, "deletions": 0},
        {"filename": "old.txt", "status": "removed", "additions": 0, "deletions": 7},
    ]

    result = format_change_request_files(files)

    assert result.split("\n") == [
        "- src/app.py (modified, +10/-2)",
        "- docs/new.md (added, +40/-0)",
        "- old.txt (removed, +0/-7)",
    ]
    assert not result.endswith("\n")


def test_change_request_files_accepts_models() -> None:
    result = format_change_request_files([ChangedFile("a.py", "renamed", 1, 1)])
    assert result == "- a.py (renamed, +1/-1)"


def test_change_request_files_empty() -> None:
    assert format_change_request_files([]) == ""


def test_tree_files_skips_directories() -> None:
    tree = [
        {"path": "docs", "type": "tree"},
        {"path": "docs/index.md", "type": "blob"},
        {"path": "src", "type": "tree"},
        {"path": "src/main.py", "type": "blob"},
    ]

    assert format_tree_files(tree) == "- docs/index.md\n- src/main.py"


def test_tree_files_respects_limit_in_order() -> None:
    tree = [TreeEntry(f"file{index}.txt", "blob") for index in range(60)]

    lines = format_tree_files(tree).split("\n")

    assert len(lines) == 50
    assert lines[0] == "- file0.txt"
    assert lines[-1] == "- file49.txt"


def test_tree_files_limit_counts_files_only() -> None:
    tree = [
        TreeEntry("a", "tree"),
        TreeEntry("a/one.md", "blob"),
        TreeEntry("b", "tree"),
        TreeEntry("b/two.md", "blob"),
        TreeEntry("c.md", "blob"),
    ]

    assert format_tree_files(tree, limit=2) == "- a/one.md\n- b/two.md"


def test_tree_files_empty() -> None:
    assert format_tree_files([]) == ""
    assert format_tree_files([TreeEntry("docs", "tree")]) == ""
