"""Tests for documentation content fetching."""

from __future__ import annotations

from docsync.errors import GitHubError
from docsync.github.docs import fetch_doc_content, select_doc_paths
from docsync.models import TreeEntry
from tests._fixtures.github_payloads import FakeGitHub, encoded


def test_fetch_without_candidates_tries_readme() -> None:
    github = FakeGitHub({"README.md": "# Hello"})

    content = fetch_doc_content(github, "acme", "widgets", "main")

    assert content == {"README.md": "# Hello"}
    assert github.content_calls == [("README.md", "main")]


def test_fetch_caps_candidates_and_puts_readme_first() -> None:
    candidates = [f"docs/page{index}.md" for index in range(7)]
    github = FakeGitHub({path: path for path in candidates})

    content = fetch_doc_content(github, "acme", "widgets", "sha1", candidates)

    attempted = [path for path, _ in github.content_calls]
    assert attempted == ["README.md"] + candidates[:4]
    assert len(content) <= 5
    assert list(content) == candidates[:4]


def test_fetch_filters_to_doc_patterns() -> None:
    candidates = [
        {"filename": "src/app.py"},
        {"filename": "CONTRIBUTING.md"},
        {"filename": "doc/setup.txt"},
        {"filename": "package.json"},
        {"filename": "readme.md"},
    ]

    assert select_doc_paths(candidates) == ["CONTRIBUTING.md", "doc/setup.txt", "readme.md"]


def test_existing_readme_is_not_duplicated() -> None:
    paths = select_doc_paths(["docs/a.md", "ReadMe.md"])
    assert paths == ["docs/a.md", "ReadMe.md"]


def test_tree_directories_are_not_candidates() -> None:
    tree = [TreeEntry("docs", "tree"), TreeEntry("docs/a.md", "blob")]
    assert select_doc_paths(tree) == ["README.md", "docs/a.md"]


def test_failed_fetch_does_not_stop_batch() -> None:
    github = FakeGitHub({"docs/b.md": "bee"})

    content = fetch_doc_content(github, "acme", "widgets", "ref", ["docs/a.md", "docs/b.md"])

    assert content == {"docs/b.md": "bee"}
    assert [path for path, _ in github.content_calls] == ["README.md", "docs/a.md", "docs/b.md"]


def test_non_base64_and_network_errors_are_skipped() -> None:
    class Reader:
        def get_content(self, owner, repo, path, ref):  # type: ignore[no-untyped-def]
            if path == "README.md":
                return {"content": "plain", "encoding": "utf-8"}
            if path == "docs/down.md":
                raise GitHubError("connection reset")
            if path == "docs/slow.md":
                raise TimeoutError("timed out")
            return encoded("ok")

    content = fetch_doc_content(
        Reader(), "acme", "widgets", "ref", ["docs/down.md", "docs/slow.md", "docs/ok.md"]
    )

    assert content == {"docs/ok.md": "ok"}
