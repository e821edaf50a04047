from __future__ import annotations

from datetime import date

import pytest

from docsync.changelog.entries import build_change_request_entry, build_sync_entry
from docsync.models import ChangelogEntry
from tests._fixtures import github_payloads
from tests._fixtures.github_payloads import FakeGitHub

TODAY = date(2024, 5, 17)


@pytest.fixture
def pr_entry() -> ChangelogEntry:
    """Change-request entry with two changed files and no description."""
    return build_change_request_entry(
        github_payloads.pull_request(),
        "- src/app.py (modified, +10/-2)\n- README.md (modified, +3/-1)",
        today=TODAY,
    )


@pytest.fixture
def sync_entry() -> ChangelogEntry:
    return build_sync_entry(
        github_payloads.repository(),
        github_payloads.commit(),
        "- README.md",
        today=TODAY,
    )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub({"README.md": "# Widgets\n\nHello.", "docs/guide.md": "Guide"})
