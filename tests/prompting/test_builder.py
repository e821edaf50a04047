"""Tests for agent prompt rendering."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from docsync.changelog.entries import build_doc_update_context
from docsync.prompting.builder import (
    PromptBuilder,
    build_changelog_prompt,
    build_doc_update_prompt,
    build_find_or_create_prompt,
    build_system_message,
)

PAGE_ID = "0123456789abcdef0123456789abcdef"


def test_changelog_prompt_for_pull_request(pr_entry) -> None:
    prompt = build_changelog_prompt(pr_entry, PAGE_ID)

    assert f'page "{PAGE_ID}"' in prompt
    assert "**Heading (heading_2):** 2024-05-17 - Add new feature" in prompt
    assert "PR #42 by @testuser" in prompt
    assert "[View on GitHub](https://github.com/acme/widgets/pull/42)" in prompt
    assert "**Summary paragraph:** No description provided" in prompt
    assert 'titled "Changed Files"' in prompt
    assert "- src/app.py (modified, +10/-2)\n- README.md (modified, +3/-1)" in prompt
    assert "**Divider**" in prompt
    assert "single API call" in prompt


def test_changelog_prompt_for_sync(sync_entry) -> None:
    prompt = build_changelog_prompt(sync_entry, PAGE_ID)

    assert "Commit abc1234 by Jane Doe" in prompt
    assert "2024-05-17 - Documentation sync from main" in prompt


def test_changelog_prompt_omits_empty_files(pr_entry) -> None:
    for files in ("", "   \n  "):
        prompt = build_changelog_prompt(replace(pr_entry, files=files), PAGE_ID)
        assert "Changed Files" not in prompt
        assert "**Divider**" in prompt


def test_changelog_prompt_truncates_summary(pr_entry) -> None:
    entry = replace(pr_entry, summary="a" * 1990 + "b" * 100)

    prompt = build_changelog_prompt(entry, PAGE_ID)

    assert "a" * 1990 + "b" * 10 in prompt
    assert "b" * 11 not in prompt


def test_changelog_prompt_is_deterministic(pr_entry) -> None:
    assert build_changelog_prompt(pr_entry, PAGE_ID) == build_changelog_prompt(pr_entry, PAGE_ID)


def test_doc_update_prompt_none_without_readme(pr_entry) -> None:
    context = build_doc_update_context(pr_entry, {"docs/guide.md": "guide"})
    assert build_doc_update_prompt(context, PAGE_ID) is None


def test_doc_update_prompt_includes_readme(pr_entry) -> None:
    context = build_doc_update_context(pr_entry, {"docs/a.md": "a", "readme.md": "# Title\n\nBody"})

    prompt = build_doc_update_prompt(context, PAGE_ID)

    assert prompt is not None
    assert f'ID "{PAGE_ID}"' in prompt
    assert "PR #42: Add new feature" in prompt
    assert "```markdown\n# Title\n\nBody\n```" in prompt
    assert "[Content truncated...]" not in prompt
    assert "Preserve any existing Notion-specific content" in prompt


def test_doc_update_prompt_truncates_long_readme(pr_entry) -> None:
    context = build_doc_update_context(pr_entry, {"README.md": "x" * 10000})

    prompt = build_doc_update_prompt(context, PAGE_ID)

    assert prompt is not None
    assert "[Content truncated...]" in prompt
    assert "x" * 8000 in prompt
    assert "x" * 8001 not in prompt
    assert len(prompt) < 10000 + 2000


def test_doc_update_prompt_exact_limit_is_not_truncated(sync_entry) -> None:
    context = build_doc_update_context(sync_entry, {"README.md": "y" * 8000})

    prompt = build_doc_update_prompt(context, PAGE_ID)

    assert prompt is not None
    assert "[Content truncated...]" not in prompt
    assert "Commit abc1234: Documentation sync from main" in prompt


def test_find_or_create_prompt_mentions_root_and_title() -> None:
    prompt = build_find_or_create_prompt("root123")

    assert 'child page named "Changelog"' in prompt
    assert 'page with ID "root123"' in prompt
    assert "Only respond with the page ID" in prompt


def test_system_message_mentions_root_page() -> None:
    assert "The target Notion page ID is: root123" in build_system_message("root123")


def test_custom_changelog_title() -> None:
    builder = PromptBuilder(changelog_title="Release Notes")
    assert 'child page named "Release Notes"' in builder.find_or_create("root")
    assert 'child page named "History"' in build_find_or_create_prompt("root", "History")


def test_templates_dir_overrides_single_template(tmp_path: Path, pr_entry) -> None:
    (tmp_path / "find_or_create.j2").write_text("Find {{ title }} under {{ root_page_id }}", encoding="utf-8")
    builder = PromptBuilder(tmp_path)

    assert builder.find_or_create("root") == "Find Changelog under root"
    assert "PR #42 by @testuser" in builder.changelog(pr_entry, PAGE_ID)
