"""Builds the natural-language prompts sent to the Notion agent."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..changelog.entries import is_root_readme
from ..constants import (
    CHANGELOG_PAGE_TITLE,
    MAX_README_CONTENT_LENGTH,
    MAX_SUMMARY_LENGTH,
    TRUNCATION_MARKER,
)
from ..models import ChangelogEntry, DocUpdateContext


class PromptBuilder:
    """Renders agent prompts from Jinja templates.

    Templates are looked up in ``templates_dir`` first and then in the
    packaged ``templates`` directory, so a repository can override any
    single prompt without copying the rest.
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        changelog_title: str = CHANGELOG_PAGE_TITLE,
        max_summary_length: int = MAX_SUMMARY_LENGTH,
        max_readme_length: int = MAX_README_CONTENT_LENGTH,
    ) -> None:
        self.templates_dir = templates_dir
        self.changelog_title = changelog_title
        self.max_summary_length = max_summary_length
        self.max_readme_length = max_readme_length
        self._env = self._create_env(templates_dir)

    def system_message(self, root_page_id: str) -> str:
        return self._render("system.j2", root_page_id=root_page_id)

    def find_or_create(self, root_page_id: str, page_title: str | None = None) -> str:
        """Prompt that resolves (creating if needed) the Changelog child page."""
        return self._render(
            "find_or_create.j2",
            root_page_id=root_page_id,
            title=page_title or self.changelog_title,
        )

    def changelog(self, entry: ChangelogEntry, page_id: str) -> str:
        """Prompt that appends ``entry`` as blocks to the Changelog page."""
        files = entry.files if entry.files and entry.files.strip() else ""
        return self._render(
            "changelog.j2",
            entry=entry,
            page_id=page_id,
            summary=entry.summary[: self.max_summary_length],
            files=files,
        )

    def doc_update(self, context: DocUpdateContext, page_id: str) -> Optional[str]:
        """Prompt that rewrites the root page from the README, or None without one."""
        readme = _find_readme(context)
        if readme is None:
            return None
        readme_path, content = readme
        if len(content) > self.max_readme_length:
            content = f"{content[: self.max_readme_length]}\n\n{TRUNCATION_MARKER}"
        return self._render(
            "doc_update.j2",
            entry=context,
            page_id=page_id,
            readme_path=readme_path,
            readme=content,
            changelog_title=self.changelog_title,
        )

    def _render(self, template_name: str, **values: object) -> str:
        template = self._env.get_template(template_name)
        return template.render(**values)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        default_dir = Path(__file__).with_name("templates")
        directories = [str(templates_dir)] if templates_dir else []
        if str(default_dir) not in directories:
            directories.append(str(default_dir))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


def _find_readme(context: DocUpdateContext) -> Optional[Tuple[str, str]]:
    for path, content in context.doc_content.items():
        if is_root_readme(path):
            return (path, content) if content else None
    return None


@lru_cache(maxsize=1)
def _default_builder() -> PromptBuilder:
    return PromptBuilder()


def build_system_message(root_page_id: str) -> str:
    return _default_builder().system_message(root_page_id)


def build_find_or_create_prompt(root_page_id: str, page_title: str = CHANGELOG_PAGE_TITLE) -> str:
    return _default_builder().find_or_create(root_page_id, page_title)


def build_changelog_prompt(entry: ChangelogEntry, page_id: str) -> str:
    """Render the append-changelog instruction for ``page_id``."""
    return _default_builder().changelog(entry, page_id)


def build_doc_update_prompt(context: DocUpdateContext, page_id: str) -> Optional[str]:
    """Render the README-to-page instruction; None means there is nothing to update."""
    return _default_builder().doc_update(context, page_id)


__all__ = [
    "PromptBuilder",
    "build_changelog_prompt",
    "build_doc_update_prompt",
    "build_find_or_create_prompt",
    "build_system_message",
]
