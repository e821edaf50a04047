"""Prompt rendering and response parsing for the Notion agent."""

from .builder import (
    PromptBuilder,
    build_changelog_prompt,
    build_doc_update_prompt,
    build_find_or_create_prompt,
    build_system_message,
)
from .page_id import extract_page_id

__all__ = [
    "PromptBuilder",
    "build_changelog_prompt",
    "build_doc_update_prompt",
    "build_find_or_create_prompt",
    "build_system_message",
    "extract_page_id",
]
