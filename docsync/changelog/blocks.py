"""Notion block structure for a changelog entry."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..constants import MAX_SUMMARY_LENGTH
from ..models import ChangelogEntry

Block = Dict[str, Any]


def build_changelog_blocks(entry: ChangelogEntry) -> List[Block]:
    """Return the blocks appended to the Changelog page for ``entry``.

    The sequence is a heading, a linked reference paragraph, the summary
    paragraph, an optional "Changed files" toggle holding a code block, and
    a closing divider. The agent is asked to produce the same layout, so
    this mirrors what a direct API write would send.
    """
    blocks: List[Block] = [
        _text_block("heading_2", f"{entry.date} - {entry.title}"),
        _text_block("paragraph", entry.reference_text, link=entry.url),
        _text_block("paragraph", entry.summary[:MAX_SUMMARY_LENGTH]),
    ]
    if entry.files.strip():
        code = _text_block("code", entry.files)
        code["code"]["language"] = "plain text"
        toggle = _text_block("toggle", "Changed files")
        toggle["toggle"]["children"] = [code]
        blocks.append(toggle)
    blocks.append({"type": "divider", "divider": {}})
    return blocks


def _text_block(block_type: str, content: str, *, link: Optional[str] = None) -> Block:
    text: Dict[str, Any] = {"content": content}
    if link:
        text["link"] = {"url": link}
    return {
        "type": block_type,
        block_type: {"rich_text": [{"type": "text", "text": text}]},
    }


__all__ = ["build_changelog_blocks"]
