"""Read Notion page identifiers out of free-form agent replies."""

from __future__ import annotations

import re
from typing import Optional

# 8-4-4-4-12 hex groups; Notion accepts IDs with or without the dashes.
_UUID_PATTERN = re.compile(
    r"[a-f0-9]{8}-?[a-f0-9]{4}-?[a-f0-9]{4}-?[a-f0-9]{4}-?[a-f0-9]{12}",
    re.IGNORECASE,
)


def extract_page_id(text: Optional[str]) -> Optional[str]:
    """Return the first UUID-shaped token in ``text`` without dashes, or None.

    Case is preserved. There is no fallback beyond the first full match.
    """
    if not text:
        return None
    match = _UUID_PATTERN.search(text)
    if match is None:
        return None
    return match.group(0).replace("-", "")


__all__ = ["extract_page_id"]
