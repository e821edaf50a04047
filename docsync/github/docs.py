"""Fetch documentation files that feed the doc-update prompt."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..changelog.entries import is_root_readme
from ..constants import DOC_FILES_LIMIT, ROOT_README
from ..errors import GitHubError
from ..logging import get_logger
from ..models import ChangedFile, TreeEntry
from .client import ContentReader

_DOC_PATTERNS = (
    re.compile(r"^readme\.md$", re.IGNORECASE),
    re.compile(r"^docs?/", re.IGNORECASE),
    re.compile(r"\.md$", re.IGNORECASE),
    re.compile(r"^contributing\.md$", re.IGNORECASE),
    re.compile(r"^changelog\.md$", re.IGNORECASE),
)

_logger = get_logger("github.docs")


def is_doc_path(path: str) -> bool:
    return any(pattern.search(path) for pattern in _DOC_PATTERNS)


def select_doc_paths(
    candidates: Optional[Iterable[Any]], limit: int = DOC_FILES_LIMIT
) -> List[str]:
    """Pick the documentation paths to fetch, README first when it was absent."""
    selected: List[str] = []
    for candidate in candidates or ():
        path = _candidate_path(candidate)
        if path and is_doc_path(path):
            selected.append(path)
    if not any(is_root_readme(path) for path in selected):
        selected.insert(0, ROOT_README)
    return selected[:limit]


def fetch_doc_content(
    reader: ContentReader,
    owner: str,
    repo: str,
    ref: str,
    candidates: Optional[Iterable[Any]] = None,
) -> Dict[str, str]:
    """Return decoded documentation content keyed by path.

    Files that cannot be fetched, or that come back in an encoding other
    than base64, are skipped; the remaining files are still returned.
    """
    content: Dict[str, str] = {}
    for path in select_doc_paths(candidates):
        try:
            data = reader.get_content(owner, repo, path, ref)
        except (GitHubError, OSError) as exc:
            _logger.debug("Skipping %s: %s", path, exc)
            continue
        text = _decode(data)
        if text is None:
            _logger.debug("Skipping %s: unsupported content payload", path)
            continue
        content[path] = text
    return content


def _decode(data: Mapping[str, Any]) -> Optional[str]:
    if not isinstance(data, Mapping):
        return None
    raw = data.get("content")
    if not raw or data.get("encoding") != "base64":
        return None
    try:
        return base64.b64decode(raw).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return None


def _candidate_path(candidate: Any) -> Optional[str]:
    if isinstance(candidate, str):
        return candidate
    if isinstance(candidate, TreeEntry):
        return candidate.path if candidate.is_file else None
    if isinstance(candidate, ChangedFile):
        return candidate.path
    if isinstance(candidate, Mapping):
        if candidate.get("type") == "tree":
            return None
        value = candidate.get("filename") or candidate.get("path")
        return str(value) if value else None
    return None


__all__ = ["fetch_doc_content", "is_doc_path", "select_doc_paths"]
