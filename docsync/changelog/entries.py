"""Builders that normalize GitHub payloads into changelog entries."""

from __future__ import annotations

import re
from dataclasses import asdict
from datetime import date
from typing import Any, Mapping, Optional

from ..constants import NO_DESCRIPTION_PROVIDED, NO_REPO_DESCRIPTION, ROOT_README, SHORT_SHA_LENGTH
from ..errors import EventDataError
from ..models import ChangelogEntry, DocUpdateContext, EntryKind

_README_PATTERN = re.compile(rf"^{re.escape(ROOT_README)}$", re.IGNORECASE)


def is_root_readme(path: str) -> bool:
    """Return True when ``path`` names the root README, ignoring case."""
    return bool(_README_PATTERN.match(path))


def parse_request_number(value: Any) -> int:
    """Return a pull request number, raising EventDataError when it is absent or malformed."""
    if value is None or isinstance(value, bool):
        raise EventDataError(f"Pull request payload has no usable 'number' (got {value!r})")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise EventDataError(
            f"Pull request payload has no usable 'number' (got {value!r})"
        ) from exc


def build_change_request_entry(
    request: Mapping[str, Any],
    files_text: str,
    *,
    today: Optional[date] = None,
) -> ChangelogEntry:
    """Create a changelog entry for a merged pull request."""
    user = request.get("user")
    author = user.get("login") if isinstance(user, Mapping) else None
    if not author:
        raise EventDataError("Pull request payload is missing 'user.login'")
    number = parse_request_number(request.get("number"))

    return ChangelogEntry(
        kind=EntryKind.CHANGE_REQUEST,
        date=_iso_date(today),
        title=_require(request, "title", "Pull request"),
        request_number=number,
        author=str(author),
        url=_require(request, "html_url", "Pull request"),
        summary=request.get("body") or NO_DESCRIPTION_PROVIDED,
        files=files_text,
    )


def build_sync_entry(
    repo_info: Mapping[str, Any],
    latest_commit: Mapping[str, Any],
    files_text: str,
    *,
    today: Optional[date] = None,
) -> ChangelogEntry:
    """Create a changelog entry for a manual sync of the default branch."""
    branch = _require(repo_info, "default_branch", "Repository")
    sha = _require(latest_commit, "sha", "Commit")
    commit = latest_commit.get("commit")
    commit = commit if isinstance(commit, Mapping) else {}
    author = commit.get("author")
    author = author if isinstance(author, Mapping) else {}
    message = commit.get("message") or ""

    return ChangelogEntry(
        kind=EntryKind.PERIODIC_SYNC,
        date=_iso_date(today),
        title=f"Documentation sync from {branch}",
        commit_hash=sha[:SHORT_SHA_LENGTH],
        author=_require(author, "name", "Commit author"),
        url=_require(latest_commit, "html_url", "Commit"),
        summary=f"Synced documentation from {branch} branch.\n\nLatest commit: {message}",
        files=files_text,
        repo_description=repo_info.get("description") or NO_REPO_DESCRIPTION,
    )


def build_doc_update_context(
    entry: ChangelogEntry, doc_content: Mapping[str, str]
) -> DocUpdateContext:
    """Return a copy of ``entry`` carrying the fetched documentation files."""
    base = {
        name: value
        for name, value in asdict(entry).items()
        if name not in {"doc_content", "has_readme", "doc_files"}
    }
    content = dict(doc_content)
    return DocUpdateContext(
        **base,
        doc_content=content,
        has_readme=any(is_root_readme(path) for path in content),
        doc_files=tuple(content),
    )


def _iso_date(today: Optional[date]) -> str:
    return (today or date.today()).isoformat()


def _require(payload: Mapping[str, Any], key: str, label: str) -> str:
    value = payload.get(key)
    if value is None or value == "":
        raise EventDataError(f"{label} payload is missing '{key}'")
    return str(value)


__all__ = [
    "build_change_request_entry",
    "build_doc_update_context",
    "build_sync_entry",
    "is_root_readme",
    "parse_request_number",
]
