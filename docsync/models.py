"""Core data models shared across docsync components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple


class EntryKind(str, Enum):
    """Trigger that produced a changelog entry."""

    CHANGE_REQUEST = "change-request"
    PERIODIC_SYNC = "periodic-sync"


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by a pull request."""

    path: str
    status: str
    additions: int = 0
    deletions: int = 0

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ChangedFile":
        return cls(
            path=str(payload.get("filename") or payload.get("path") or ""),
            status=str(payload.get("status") or "modified"),
            additions=int(payload.get("additions") or 0),
            deletions=int(payload.get("deletions") or 0),
        )


@dataclass(frozen=True)
class TreeEntry:
    """An entry from a recursive repository tree listing."""

    path: str
    kind: str

    @property
    def is_file(self) -> bool:
        return self.kind == "blob"

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "TreeEntry":
        return cls(path=str(payload.get("path") or ""), kind=str(payload.get("type") or ""))


@dataclass(frozen=True)
class ChangelogEntry:
    """Normalized changelog record built once per run."""

    kind: EntryKind
    date: str
    title: str
    author: str
    url: str
    summary: str
    files: str = ""
    request_number: Optional[int] = None
    commit_hash: Optional[str] = None
    repo_description: Optional[str] = None

    @property
    def is_change_request(self) -> bool:
        return self.kind is EntryKind.CHANGE_REQUEST

    @property
    def reference_text(self) -> str:
        """Attribution line shown under the changelog heading."""
        if self.is_change_request:
            return f"PR #{self.request_number} by @{self.author}"
        return f"Commit {self.commit_hash} by {self.author}"

    @property
    def reference_label(self) -> str:
        """Short reference used when describing the source of a doc update."""
        if self.is_change_request:
            return f"PR #{self.request_number}: {self.title}"
        return f"Commit {self.commit_hash}: {self.title}"


@dataclass(frozen=True)
class DocUpdateContext(ChangelogEntry):
    """Changelog entry enriched with fetched documentation content."""

    doc_content: Mapping[str, str] = field(default_factory=dict)
    has_readme: bool = False
    doc_files: Tuple[str, ...] = ()


__all__ = [
    "ChangedFile",
    "ChangelogEntry",
    "DocUpdateContext",
    "EntryKind",
    "TreeEntry",
]
