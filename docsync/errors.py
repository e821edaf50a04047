"""Exception hierarchy for docsync runs."""

from __future__ import annotations


class DocSyncError(RuntimeError):
    """Base class for docsync failures."""


class ConfigError(DocSyncError):
    """Raised when configuration is missing or cannot be parsed."""


class EventDataError(DocSyncError):
    """Raised when event payloads lack fields required to build an entry."""


class UnsupportedEventError(DocSyncError):
    """Raised when docsync is triggered by an event it does not handle."""


class GitHubError(DocSyncError):
    """Raised when a GitHub REST call fails."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GitHubNotFoundError(GitHubError):
    """Raised when GitHub reports that a resource does not exist."""


class AgentError(DocSyncError):
    """Raised when the agent runtime fails to start or answer."""


class PageIdError(DocSyncError):
    """Raised when no page identifier can be read from an agent response."""

    def __init__(self, message: str, *, response_text: str = "") -> None:
        super().__init__(message)
        self.response_text = response_text


__all__ = [
    "AgentError",
    "ConfigError",
    "DocSyncError",
    "EventDataError",
    "GitHubError",
    "GitHubNotFoundError",
    "PageIdError",
    "UnsupportedEventError",
]
