"""GitHub collaborators: REST client, doc fetching, and event handling."""

from .client import ContentReader, GitHubClient
from .docs import fetch_doc_content

__all__ = ["ContentReader", "GitHubClient", "fetch_doc_content"]
