"""Turn GitHub Actions events into changelog entries."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..changelog.entries import (
    build_change_request_entry,
    build_doc_update_context,
    build_sync_entry,
    parse_request_number,
)
from ..changelog.formatting import format_change_request_files, format_tree_files
from ..config import UpdateMode
from ..errors import EventDataError, UnsupportedEventError
from ..logging import get_logger
from ..models import ChangelogEntry, DocUpdateContext
from .client import GitHubClient
from .docs import fetch_doc_content

PreparedEntry = Union[ChangelogEntry, DocUpdateContext]

_logger = get_logger("github.events")


@dataclass(frozen=True)
class ActionContext:
    """The subset of the Actions runtime context docsync reads."""

    event_name: str
    owner: str
    repo: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def pull_request(self) -> Optional[Mapping[str, Any]]:
        value = self.payload.get("pull_request")
        return value if isinstance(value, Mapping) else None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        event_path: Path | None = None,
        event_name: str | None = None,
    ) -> "ActionContext":
        env = os.environ if environ is None else environ
        name = event_name or env.get("GITHUB_EVENT_NAME", "")
        repository = env.get("GITHUB_REPOSITORY", "")
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise EventDataError("GITHUB_REPOSITORY must be set as '<owner>/<repo>'")

        path = event_path
        if path is None and env.get("GITHUB_EVENT_PATH"):
            path = Path(env["GITHUB_EVENT_PATH"])
        payload: Dict[str, Any] = {}
        if path is not None:
            try:
                loaded = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise EventDataError(f"Unable to read event payload {path}: {exc}") from exc
            if isinstance(loaded, dict):
                payload = loaded
        return cls(event_name=name, owner=owner, repo=repo, payload=payload)


def prepare_entry(
    client: GitHubClient,
    context: ActionContext,
    update_mode: UpdateMode = UpdateMode.CHANGELOG_AND_DOC,
) -> PreparedEntry:
    """Collect metadata for the triggering event and build its changelog entry."""
    pr = context.pull_request
    if pr is not None:
        return _prepare_pull_request(client, context, pr, update_mode)
    if context.event_name == "workflow_dispatch":
        return _prepare_sync(client, context, update_mode)
    raise UnsupportedEventError(
        "docsync must run on a pull_request or workflow_dispatch event "
        f"(got '{context.event_name or 'unknown'}')"
    )


def _prepare_pull_request(
    client: GitHubClient,
    context: ActionContext,
    pr: Mapping[str, Any],
    update_mode: UpdateMode,
) -> PreparedEntry:
    number = parse_request_number(pr.get("number"))
    _logger.info("Running in PR mode for #%s", number)

    pull_request = client.get_pull_request(context.owner, context.repo, number)
    files = client.list_pull_request_files(context.owner, context.repo, number)
    entry = build_change_request_entry(pull_request, format_change_request_files(files))

    if not update_mode.includes_docs:
        return entry
    head = pull_request.get("head")
    ref = head.get("sha") if isinstance(head, Mapping) else None
    if not ref:
        raise EventDataError("Pull request payload is missing 'head.sha'")
    docs = fetch_doc_content(client, context.owner, context.repo, ref, files)
    return build_doc_update_context(entry, docs)


def _prepare_sync(
    client: GitHubClient,
    context: ActionContext,
    update_mode: UpdateMode,
) -> PreparedEntry:
    _logger.info("Running in workflow_dispatch mode, syncing from the default branch")
    repo_info = client.get_repository(context.owner, context.repo)
    branch = repo_info.get("default_branch")
    if not branch:
        raise EventDataError("Repository payload is missing 'default_branch'")
    latest = client.get_latest_commit(context.owner, context.repo, str(branch))
    sha = latest.get("sha")
    if not sha:
        raise EventDataError("Commit payload is missing 'sha'")
    tree = client.get_tree(context.owner, context.repo, str(sha))
    entry = build_sync_entry(repo_info, latest, format_tree_files(tree))

    if not update_mode.includes_docs:
        return entry
    docs = fetch_doc_content(client, context.owner, context.repo, str(sha), tree)
    return build_doc_update_context(entry, docs)


def set_output(name: str, value: str, environ: Mapping[str, str] | None = None) -> bool:
    """Append an output to $GITHUB_OUTPUT; returns False outside of Actions."""
    env = os.environ if environ is None else environ
    target = env.get("GITHUB_OUTPUT")
    if not target:
        return False
    with open(target, "a", encoding="utf-8") as handle:
        handle.write(f"{name}={value}\n")
    return True


__all__ = ["ActionContext", "PreparedEntry", "prepare_entry", "set_output"]
