"""Drives one agent session through the changelog and doc-update steps."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .agent.session import (
    AgentClient,
    AgentSession,
    CopilotCliClient,
    McpServerConfig,
    SessionConfig,
    notion_mcp_server,
)
from .config import DocSyncConfig, UpdateMode
from .constants import DEFAULT_MODEL
from .errors import PageIdError
from .github.client import GitHubClient
from .github.events import ActionContext, prepare_entry
from .logging import get_logger
from .models import ChangelogEntry, DocUpdateContext
from .prompting.builder import PromptBuilder
from .prompting.page_id import extract_page_id


class SyncState(str, Enum):
    IDLE = "idle"
    SESSION_STARTING = "session-starting"
    FIND_OR_CREATE_PAGE = "find-or-create-page"
    EXTRACTING_ID = "extracting-id"
    APPENDING_CHANGELOG = "appending-changelog"
    UPDATING_DOC = "updating-doc"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncSettings:
    """Per-run values supplied by the caller."""

    root_page_id: str
    model: str = DEFAULT_MODEL
    update_mode: UpdateMode = UpdateMode.CHANGELOG_AND_DOC
    mcp_servers: Tuple[McpServerConfig, ...] = ()
    exchange_timeout: Optional[float] = 600.0
    cleanup_timeout: float = 5.0


@dataclass
class SyncOutcome:
    """Result of a sync run."""

    state: SyncState
    page_id: Optional[str] = None
    reason: Optional[str] = None
    transitions: List[SyncState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is SyncState.DONE


class SyncOrchestrator:
    """Runs the find-or-create, append, and doc-update exchanges in order.

    One client and one session object serve the whole run, and every
    exchange completes before the next starts, so the Changelog page is
    never created twice and writes to it never interleave. The session
    keeps no conversation between exchanges: each prompt carries the page
    IDs it needs. The session and client are released on every exit path.
    """

    def __init__(
        self,
        client_factory: Callable[[], AgentClient],
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._client_factory = client_factory
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("orchestrator")

    def run(self, entry: ChangelogEntry, settings: SyncSettings) -> SyncOutcome:
        outcome = SyncOutcome(state=SyncState.IDLE, transitions=[SyncState.IDLE])
        client: AgentClient | None = None
        session: AgentSession | None = None
        try:
            self._advance(outcome, SyncState.SESSION_STARTING)
            self.logger.info("Starting agent session (model: %s)", settings.model)
            client = self._client_factory()
            client.start()
            session = client.create_session(self._session_config(settings))
            self.logger.info("Agent session created: %s", session.session_id)

            self._advance(outcome, SyncState.FIND_OR_CREATE_PAGE)
            self.logger.info(
                "Searching for or creating %s page...", self.prompt_builder.changelog_title
            )
            reply = session.send(
                self.prompt_builder.find_or_create(settings.root_page_id),
                timeout=settings.exchange_timeout,
            )

            self._advance(outcome, SyncState.EXTRACTING_ID)
            page_id = extract_page_id(reply.content)
            if page_id is None:
                raise PageIdError(
                    f"Failed to find or create {self.prompt_builder.changelog_title} page; "
                    f"agent replied: {reply.content!r}",
                    response_text=reply.content,
                )
            outcome.page_id = page_id
            self.logger.info("Using %s page: %s", self.prompt_builder.changelog_title, page_id)

            self._advance(outcome, SyncState.APPENDING_CHANGELOG)
            reply = session.send(
                self.prompt_builder.changelog(entry, page_id),
                timeout=settings.exchange_timeout,
            )
            self.logger.debug("Changelog reply: %s", reply.content)
            self.logger.info("Changelog entry added")

            doc_prompt = self._doc_update_prompt(entry, settings)
            if doc_prompt is not None:
                self._advance(outcome, SyncState.UPDATING_DOC)
                self.logger.info("Updating main documentation page...")
                reply = session.send(doc_prompt, timeout=settings.exchange_timeout)
                self.logger.debug("Doc update reply: %s", reply.content)
                self.logger.info("Main documentation page updated")

            self._advance(outcome, SyncState.DONE)
            self.logger.info("Documentation update completed")
        except Exception as exc:
            step = outcome.state.value
            outcome.reason = f"{step}: {exc}"
            self.logger.debug("Run failed during %s", step, exc_info=True)
            self._advance(outcome, SyncState.FAILED)
        finally:
            self._teardown(session, client, settings.cleanup_timeout)
        return outcome

    def _doc_update_prompt(
        self, entry: ChangelogEntry, settings: SyncSettings
    ) -> Optional[str]:
        if not settings.update_mode.includes_docs:
            return None
        if not isinstance(entry, DocUpdateContext) or not entry.has_readme:
            self.logger.info("Skipping doc update: no README.md found in fetched documentation")
            return None
        prompt = self.prompt_builder.doc_update(entry, settings.root_page_id)
        if prompt is None:
            self.logger.info("Skipping doc update: README.md is empty")
        return prompt

    def _session_config(self, settings: SyncSettings) -> SessionConfig:
        return SessionConfig(
            model=settings.model,
            system_message=self.prompt_builder.system_message(settings.root_page_id),
            mcp_servers=settings.mcp_servers,
        )

    def _teardown(
        self,
        session: AgentSession | None,
        client: AgentClient | None,
        timeout: float,
    ) -> None:
        if session is not None:
            self._release("Session", session.destroy, timeout)
        if client is not None:
            self._release("Client", client.stop, timeout)

    def _release(self, label: str, action: Callable[[], None], timeout: float) -> None:
        errors: List[BaseException] = []

        def _target() -> None:
            try:
                action()
            except Exception as exc:
                errors.append(exc)

        worker = threading.Thread(
            target=_target, name=f"docsync-{label.lower()}-cleanup", daemon=True
        )
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            self.logger.debug("%s cleanup: still running after %ss, abandoning", label, timeout)
        elif errors:
            self.logger.debug("%s cleanup: %s", label, errors[0])

    @staticmethod
    def _advance(outcome: SyncOutcome, state: SyncState) -> None:
        outcome.state = state
        outcome.transitions.append(state)


def settings_from_config(config: DocSyncConfig) -> SyncSettings:
    """Translate loaded configuration into per-run settings."""
    config.require()
    return SyncSettings(
        root_page_id=str(config.notion.page_id),
        model=config.agent.model,
        update_mode=config.update_mode,
        mcp_servers=(
            notion_mcp_server(str(config.notion.token), tools=config.agent.allowed_tools),
        ),
        exchange_timeout=config.agent.exchange_timeout,
        cleanup_timeout=config.agent.cleanup_timeout,
    )


def run_from_config(
    config: DocSyncConfig,
    context: ActionContext,
    *,
    github_client: GitHubClient | None = None,
    client_factory: Callable[[], AgentClient] | None = None,
) -> SyncOutcome:
    """Build the entry for ``context`` and sync it into Notion."""
    settings = settings_from_config(config)
    github = github_client or GitHubClient(
        config.github.token,
        base_url=config.github.api_url,
        request_timeout=config.github.request_timeout,
    )
    entry = prepare_entry(github, context, config.update_mode)
    orchestrator = SyncOrchestrator(
        client_factory or (lambda: CopilotCliClient(config.agent.executable)),
        PromptBuilder(changelog_title=config.notion.changelog_title),
    )
    return orchestrator.run(entry, settings)


__all__ = [
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncSettings",
    "SyncState",
    "run_from_config",
    "settings_from_config",
]
