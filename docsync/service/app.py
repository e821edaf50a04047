"""FastAPI application entrypoint for docsync service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..changelog.blocks import build_changelog_blocks
from ..changelog.entries import build_doc_update_context
from ..config import load_config
from ..errors import ConfigError, DocSyncError, EventDataError, UnsupportedEventError
from ..github.events import ActionContext
from ..models import ChangelogEntry, EntryKind
from ..orchestrator import SyncOutcome, run_from_config
from ..prompting.builder import PromptBuilder
from ..prompting.page_id import extract_page_id

SyncRunner = Callable[[ActionContext], SyncOutcome]


class EntryPayload(BaseModel):
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
    doc_content: Dict[str, str] = Field(default_factory=dict)

    def to_entry(self) -> ChangelogEntry:
        entry = ChangelogEntry(
            kind=self.kind,
            date=self.date,
            title=self.title,
            author=self.author,
            url=self.url,
            summary=self.summary,
            files=self.files,
            request_number=self.request_number,
            commit_hash=self.commit_hash,
            repo_description=self.repo_description,
        )
        if self.doc_content:
            return build_doc_update_context(entry, self.doc_content)
        return entry


class PromptRequest(BaseModel):
    entry: EntryPayload
    page_id: str
    root_page_id: Optional[str] = None


class PromptResponse(BaseModel):
    changelog: str
    doc_update: Optional[str] = None
    blocks: List[Dict[str, Any]]


class PageIdRequest(BaseModel):
    text: Optional[str] = None


class PageIdResponse(BaseModel):
    page_id: Optional[str] = None


class SyncRequest(BaseModel):
    event_name: str
    repository: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class SyncResponse(BaseModel):
    status: str
    page_id: Optional[str] = None
    reason: Optional[str] = None
    transitions: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def _default_sync_runner(context: ActionContext) -> SyncOutcome:
    return run_from_config(load_config(), context)


def create_app(sync_runner: SyncRunner = _default_sync_runner) -> FastAPI:
    """Create the FastAPI application exposing docsync operations."""
    app = FastAPI(title="docsync", version="0.1.0")

    async def get_builder() -> PromptBuilder:
        return PromptBuilder()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/prompts", response_model=PromptResponse)
    async def render_prompts(
        payload: PromptRequest,
        builder: PromptBuilder = Depends(get_builder),
    ) -> PromptResponse:
        entry = payload.entry.to_entry()
        doc_update = None
        if payload.entry.doc_content:
            doc_update = builder.doc_update(entry, payload.root_page_id or payload.page_id)
        return PromptResponse(
            changelog=builder.changelog(entry, payload.page_id),
            doc_update=doc_update,
            blocks=build_changelog_blocks(entry),
        )

    @app.post("/page-id", response_model=PageIdResponse)
    async def page_id(payload: PageIdRequest) -> PageIdResponse:
        return PageIdResponse(page_id=extract_page_id(payload.text))

    @app.post("/sync", response_model=SyncResponse)
    async def sync(payload: SyncRequest) -> SyncResponse:
        owner, _, repo = payload.repository.partition("/")
        if not owner or not repo:
            raise EventDataError("repository must be given as '<owner>/<repo>'")
        context = ActionContext(
            event_name=payload.event_name,
            owner=owner,
            repo=repo,
            payload=payload.payload,
        )
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, sync_runner, context)
        return SyncResponse(
            status="ok" if outcome.ok else "failed",
            page_id=outcome.page_id,
            reason=outcome.reason,
            transitions=[state.value for state in outcome.transitions],
        )

    @app.exception_handler(EventDataError)
    @app.exception_handler(UnsupportedEventError)
    @app.exception_handler(ConfigError)
    async def bad_request_handler(_: Any, exc: DocSyncError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DocSyncError)
    async def upstream_error_handler(_: Any, exc: DocSyncError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
