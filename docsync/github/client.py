"""Read-only GitHub REST client used to gather change metadata."""

from __future__ import annotations

import http.client
import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..errors import GitHubError, GitHubNotFoundError
from ..logging import get_logger

_AUTO_TOKEN = object()


@dataclass
class GitHubRequest:
    """Represents a single GET request against the REST API."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None


@dataclass
class GitHubResponse:
    """Decoded response returned by a transport."""

    status: int
    payload: Any


Transport = Callable[[GitHubRequest], GitHubResponse]


class ContentReader(Protocol):
    """Anything able to return file contents at a ref."""

    def get_content(self, owner: str, repo: str, path: str, ref: str) -> Dict[str, Any]:
        ...


class GitHubClient:
    """Thin wrapper over the endpoints docsync needs."""

    DEFAULT_BASE_URL = "https://api.github.com"
    ENV_TOKEN_KEYS = ("DOCSYNC_GITHUB_TOKEN", "GITHUB_TOKEN")
    PAGE_SIZE = 100

    def __init__(
        self,
        token: str | None | object = _AUTO_TOKEN,
        *,
        base_url: str | None = None,
        request_timeout: Optional[float] = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.token = self._resolve_token(token)
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport or self._urllib_transport
        self.logger = get_logger("github")

    # ------------------------------------------------------------------
    # Endpoints

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        return self._get_object(f"/repos/{owner}/{repo}/pulls/{int(number)}")

    def list_pull_request_files(
        self, owner: str, repo: str, number: int
    ) -> List[Dict[str, Any]]:
        files: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._get(
                f"/repos/{owner}/{repo}/pulls/{int(number)}/files",
                params={"per_page": self.PAGE_SIZE, "page": page},
            )
            if not isinstance(batch, list):
                raise GitHubError("Unexpected payload listing pull request files")
            files.extend(item for item in batch if isinstance(item, dict))
            if len(batch) < self.PAGE_SIZE:
                return files
            page += 1

    def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        return self._get_object(f"/repos/{owner}/{repo}")

    def get_latest_commit(self, owner: str, repo: str, branch: str) -> Dict[str, Any]:
        commits = self._get(
            f"/repos/{owner}/{repo}/commits",
            params={"sha": branch, "per_page": 1},
        )
        if not isinstance(commits, list) or not commits:
            raise GitHubError(f"No commits found on branch '{branch}'")
        return commits[0]

    def get_tree(
        self, owner: str, repo: str, sha: str, *, recursive: bool = True
    ) -> List[Dict[str, Any]]:
        params = {"recursive": "true"} if recursive else None
        payload = self._get_object(f"/repos/{owner}/{repo}/git/trees/{sha}", params=params)
        if payload.get("truncated"):
            self.logger.debug("Tree listing for %s was truncated by GitHub", sha)
        tree = payload.get("tree")
        return [item for item in tree if isinstance(item, dict)] if isinstance(tree, list) else []

    def get_content(self, owner: str, repo: str, path: str, ref: str) -> Dict[str, Any]:
        return self._get_object(
            f"/repos/{owner}/{repo}/contents/{quote(path)}",
            params={"ref": ref},
        )

    # ------------------------------------------------------------------
    # Helpers

    def _get_object(self, path: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        payload = self._get(path, params=params)
        if not isinstance(payload, dict):
            raise GitHubError(f"Unexpected payload for {path}")
        return payload

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "docsync",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self.logger.debug("GET %s", url)
        response = self._transport(
            GitHubRequest(url=url, headers=headers, timeout=self.request_timeout)
        )
        if response.status == 404:
            raise GitHubNotFoundError(f"GitHub resource not found: {path}", status=404)
        if response.status >= 400:
            raise GitHubError(
                f"GitHub request failed with status {response.status}: {path}",
                status=response.status,
            )
        return response.payload

    @staticmethod
    def _urllib_transport(request: GitHubRequest) -> GitHubResponse:
        http_request = Request(request.url, headers=request.headers, method="GET")
        timeout = request.timeout or 30.0
        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
                status = getattr(response, "status", 200)
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            return GitHubResponse(status=exc.code, payload={"message": detail.strip()})
        except URLError as exc:  # pragma: no cover - depends on network
            raise GitHubError(f"GitHub request failed: {exc.reason}") from exc
        except http.client.HTTPException as exc:
            raise GitHubError(f"GitHub connection dropped: {exc!r}") from exc

        try:
            payload = json.loads(raw.decode("utf-8")) if raw else None
        except json.JSONDecodeError as exc:
            raise GitHubError("GitHub returned invalid JSON") from exc
        return GitHubResponse(status=status, payload=payload)

    def _resolve_token(self, token: str | None | object) -> str | None:
        if token is _AUTO_TOKEN:
            return self._first_env_value(self.ENV_TOKEN_KEYS)
        return token  # type: ignore[return-value]

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None


__all__ = [
    "ContentReader",
    "GitHubClient",
    "GitHubRequest",
    "GitHubResponse",
]
