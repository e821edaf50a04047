"""Adapters around the tool-using agent runtime (Copilot CLI + Notion MCP)."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..errors import AgentError
from ..logging import get_logger

NOTION_MCP_PACKAGE = "@notionhq/notion-mcp-server"

_logger = get_logger("agent")


@dataclass(frozen=True)
class McpServerConfig:
    """A local MCP tool server and the tools the agent may call on it.

    ``tools`` is an explicit allow-list; ``("*",)`` grants every tool the
    server exposes and must be requested deliberately.
    """

    name: str
    command: str
    args: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    tools: Tuple[str, ...] = ()

    @property
    def allows_all_tools(self) -> bool:
        return "*" in self.tools

    def to_mcp_json(self) -> Dict[str, object]:
        return {
            "type": "local",
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "tools": list(self.tools),
        }


@dataclass(frozen=True)
class SessionConfig:
    """Settings for one agent session."""

    model: str
    system_message: Optional[str] = None
    mcp_servers: Tuple[McpServerConfig, ...] = ()


@dataclass(frozen=True)
class AgentResponse:
    """Final text of one exchange."""

    content: str
    timed_out: bool = False


@dataclass
class AgentRequest:
    """Represents one prompt dispatched to the agent executable."""

    prompt: str
    executable: str
    config: SessionConfig
    timeout: Optional[float]


class AgentSession(Protocol):
    session_id: str

    def send(self, prompt: str, *, timeout: Optional[float] = None) -> AgentResponse:
        ...

    def destroy(self) -> None:
        ...


class AgentClient(Protocol):
    def start(self) -> None:
        ...

    def create_session(self, config: SessionConfig) -> AgentSession:
        ...

    def stop(self) -> None:
        ...


def notion_mcp_server(
    token: str,
    *,
    tools: Sequence[str],
    environ: Mapping[str, str] | None = None,
) -> McpServerConfig:
    """Describe the Notion MCP server launched through ``npx``.

    ``tools`` is passed through unchanged; an empty list is rejected rather
    than widened.
    """
    if not tools:
        raise AgentError("Notion MCP server needs at least one allowed tool")
    env = os.environ if environ is None else environ
    server_env = {"NOTION_TOKEN": token, "NODE_OPTIONS": "--no-warnings"}
    for key in ("PATH", "HOME"):
        if env.get(key):
            server_env[key] = env[key]
    return McpServerConfig(
        name="notion",
        command="npx",
        args=("-y", NOTION_MCP_PACKAGE),
        env=server_env,
        tools=tuple(tools),
    )


class CopilotCliSession:
    """Session whose exchanges run the agent CLI in non-interactive mode."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        executable: str,
        runner: Callable[[AgentRequest], str],
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self.config = config
        self.executable = executable
        self._runner = runner
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, prompt: str, *, timeout: Optional[float] = None) -> AgentResponse:
        """Run one exchange; an exchange that times out counts as an empty reply."""
        if self._closed:
            raise AgentError(f"Session {self.session_id} has already been destroyed")
        request = AgentRequest(
            prompt=prompt,
            executable=self.executable,
            config=self.config,
            timeout=timeout,
        )
        try:
            content = self._runner(request)
        except subprocess.TimeoutExpired as exc:
            _logger.warning(
                "Agent exchange exceeded %ss; treating it as complete", exc.timeout
            )
            return AgentResponse(content=_partial_output(exc.stdout), timed_out=True)
        return AgentResponse(content=content.strip())

    def destroy(self) -> None:
        self._closed = True


class CopilotCliClient:
    """Starts the Copilot CLI and hands out sessions bound to it."""

    DEFAULT_EXECUTABLE = "copilot"
    ENV_EXECUTABLE_KEYS = ("DOCSYNC_AGENT_EXECUTABLE", "COPILOT_CLI_PATH")

    def __init__(
        self,
        executable: str | None = None,
        *,
        runner: Callable[[AgentRequest], str] | None = None,
    ) -> None:
        self.executable = executable or self._env_executable() or self.DEFAULT_EXECUTABLE
        self._runner = runner or self._cli_runner
        self._external_runner = runner is not None
        self._sessions: List[CopilotCliSession] = []
        self._started = False

    def start(self) -> None:
        if not self._external_runner and shutil.which(self.executable) is None:
            raise AgentError(
                f"Unable to locate '{self.executable}'. Install the Copilot CLI or set "
                "DOCSYNC_AGENT_EXECUTABLE."
            )
        self._started = True
        _logger.debug("Agent client ready (%s)", self.executable)

    def create_session(self, config: SessionConfig) -> CopilotCliSession:
        if not self._started:
            raise AgentError("Agent client must be started before creating a session")
        session = CopilotCliSession(config, executable=self.executable, runner=self._runner)
        self._sessions.append(session)
        return session

    def stop(self) -> None:
        for session in self._sessions:
            session.destroy()
        self._sessions.clear()
        self._started = False

    @staticmethod
    def build_args(request: AgentRequest) -> List[str]:
        config = request.config
        args = [request.executable, "--model", config.model]
        if config.mcp_servers:
            servers = {server.name: server.to_mcp_json() for server in config.mcp_servers}
            args.extend(["--additional-mcp-config", json.dumps({"mcpServers": servers})])
        for server in config.mcp_servers:
            if server.allows_all_tools:
                args.extend(["--allow-tool", server.name])
                continue
            for tool in server.tools:
                args.extend(["--allow-tool", f"{server.name}({tool})"])
        args.extend(["-p", _compose_prompt(config.system_message, request.prompt)])
        return args

    @classmethod
    def _cli_runner(cls, request: AgentRequest) -> str:
        args = cls.build_args(request)
        try:
            completed = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                timeout=request.timeout,
            )
        except FileNotFoundError as exc:  # pragma: no cover - depends on environment
            raise AgentError(f"Unable to locate '{request.executable}'.") from exc
        except subprocess.CalledProcessError as exc:
            message = (exc.stderr or "").strip() or (exc.stdout or "").strip()
            raise AgentError(
                f"Agent exited with code {exc.returncode}: {message or 'no output'}"
            ) from exc
        return completed.stdout

    @classmethod
    def _env_executable(cls) -> str | None:
        for key in cls.ENV_EXECUTABLE_KEYS:
            value = os.getenv(key)
            if value:
                return value
        return None


def _compose_prompt(system: str | None, prompt: str) -> str:
    if system:
        return f"{system.strip()}\n\n{prompt}"
    return prompt


def _partial_output(output: object) -> str:
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="ignore").strip()
    if isinstance(output, str):
        return output.strip()
    return ""


__all__ = [
    "AgentClient",
    "AgentRequest",
    "AgentResponse",
    "AgentSession",
    "CopilotCliClient",
    "CopilotCliSession",
    "McpServerConfig",
    "SessionConfig",
    "notion_mcp_server",
]
