"""Agent runtime adapters."""

from .session import (
    AgentClient,
    AgentResponse,
    AgentSession,
    CopilotCliClient,
    McpServerConfig,
    SessionConfig,
    notion_mcp_server,
)

__all__ = [
    "AgentClient",
    "AgentResponse",
    "AgentSession",
    "CopilotCliClient",
    "McpServerConfig",
    "SessionConfig",
    "notion_mcp_server",
]
