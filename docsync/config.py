"""Configuration loading for docsync (.docsync.yml plus action inputs)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .constants import DEFAULT_MODEL
from .errors import ConfigError

CONFIG_FILENAME = ".docsync.yml"


class UpdateMode(str, Enum):
    """Which Notion pages a run is allowed to touch."""

    CHANGELOG_ONLY = "changelog-only"
    CHANGELOG_AND_DOC = "changelog-and-doc"

    @property
    def includes_docs(self) -> bool:
        return self is UpdateMode.CHANGELOG_AND_DOC

    @classmethod
    def parse(cls, value: str | None) -> "UpdateMode":
        if not value:
            return cls.CHANGELOG_AND_DOC
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            choices = ", ".join(mode.value for mode in cls)
            raise ConfigError(f"Unknown update mode '{value}' (expected one of: {choices})") from exc


@dataclass
class NotionConfig:
    """Target workspace settings."""

    token: Optional[str] = None
    page_id: Optional[str] = None
    changelog_title: str = "Changelog"


@dataclass
class AgentConfig:
    """Agent runtime settings."""

    model: str = DEFAULT_MODEL
    executable: str = "copilot"
    allowed_tools: List[str] = field(default_factory=lambda: ["*"])
    exchange_timeout: float = 600.0
    cleanup_timeout: float = 5.0


@dataclass
class GitHubConfig:
    """Source-control settings."""

    token: Optional[str] = None
    api_url: Optional[str] = None
    request_timeout: float = 30.0


@dataclass
class DocSyncConfig:
    """Represents the settings for a docsync run."""

    root: Path
    update_mode: UpdateMode = UpdateMode.CHANGELOG_AND_DOC
    notion: NotionConfig = field(default_factory=NotionConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    def require(self) -> "DocSyncConfig":
        """Raise ConfigError unless the values needed for a full run are present."""
        missing = []
        if not self.notion.token:
            missing.append("notion-token")
        if not self.notion.page_id:
            missing.append("notion-page-id")
        if not self.github.token:
            missing.append("github-token")
        if missing:
            raise ConfigError(f"Missing required input(s): {', '.join(missing)}")
        if not self.agent.allowed_tools:
            raise ConfigError(
                "agent.allowed_tools is empty; list the Notion tools to allow, or \"*\" for all"
            )
        return self


# Action inputs arrive as INPUT_<NAME> with the name upper-cased verbatim.
_INPUT_KEYS: Mapping[str, Sequence[str]] = {
    "notion_token": ("INPUT_NOTION-TOKEN", "INPUT_NOTION_TOKEN", "NOTION_TOKEN"),
    "notion_page_id": ("INPUT_NOTION-PAGE-ID", "INPUT_NOTION_PAGE_ID", "NOTION_PAGE_ID"),
    "github_token": ("INPUT_GITHUB-TOKEN", "INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"),
    "model": ("INPUT_MODEL", "DOCSYNC_MODEL"),
    "update_mode": ("INPUT_UPDATE-MODE", "INPUT_UPDATE_MODE", "DOCSYNC_UPDATE_MODE"),
}


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> DocSyncConfig:
    """Load configuration from disk, then apply action inputs and environment overrides."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()
    data = _read_config(config_file) if config_file.exists() else {}
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    notion_data = _as_dict(data.get("notion"))
    notion = NotionConfig(
        token=_as_str(notion_data.get("token")),
        page_id=_as_str(notion_data.get("page_id")),
        changelog_title=_as_str(notion_data.get("changelog_title")) or "Changelog",
    )

    agent_data = _as_dict(data.get("agent"))
    agent = AgentConfig()
    if agent_data:
        agent.model = _as_str(agent_data.get("model")) or agent.model
        agent.executable = _as_str(agent_data.get("executable")) or agent.executable
        if "allowed_tools" in agent_data:
            agent.allowed_tools = _as_str_list(agent_data.get("allowed_tools"))
        agent.exchange_timeout = _as_float(agent_data.get("exchange_timeout"), agent.exchange_timeout)
        agent.cleanup_timeout = _as_float(agent_data.get("cleanup_timeout"), agent.cleanup_timeout)

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig(
        token=_as_str(github_data.get("token")),
        api_url=_as_str(github_data.get("api_url")),
        request_timeout=_as_float(github_data.get("request_timeout"), 30.0),
    )

    config = DocSyncConfig(
        root=root,
        update_mode=UpdateMode.parse(_as_str(data.get("update_mode"))),
        notion=notion,
        agent=agent,
        github=github,
    )
    apply_env_overrides(config, os.environ if environ is None else environ)
    return config


def apply_env_overrides(config: DocSyncConfig, environ: Mapping[str, str]) -> DocSyncConfig:
    """Overlay GitHub Actions inputs and environment variables onto ``config``."""
    values = {name: _first_env_value(environ, keys) for name, keys in _INPUT_KEYS.items()}
    if values["notion_token"]:
        config.notion.token = values["notion_token"]
    if values["notion_page_id"]:
        config.notion.page_id = values["notion_page_id"]
    if values["github_token"]:
        config.github.token = values["github_token"]
    if values["model"]:
        config.agent.model = values["model"]
    if values["update_mode"]:
        config.update_mode = UpdateMode.parse(values["update_mode"])
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _first_env_value(environ: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = environ.get(key)
        if value:
            return value.strip()
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AgentConfig",
    "CONFIG_FILENAME",
    "DocSyncConfig",
    "GitHubConfig",
    "NotionConfig",
    "UpdateMode",
    "apply_env_overrides",
    "load_config",
]
