"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsync import cli
from docsync.cli import _build_parser
from docsync.config import DocSyncConfig, load_config
from docsync.errors import ConfigError
from docsync.orchestrator import SyncOutcome, SyncState


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "run"])
    assert args.verbose is True
    assert args.command == "run"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", "--verbose"])
    assert args.verbose is True
    assert args.command == "run"


def test_cli_accepts_event_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["preview", "--event-name", "workflow_dispatch", "--event-path", "event.json", "--blocks"]
    )
    assert args.command == "preview"
    assert args.event_name == "workflow_dispatch"
    assert args.event_path == Path("event.json")
    assert args.blocks is True


def test_cli_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve"])
    assert args.host == "0.0.0.0"
    assert args.port == 8000


@pytest.fixture
def action_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    output = tmp_path / "github_output"
    output.touch()
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/widgets")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)
    monkeypatch.setattr(cli, "load_config", lambda path=None: DocSyncConfig(root=tmp_path))
    return output


def test_run_writes_page_id_output(action_env: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    seen = {}

    def fake_run(config, context):  # type: ignore[no-untyped-def]
        seen["context"] = context
        return SyncOutcome(state=SyncState.DONE, page_id="abc123")

    monkeypatch.setattr(cli, "run_from_config", fake_run)

    cli.main(["run", "--event-name", "workflow_dispatch"])

    assert seen["context"].owner == "acme"
    assert seen["context"].repo == "widgets"
    assert action_env.read_text(encoding="utf-8") == "changelog-page-id=abc123\n"
    assert "Changelog page: abc123" in capsys.readouterr().out


def test_run_exits_non_zero_on_failed_outcome(
    action_env: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setattr(
        cli,
        "run_from_config",
        lambda config, context: SyncOutcome(
            state=SyncState.FAILED, reason="extracting-id: no page id"
        ),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--event-name", "workflow_dispatch"])

    assert excinfo.value.code == 1
    assert "docsync run failed: extracting-id: no page id" in capsys.readouterr().err
    assert action_env.read_text(encoding="utf-8") == ""


def test_run_exits_non_zero_on_config_error(
    action_env: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    def fake_run(config, context):  # type: ignore[no-untyped-def]
        raise ConfigError("Missing required input(s): notion-token")

    monkeypatch.setattr(cli, "run_from_config", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--event-name", "workflow_dispatch"])

    assert excinfo.value.code == 1
    assert "notion-token" in capsys.readouterr().err


def test_preview_prints_prompts_without_agent(
    action_env: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, fake_github
) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": 42}}), encoding="utf-8")
    monkeypatch.setattr(cli, "GitHubClient", lambda *args, **kwargs: fake_github)

    cli.main(["preview", "--event-name", "pull_request", "--event-path", str(event), "--blocks"])

    out = capsys.readouterr().out
    assert 'child page named "Changelog"' in out
    assert "PR #42 by @testuser" in out
    assert "# Widgets" in out
    assert '"type": "heading_2"' in out


def test_run_reports_malformed_event_on_one_line(
    action_env: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, fake_github
) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": "abc"}}), encoding="utf-8")
    monkeypatch.setenv("NOTION_TOKEN", "nt")
    monkeypatch.setenv("NOTION_PAGE_ID", "np")
    monkeypatch.setenv("GITHUB_TOKEN", "gt")
    monkeypatch.setattr(cli, "load_config", lambda path=None: load_config(tmp_path))
    monkeypatch.setattr("docsync.orchestrator.GitHubClient", lambda *args, **kwargs: fake_github)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["run", "--event-name", "pull_request", "--event-path", str(event)])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "docsync run failed: Pull request payload has no usable 'number'" in err
    assert "Traceback" not in err


def test_failed_run_emits_error_annotation_in_actions(
    action_env: Path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    monkeypatch.setattr(
        cli,
        "run_from_config",
        lambda config, context: SyncOutcome(state=SyncState.FAILED, reason="extracting-id: none"),
    )

    with pytest.raises(SystemExit):
        cli.main(["run", "--event-name", "workflow_dispatch"])

    captured = capsys.readouterr()
    assert "::error::docsync run failed: extracting-id: none" in captured.out
    assert "docsync run failed: extracting-id: none" in captured.err
