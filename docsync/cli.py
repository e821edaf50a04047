"""CLI entrypoints for docsync commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import NoReturn

from .changelog.blocks import build_changelog_blocks
from .config import UpdateMode, load_config
from .errors import DocSyncError
from .github.client import GitHubClient
from .github.events import ActionContext, prepare_entry, set_output
from .logging import configure_logging, get_logger, in_actions_runtime
from .models import DocUpdateContext
from .orchestrator import run_from_config
from .prompting.builder import PromptBuilder

PREVIEW_PAGE_ID = "<changelog-page-id>"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_event_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .docsync.yml or the directory containing it (defaults to cwd).",
    )
    parser.add_argument(
        "--event-path",
        type=Path,
        default=None,
        help="Event payload JSON (defaults to $GITHUB_EVENT_PATH).",
    )
    parser.add_argument(
        "--event-name",
        default=None,
        help="Event name such as pull_request or workflow_dispatch (defaults to $GITHUB_EVENT_NAME).",
    )


def _fail(parser: argparse.ArgumentParser, command: str, reason: object) -> NoReturn:
    message = f"docsync {command} failed: {reason}"
    if in_actions_runtime():
        # Marks the step as failed with an annotation, like core.setFailed.
        get_logger("cli").error(message)
    parser.exit(1, f"{message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Sync pull-request changelogs and README content into Notion.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Append a changelog entry (and optionally refresh the docs page) for this event.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    _add_event_options(run_parser)

    preview_parser = subparsers.add_parser(
        "preview",
        help="Print the prompts for this event without starting an agent.",
    )
    _add_verbose_option(preview_parser, suppress_default=True)
    _add_event_options(preview_parser)
    preview_parser.add_argument(
        "--blocks",
        action="store_true",
        help="Also print the Notion blocks for the changelog entry as JSON.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsync commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "run":
        try:
            config = load_config(args.config)
            context = ActionContext.from_env(
                event_path=args.event_path, event_name=args.event_name
            )
            outcome = run_from_config(config, context)
        except DocSyncError as exc:
            _fail(parser, "run", exc)
        if not outcome.ok:
            _fail(parser, "run", outcome.reason)
        set_output("changelog-page-id", str(outcome.page_id))
        print(f"Changelog page: {outcome.page_id}")
    elif args.command == "preview":
        try:
            config = load_config(args.config)
            context = ActionContext.from_env(
                event_path=args.event_path, event_name=args.event_name
            )
            github = GitHubClient(
                config.github.token,
                base_url=config.github.api_url,
                request_timeout=config.github.request_timeout,
            )
            entry = prepare_entry(github, context, config.update_mode)
        except DocSyncError as exc:
            _fail(parser, "preview", exc)
        builder = PromptBuilder(changelog_title=config.notion.changelog_title)
        root_page_id = config.notion.page_id or "<root-page-id>"
        print(builder.find_or_create(root_page_id))
        print("\n---\n")
        print(builder.changelog(entry, PREVIEW_PAGE_ID))
        if config.update_mode is UpdateMode.CHANGELOG_AND_DOC and isinstance(
            entry, DocUpdateContext
        ):
            doc_prompt = builder.doc_update(entry, root_page_id)
            print("\n---\n")
            print(doc_prompt or "(no README.md found; doc update skipped)")
        if args.blocks:
            print("\n---\n")
            print(json.dumps(build_changelog_blocks(entry), indent=2))
    elif args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
