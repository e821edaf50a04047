"""Logging for docsync runs, locally and inside GitHub Actions.

Outside Actions, records go to stderr as ``[docsync] LEVEL message``. When
``GITHUB_ACTIONS`` is ``true`` the handler writes workflow commands to
stdout instead: debug records become ``::debug::`` lines (shown only when
step debugging is enabled), warnings ``::warning::`` and errors
``::error::`` annotations, while info records print as plain log lines.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping

_LOGGER_NAME = "docsync"

_WORKFLOW_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docsync hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def in_actions_runtime(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("GITHUB_ACTIONS", "").lower() == "true"


class WorkflowCommandFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _WORKFLOW_COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_command_data(message)}"


def escape_command_data(message: str) -> str:
    # Workflow commands are line-oriented; the runner decodes these escapes.
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> logging.Logger:
    """Install the console handler for this runtime and an optional file sink."""
    actions = in_actions_runtime(environ)
    # The runner filters ::debug:: itself, so Actions always receives debug records.
    level = logging.DEBUG if verbose or actions else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if actions:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(WorkflowCommandFormatter("%(message)s"))
    else:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("[docsync] %(levelname)s %(message)s"))
    console.setLevel(level)
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "WorkflowCommandFormatter",
    "configure_logging",
    "escape_command_data",
    "get_logger",
    "in_actions_runtime",
]
