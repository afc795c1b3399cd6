"""Logging setup for runner and local consoles."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from core.config import get_settings

_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}
_MARKER = "_uuidcache_handler"


def escape_data(value: str) -> str:
    """Escape a message for use as workflow command data."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandHandler(logging.Handler):
    """Render records as runner workflow commands on stdout."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            command = _COMMANDS.get(record.levelno)
            if command is not None:
                line = f"::{command}::{escape_data(message)}"
            else:
                line = message
            stream = self._stream or sys.stdout
            stream.write(line + os.linesep)
            stream.flush()
        except Exception:
            self.handleError(record)


def running_in_runner() -> bool:
    return os.getenv("GITHUB_ACTIONS", "").lower() == "true"


def configure_logging(level: str | None = None, *, console: Console | None = None) -> None:
    """Install a single root handler suited to the current environment."""
    resolved = (level or get_settings().log_level).upper()
    if os.getenv("RUNNER_DEBUG") == "1":
        resolved = "DEBUG"

    handler: logging.Handler
    if running_in_runner():
        handler = WorkflowCommandHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _MARKER, False):
            root.removeHandler(existing)
    setattr(handler, _MARKER, True)
    root.addHandler(handler)
    root.setLevel(resolved)


__all__ = [
    "WorkflowCommandHandler",
    "configure_logging",
    "escape_data",
    "running_in_runner",
]
