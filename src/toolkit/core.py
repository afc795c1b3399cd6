"""Workflow runner interface: inputs, outputs, step state and failure."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.config import get_settings

logger = logging.getLogger(__name__)

_DELIMITER_PREFIX = "ghadelimiter_"


class InputError(ValueError):
    """A required step input was not supplied."""


class _RunStatus:
    exit_code = 0


def input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, *, required: bool = False, trim: bool = True) -> str:
    value = os.environ.get(input_env_name(name), "")
    if required and not value:
        raise InputError(f"Input required and not supplied: {name}")
    return value.strip() if trim else value


def get_multiline_input(name: str, *, required: bool = False) -> list[str]:
    value = get_input(name, required=required, trim=False)
    return [line.strip() for line in value.splitlines() if line.strip()]


def set_output(name: str, value: Any) -> None:
    rendered = _render(value)
    target = os.environ.get("GITHUB_OUTPUT")
    if target:
        _append_record(Path(target), name, rendered)
        return
    sys.stdout.write(f"::set-output name={name}::{rendered}{os.linesep}")


def save_state(name: str, value: Any) -> None:
    """Persist ``name`` for later steps of the same job.

    The state file only reaches an action's own post step, so inside a
    runner the value is also exported as ``STATE_<name>`` via
    ``GITHUB_ENV`` for steps that run the tool separately.
    """
    rendered = _render(value)
    _append_record(_state_path(), name, rendered)
    env_file = os.environ.get("GITHUB_ENV")
    if env_file:
        _append_record(Path(env_file), f"STATE_{name}", rendered)


def clear_state() -> None:
    """Truncate the local state file; runner-provided state files are left alone."""
    if os.environ.get("GITHUB_STATE"):
        return
    path = get_settings().state_file
    if path.exists():
        path.write_text("", encoding="utf-8")


def get_state(name: str) -> str:
    value = os.environ.get(f"STATE_{name}")
    if value is not None:
        return value
    path = _state_path()
    if not path.exists():
        return ""
    return read_records(path).get(name, "")


def set_failed(message: str) -> None:
    _RunStatus.exit_code = 1
    logger.error(message)


def exit_code() -> int:
    return _RunStatus.exit_code


def reset() -> None:
    _RunStatus.exit_code = 0


def is_debug() -> bool:
    return os.environ.get("RUNNER_DEBUG") == "1"


def read_records(path: Path) -> dict[str, str]:
    """Parse a runner key/value file; later records override earlier ones."""
    records: dict[str, str] = {}
    lines = path.read_text(encoding="utf-8").splitlines()
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        idx += 1
        if "<<" in line:
            key, delimiter = line.split("<<", 1)
            collected: list[str] = []
            while idx < len(lines) and lines[idx] != delimiter:
                collected.append(lines[idx])
                idx += 1
            idx += 1
            records[key] = "\n".join(collected)
        elif "=" in line:
            key, value = line.split("=", 1)
            records[key] = value
    return records


def _state_path() -> Path:
    target = os.environ.get("GITHUB_STATE")
    if target:
        return Path(target)
    return get_settings().state_file


def _append_record(path: Path, name: str, value: str) -> None:
    delimiter = f"{_DELIMITER_PREFIX}{uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: value should not contain the delimiter {delimiter}")
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


__all__ = [
    "InputError",
    "clear_state",
    "exit_code",
    "get_input",
    "get_multiline_input",
    "get_state",
    "input_env_name",
    "is_debug",
    "read_records",
    "reset",
    "save_state",
    "set_failed",
    "set_output",
]
