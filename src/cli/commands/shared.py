"""Shared helpers for CLI subcommands."""

from __future__ import annotations

import json
import os
from typing import Any, Mapping, Sequence

import typer

from toolkit import input_env_name


def emit_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def export_inputs(values: Mapping[str, str | int | Sequence[str] | None]) -> None:
    """Expose CLI options as step inputs, leaving unset ones to the runner."""
    for name, value in values.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            rendered = "\n".join(str(item) for item in value)
        else:
            rendered = str(value)
        os.environ[input_env_name(name)] = rendered


__all__ = ["emit_json", "export_inputs"]
