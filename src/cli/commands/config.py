"""Configuration inspection commands."""

from __future__ import annotations

import typer

from core.config import get_settings
from .shared import emit_json


app = typer.Typer(
    help="Show effective configuration",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    no_args_is_help=True,
)


@app.command("show", help="Show the effective settings")
def show_config(
    json_out: bool = typer.Option(True, "--json/--no-json", help="Print JSON"),
) -> None:
    payload = get_settings().model_dump(mode="json")
    if json_out:
        emit_json(payload)
        return
    for key, value in payload.items():
        typer.echo(f"{key}={value}")


__all__ = ["app"]
