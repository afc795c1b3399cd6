"""Local cache store inspection commands."""

from __future__ import annotations

import typer

from .shared import emit_json


app = typer.Typer(
    help="Inspect the local cache store",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
    no_args_is_help=True,
)


@app.command("entries", help="List cache entries as JSON")
def cache_entries(
    committed_only: bool = typer.Option(
        False,
        "--committed-only",
        help="Hide reservations that were never committed",
    ),
) -> None:
    from persistence.cache import build_backend

    backend = build_backend()
    if not backend.is_available():
        emit_json({"entries": [], "reason": "cache_unavailable"})
        return
    entries = backend.list_entries()
    if committed_only:
        entries = [entry for entry in entries if entry.committed]
    emit_json({"entries": [entry.to_dict() for entry in entries]})


__all__ = ["app"]
