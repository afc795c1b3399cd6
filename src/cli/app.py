"""Typer CLI entrypoint for the restore and save steps."""

from __future__ import annotations

import typer

from cli.commands import cache, config
from core.log import configure_logging
from uuidcache import __version__
from uuidcache.constants import Inputs

app = typer.Typer(
    help=(
        "Cache UUID-marked build directories across CI runs.\n\n"
        "Run `restore` at job start and `save` at job end."
    ),
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
app.add_typer(cache.app, name="cache")
app.add_typer(config.app, name="config")


@app.callback()
def root(
    ctx: typer.Context,
    version_flag: bool = typer.Option(
        False,
        "-v",
        "--version",
        help="Show the installed version and exit.",
    ),
) -> None:
    if version_flag:
        typer.echo(__version__)
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command(help="Restore the manifest and every directory it lists")
def restore(
    key: str | None = typer.Option(
        None,
        "--key",
        help="Primary cache key (defaults to the INPUT_KEY step input)",
    ),
    path: list[str] | None = typer.Option(
        None,
        "--path",
        help="Cache path pattern, repeatable",
    ),
    restore_keys: list[str] | None = typer.Option(
        None,
        "--restore-keys",
        help="Fallback key prefix for directory entries, repeatable",
    ),
) -> None:
    from cli.commands.shared import export_inputs
    from uuidcache.restore import run

    export_inputs(
        {
            Inputs.KEY.value: key,
            Inputs.PATH.value: path,
            Inputs.RESTORE_KEYS.value: restore_keys,
        }
    )
    configure_logging()
    raise typer.Exit(code=run())


@app.command(help="Save UUID-marked directories and the manifest")
def save(
    path: list[str] | None = typer.Option(
        None,
        "--path",
        help="Cache path pattern, repeatable",
    ),
    upload_chunk_size: int | None = typer.Option(
        None,
        "--upload-chunk-size",
        min=1,
        help="Chunk size in bytes used when uploading archives",
    ),
) -> None:
    from cli.commands.shared import export_inputs
    from uuidcache.save import run

    export_inputs(
        {
            Inputs.PATH.value: path,
            Inputs.UPLOAD_CHUNK_SIZE.value: upload_chunk_size,
        }
    )
    configure_logging()
    raise typer.Exit(code=run())


def main() -> None:
    app()


__all__ = ["app", "main"]
