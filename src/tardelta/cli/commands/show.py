"""Show command for tar-delta CLI."""

import asyncio
from pathlib import Path

import typer

from tardelta.cli.app import app
from tardelta.cli.commands.display import display_changes
from tardelta.errors import TarDeltaError, format_error
from tardelta.services import DeltaService


@app.command()
def show(
    ctx: typer.Context,
    delta: Path = typer.Argument(..., help="Delta archive to inspect"),
    detail: bool = typer.Option(False, "--detail", "-d", help="List every changed path"),
):
    """Show the manifest of a delta archive."""
    try:
        manifest = asyncio.run(DeltaService(ctx.obj).inspect(delta))
    except TarDeltaError as e:
        typer.echo(format_error(e), err=True)
        raise typer.Exit(1)

    display_changes(f"Delta {delta.name}", manifest, verbose=detail)
