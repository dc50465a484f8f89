"""Diff command for tar-delta CLI."""

import asyncio
from pathlib import Path

import typer

from tardelta.cli.app import app
from tardelta.cli.commands.display import display_changes
from tardelta.errors import TarDeltaError, format_error
from tardelta.services import DeltaService


@app.command()
def diff(
    ctx: typer.Context,
    old: Path = typer.Argument(..., help="The old archive"),
    new: Path = typer.Argument(..., help="The new archive"),
    out: Path = typer.Argument(..., help="Where to write the delta archive"),
    detail: bool = typer.Option(False, "--detail", "-d", help="List every changed path"),
):
    """Create a delta archive holding the entries that changed between OLD and NEW."""
    try:
        service = DeltaService(ctx.obj)
        manifest = asyncio.run(service.diff(old, new, out))
    except TarDeltaError as e:
        typer.echo(format_error(e), err=True)
        raise typer.Exit(1)

    display_changes(f"Delta {out.name}", manifest, verbose=detail)
