"""Apply command for tar-delta CLI."""

import asyncio
from pathlib import Path

import typer

from tardelta.cli.app import app
from tardelta.cli.commands.display import console
from tardelta.errors import TarDeltaError, format_error
from tardelta.services import DeltaService


@app.command()
def apply(
    ctx: typer.Context,
    old: Path = typer.Argument(..., help="The old archive"),
    delta: Path = typer.Argument(..., help="Delta archive created by `diff`"),
    out: Path = typer.Argument(..., help="Where to write the rebuilt archive"),
):
    """Rebuild the new archive from OLD and DELTA."""
    try:
        service = DeltaService(ctx.obj)
        report = asyncio.run(service.apply(old, delta, out))
    except TarDeltaError as e:
        typer.echo(format_error(e), err=True)
        raise typer.Exit(1)

    console.print(
        f"[green]✓ Wrote {out}[/green] "
        f"({report.kept} kept, {report.applied} from delta, {report.dropped} dropped)"
    )
