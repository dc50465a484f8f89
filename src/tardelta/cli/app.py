from typing import Optional

import typer
from pydantic import ValidationError

from tardelta.config import Compression, DeltaConfig
from tardelta.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import tardelta

        typer.echo(f"tar-delta version: {tardelta.__version__}")
        raise typer.Exit()


app = typer.Typer(name="tar-delta", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output to stderr."
    ),
    compression: Optional[Compression] = typer.Option(
        None,
        "--compression",
        "-c",
        help="Compression of the input archives.",
        case_sensitive=False,
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """tar-delta - ship incremental updates of tar archives."""
    overrides = {}
    if compression is not None:
        overrides["compression"] = compression

    try:
        config = DeltaConfig(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        typer.echo(f"Invalid configuration: {problems}", err=True)
        raise typer.Exit(1)
    setup_logging(level="DEBUG" if verbose else config.log_level, log_file=config.log_file)
    ctx.obj = config
