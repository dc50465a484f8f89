"""Main CLI entry point for tar-delta."""  # pragma: no cover

from tardelta.cli.app import app  # pragma: no cover

# Register commands
from tardelta.cli.commands import apply, diff, show  # pragma: no cover

__all__ = ["app", "apply", "diff", "show"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
