"""CLI commands for tar-delta."""

from . import apply, diff, show

__all__ = ["apply", "diff", "show"]
