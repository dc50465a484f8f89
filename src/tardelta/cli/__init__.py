"""Command line interface for tar-delta."""
