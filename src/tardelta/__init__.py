"""tar-delta - whole-entry deltas between tar archives."""

__version__ = "0.1.0"
