"""Typed errors raised by the indexing, diff, encode and apply phases."""

from typing import Optional

__all__ = [
    "TarDeltaError",
    "CorruptHeader",
    "ReadError",
    "WriteError",
    "EmptyDelta",
    "MissingManifest",
    "InvalidManifest",
    "UnsupportedCompression",
    "format_error",
]


class TarDeltaError(Exception):
    """Base class for all tar-delta failures.

    `phase` names the step that failed (e.g. "index old", "encode", "apply")
    and is filled in by the service layer when it is not known at raise time.
    """

    def __init__(self, message: str, phase: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.phase = phase

    def with_phase(self, phase: str) -> "TarDeltaError":
        """Attach the phase if none was recorded yet."""
        if self.phase is None:
            self.phase = phase
        return self


class CorruptHeader(TarDeltaError):
    """Entry header is missing or cannot be parsed."""

    pass


class ReadError(TarDeltaError):
    """I/O failure while streaming entry bytes."""

    pass


class WriteError(TarDeltaError):
    """I/O failure writing or finalizing an output archive."""

    pass


class EmptyDelta(TarDeltaError):
    """Delta archive holds no entries."""

    pass


class MissingManifest(TarDeltaError):
    """First delta entry is not the manifest."""

    pass


class InvalidManifest(TarDeltaError):
    """Manifest bytes do not describe a valid diff."""

    pass


class UnsupportedCompression(TarDeltaError):
    """Requested archive compression is not implemented."""

    pass


def format_error(e: BaseException) -> str:
    """Return a short operator-facing message like 'ReadError [index old]: detail'."""
    name = e.__class__.__name__
    phase = getattr(e, "phase", None)
    if phase:
        name = f"{name} [{phase}]"
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name
