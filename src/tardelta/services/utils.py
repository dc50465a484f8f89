"""Types shared by the indexing, diff and apply services."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Fingerprint:
    """State of one archive entry.

    Attributes:
        content_hash: SHA-1 digest of the entry payload
        structural_checksum: Checksum declared in the entry's tar header
    """
    content_hash: bytes
    structural_checksum: int

    @property
    def short(self) -> str:
        """First 8 hex chars of the content hash, for display."""
        return self.content_hash.hex()[:8]


# entry path -> fingerprint, one per archive
Index = Dict[str, Fingerprint]


@dataclass
class ApplyReport:
    """Counts of entries handled while reconstructing an archive.

    Attributes:
        kept: Old entries copied unchanged
        dropped: Old entries removed or superseded
        applied: Entries copied from the delta archive
    """
    kept: int = 0
    dropped: int = 0
    applied: int = 0

    @property
    def total_written(self) -> int:
        return self.kept + self.applied
