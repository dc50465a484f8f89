"""Pydantic schema for the delta manifest.

The manifest is the only persisted description of what differs between two
archives. It travels as the first entry of every delta archive, serialized as
compact JSON:

    {"changed": [...], "added": [...], "removed": [...]}

Path lists are kept sorted so identical inputs always serialize to identical
bytes.
"""

from typing import FrozenSet, List

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Reserved name of the manifest entry, always first in a delta archive
MANIFEST_NAME = "__delta_metadata.json"


class DiffManifest(BaseModel):
    """Paths that differ between an old and a new archive."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    changed: List[str]
    added: List[str]
    removed: List[str]

    @field_validator("changed", "added", "removed")
    @classmethod
    def sort_paths(cls, v: List[str]) -> List[str]:
        """Deduplicate and sort lexicographically."""
        return sorted(set(v))

    @model_validator(mode="after")
    def check_disjoint(self) -> "DiffManifest":
        """A path belongs to at most one of changed/added/removed."""
        changed, added, removed = set(self.changed), set(self.added), set(self.removed)
        overlap = (changed & added) | (changed & removed) | (added & removed)
        if overlap:
            raise ValueError(f"paths listed in more than one set: {sorted(overlap)}")
        return self

    @property
    def payload_paths(self) -> FrozenSet[str]:
        """Paths whose bytes travel in the delta archive."""
        return frozenset(self.changed) | frozenset(self.added)

    @property
    def dropped_paths(self) -> FrozenSet[str]:
        """Paths whose old entries must not reach the reconstructed archive."""
        return frozenset(self.changed) | frozenset(self.removed)

    @property
    def total_changes(self) -> int:
        return len(self.changed) + len(self.added) + len(self.removed)

    @property
    def is_empty(self) -> bool:
        return self.total_changes == 0

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "DiffManifest":
        return cls.model_validate_json(data)
