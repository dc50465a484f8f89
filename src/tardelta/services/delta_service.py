"""Service for creating and applying delta archives."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

from tardelta.archive import ArchiveWriter, get_opener
from tardelta.config import DeltaConfig
from tardelta.errors import TarDeltaError
from tardelta.schemas import DiffManifest
from tardelta.services.delta_decoder import apply_delta, read_manifest
from tardelta.services.delta_encoder import encode_delta
from tardelta.services.diff_service import compute_diff
from tardelta.services.index_service import build_index
from tardelta.services.utils import ApplyReport, Index

T = TypeVar("T")


class DeltaService:
    """
    Diffs and patches tar archives.

    Both index builds of a diff run concurrently in worker threads; encoding
    and applying are single sequential passes. Each archive is opened by
    exactly one step for the duration of its pass.
    """

    def __init__(self, config: Optional[DeltaConfig] = None):
        self.config = config or DeltaConfig()
        # Fails fast on compression modes nobody can read yet
        self.opener = get_opener(self.config.compression)

    async def _run_phase(self, phase: str, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking step in a worker thread, tagging failures with the phase."""
        try:
            return await asyncio.to_thread(func, *args)
        except TarDeltaError as e:
            e.with_phase(phase)
            logger.error(f"Failed to {phase}: {e}")
            raise

    def _index(self, path: Path, label: str) -> Index:
        with self.opener.open_reader(path) as reader:
            return build_index(
                reader,
                label=label,
                chunk_size=self.config.chunk_size,
                diagnostics=self.config.diagnostics,
            )

    def _encode(self, new_path: Path, manifest: DiffManifest, out_path: Path) -> int:
        with self.opener.open_reader(new_path) as reader:
            with ArchiveWriter(out_path, chunk_size=self.config.chunk_size) as writer:
                return encode_delta(reader, manifest, writer)

    def _apply(self, old_path: Path, delta_path: Path, out_path: Path) -> ApplyReport:
        with self.opener.open_reader(delta_path) as delta_reader:
            with self.opener.open_reader(old_path) as old_reader:
                with ArchiveWriter(out_path, chunk_size=self.config.chunk_size) as writer:
                    return apply_delta(
                        old_reader, delta_reader, writer, diagnostics=self.config.diagnostics
                    )

    def _read_manifest(self, delta_path: Path) -> DiffManifest:
        with self.opener.open_reader(delta_path) as reader:
            return read_manifest(iter(reader))

    async def diff(self, old_path: Path, new_path: Path, out_path: Path) -> DiffManifest:
        """
        Write a delta archive turning old_path into new_path.

        Args:
            old_path: The old archive
            new_path: The new archive
            out_path: Where to write the delta archive

        Returns:
            The manifest stored in the delta archive

        Raises:
            TarDeltaError: Subclass naming the failure, with phase set
        """
        logger.info(f"Computing delta {old_path} -> {new_path}")

        old_index, new_index = await asyncio.gather(
            self._run_phase("index old", self._index, old_path, "old"),
            self._run_phase("index new", self._index, new_path, "new"),
        )
        manifest = compute_diff(old_index, new_index, diagnostics=self.config.diagnostics)

        copied = await self._run_phase("encode", self._encode, new_path, manifest, out_path)
        logger.info(
            f"Wrote {out_path}: {copied} entries, "
            f"{len(manifest.changed)} changed, {len(manifest.added)} added, "
            f"{len(manifest.removed)} removed"
        )
        return manifest

    async def apply(self, old_path: Path, delta_path: Path, out_path: Path) -> ApplyReport:
        """
        Rebuild the new archive from old_path and delta_path into out_path.

        Raises:
            TarDeltaError: Subclass naming the failure, with phase set
        """
        logger.info(f"Applying {delta_path} to {old_path}")
        report = await self._run_phase("apply", self._apply, old_path, delta_path, out_path)
        logger.info(f"Wrote {out_path}: {report.total_written} entries")
        return report

    async def inspect(self, delta_path: Path) -> DiffManifest:
        """Read only the manifest of a delta archive."""
        return await self._run_phase("inspect", self._read_manifest, delta_path)
