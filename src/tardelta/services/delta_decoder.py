"""Read delta archives and rebuild the new archive from them."""

from typing import Iterator

from loguru import logger
from pydantic import ValidationError

from tardelta.archive import ArchiveEntry, ArchiveReader, ArchiveWriter
from tardelta.errors import EmptyDelta, InvalidManifest, MissingManifest
from tardelta.schemas import MANIFEST_NAME, DiffManifest
from tardelta.services.utils import ApplyReport


def read_manifest(entries: Iterator[ArchiveEntry]) -> DiffManifest:
    """
    Consume the first delta entry and decode it as the manifest.

    Args:
        entries: Entry iterator of a delta archive, positioned at the start

    Returns:
        The decoded manifest; entries is left at the first payload entry

    Raises:
        EmptyDelta: If there are no entries
        MissingManifest: If the first entry is not the manifest
        InvalidManifest: If the manifest content does not decode
    """
    first = next(entries, None)
    if first is None:
        raise EmptyDelta("delta archive has no entries")
    if first.path != MANIFEST_NAME:
        raise MissingManifest(
            f"first entry is {first.path!r}, expected {MANIFEST_NAME!r}"
        )
    if first.stream is None:
        raise InvalidManifest(f"{MANIFEST_NAME} is not a regular file")

    data = first.stream.read()
    try:
        return DiffManifest.from_bytes(data)
    except ValidationError as e:
        raise InvalidManifest(f"Invalid manifest: {e}") from e


def apply_delta(
    old_reader: ArchiveReader,
    delta_reader: ArchiveReader,
    writer: ArchiveWriter,
    diagnostics: bool = False,
) -> ApplyReport:
    """
    Reconstruct the new archive from the old archive and a delta.

    The output holds every old entry that was neither removed nor changed,
    in old-archive order, followed by every entry carried in the delta, in
    delta order. The writer is finalized as the last step.

    Raises:
        EmptyDelta, MissingManifest, InvalidManifest: If the delta is malformed
        CorruptHeader, ReadError: If either input cannot be read
        WriteError: If the output cannot be written or finalized
    """
    log = logger.bind(phase="apply")

    entries = iter(delta_reader)
    manifest = read_manifest(entries)
    if diagnostics:
        log.debug(f"Manifest: {manifest.model_dump_json()}")

    dropped = manifest.dropped_paths
    payload = manifest.payload_paths
    report = ApplyReport()

    log.info("Adding old entries..")
    for entry in old_reader:
        if entry.path in dropped:
            report.dropped += 1
            continue
        writer.copy(entry)
        report.kept += 1

    log.info("Applying delta..")
    for entry in entries:
        if entry.path not in payload:
            raise InvalidManifest(f"delta entry {entry.path!r} is not listed in the manifest")
        writer.copy(entry)
        report.applied += 1

    writer.finalize()
    log.debug(
        f"Applied delta: kept {report.kept}, dropped {report.dropped}, applied {report.applied}"
    )
    return report
