"""Write delta archives."""

import io
import tarfile

from loguru import logger

from tardelta.archive import ArchiveReader, ArchiveWriter
from tardelta.errors import WriteError
from tardelta.schemas import MANIFEST_NAME, DiffManifest


def manifest_info(size: int) -> tarfile.TarInfo:
    """Header for the manifest entry, with fixed ownership and timestamp."""
    info = tarfile.TarInfo(MANIFEST_NAME)
    info.size = size
    info.mode = 0o644
    info.mtime = 0
    info.uid = info.gid = 0
    return info


def write_manifest(writer: ArchiveWriter, manifest: DiffManifest) -> None:
    """Append the serialized manifest as the next entry of writer."""
    try:
        data = manifest.to_bytes()
    except ValueError as e:
        raise WriteError(f"Failed to serialize manifest: {e}") from e
    writer.append(manifest_info(len(data)), io.BytesIO(data))


def encode_delta(reader: ArchiveReader, manifest: DiffManifest, writer: ArchiveWriter) -> int:
    """
    Write a delta archive: the manifest, then every changed or added entry.

    Entries are copied in the order the new archive holds them, header
    blocks and payload byte for byte. The writer is finalized as the last step.

    Args:
        reader: The new archive
        manifest: Diff of the old and new archives
        writer: Destination delta archive

    Returns:
        Number of payload entries copied (manifest excluded)

    Raises:
        ReadError: If an entry of the new archive cannot be read
        WriteError: If the delta archive cannot be written or finalized
    """
    log = logger.bind(phase="encode")

    write_manifest(writer, manifest)

    wanted = manifest.payload_paths
    copied = 0
    skipped = 0
    for entry in reader:
        if entry.path not in wanted:
            skipped += 1
            continue
        writer.copy(entry)
        copied += 1
        log.debug(f"Copied {entry.path} ({entry.info.size} bytes)")

    writer.finalize()
    log.debug(f"Delta written: {copied} entries copied, {skipped} unchanged skipped")
    return copied
