"""Build content indexes of tar archives."""

import hashlib
from typing import Optional

from loguru import logger

from tardelta.archive import ArchiveReader, EntryStream
from tardelta.config import DEFAULT_CHUNK_SIZE
from tardelta.errors import CorruptHeader
from tardelta.services.utils import Fingerprint, Index

MAX_CHECKSUM = 2**32


def compute_digest(stream: Optional[EntryStream], chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Compute the SHA-1 digest of a payload stream.

    Args:
        stream: Entry payload, or None for entries without one
        chunk_size: Bytes read per update

    Returns:
        20-byte digest (the digest of no data when stream is None)

    Raises:
        ReadError: If the stream fails mid-read
    """
    hasher = hashlib.sha1()
    if stream is not None:
        for chunk in iter(lambda: stream.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.digest()


def build_index(
    reader: ArchiveReader,
    label: str = "archive",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    diagnostics: bool = False,
) -> Index:
    """
    Fingerprint every entry of an archive in one sequential pass.

    Directories, links and other non-regular entries are indexed like files;
    they carry no payload so only their header checksum distinguishes them.
    A name that occurs more than once keeps the fingerprint of its last entry.

    Args:
        reader: Archive to index
        label: Name used in log output (e.g. "old", "new")
        chunk_size: Hash buffer size
        diagnostics: Dump the finished index at DEBUG level

    Returns:
        Mapping of entry path to Fingerprint

    Raises:
        CorruptHeader: If an entry header is missing its checksum or unreadable
        ReadError: If an entry payload cannot be read
    """
    log = logger.bind(phase=f"index {label}")
    log.debug(f"Indexing {reader.path}")

    index: Index = {}
    for entry in reader:
        checksum = getattr(entry.info, "chksum", None)
        if not isinstance(checksum, int) or not 0 <= checksum < MAX_CHECKSUM:
            raise CorruptHeader(f"{reader.path}: invalid header checksum for {entry.path}")

        content_hash = compute_digest(entry.stream, chunk_size)
        if entry.path in index:
            log.debug(f"Duplicate entry {entry.path}, keeping the later one")
        index[entry.path] = Fingerprint(
            content_hash=content_hash, structural_checksum=checksum
        )

    log.debug(f"Indexed {len(index)} entries from {reader.path}")
    if diagnostics:
        for path, fingerprint in sorted(index.items()):
            log.debug(f"  {path} ({fingerprint.short}, cksum {fingerprint.structural_checksum})")

    return index
