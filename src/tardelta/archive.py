"""Sequential access to tar archives.

Readers walk an archive exactly once, front to back. Every entry carries its
stored record (header blocks, payload and padding exactly as they sit in the
archive) so writers copy entries byte for byte, whatever tar dialect produced
them. Writers produce a new archive in a sibling temp file and only move it to
its destination once the end-of-archive blocks have been written, so an
aborted run never leaves a complete-looking archive behind.
"""

import os
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Dict, Iterator, Optional, Protocol, Union

from loguru import logger

from tardelta.config import Compression, DEFAULT_CHUNK_SIZE
from tardelta.errors import CorruptHeader, ReadError, UnsupportedCompression, WriteError

PathLike = Union[str, Path]
Payload = Union["EntryStream", "StoredRecord", IO[bytes]]


class EntryStream:
    """Payload stream of one entry that reports failures as ReadError."""

    def __init__(self, stream: IO[bytes], name: str):
        self._stream = stream
        self.name = name

    def read(self, size: int = -1) -> bytes:
        try:
            return self._stream.read(size)
        except (OSError, tarfile.TarError) as e:
            raise ReadError(f"Failed to read entry {self.name}: {e}") from e


class StoredRecord:
    """The raw bytes one entry occupies in its archive.

    Covers any extended headers (PAX, GNU long name) in front of the entry's
    own header, then the payload and its padding to the next block boundary.
    """

    def __init__(self, fileobj: IO[bytes], start: int, size: int, name: str):
        self._fileobj = fileobj
        self.start = start
        self.size = size
        self.name = name
        self._position = 0

    def read(self, size: int = -1) -> bytes:
        remaining = self.size - self._position
        if size < 0 or size > remaining:
            size = remaining
        if size == 0:
            return b""
        try:
            # the archive file is shared with the header parser and payload streams
            self._fileobj.seek(self.start + self._position)
            data = self._fileobj.read(size)
        except OSError as e:
            raise ReadError(f"Failed to read entry {self.name}: {e}") from e
        if len(data) != size:
            raise ReadError(f"Failed to read entry {self.name}: unexpected end of data")
        self._position += size
        return data


@dataclass
class ArchiveEntry:
    """One logical entry: its parsed header and, for regular files, its payload."""

    info: tarfile.TarInfo
    stream: Optional[EntryStream]
    record: Optional[StoredRecord] = None

    @property
    def path(self) -> str:
        return self.info.name


def _has_payload(info: tarfile.TarInfo) -> bool:
    # tarfile treats unknown entry types as regular files
    return info.isreg() or info.type not in tarfile.SUPPORTED_TYPES


class ArchiveReader:
    """Single-pass reader over the entries of one archive."""

    def __init__(self, path: Path, tar: Optional[tarfile.TarFile]):
        self.path = path
        self._tar = tar

    def __iter__(self) -> Iterator[ArchiveEntry]:
        if self._tar is None:
            return
        # tarfile parses the first header while opening the archive
        info = self._tar.firstmember
        start = 0
        while info is not None:
            end = self._tar.offset
            yield self._entry(info, start, end)
            start = end
            info = self._next_header()

    def _entry(self, info: tarfile.TarInfo, start: int, end: int) -> ArchiveEntry:
        stream = None
        if _has_payload(info):
            stream = EntryStream(self._tar.extractfile(info), info.name)
        record = StoredRecord(self._tar.fileobj, start, end - start, info.name)
        return ArchiveEntry(info=info, stream=stream, record=record)

    def _next_header(self) -> Optional[tarfile.TarInfo]:
        """Parse the header after the current entry.

        TarFile.next() reads any damaged header past the first entry as the
        end of the archive, so headers are parsed here and only a zero block
        ends the walk.

        Raises:
            CorruptHeader: If the header fails validation
            ReadError: If the archive ends before its end-of-archive blocks
        """
        tar = self._tar
        offset = tar.offset
        try:
            # the previous entry's payload and padding must be present in full
            tar.fileobj.seek(offset - 1)
            if not tar.fileobj.read(1):
                raise ReadError(f"{self.path}: unexpected end of data at offset {offset}")
            return tar.tarinfo.fromtarfile(tar)
        except tarfile.EOFHeaderError:
            return None
        except (tarfile.EmptyHeaderError, tarfile.TruncatedHeaderError) as e:
            raise ReadError(
                f"{self.path}: archive ends at offset {offset} without end-of-archive blocks ({e})"
            ) from e
        except tarfile.HeaderError as e:
            raise CorruptHeader(f"{self.path}: {e} at offset {offset}") from e
        except OSError as e:
            raise ReadError(f"Failed to read {self.path}: {e}") from e

    def close(self) -> None:
        if self._tar is not None:
            self._tar.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ArchiveOpener(Protocol):
    """Strategy for turning a path into a sequential archive reader."""

    def open_reader(self, path: PathLike) -> ArchiveReader: ...


class PlainOpener:
    """Opens uncompressed tar archives."""

    def open_reader(self, path: PathLike) -> ArchiveReader:
        path = Path(path)
        try:
            # tarfile refuses zero-length input; read it as an archive without entries
            if path.stat().st_size == 0:
                return ArchiveReader(path, None)
            tar = tarfile.open(str(path), mode="r:")
        except tarfile.TarError as e:
            raise CorruptHeader(f"{path}: {e}") from e
        except OSError as e:
            raise ReadError(f"Failed to open {path}: {e}") from e
        logger.debug(f"Opened archive {path}")
        return ArchiveReader(path, tar)


_OPENERS: Dict[Compression, ArchiveOpener] = {
    Compression.NONE: PlainOpener(),
}


def get_opener(compression: Union[Compression, str] = Compression.NONE) -> ArchiveOpener:
    """Return the opener for a compression mode.

    Raises:
        UnsupportedCompression: If no opener handles the mode yet
    """
    compression = Compression(compression)
    opener = _OPENERS.get(compression)
    if opener is None:
        raise UnsupportedCompression(f"{compression.value} archives are not supported")
    return opener


def open_archive(
    path: PathLike, compression: Union[Compression, str] = Compression.NONE
) -> ArchiveReader:
    return get_opener(compression).open_reader(path)


class ArchiveWriter:
    """Append-only writer for a new archive.

    Usage:
        with ArchiveWriter(out) as writer:
            writer.copy(entry)
            writer.append(info, stream)
            writer.finalize()

    Leaving the block without calling finalize() discards everything written.
    """

    def __init__(self, path: PathLike, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = Path(path)
        self.temp_path = self.path.with_name(f".{self.path.name}.partial")
        self.chunk_size = chunk_size
        self.entry_count = 0
        self.finalized = False
        self._file: Optional[IO[bytes]] = None
        self._offset = 0

    def open(self) -> "ArchiveWriter":
        try:
            self._file = open(self.temp_path, "wb")
        except OSError as e:
            self.abort()
            raise WriteError(f"Failed to create {self.path}: {e}") from e
        return self

    def copy(self, entry: ArchiveEntry) -> None:
        """Copy one entry exactly as it is stored in its source archive."""
        self._check_open()
        if entry.record is None:
            raise WriteError(f"Entry {entry.path} has no stored record to copy")
        self._copy(entry.record, entry.record.size, entry.path)
        self.entry_count += 1

    def append(self, info: tarfile.TarInfo, stream: Optional[Payload] = None) -> None:
        """Add a new entry under a freshly encoded PAX header."""
        self._check_open()
        try:
            header = info.tobuf(tarfile.PAX_FORMAT, tarfile.ENCODING, "surrogateescape")
        except ValueError as e:
            raise WriteError(f"Failed to encode header of {info.name}: {e}") from e
        self._write(header, info.name)
        if _has_payload(info) and info.size > 0:
            if stream is None:
                raise WriteError(f"Entry {info.name} has no payload to write")
            self._copy(stream, info.size, info.name)
            self._pad(tarfile.BLOCKSIZE, info.name)
        self.entry_count += 1

    def finalize(self) -> None:
        """Write end-of-archive framing and move the archive into place."""
        self._check_open()
        self._write(tarfile.NUL * (tarfile.BLOCKSIZE * 2), "end-of-archive")
        self._pad(tarfile.RECORDSIZE, "end-of-archive")
        try:
            self._file.close()
            os.replace(self.temp_path, self.path)
        except OSError as e:
            raise WriteError(f"Failed to finalize {self.path}: {e}") from e
        self.finalized = True
        logger.debug(f"Finalized {self.path} ({self.entry_count} entries)")

    def abort(self) -> None:
        """Drop the partial archive."""
        if self._file is not None and not self._file.closed:
            self._file.close()
        self.temp_path.unlink(missing_ok=True)

    def _check_open(self) -> None:
        if self._file is None or self._file.closed or self.finalized:
            raise WriteError(f"{self.path} is not open for writing")

    def _copy(self, source: Payload, size: int, name: str) -> None:
        remaining = size
        while remaining > 0:
            chunk = source.read(min(self.chunk_size, remaining))
            if not chunk:
                raise ReadError(f"Entry {name} ended {remaining} bytes early")
            self._write(chunk, name)
            remaining -= len(chunk)

    def _pad(self, boundary: int, name: str) -> None:
        remainder = self._offset % boundary
        if remainder:
            self._write(tarfile.NUL * (boundary - remainder), name)

    def _write(self, data: bytes, name: str) -> None:
        try:
            self._file.write(data)
        except OSError as e:
            raise WriteError(f"Failed to write {name} to {self.path}: {e}") from e
        self._offset += len(data)

    def __enter__(self) -> "ArchiveWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.finalized:
            if exc_type is None:
                logger.warning(f"Discarding {self.path}: archive was never finalized")
            self.abort()
