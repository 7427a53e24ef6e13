"""ZIP container reader working directly on an in-memory buffer.

Only the subset needed to pull files out of EPUB packages is supported:
central-directory lookup, Store and raw Deflate payloads. Every offset and
length comes from untrusted bytes, so each one is bounds-checked before the
buffer is sliced.
"""

import logging
import struct
import zlib

from reader_extract.core.errors import (
    DecompressionFailed,
    EntryNotFound,
    MalformedArchive,
    UnsupportedCompression,
)
from reader_extract.models.archive import (
    ArchiveEntry,
    CompressionMethod,
    EndOfCentralDirectory,
)

log = logging.getLogger(__name__)


# =============================================================================
# Record Layouts (all little-endian)
# =============================================================================

EOCD_SIGNATURE = 0x06054B50
CENTRAL_HEADER_SIGNATURE = 0x02014B50
LOCAL_HEADER_SIGNATURE = 0x04034B50

EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46
LOCAL_HEADER_SIZE = 30
MAX_COMMENT_SIZE = 65535
EOCD_SEARCH_WINDOW = EOCD_SIZE + MAX_COMMENT_SIZE

# signature, disk, cd disk, disk entries, total entries, cd size, cd offset, comment len
_EOCD = struct.Struct("<IHHHHIIH")
# signature, made by, needed, flags, method, time, date, crc, csize, usize,
# name len, extra len, comment len, disk, int attrs, ext attrs, local offset
_CENTRAL_HEADER = struct.Struct("<IHHHHHHIIIHHHHHII")
# signature, needed, flags, method, time, date, crc, csize, usize, name len, extra len
_LOCAL_HEADER = struct.Struct("<IHHHHHIIIHH")

_EOCD_MAGIC = struct.pack("<I", EOCD_SIGNATURE)


# =============================================================================
# Directory Parsing
# =============================================================================


def find_end_of_central_directory(data: bytes) -> EndOfCentralDirectory:
    """Locate the EOCD record by scanning backward from the end of the buffer.

    The record is at least 22 bytes and may be followed by a comment of up to
    65535 bytes, so only the trailing 65557 bytes are searched.

    Raises:
        MalformedArchive: If no EOCD signature is present in the window.
    """
    if len(data) < EOCD_SIZE:
        raise MalformedArchive("Buffer too small to be a ZIP archive")

    window_start = max(0, len(data) - EOCD_SEARCH_WINDOW)
    # The signature must leave room for the full fixed-size record after it
    window_end = len(data) - EOCD_SIZE + len(_EOCD_MAGIC)
    position = data.rfind(_EOCD_MAGIC, window_start, window_end)
    if position < 0:
        raise MalformedArchive("End of central directory record not found")

    (
        _signature,
        _disk,
        _cd_disk,
        _disk_entries,
        total_entries,
        cd_size,
        cd_offset,
        _comment_length,
    ) = _EOCD.unpack_from(data, position)

    return EndOfCentralDirectory(
        central_directory_offset=cd_offset,
        central_directory_size=cd_size,
        entry_count=total_entries,
    )


def parse_central_directory(
    data: bytes, eocd: EndOfCentralDirectory
) -> dict[str, ArchiveEntry]:
    """Build the entry directory from the central directory file headers.

    A signature mismatch or truncated header stops the scan but keeps the
    entries already parsed. Names that are not valid UTF-8 are skipped.
    Duplicate names resolve to the last header seen.

    Raises:
        MalformedArchive: If the declared directory lies outside the buffer.
    """
    cd_end = eocd.central_directory_offset + eocd.central_directory_size
    if cd_end > len(data):
        raise MalformedArchive(
            f"Central directory ({eocd.central_directory_offset}+"
            f"{eocd.central_directory_size}) exceeds archive length {len(data)}"
        )

    entries: dict[str, ArchiveEntry] = {}
    cursor = eocd.central_directory_offset

    for index in range(eocd.entry_count):
        if cursor + CENTRAL_HEADER_SIZE > len(data):
            log.debug(f"Central directory truncated at entry {index}")
            break

        fields = _CENTRAL_HEADER.unpack_from(data, cursor)
        if fields[0] != CENTRAL_HEADER_SIGNATURE:
            log.debug(f"Central directory signature mismatch at offset {cursor}")
            break

        method = fields[4]
        compressed_size = fields[8]
        uncompressed_size = fields[9]
        name_length, extra_length, comment_length = fields[10], fields[11], fields[12]
        local_header_offset = fields[16]

        name_start = cursor + CENTRAL_HEADER_SIZE
        name_end = name_start + name_length
        if name_end > len(data):
            log.debug(f"Entry name at offset {name_start} runs past archive end")
            break

        try:
            name = data[name_start:name_end].decode("utf-8")
        except UnicodeDecodeError:
            log.debug(f"Skipping entry {index}: name is not valid UTF-8")
        else:
            entries[name] = ArchiveEntry(
                path=name,
                local_header_offset=local_header_offset,
                compressed_size=compressed_size,
                uncompressed_size=uncompressed_size,
                compression_method=method,
            )

        cursor = name_end + extra_length + comment_length

    return entries


# =============================================================================
# Decompression
# =============================================================================


def inflate_raw(payload: bytes, uncompressed_size: int) -> bytes:
    """Inflate a headerless DEFLATE stream into at most ``uncompressed_size`` bytes.

    Raises:
        DecompressionFailed: If the stream is corrupt, does not reach its end
            marker within the declared size, or leaves input unconsumed.
    """
    inflater = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        # One byte of headroom so overlong output is detectable
        output = inflater.decompress(payload, uncompressed_size + 1)
    except zlib.error as e:
        raise DecompressionFailed(f"Corrupt deflate stream: {e}") from e

    if len(output) > uncompressed_size or not inflater.eof:
        raise DecompressionFailed(
            f"Deflate stream did not end within {uncompressed_size} bytes"
        )
    if inflater.unconsumed_tail or inflater.unused_data:
        raise DecompressionFailed("Deflate stream left compressed input unconsumed")

    return output


# =============================================================================
# Archive
# =============================================================================


class ZipArchive:
    """Read-only view over a ZIP archive held in memory."""

    def __init__(self, data: bytes, entries: dict[str, ArchiveEntry]):
        self._data = data
        self._entries = entries

    @classmethod
    def open(cls, data: bytes | bytearray | memoryview) -> "ZipArchive":
        """Parse the archive directory.

        Raises:
            MalformedArchive: If the EOCD record is missing or the central
                directory lies outside the buffer.
        """
        buffer = bytes(data)
        eocd = find_end_of_central_directory(buffer)
        entries = parse_central_directory(buffer, eocd)
        log.debug(
            f"Opened archive: {len(entries)} of {eocd.entry_count} declared entries"
        )
        return cls(buffer, entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def names(self) -> list[str]:
        """Entry paths in central directory order."""
        return list(self._entries)

    def get_entry(self, path: str) -> ArchiveEntry | None:
        return self._entries.get(path)

    def read(self, path: str) -> bytes:
        """Return the decompressed contents of an entry.

        Raises:
            EntryNotFound: If no entry has exactly this path.
            MalformedArchive: If the local header is missing, has the wrong
                signature, or the payload runs past the end of the archive.
            DecompressionFailed: If a Deflate payload does not inflate cleanly.
            UnsupportedCompression: For methods other than Store and Deflate.
        """
        entry = self._entries.get(path)
        if entry is None:
            raise EntryNotFound(path)

        payload = self._payload(entry)

        if entry.compression_method == CompressionMethod.STORE:
            return payload
        if entry.compression_method == CompressionMethod.DEFLATE:
            return inflate_raw(payload, entry.uncompressed_size)
        raise UnsupportedCompression(path, entry.compression_method)

    def _payload(self, entry: ArchiveEntry) -> bytes:
        """Slice the compressed bytes that follow an entry's local header."""
        offset = entry.local_header_offset
        if offset + LOCAL_HEADER_SIZE > len(self._data):
            raise MalformedArchive(f"Local header for {entry.path} is out of bounds")

        fields = _LOCAL_HEADER.unpack_from(self._data, offset)
        if fields[0] != LOCAL_HEADER_SIGNATURE:
            raise MalformedArchive(f"Bad local header signature for {entry.path}")

        # Local name/extra lengths may differ from the central directory copy
        name_length, extra_length = fields[9], fields[10]
        start = offset + LOCAL_HEADER_SIZE + name_length + extra_length
        end = start + entry.compressed_size
        if end > len(self._data):
            raise MalformedArchive(f"Payload for {entry.path} runs past archive end")

        return self._data[start:end]
