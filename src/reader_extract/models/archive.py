"""Data models for ZIP archive structure."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class CompressionMethod(IntEnum):
    """Compression methods the archive reader can decode."""

    STORE = 0
    DEFLATE = 8


class ArchiveEntry(BaseModel):
    """Single file stored in a ZIP container, as listed by the central directory."""

    model_config = ConfigDict(frozen=True)

    path: str
    local_header_offset: int
    compressed_size: int
    uncompressed_size: int
    compression_method: int  # raw value, may be unsupported


class EndOfCentralDirectory(BaseModel):
    """Trailer record pointing at the central directory."""

    model_config = ConfigDict(frozen=True)

    central_directory_offset: int
    central_directory_size: int
    entry_count: int
