"""Data models."""

from reader_extract.models.archive import (
    ArchiveEntry,
    CompressionMethod,
    EndOfCentralDirectory,
)
from reader_extract.models.config import ExtractionConfig
from reader_extract.models.epub import ContainerMetadata, PackageDocument
from reader_extract.models.extraction import DocumentType, ExtractionResult
from reader_extract.models.output import DocumentOutput, PageMetadata

__all__ = [
    # Archive models
    "ArchiveEntry",
    "CompressionMethod",
    "EndOfCentralDirectory",
    # EPUB models
    "ContainerMetadata",
    "PackageDocument",
    # Extraction models
    "DocumentType",
    "ExtractionResult",
    "ExtractionConfig",
    # Output models
    "PageMetadata",
    "DocumentOutput",
]
