"""Route documents to the extractor for their declared type."""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from reader_extract.core.errors import DecodeFailure, UnsupportedFileType
from reader_extract.models.config import ExtractionConfig
from reader_extract.models.extraction import DocumentType, ExtractionResult

log = logging.getLogger(__name__)

UNSUPPORTED_PAGE = "Unsupported file type."
UNREADABLE_TEXT_PAGE = "Unable to read text file."
EMPTY_PAGE = "No text content found."
CANCELLED_PAGE = "Extraction cancelled."


class DocumentParser(ABC):
    """Abstract base class for document extractors."""

    cancelled: bool = False
    warnings: list[str]

    @abstractmethod
    def extract_pages(self) -> list[str]:
        """Extract the ordered page sequence."""
        pass


def decode_text(data: bytes) -> str:
    """Decode a plain-text document, dropping a UTF-8 byte order mark.

    Raises:
        DecodeFailure: If the bytes are not valid UTF-8.
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeFailure(f"Text is not valid UTF-8: {e}") from e


class PlainTextParser(DocumentParser):
    """Treat the whole document as a single page."""

    def __init__(self, data: bytes):
        self.data = data
        self.warnings = []

    def extract_pages(self) -> list[str]:
        try:
            return [decode_text(self.data)]
        except DecodeFailure as e:
            log.warning(str(e))
            return [UNREADABLE_TEXT_PAGE]


class ParserFactory:
    """Factory for creating the extractor for a document type."""

    SUPPORTED_FORMATS = {
        ".pdf": DocumentType.PDF,
        ".epub": DocumentType.EPUB,
        ".txt": DocumentType.TEXT,
        ".text": DocumentType.TEXT,
        ".md": DocumentType.TEXT,
    }

    @classmethod
    def create(
        cls,
        data: bytes,
        document_type: DocumentType,
        config: ExtractionConfig | None = None,
        cancel_event: threading.Event | None = None,
    ) -> DocumentParser:
        """Create the extractor for the given document type.

        Raises:
            UnsupportedFileType: If the type has no extraction path.
        """
        if document_type == DocumentType.PDF:
            from reader_extract.core.pdf_parser import PdfParser

            return PdfParser(data, config=config, cancel_event=cancel_event)
        elif document_type == DocumentType.EPUB:
            from reader_extract.core.epub_parser import EpubParser

            return EpubParser(data, cancel_event=cancel_event)
        elif document_type == DocumentType.TEXT:
            return PlainTextParser(data)

        raise UnsupportedFileType(f"No extractor for type: {document_type.value}")

    @classmethod
    def detect_type(cls, path: Path) -> DocumentType:
        """Detect document type from the file extension."""
        return cls.SUPPORTED_FORMATS.get(path.suffix.lower(), DocumentType.UNSUPPORTED)

    @classmethod
    def is_supported(cls, path: Path) -> bool:
        return path.suffix.lower() in cls.SUPPORTED_FORMATS


def extract_document(
    data: bytes,
    declared_type: "str | DocumentType | None",
    config: ExtractionConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> ExtractionResult:
    """Extract the page sequence for a document.

    Never raises and never returns an empty page list: every failure that
    affects the whole document becomes a single diagnostic page.
    """
    document_type = DocumentType.from_declared(declared_type)

    try:
        parser = ParserFactory.create(
            data, document_type, config=config, cancel_event=cancel_event
        )
        pages = parser.extract_pages()
    except UnsupportedFileType as e:
        log.warning(f"{e} (declared: {declared_type!r})")
        return ExtractionResult(pages=[UNSUPPORTED_PAGE], document_type=document_type)
    except Exception as e:
        log.exception(f"Extraction failed for {document_type.value} document")
        return ExtractionResult(pages=[f"Error: {e}"], document_type=document_type)

    if not pages:
        pages = [CANCELLED_PAGE if parser.cancelled else EMPTY_PAGE]

    return ExtractionResult(
        pages=pages,
        document_type=document_type,
        cancelled=parser.cancelled,
        warnings=list(parser.warnings),
    )


def extract(
    data: bytes,
    declared_type: "str | DocumentType | None",
    config: ExtractionConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> list[str]:
    """Return the ordered plain-text pages of a document."""
    return extract_document(data, declared_type, config, cancel_event).pages
