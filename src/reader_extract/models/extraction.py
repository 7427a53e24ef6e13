"""Data models for document extraction results."""

from enum import Enum

from pydantic import BaseModel, Field


class DocumentType(str, Enum):
    """Declared content type of an input document."""

    PDF = "pdf"
    EPUB = "epub"
    TEXT = "text"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_declared(cls, value: object) -> "DocumentType":
        """Map a MIME type, UTI or short name to a document type.

        Anything that is not a recognised string tag is UNSUPPORTED.
        """
        if isinstance(value, DocumentType):
            return value
        if not isinstance(value, str) or not value:
            return cls.UNSUPPORTED
        return DECLARED_TYPES.get(value.strip().lower(), cls.UNSUPPORTED)


DECLARED_TYPES: dict[str, DocumentType] = {
    "pdf": DocumentType.PDF,
    "application/pdf": DocumentType.PDF,
    "com.adobe.pdf": DocumentType.PDF,
    "epub": DocumentType.EPUB,
    "application/epub+zip": DocumentType.EPUB,
    "org.idpf.epub-container": DocumentType.EPUB,
    "text": DocumentType.TEXT,
    "txt": DocumentType.TEXT,
    "text/plain": DocumentType.TEXT,
    "public.plain-text": DocumentType.TEXT,
    "public.text": DocumentType.TEXT,
}


class ExtractionResult(BaseModel):
    """Page sequence produced by one extraction call."""

    pages: list[str]
    document_type: DocumentType
    cancelled: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        """Whole-document text, pages joined by newlines."""
        return "\n".join(self.pages)
