"""Extract ordered plain-text pages from PDF, EPUB and text documents."""

from reader_extract.core.parser_factory import extract, extract_document

__version__ = "0.1.0"

__all__ = ["extract", "extract_document", "__version__"]
