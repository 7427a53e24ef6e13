"""Data models for output format."""

from datetime import datetime

from pydantic import BaseModel, Field


class PageMetadata(BaseModel):
    """Metadata accompanying one written page."""

    page_number: int  # 1-based, as shown to the reader
    file_name: str
    word_count: int
    character_count: int
    line_count: int
    paragraph_count: int


class DocumentOutput(BaseModel):
    """Complete document output manifest."""

    source_path: str
    document_type: str
    total_pages: int
    extracted_pages: list[int]
    output_directory: str
    created_at: datetime = Field(default_factory=datetime.now)
    pages: list[PageMetadata]
    cancelled: bool = False
    warnings: list[str] = Field(default_factory=list)
