"""Write extracted pages to an output directory."""

from datetime import datetime
from pathlib import Path

from reader_extract.core.content_processor import ContentProcessor
from reader_extract.models.extraction import ExtractionResult
from reader_extract.models.output import DocumentOutput, PageMetadata


class OutputWriter:
    """Write extracted pages as text files plus a JSON manifest."""

    def __init__(self, output_dir: Path, source_path: Path):
        """Initialize output writer.

        Args:
            output_dir: Directory to write output files
            source_path: Path to the source document
        """
        self.output_dir = output_dir
        self.source_path = source_path
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.processor = ContentProcessor()

    def write_page(self, page_index: int, text: str) -> tuple[Path, PageMetadata]:
        """Write a single page (0-based index) to a UTF-8 text file."""
        stats = self.processor.get_stats(text)
        filename = f"page_{page_index + 1:03d}.txt"
        filepath = self.output_dir / filename
        filepath.write_text(text, encoding="utf-8")

        metadata = PageMetadata(
            page_number=page_index + 1,
            file_name=filename,
            word_count=stats["word_count"],
            character_count=stats["character_count"],
            line_count=stats["line_count"],
            paragraph_count=stats["paragraph_count"],
        )
        return filepath, metadata

    def write_manifest(
        self,
        result: ExtractionResult,
        extracted_indices: list[int],
        page_metadata: list[PageMetadata],
    ) -> Path:
        """Write document manifest file."""
        manifest = DocumentOutput(
            source_path=str(self.source_path),
            document_type=result.document_type.value,
            total_pages=result.page_count,
            extracted_pages=[i + 1 for i in extracted_indices],
            output_directory=str(self.output_dir),
            created_at=datetime.now(),
            pages=page_metadata,
            cancelled=result.cancelled,
            warnings=result.warnings,
        )

        filepath = self.output_dir / "manifest.json"
        filepath.write_text(manifest.model_dump_json(indent=2))
        return filepath
