"""PDF page extraction: native text layer first, OCR for pages without one."""

import io
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

# Suppress warnings about malformed PDF object references from PDF libraries
logging.getLogger("pdfminer").setLevel(logging.ERROR)
logging.getLogger("pypdf").setLevel(logging.ERROR)

import pypdf
from pypdf.errors import FileNotDecryptedError, PdfReadError, PyPdfError

from reader_extract.core.ocr import (
    PageRasterizer,
    RasterizerFactory,
    Recognizer,
    TesseractRecognizer,
)
from reader_extract.core.parser_factory import DocumentParser
from reader_extract.models.config import ExtractionConfig

log = logging.getLogger(__name__)

OPEN_FAILED_PAGE = "Error: Unable to open PDF document."
EMPTY_DOCUMENT_PAGE = "No text content found."


class PdfParser(DocumentParser):
    """Extract one string per PDF page, keeping page positions stable.

    Pages whose text layer is empty are rasterized and sent through OCR on a
    worker pool. A page that cannot be read or recognized contributes an
    empty string rather than being dropped.
    """

    def __init__(
        self,
        data: bytes,
        config: ExtractionConfig | None = None,
        recognizer: Recognizer | None = None,
        rasterizer_factory: RasterizerFactory | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.data = data
        self.config = config or ExtractionConfig()
        self.recognizer = recognizer or TesseractRecognizer.from_config(self.config)
        self.rasterizer_factory = rasterizer_factory or PageRasterizer
        self.cancel_event = cancel_event
        self.cancelled = False
        self.warnings: list[str] = []

    def extract_pages(self) -> list[str]:
        """Return the page texts in document order."""
        try:
            reader = self._open_reader()
        except ValueError as e:
            log.warning(f"Cannot open PDF: {e}")
            return [OPEN_FAILED_PAGE]

        texts = self._extract_text_layer(reader)
        if not texts and not self.cancelled:
            return [EMPTY_DOCUMENT_PAGE]

        missing = [index for index, text in enumerate(texts) if text is None]
        if missing and not self.cancelled:
            if self.config.ocr_enabled:
                log.info(f"Running OCR on {len(missing)} of {len(texts)} page(s)")
                self._recognize_pages(missing, texts)
            else:
                log.info(f"OCR disabled; {len(missing)} page(s) left empty")

        pages: list[str] = []
        for text in texts:
            if text is None:
                if self.cancelled:
                    break
                text = ""
            pages.append(text)
        return pages

    def _open_reader(self) -> pypdf.PdfReader:
        try:
            reader = pypdf.PdfReader(io.BytesIO(self.data))
            if reader.is_encrypted and not reader.decrypt(""):
                raise FileNotDecryptedError("File has not been decrypted")
            page_count = len(reader.pages)
        except FileNotDecryptedError:
            raise ValueError("PDF is encrypted. Please decrypt first.")
        except PdfReadError as e:
            raise ValueError(f"PDF appears corrupted: {e}")
        except PyPdfError as e:
            raise ValueError(f"PDF could not be read: {e}")
        log.debug(f"Opened PDF with {page_count} page(s)")
        return reader

    def _is_cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _extract_text_layer(self, reader: pypdf.PdfReader) -> list[str | None]:
        """Read each page's embedded text; None marks pages needing OCR."""
        texts: list[str | None] = []

        for index in range(len(reader.pages)):
            if self._is_cancelled():
                log.info(f"Extraction cancelled at page {index + 1}")
                self.cancelled = True
                break

            try:
                text = reader.pages[index].extract_text() or ""
            except Exception as e:
                log.warning(f"Text layer unreadable on page {index + 1}: {e}")
                text = ""

            texts.append(text if text.strip() else None)

        return texts

    def _recognize_pages(self, indices: list[int], texts: list[str | None]) -> None:
        """OCR the given pages in parallel, filling ``texts`` in page order."""
        try:
            rasterizer = self.rasterizer_factory(self.data, self.config.ocr_resolution)
        except Exception as e:
            log.warning(f"Cannot rasterize PDF for OCR: {e}")
            self.warnings.append(f"OCR unavailable: {e}")
            return

        with rasterizer, ThreadPoolExecutor(
            max_workers=self.config.max_workers
        ) as executor:
            futures = {
                index: executor.submit(self._recognize_page, rasterizer, index)
                for index in indices
            }

            for index in indices:
                if self._is_cancelled():
                    self.cancelled = True
                    break
                try:
                    text = futures[index].result()
                except Exception as e:
                    log.warning(f"OCR failed on page {index + 1}: {e}")
                    self.warnings.append(f"OCR failed on page {index + 1}")
                    text = ""
                if text is None:
                    self.cancelled = True
                    break
                texts[index] = text

            if self.cancelled:
                log.info("Extraction cancelled during OCR")
                for future in futures.values():
                    future.cancel()

    def _recognize_page(self, rasterizer: PageRasterizer, index: int) -> str | None:
        if self._is_cancelled():
            return None
        image = rasterizer.render(index)
        blocks = self.recognizer(image)
        return " ".join(block.strip() for block in blocks if block.strip())
