"""Page rasterization and Tesseract text recognition for the PDF OCR fallback."""

import io
import logging
import threading
from typing import Any, Callable

from PIL import Image

from reader_extract.models.config import ExtractionConfig

log = logging.getLogger(__name__)

# Recognizes an image and returns its text blocks in reading order
Recognizer = Callable[[Image.Image], list[str]]


class TesseractRecognizer:
    """Recognize text blocks with Tesseract.

    Uses the LSTM engine (Tesseract's most accurate mode) with automatic page
    segmentation; dictionary-based correction stays enabled.
    """

    def __init__(
        self,
        language: str = "eng",
        timeout: float = 0,
        tessdata_prefix: str | None = None,
    ):
        self.language = language
        self.timeout = timeout
        self.tessdata_prefix = tessdata_prefix

    @classmethod
    def from_config(cls, config: ExtractionConfig) -> "TesseractRecognizer":
        return cls(
            language=config.ocr_language,
            timeout=config.ocr_timeout,
            tessdata_prefix=config.tessdata_prefix,
        )

    def tesseract_config(self) -> str:
        options = "--oem 1 --psm 3"
        if self.tessdata_prefix:
            log.debug(f"Using tessdata directory {self.tessdata_prefix}")
            options += f' --tessdata-dir "{self.tessdata_prefix}"'
        return options

    def __call__(self, image: Image.Image) -> list[str]:
        """Return recognized text blocks, one string per Tesseract block.

        Raises:
            RuntimeError: If Tesseract exceeds the configured timeout.
            pytesseract.TesseractError: If Tesseract fails on the image.
        """
        import pytesseract  # imported lazily so tests can inject a recognizer

        data: dict[str, list[Any]] = pytesseract.image_to_data(
            image,
            lang=self.language,
            config=self.tesseract_config(),
            timeout=self.timeout,
            output_type=pytesseract.Output.DICT,
        )

        blocks: dict[tuple[int, int], list[str]] = {}
        for text, page_num, block_num in zip(
            data["text"], data["page_num"], data["block_num"]
        ):
            word = str(text).strip()
            if word:
                blocks.setdefault((page_num, block_num), []).append(word)

        return [" ".join(words) for words in blocks.values()]


class PageRasterizer:
    """Render PDF pages to upright RGB images on a white background.

    pdfium is not thread-safe, so rendering is serialized; callers may invoke
    ``render`` from several worker threads.
    """

    def __init__(self, data: bytes, resolution: int = 72):
        import pdfplumber

        self.resolution = resolution
        self._pdf = pdfplumber.open(io.BytesIO(data))
        self._lock = threading.Lock()

    def __enter__(self) -> "PageRasterizer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def render(self, page_index: int) -> Image.Image:
        """Render one page's media box at the configured resolution."""
        with self._lock:
            page = self._pdf.pages[page_index]
            try:
                rendered = page.to_image(
                    resolution=self.resolution, force_mediabox=True
                ).original
            finally:
                page.close()

        if rendered.mode == "RGB":
            return rendered
        # Flatten any transparency onto white
        rgba = rendered.convert("RGBA")
        image = Image.new("RGB", rgba.size, "white")
        image.paste(rgba, mask=rgba.getchannel("A"))
        return image

    def close(self) -> None:
        with self._lock:
            self._pdf.close()


RasterizerFactory = Callable[[bytes, int], PageRasterizer]
