from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
import pytesseract
from PIL import Image

from reader_extract.core.ocr import PageRasterizer, TesseractRecognizer
from reader_extract.models.config import ExtractionConfig
from tests.helpers import build_pdf

LETTER_SIZE = (612, 792)
WHITE = (255, 255, 255)


class TestPageRasterizer:
    def test_page_is_white_rgb_at_media_box_size(self) -> None:
        with PageRasterizer(build_pdf(["Hello page"])) as rasterizer:
            image = rasterizer.render(0)

        assert image.mode == "RGB"
        assert image.size == LETTER_SIZE
        assert image.getpixel((0, 0)) == WHITE
        assert image.getpixel((LETTER_SIZE[0] - 1, LETTER_SIZE[1] - 1)) == WHITE

    def test_resolution_scales_the_image(self) -> None:
        with PageRasterizer(build_pdf([None]), resolution=144) as rasterizer:
            image = rasterizer.render(0)

        assert image.size == (LETTER_SIZE[0] * 2, LETTER_SIZE[1] * 2)

    def test_text_is_drawn_in_dark_pixels(self) -> None:
        with PageRasterizer(build_pdf(["MMMMMMMMMMMMMMMMMMMM"])) as rasterizer:
            image = rasterizer.render(0)

        # drawString baseline at y=720pt from the bottom, i.e. 72px from the top
        band = image.crop((72, 60, 250, 75)).convert("L")
        assert min(band.getdata()) < 128

    def test_pages_render_from_worker_threads(self) -> None:
        data = build_pdf(["one", None, "three", None])

        with PageRasterizer(data) as rasterizer, ThreadPoolExecutor(max_workers=4) as pool:
            images = list(pool.map(rasterizer.render, range(4)))

        assert [image.size for image in images] == [LETTER_SIZE] * 4
        assert all(image.mode == "RGB" for image in images)


class TestTesseractRecognizer:
    def test_words_are_grouped_by_block(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, object]] = []

        def fake_image_to_data(image: Image.Image, **kwargs: object) -> dict[str, list]:
            calls.append(kwargs)
            return {
                "text": ["", "A", "b", "", "C", "  "],
                "page_num": [1, 1, 1, 1, 1, 1],
                "block_num": [0, 1, 1, 2, 2, 2],
            }

        monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
        recognizer = TesseractRecognizer(language="eng+deu", timeout=5)

        blocks = recognizer(Image.new("RGB", (10, 10), "white"))

        assert blocks == ["A b", "C"]
        (call,) = calls
        assert call["lang"] == "eng+deu"
        assert call["timeout"] == 5
        assert call["config"] == "--oem 1 --psm 3"
        assert call["output_type"] == pytesseract.Output.DICT

    def test_blank_image_gives_no_blocks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            pytesseract,
            "image_to_data",
            lambda image, **kwargs: {"text": ["", " "], "page_num": [1, 1], "block_num": [0, 1]},
        )

        assert TesseractRecognizer()(Image.new("RGB", (10, 10), "white")) == []

    def test_tesseract_errors_propagate(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def timeout(image: Image.Image, **kwargs: object) -> dict[str, list]:
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(pytesseract, "image_to_data", timeout)

        with pytest.raises(RuntimeError):
            TesseractRecognizer(timeout=1)(Image.new("RGB", (10, 10), "white"))

    def test_tessdata_dir_is_passed_when_configured(self) -> None:
        recognizer = TesseractRecognizer(tessdata_prefix="/opt/tessdata")

        assert recognizer.tesseract_config() == '--oem 1 --psm 3 --tessdata-dir "/opt/tessdata"'

    def test_from_config(self) -> None:
        config = ExtractionConfig(
            ocr_language="fas", ocr_timeout=12.0, tessdata_prefix="/data"
        )

        recognizer = TesseractRecognizer.from_config(config)

        assert recognizer.language == "fas"
        assert recognizer.timeout == 12.0
        assert recognizer.tessdata_prefix == "/data"
