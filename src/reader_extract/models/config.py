"""Extraction settings."""

import os

from pydantic import BaseModel, Field

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ExtractionConfig(BaseModel):
    """Tunables for the PDF OCR fallback and page-level parallelism."""

    ocr_enabled: bool = True
    ocr_language: str = "eng"
    ocr_timeout: float = Field(default=30.0, ge=0)  # seconds per page, 0 = no limit
    ocr_resolution: int = Field(default=72, ge=18)  # 72 dpi = media box size
    max_workers: int = Field(default=4, ge=1)
    tessdata_prefix: str | None = None

    @classmethod
    def from_env(cls) -> "ExtractionConfig":
        """Build a config from READER_* environment variables."""
        values: dict[str, object] = {}

        ocr = os.getenv("READER_OCR")
        if ocr is not None:
            values["ocr_enabled"] = ocr.strip().lower() in _TRUE_VALUES
        if lang := os.getenv("READER_OCR_LANG"):
            values["ocr_language"] = lang
        if timeout := os.getenv("READER_OCR_TIMEOUT"):
            values["ocr_timeout"] = timeout
        if resolution := os.getenv("READER_OCR_RESOLUTION"):
            values["ocr_resolution"] = resolution
        if workers := os.getenv("READER_MAX_WORKERS"):
            values["max_workers"] = workers
        if prefix := os.getenv("TESSDATA_PREFIX"):
            values["tessdata_prefix"] = prefix

        return cls.model_validate(values)
