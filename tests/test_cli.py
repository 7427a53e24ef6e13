from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from reader_extract.cli import app
from reader_extract.commands.extract import parse_page_selection

runner = CliRunner()


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("Hello reader, this is a short note.", encoding="utf-8")
    return path


@pytest.fixture
def epub_file(tmp_path: Path, sample_epub: bytes) -> Path:
    path = tmp_path / "book.epub"
    path.write_bytes(sample_epub)
    return path


@pytest.mark.parametrize(
    ("selection", "total", "expected"),
    [
        ("all", 3, [0, 1, 2]),
        ("", 2, [0, 1]),
        ("1,3", 3, [0, 2]),
        ("2-4", 5, [1, 2, 3]),
        ("3, 1-2, 2", 4, [0, 1, 2]),
        ("4-", 6, [3, 4, 5]),
        ("-2", 6, [0, 1]),
        ("5 - 5", 5, [4]),
    ],
)
def test_parse_page_selection(selection: str, total: int, expected: list[int]) -> None:
    assert parse_page_selection(selection, total) == expected


@pytest.mark.parametrize(
    ("selection", "message"),
    [
        ("9", "Page 9 is out of range (document has 4 page(s))"),
        ("0", "Page 0 is out of range"),
        ("2-7", "Page 7 is out of range"),
        ("6-", "Page 6 is out of range"),
        ("3-2", "Page range '3-2' is reversed"),
        ("x,2", "Invalid page selection: 'x'"),
        ("-", "Invalid page selection: '-'"),
        ("1-2-3", "Invalid page selection: '1-2-3'"),
    ],
)
def test_parse_page_selection_rejects_bad_input(selection: str, message: str) -> None:
    with pytest.raises(ValueError, match=re.escape(message)):
        parse_page_selection(selection, 4)


def test_extract_prints_text(text_file: Path) -> None:
    result = runner.invoke(app, ["extract", str(text_file), "--quiet"])

    assert result.exit_code == 0
    assert "Hello reader, this is a short note." in result.output


def test_extract_epub_selected_page(epub_file: Path) -> None:
    result = runner.invoke(app, ["extract", str(epub_file), "--pages", "2", "--quiet"])

    assert result.exit_code == 0
    assert "The clocks struck." in result.output
    assert "It was a cold day." not in result.output


def test_extract_writes_output_directory(epub_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["extract", str(epub_file), "-o", str(out_dir), "--no-ocr"])

    assert result.exit_code == 0
    assert "Complete" in result.output
    assert (out_dir / "page_001.txt").read_text(encoding="utf-8").startswith("Chapter One")
    manifest = json.loads((out_dir / "manifest.json").read_text())
    assert manifest["extracted_pages"] == [1, 2]
    assert manifest["document_type"] == "epub"


def test_declared_type_overrides_suffix(tmp_path: Path, sample_epub: bytes) -> None:
    path = tmp_path / "book.bin"
    path.write_bytes(sample_epub)

    result = runner.invoke(app, ["extract", str(path), "--type", "application/epub+zip", "-q"])

    assert result.exit_code == 0
    assert "It was a cold day." in result.output


def test_unsupported_file_prints_placeholder(tmp_path: Path) -> None:
    path = tmp_path / "image.png"
    path.write_bytes(b"\x89PNG\r\n")

    result = runner.invoke(app, ["extract", str(path), "-q"])

    assert result.exit_code == 0
    assert "Unsupported file type." in result.output


def test_info_shows_page_overview(epub_file: Path) -> None:
    result = runner.invoke(app, ["info", str(epub_file)])

    assert result.exit_code == 0
    assert "Document Information" in result.output
    assert "EPUB" in result.output
    assert "Chapter Two" in result.output


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    result = runner.invoke(app, ["extract", str(tmp_path / "missing.pdf")])

    assert result.exit_code != 0


def test_out_of_range_page_is_reported(epub_file: Path) -> None:
    result = runner.invoke(app, ["extract", str(epub_file), "--pages", "9", "-q"])

    assert result.exit_code == 1
    assert "out of range" in result.output
    assert "It was a cold day." not in result.output
