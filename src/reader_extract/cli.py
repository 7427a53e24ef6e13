"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from reader_extract.commands.extract import execute_extract, execute_info
from reader_extract.models.config import ExtractionConfig

app = typer.Typer(
    name="reader-extract",
    help="Extract ordered plain-text pages from PDF, EPUB and text documents.",
    add_completion=False,
)

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logs through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def build_config(
    no_ocr: bool,
    lang: str | None,
    workers: int | None,
    ocr_timeout: float | None,
) -> ExtractionConfig:
    """Environment defaults overridden by command-line options."""
    config = ExtractionConfig.from_env()
    overrides: dict[str, object] = {}
    if no_ocr:
        overrides["ocr_enabled"] = False
    if lang:
        overrides["ocr_language"] = lang
    if workers is not None:
        overrides["max_workers"] = workers
    if ocr_timeout is not None:
        overrides["ocr_timeout"] = ocr_timeout
    return config.model_copy(update=overrides)


BookArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the document (PDF, EPUB or plain text)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
TypeOption = Annotated[
    Optional[str],
    typer.Option(
        "--type",
        "-t",
        help="Declared content type (pdf, epub, text or a MIME type); default: from suffix",
    ),
]
NoOcrOption = Annotated[
    bool,
    typer.Option("--no-ocr", help="Skip OCR for PDF pages without a text layer"),
]
LangOption = Annotated[
    Optional[str],
    typer.Option("--lang", help="Tesseract language(s) for OCR, e.g. 'eng+deu'"),
]
WorkersOption = Annotated[
    Optional[int],
    typer.Option("--workers", "-w", help="Parallel OCR workers", min=1),
]
TimeoutOption = Annotated[
    Optional[float],
    typer.Option("--ocr-timeout", help="Per-page OCR timeout in seconds (0 = none)", min=0),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging"),
]


@app.command()
def extract(
    book_path: BookArgument,
    declared_type: TypeOption = None,
    pages: Annotated[
        Optional[str],
        typer.Option(
            "--pages",
            "-p",
            help="Pages to output: '1,3,5-7' or 'all'",
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Write pages as text files here instead of printing them",
        ),
    ] = None,
    no_ocr: NoOcrOption = False,
    lang: LangOption = None,
    workers: WorkersOption = None,
    ocr_timeout: TimeoutOption = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Extract a document's pages and print or save them."""
    configure_logging(verbose)

    try:
        execute_extract(
            book_path=book_path,
            declared_type=declared_type,
            pages=pages,
            output_dir=output_dir,
            config=build_config(no_ocr, lang, workers, ocr_timeout),
            quiet=quiet,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def info(
    book_path: BookArgument,
    declared_type: TypeOption = None,
    no_ocr: NoOcrOption = False,
    lang: LangOption = None,
    workers: WorkersOption = None,
    ocr_timeout: TimeoutOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Display document type, page count and a per-page overview."""
    configure_logging(verbose)

    try:
        execute_info(
            book_path=book_path,
            declared_type=declared_type,
            config=build_config(no_ocr, lang, workers, ocr_timeout),
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error reading file: {e}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
