"""Extract and info command implementations."""

import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from reader_extract.core.content_processor import ContentProcessor
from reader_extract.core.output_writer import OutputWriter
from reader_extract.core.parser_factory import ParserFactory, extract_document
from reader_extract.models.config import ExtractionConfig
from reader_extract.models.extraction import DocumentType, ExtractionResult

_PAGE = re.compile(r"^[0-9]+$")
_RANGE = re.compile(r"^([0-9]*)\s*-\s*([0-9]*)$")


def parse_page_selection(selection: str, total_pages: int) -> list[int]:
    """Parse a page selection such as "1,3,5-7", "4-" or "all".

    Page numbers are 1-based; open ranges run to the first or last page.
    Returns sorted, de-duplicated 0-based indices.

    Raises:
        ValueError: If a part is malformed, a range is reversed, or a page
            lies outside 1..total_pages.
    """
    selection = selection.strip().lower()

    if selection in ("", "all"):
        return list(range(total_pages))

    indices: set[int] = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue

        match = _RANGE.match(part)
        if match:
            start_text, end_text = match.groups()
            if not start_text and not end_text:
                raise ValueError(f"Invalid page selection: {part!r}")
            start = int(start_text) if start_text else 1
            end = int(end_text) if end_text else total_pages
        elif _PAGE.match(part):
            start = end = int(part)
        else:
            raise ValueError(f"Invalid page selection: {part!r}")

        for page in (start, end):
            if not 1 <= page <= total_pages:
                raise ValueError(
                    f"Page {page} is out of range (document has {total_pages} page(s))"
                )
        if start > end:
            raise ValueError(f"Page range {part!r} is reversed")
        indices.update(range(start - 1, end))

    return sorted(indices)


def resolve_document_type(book_path: Path, declared: str | None) -> DocumentType:
    """Use the declared type if given, otherwise infer it from the suffix."""
    if declared:
        return DocumentType.from_declared(declared)
    return ParserFactory.detect_type(book_path)


def load_document(
    book_path: Path,
    document_type: DocumentType,
    config: ExtractionConfig,
    quiet: bool,
    console: Console,
) -> ExtractionResult:
    """Read the file and run extraction, with a spinner unless quiet."""
    data = book_path.read_bytes()

    if quiet:
        return extract_document(data, document_type, config=config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Extracting {document_type.value.upper()}...", total=None)
        return extract_document(data, document_type, config=config)


def execute_extract(
    book_path: Path,
    declared_type: str | None,
    pages: str | None,
    output_dir: Path | None,
    config: ExtractionConfig,
    quiet: bool,
    console: Console,
) -> None:
    """Execute the extract command."""
    document_type = resolve_document_type(book_path, declared_type)
    result = load_document(book_path, document_type, config, quiet, console)

    selected = parse_page_selection(pages or "all", result.page_count)
    if not selected:
        console.print("[yellow]No pages selected. Exiting.[/]")
        return

    if output_dir is None:
        for idx in selected:
            if not quiet:
                console.rule(f"[dim]Page {idx + 1}[/]")
            # Page text is printed verbatim, never interpreted as markup
            console.print(result.pages[idx], markup=False, highlight=False)
        _print_warnings(result, quiet, console)
        return

    writer = OutputWriter(output_dir, book_path)
    page_metadata = []
    for idx in selected:
        _, metadata = writer.write_page(idx, result.pages[idx])
        page_metadata.append(metadata)
    manifest_path = writer.write_manifest(result, selected, page_metadata)

    if not quiet:
        summary_lines = [
            f"[green]Successfully extracted {len(selected)} page(s)[/]",
            "",
            f"[dim]Output directory:[/] {output_dir}",
            f"[dim]Manifest:[/] {manifest_path.name}",
        ]
        if result.cancelled:
            summary_lines.append("[yellow]Extraction was cancelled early[/]")
        console.print(
            Panel("\n".join(summary_lines), title="Complete", border_style="green")
        )
    _print_warnings(result, quiet, console)


def execute_info(
    book_path: Path,
    declared_type: str | None,
    config: ExtractionConfig,
    console: Console,
) -> None:
    """Execute the info command."""
    document_type = resolve_document_type(book_path, declared_type)
    result = load_document(book_path, document_type, config, False, console)
    processor = ContentProcessor()
    stats = processor.get_stats(result.text)

    info_lines = [
        f"[bold]{book_path.name}[/]",
        "",
        f"[dim]Format:[/] {document_type.value.upper()}",
        f"[dim]Pages:[/] {result.page_count}",
        f"[dim]Words:[/] {stats['word_count']:,}",
    ]
    if result.warnings:
        info_lines.append("")
        for warning in result.warnings:
            info_lines.append(f"[yellow]! {escape(warning)}[/]")

    console.print()
    console.print(
        Panel("\n".join(info_lines), title="Document Information", border_style="green")
    )

    console.print()
    table = Table(title="Pages", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=5)
    table.add_column("Words", justify="right", style="green")
    table.add_column("Begins with", style="white")

    for idx, page in enumerate(result.pages):
        words = page.split()
        preview = " ".join(words[:8]) + (" ..." if len(words) > 8 else "")
        table.add_row(str(idx + 1), f"{len(words):,}", Text(preview or "-"))

    console.print(table)
    console.print()


def _print_warnings(result: ExtractionResult, quiet: bool, console: Console) -> None:
    if quiet or not result.warnings:
        return
    for warning in result.warnings:
        console.print(f"[yellow]! {escape(warning)}[/]")
