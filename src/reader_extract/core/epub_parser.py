"""EPUB reading-order resolution on top of the in-memory ZIP reader."""

import io
import logging
import posixpath
import threading
from collections.abc import Iterator, Mapping
from urllib.parse import unquote

from lxml import etree

from reader_extract.core.content_processor import ContentProcessor
from reader_extract.core.errors import (
    ArchiveError,
    EntryNotFound,
    EpubError,
    InvalidContainer,
    MissingPackageDocument,
)
from reader_extract.core.parser_factory import DocumentParser
from reader_extract.core.zip_archive import ZipArchive
from reader_extract.models.epub import ContainerMetadata, PackageDocument

log = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"

INVALID_ARCHIVE_PAGE = "Error: Invalid EPUB or Zip Archive"
EMPTY_BOOK_PAGE = "No text content found."


# =============================================================================
# Metadata Parsing
# =============================================================================


def _start_elements(xml: bytes) -> Iterator[tuple[str, Mapping[str, str]]]:
    """Yield (local name, attributes) for each start tag until the XML breaks.

    Namespaces are ignored so prefixed and default-namespace documents match
    alike. The parser recovers past syntax errors where it can; elements seen
    before an unrecoverable one still count.
    """
    events = etree.iterparse(
        io.BytesIO(xml),
        events=("start",),
        no_network=True,
        resolve_entities=False,
        recover=True,
    )
    try:
        for _event, element in events:
            yield etree.QName(element).localname, element.attrib
    except etree.XMLSyntaxError as e:
        log.warning(f"Malformed XML, keeping partial results: {e}")


def parse_container(xml: bytes) -> ContainerMetadata:
    """Find the package document path in META-INF/container.xml.

    The first ``rootfile`` carrying ``full-path`` wins.

    Raises:
        InvalidContainer: If no rootfile is declared.
    """
    for name, attributes in _start_elements(xml):
        if name == "rootfile" and attributes.get("full-path"):
            return ContainerMetadata(opf_path=attributes["full-path"])
    raise InvalidContainer("No rootfile found")


def parse_package(xml: bytes) -> PackageDocument:
    """Collect the manifest and spine from an OPF package document."""
    package = PackageDocument()
    for name, attributes in _start_elements(xml):
        if name == "item":
            item_id = attributes.get("id")
            href = attributes.get("href")
            if item_id and href:
                package.manifest[item_id] = href
        elif name == "itemref":
            idref = attributes.get("idref")
            if idref:
                package.spine.append(idref)
    return package


def resolve_item_path(opf_path: str, href: str) -> str:
    """Resolve a manifest href against the directory holding the OPF file.

    Example: ``OEBPS/content.opf`` + ``text/ch01.html`` -> ``OEBPS/text/ch01.html``
    """
    href = href.split("#", 1)[0]
    base = posixpath.dirname(opf_path)
    joined = posixpath.normpath(posixpath.join("/", base, href))
    return joined.lstrip("/")


# =============================================================================
# EPUB Parser
# =============================================================================


class EpubParser(DocumentParser):
    """Extract one page of text per spine item."""

    def __init__(
        self,
        data: bytes,
        processor: ContentProcessor | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.data = data
        self.processor = processor or ContentProcessor()
        self.cancel_event = cancel_event
        self.cancelled = False
        self.warnings: list[str] = []

    def extract_pages(self) -> list[str]:
        """Return the page sequence, or a single diagnostic page."""
        try:
            archive = ZipArchive.open(self.data)
        except ArchiveError as e:
            log.warning(f"Not a readable ZIP archive: {e}")
            return [INVALID_ARCHIVE_PAGE]

        try:
            opf_path, package = self._load_package(archive)
        except EpubError as e:
            log.warning(f"Invalid EPUB structure: {e}")
            return [f"Error: Invalid EPUB ({e})"]

        pages = self._extract_spine(archive, opf_path, package)
        if self.cancelled:
            return pages
        return pages or [EMPTY_BOOK_PAGE]

    def reading_order(self) -> list[str]:
        """Archive paths of the spine items, in reading order.

        Raises:
            ArchiveError: If the buffer is not a readable ZIP archive.
            InvalidContainer, MissingPackageDocument: If the EPUB metadata
                cannot be located.
        """
        archive = ZipArchive.open(self.data)
        opf_path, package = self._load_package(archive)
        paths = []
        for idref in package.spine:
            href = package.resolve(idref)
            if href is not None:
                paths.append(resolve_item_path(opf_path, href))
        return paths

    def _load_package(self, archive: ZipArchive) -> tuple[str, PackageDocument]:
        try:
            container_xml = archive.read(CONTAINER_PATH)
        except ArchiveError as e:
            raise InvalidContainer("Missing container.xml") from e

        opf_path = parse_container(container_xml).opf_path

        try:
            opf_xml = archive.read(opf_path)
        except ArchiveError as e:
            raise MissingPackageDocument(opf_path) from e

        package = parse_package(opf_xml)
        log.debug(
            f"Package {opf_path}: {len(package.manifest)} manifest items, "
            f"{len(package.spine)} spine items"
        )
        return opf_path, package

    def _extract_spine(
        self, archive: ZipArchive, opf_path: str, package: PackageDocument
    ) -> list[str]:
        pages: list[str] = []

        for idref in package.spine:
            if self.cancel_event is not None and self.cancel_event.is_set():
                log.info(f"Extraction cancelled after {len(pages)} page(s)")
                self.cancelled = True
                break

            href = package.resolve(idref)
            if href is None:
                log.debug(f"Spine idref {idref!r} not in manifest")
                continue

            path = resolve_item_path(opf_path, href)
            content = self._read_item(archive, path)
            if content is None:
                continue

            text = self.processor.to_plain_text(content)
            if text is None:
                self.warnings.append(f"Skipped undecodable item {path}")
            elif text.strip():
                pages.append(text)

        return pages

    def _read_item(self, archive: ZipArchive, path: str) -> bytes | None:
        """Read a spine item, retrying with the percent-decoded path."""
        candidates = [path]
        decoded = unquote(path)
        if decoded != path:
            candidates.append(decoded)

        for candidate in candidates:
            try:
                return archive.read(candidate)
            except EntryNotFound:
                continue
            except ArchiveError as e:
                log.warning(f"Skipping unreadable item {candidate}: {e}")
                self.warnings.append(f"Skipped unreadable item {candidate}")
                return None

        log.warning(f"Skipping missing item {path}")
        self.warnings.append(f"Skipped missing item {path}")
        return None
