from __future__ import annotations

import io
import zipfile
from collections.abc import Mapping, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Test Book</dc:title>
  </metadata>
  <manifest>
{items}
  </manifest>
  <spine>
{itemrefs}
  </spine>
</package>
"""

CHAPTER_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Ignored title</title></head>
<body>{body}</body>
</html>
"""


def build_zip(
    entries: Mapping[str, bytes | str],
    compression: int = zipfile.ZIP_DEFLATED,
    comment: bytes = b"",
) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
        archive.comment = comment
    return buffer.getvalue()


def build_opf(manifest: Mapping[str, str], spine: list[str]) -> str:
    items = "\n".join(
        f'    <item id="{item_id}" href="{href}" media-type="application/xhtml+xml"/>'
        for item_id, href in manifest.items()
    )
    itemrefs = "\n".join(f'    <itemref idref="{idref}"/>' for idref in spine)
    return OPF_TEMPLATE.format(items=items, itemrefs=itemrefs)


def chapter(body: str) -> str:
    return CHAPTER_TEMPLATE.format(body=body)


def build_epub(
    files: Mapping[str, str],
    manifest: Mapping[str, str],
    spine: list[str],
    opf_path: str = "OEBPS/content.opf",
) -> bytes:
    entries: dict[str, bytes | str] = {"mimetype": "application/epub+zip"}
    entries["META-INF/container.xml"] = CONTAINER_XML.format(opf_path=opf_path)
    entries[opf_path] = build_opf(manifest, spine)
    entries.update(files)
    return build_zip(entries)


def build_pdf(pages: Sequence[str | None]) -> bytes:
    """One PDF page per entry; None leaves the page without a text layer."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    for text in pages:
        if text is not None:
            pdf.drawString(72, 720, text)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()
