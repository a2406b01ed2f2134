"""DOCX-to-text extraction collaborator.

Architectural role:
    Turns an in-memory OOXML word-processing package into plain text for the
    `DOCX_EXTRACT` strategy. The materializer awaits `extract_text`; parsing
    runs on a worker thread so the event loop is not blocked.

Extraction behavior:
    - Body paragraphs and tables are visited in document order.
    - Paragraphs are separated by a blank line.
    - Table cells are tab-separated, one table row per line.
    - Headers, footers, comments and embedded images are ignored.

Failure handling:
    Any parse failure (not a zip, missing main part, broken XML) is raised as
    `ContentExtractionError`. An empty but valid document yields `""`.
"""

import asyncio
import io
import logging

import docx
from docx.table import Table
from docx.text.paragraph import Paragraph

from finalformatter.core.errors import ContentExtractionError


logger = logging.getLogger(__name__)


def _iter_block_text(document):
    """Yield the text of each top-level paragraph/table in body order."""
    body = document.element.body

    for child in body.iterchildren():
        tag = child.tag.rsplit("}", 1)[-1]

        if tag == "p":
            yield Paragraph(child, document).text

        elif tag == "tbl":
            table = Table(child, document)
            rows = [
                "\t".join(cell.text for cell in row.cells)
                for row in table.rows
            ]
            yield "\n".join(rows)


def extract_docx_text(data: bytes) -> str:
    """Synchronously extract plain text from DOCX bytes.

    Raises:
        ContentExtractionError: When the buffer is not a readable DOCX package.
    """
    try:
        document = docx.Document(io.BytesIO(data))
        return "\n\n".join(_iter_block_text(document))
    except Exception as exc:
        logger.warning("DOCX extraction failed: %s", type(exc).__name__)
        raise ContentExtractionError(
            f"DOCX extraction failed: {type(exc).__name__}: {exc}"
        ) from exc


class DocxTextExtractor:
    """Default extraction collaborator backed by python-docx."""

    async def extract_text(self, data: bytes) -> str:
        return await asyncio.to_thread(extract_docx_text, data)
