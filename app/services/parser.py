# =============================================================================
# Text Extraction — Uploaded Bytes → Plain Text
# =============================================================================
#
# Turns an uploaded file into the plain text kept in the DocumentStore.
# Two extractors sit behind one protocol:
#
#   TextExtractor (Protocol)
#   ├── PdfTextExtractor    — Docling conversion, page by page
#   └── PlainTextExtractor  — UTF-8 decode, verbatim
#
# select_extractor() picks one from the declared MIME type or the filename
# suffix. Anything that is not a PDF is treated as text.
#
# PDF LAYOUT: pages are emitted in order 1..N and joined by a blank line.
# Within a page, text items (body, page headers/footers, table cells) are
# joined by a single space in the order the converter enumerates them.
# That is stream order, not guaranteed visual reading order.
# =============================================================================

from __future__ import annotations

import logging
import threading
from io import BytesIO
from typing import Protocol

from docling.datamodel.base_models import DocumentStream, InputFormat
from docling.datamodel.pipeline_options import PdfPipelineOptions
from docling.document_converter import DocumentConverter, PdfFormatOption
from docling_core.types.doc import ContentLayer, TableItem

from app.config import settings
from app.exceptions import IngestionError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PAGE_SEPARATOR = "\n\n"
FRAGMENT_SEPARATOR = " "

# Page headers and footers live in the furniture layer
CONTENT_LAYERS = {ContentLayer.BODY, ContentLayer.FURNITURE}


class TextExtractor(Protocol):
    """Anything that can turn an upload's bytes into plain text."""

    def extract(self, data: bytes, filename: str = "") -> str:
        ...


# ---------------------------------------------------------------------------
# Docling Converter — Lazy Singleton
# ---------------------------------------------------------------------------

_converter: DocumentConverter | None = None
_converter_lock = threading.Lock()


def _get_converter() -> DocumentConverter:
    """Lazily initialize and cache the Docling DocumentConverter."""
    global _converter
    # Called from worker threads; only one of them may build the converter
    with _converter_lock:
        if _converter is None:
            logger.info(
                "Initializing Docling DocumentConverter (ocr=%s)",
                settings.pdf_ocr_enabled,
            )
            # Table structure stays on: without it table regions yield no cells
            pipeline_options = PdfPipelineOptions()
            pipeline_options.do_ocr = settings.pdf_ocr_enabled
            pipeline_options.do_table_structure = True

            _converter = DocumentConverter(
                allowed_formats=[InputFormat.PDF],
                format_options={
                    InputFormat.PDF: PdfFormatOption(
                        pipeline_options=pipeline_options,
                    ),
                },
            )
        return _converter


def _item_text(item: object) -> str:
    """Text carried by one document item; table cells joined by spaces."""
    if isinstance(item, TableItem):
        return FRAGMENT_SEPARATOR.join(
            cell.text for cell in item.data.table_cells if cell.text
        )
    return getattr(item, "text", "") or ""


class PdfTextExtractor:
    """Paginated-document extractor backed by Docling."""

    def __init__(self, converter: DocumentConverter | None = None) -> None:
        self._converter = converter

    def extract(self, data: bytes, filename: str = "upload.pdf") -> str:
        """
        Extract the text of every page, in page order.

        Raises:
            IngestionError: If Docling cannot convert the document.
        """
        converter = self._converter or _get_converter()
        source = DocumentStream(name=filename or "upload.pdf", stream=BytesIO(data))

        try:
            result = converter.convert(source)
        except Exception as exc:
            raise IngestionError(
                f"Could not read PDF '{filename}': {exc}", filename=filename,
            ) from exc

        document = result.document
        fragments_by_page: dict[int, list[str]] = {}
        page_no = 1
        for item, _level in document.iterate_items(
            included_content_layers=CONTENT_LAYERS,
        ):
            # Items without provenance stay on the page of the previous item
            if getattr(item, "prov", None):
                page_no = item.prov[0].page_no
            text = _item_text(item)
            if text:
                fragments_by_page.setdefault(page_no, []).append(text)

        # Pages with no text items still occupy a slot
        page_numbers = sorted(set(document.pages) | set(fragments_by_page))
        pages = [
            FRAGMENT_SEPARATOR.join(fragments_by_page.get(page_no, []))
            for page_no in page_numbers
        ]

        logger.info(
            "Extracted '%s': %d pages, %d text items",
            filename,
            len(pages),
            sum(len(f) for f in fragments_by_page.values()),
        )
        return PAGE_SEPARATOR.join(pages)


class PlainTextExtractor:
    """Text-file extractor. Invalid UTF-8 becomes U+FFFD rather than an error."""

    def extract(self, data: bytes, filename: str = "") -> str:
        return data.decode("utf-8", errors="replace")


def is_pdf(filename: str, content_type: str | None) -> bool:
    """True when the declared type or the filename suffix says PDF."""
    return content_type == PDF_CONTENT_TYPE or filename.lower().endswith(".pdf")


def select_extractor(filename: str, content_type: str | None) -> TextExtractor:
    """Pick the extractor for an upload."""
    if is_pdf(filename, content_type):
        return PdfTextExtractor()
    return PlainTextExtractor()


def extract_text(filename: str, data: bytes, content_type: str | None = None) -> str:
    """
    Convert an upload into plain text.

    Args:
        filename: Original filename (used for type detection and logging).
        data: Raw uploaded bytes.
        content_type: Declared MIME type, if the client sent one.

    Returns:
        The extracted text. May be empty.

    Raises:
        IngestionError: If the content is a corrupt or unreadable PDF.
    """
    extractor = select_extractor(filename, content_type)
    return extractor.extract(data, filename)
