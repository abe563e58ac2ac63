# =============================================================================
# Unit Tests — Text Extraction
# =============================================================================
#
# The Docling converter is replaced by fakes returning either lightweight
# stand-ins or real docling-core documents, so no ML models or real PDFs
# are needed.
# =============================================================================

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from docling_core.types.doc import (
    BoundingBox,
    ContentLayer,
    DocItemLabel,
    DoclingDocument,
    ProvenanceItem,
    Size,
    TableCell,
    TableData,
)

from app.exceptions import IngestionError
from app.services import parser
from app.services.parser import (
    PdfTextExtractor,
    PlainTextExtractor,
    extract_text,
    select_extractor,
)


def _item(text: str | None, page_no: int | None):
    """A Docling-like item with optional text and provenance."""
    prov = [SimpleNamespace(page_no=page_no)] if page_no is not None else []
    item = SimpleNamespace(prov=prov)
    if text is not None:
        item.text = text
    return item


def _fake_converter(items, pages=None):
    """Converter whose convert() yields a document with the given items."""
    page_numbers = pages if pages is not None else sorted(
        {i.prov[0].page_no for i in items if i.prov}
    )
    document = MagicMock()
    document.iterate_items.return_value = [(item, 0) for item in items]
    document.pages = {n: object() for n in page_numbers}
    converter = MagicMock()
    converter.convert.return_value = SimpleNamespace(document=document)
    return converter


class TestSelectExtractor:
    """Format detection from MIME type or filename suffix."""

    def test_pdf_by_content_type(self):
        assert isinstance(select_extractor("blob", "application/pdf"), PdfTextExtractor)

    def test_pdf_by_suffix_case_insensitive(self):
        assert isinstance(select_extractor("REPORT.PDF", None), PdfTextExtractor)

    def test_text_file(self):
        assert isinstance(select_extractor("notes.txt", "text/plain"), PlainTextExtractor)

    def test_unknown_type_falls_back_to_text(self):
        extractor = select_extractor("data.csv", "application/octet-stream")
        assert isinstance(extractor, PlainTextExtractor)


class TestPlainTextExtractor:
    """UTF-8 decoding is verbatim."""

    def test_decodes_utf8(self):
        data = "Héllo\n  wörld\t".encode()
        assert PlainTextExtractor().extract(data) == "Héllo\n  wörld\t"

    def test_empty_bytes_give_empty_string(self):
        assert PlainTextExtractor().extract(b"") == ""

    def test_invalid_bytes_replaced_not_raised(self):
        assert PlainTextExtractor().extract(b"ok\xff") == "ok\ufffd"


class TestPdfTextExtractor:
    """Page ordering and fragment joining."""

    def test_pages_joined_by_blank_line(self):
        converter = _fake_converter([_item("A", 1), _item("B", 2), _item("C", 3)])
        text = PdfTextExtractor(converter).extract(b"%PDF", "abc.pdf")
        assert text == "A\n\nB\n\nC"

    def test_fragments_on_a_page_joined_by_space(self):
        converter = _fake_converter([
            _item("Hello", 1), _item("world", 1), _item("Next", 2),
        ])
        text = PdfTextExtractor(converter).extract(b"%PDF", "x.pdf")
        assert text == "Hello world\n\nNext"

    def test_pages_emitted_in_page_order(self):
        converter = _fake_converter([_item("second", 2), _item("first", 1)])
        text = PdfTextExtractor(converter).extract(b"%PDF", "x.pdf")
        assert text == "first\n\nsecond"

    def test_blank_page_keeps_its_slot(self):
        converter = _fake_converter([_item("A", 1), _item("C", 3)], pages=[1, 2, 3])
        text = PdfTextExtractor(converter).extract(b"%PDF", "x.pdf")
        assert text == "A\n\n\n\nC"

    def test_items_without_text_skipped(self):
        converter = _fake_converter([_item("A", 1), _item(None, 1), _item("", 1)])
        assert PdfTextExtractor(converter).extract(b"%PDF", "x.pdf") == "A"

    def test_item_without_provenance_stays_on_previous_page(self):
        converter = _fake_converter(
            [_item("A", 1), _item("B", 2), _item("tail", None)], pages=[1, 2],
        )
        text = PdfTextExtractor(converter).extract(b"%PDF", "x.pdf")
        assert text == "A\n\nB tail"

    def test_document_without_text_is_empty_string(self):
        converter = _fake_converter([], pages=[])
        assert PdfTextExtractor(converter).extract(b"%PDF", "x.pdf") == ""

    def test_conversion_failure_raises_ingestion_error(self):
        converter = MagicMock()
        converter.convert.side_effect = RuntimeError("not a PDF")
        with pytest.raises(IngestionError, match="broken.pdf") as exc_info:
            PdfTextExtractor(converter).extract(b"garbage", "broken.pdf")
        assert exc_info.value.filename == "broken.pdf"

    def test_default_converter_is_lazy_singleton(self):
        converter = _fake_converter([_item("A", 1)])
        with patch.object(parser, "_get_converter", return_value=converter) as get:
            assert PdfTextExtractor().extract(b"%PDF", "x.pdf") == "A"
        get.assert_called_once()


class TestExtractText:
    """extract_text() dispatch."""

    def test_text_upload(self):
        assert extract_text("a.txt", b"plain", "text/plain") == "plain"

    def test_pdf_upload_uses_converter(self):
        converter = _fake_converter([_item("A", 1), _item("B", 2)])
        with patch.object(parser, "_get_converter", return_value=converter):
            assert extract_text("a.pdf", b"%PDF", "application/pdf") == "A\n\nB"


# ---------------------------------------------------------------------------
# Test: real Docling documents
# ---------------------------------------------------------------------------


def _prov(page_no: int, length: int) -> ProvenanceItem:
    return ProvenanceItem(
        page_no=page_no,
        bbox=BoundingBox(l=0, t=0, r=100, b=10),
        charspan=(0, length),
    )


def _cell(text: str, row: int, col: int) -> TableCell:
    return TableCell(
        text=text,
        start_row_offset_idx=row,
        end_row_offset_idx=row + 1,
        start_col_offset_idx=col,
        end_col_offset_idx=col + 1,
    )


def _converter_for(document: DoclingDocument) -> MagicMock:
    converter = MagicMock()
    converter.convert.return_value = SimpleNamespace(document=document)
    return converter


class TestPdfTextExtractorDoclingDocument:
    """Extraction from a DoclingDocument built with docling-core."""

    def _document(self, pages: int = 1) -> DoclingDocument:
        document = DoclingDocument(name="report")
        for page_no in range(1, pages + 1):
            document.add_page(page_no=page_no, size=Size(width=612, height=792))
        return document

    def test_table_cells_included(self):
        document = self._document()
        document.add_text(
            label=DocItemLabel.TEXT, text="Revenue table:", prov=_prov(1, 14),
        )
        document.add_table(
            data=TableData(
                num_rows=1,
                num_cols=2,
                table_cells=[_cell("Q1", 0, 0), _cell("$42M", 0, 1)],
            ),
            prov=_prov(1, 0),
        )

        text = PdfTextExtractor(_converter_for(document)).extract(b"%PDF", "r.pdf")

        assert text == "Revenue table: Q1 $42M"

    def test_page_header_and_footer_included(self):
        document = self._document()
        document.add_text(
            label=DocItemLabel.PAGE_HEADER,
            text="ACME Confidential",
            prov=_prov(1, 17),
            content_layer=ContentLayer.FURNITURE,
        )
        document.add_text(label=DocItemLabel.TEXT, text="Body", prov=_prov(1, 4))
        document.add_text(
            label=DocItemLabel.PAGE_FOOTER,
            text="Page 1 of 9",
            prov=_prov(1, 11),
            content_layer=ContentLayer.FURNITURE,
        )

        text = PdfTextExtractor(_converter_for(document)).extract(b"%PDF", "r.pdf")

        assert "ACME Confidential" in text
        assert "Body" in text
        assert "Page 1 of 9" in text

    def test_pages_of_real_document_in_order(self):
        document = self._document(pages=3)
        for page_no, page_text in enumerate(["A", "B", "C"], start=1):
            document.add_text(
                label=DocItemLabel.TEXT, text=page_text, prov=_prov(page_no, 1),
            )

        text = PdfTextExtractor(_converter_for(document)).extract(b"%PDF", "r.pdf")

        assert text == "A\n\nB\n\nC"


class TestGetConverter:
    """The shared Docling converter is built once."""

    def test_concurrent_first_use_builds_one_converter(self):
        def slow_build(**kwargs):
            time.sleep(0.05)
            return MagicMock()

        with patch.object(parser, "_converter", None), patch.object(
            parser, "DocumentConverter", side_effect=slow_build,
        ) as build, patch.object(parser, "PdfFormatOption"):
            with ThreadPoolExecutor(max_workers=8) as pool:
                converters = list(pool.map(lambda _: parser._get_converter(), range(8)))

        assert build.call_count == 1
        assert all(c is converters[0] for c in converters)

    def test_table_structure_enabled(self):
        with patch.object(parser, "_converter", None), patch.object(
            parser, "DocumentConverter",
        ), patch.object(parser, "PdfFormatOption") as format_option:
            parser._get_converter()

        options = format_option.call_args.kwargs["pipeline_options"]
        assert options.do_table_structure is True
