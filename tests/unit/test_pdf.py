"""Unit tests for the PDF handle with real fixture bytes.

Parses fpdf2-generated PDFs with pypdf and renders with PyMuPDF; no mocks on
the PDF libraries.
"""

from __future__ import annotations

import pytest

from content_service.extraction.errors import PdfReadError
from content_service.extraction.pdf import open_pdf

pytest.importorskip("pypdf")


class TestTextLayer:
    def test_page_count(self, multi_page_pdf_bytes: bytes) -> None:
        doc = open_pdf(multi_page_pdf_bytes)
        assert doc.page_count == 3

    def test_fragments_joined_contain_page_text(self, sample_pdf_bytes: bytes) -> None:
        doc = open_pdf(sample_pdf_bytes)
        joined = " ".join(doc.page_fragments(1))

        assert "Line one" in joined
        assert "Line three concludes the page." in joined

    def test_fragments_are_per_page(self, multi_page_pdf_bytes: bytes) -> None:
        doc = open_pdf(multi_page_pdf_bytes)

        assert "page 2" in " ".join(doc.page_fragments(2))
        assert "page 2" not in " ".join(doc.page_fragments(1))

    def test_blank_page_has_no_text(self, empty_pdf_bytes: bytes) -> None:
        doc = open_pdf(empty_pdf_bytes)
        assert " ".join(doc.page_fragments(1)).strip() == ""

    def test_garbage_bytes_raise(self) -> None:
        with pytest.raises(PdfReadError):
            open_pdf(b"NOT_EVEN_PDF")


class TestRendering:
    def test_render_page_returns_png(self, sample_pdf_bytes: bytes) -> None:
        pytest.importorskip("fitz")
        doc = open_pdf(sample_pdf_bytes)
        try:
            png = doc.render_page(1, 2.0)
        finally:
            doc.close()

        assert png.startswith(b"\x89PNG\r\n\x1a\n")

    def test_render_scale_doubles_size(self, sample_pdf_bytes: bytes) -> None:
        pytest.importorskip("fitz")
        image_mod = pytest.importorskip("PIL.Image")
        import io

        doc = open_pdf(sample_pdf_bytes)
        try:
            small = image_mod.open(io.BytesIO(doc.render_page(1, 1.0)))
            large = image_mod.open(io.BytesIO(doc.render_page(1, 2.0)))
        finally:
            doc.close()

        assert abs(large.width - 2 * small.width) <= 2
        assert abs(large.height - 2 * small.height) <= 2

    def test_render_out_of_range_raises(self, sample_pdf_bytes: bytes) -> None:
        pytest.importorskip("fitz")
        doc = open_pdf(sample_pdf_bytes)
        try:
            with pytest.raises(PdfReadError, match="page 5"):
                doc.render_page(5, 2.0)
        finally:
            doc.close()


class TestHybridOnRealPdf:
    async def test_born_digital_pdf_never_calls_ocr(self, multi_page_pdf_bytes: bytes) -> None:
        from content_service.extraction.hybrid import extract_pdf_text
        from tests.unit.fakes import FakeOcr

        ocr = FakeOcr(default="OCR")
        doc = open_pdf(multi_page_pdf_bytes)
        result = await extract_pdf_text(doc, ocr, min_chars=10)
        doc.close()

        assert ocr.calls == []
        assert result.text.index("page 1") < result.text.index("page 2") < result.text.index("page 3")
        assert result.text.count("\n\n") == 2

    async def test_blank_page_goes_to_ocr(self, empty_pdf_bytes: bytes) -> None:
        pytest.importorskip("fitz")
        from content_service.extraction.hybrid import extract_pdf_text
        from tests.unit.fakes import FakeOcr

        ocr = FakeOcr(default="recognised")
        doc = open_pdf(empty_pdf_bytes)
        result = await extract_pdf_text(doc, ocr, min_chars=10)
        doc.close()

        assert result.text == "recognised"
        image, mime_type, language = ocr.calls[0]
        assert image.startswith(b"\x89PNG")
        assert (mime_type, language) == ("image/png", "eng")
