"""PDF document handle: embedded text layer via pypdf, page rendering via PyMuPDF.

The rendering handle is only opened the first time a page needs to be
rasterised, so born-digital PDFs never touch PyMuPDF.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Protocol

import fitz  # PyMuPDF
from pypdf import PdfReader

from content_service.extraction.errors import PdfReadError

logger = logging.getLogger(__name__)


class PdfDocument(Protocol):
    @property
    def page_count(self) -> int: ...

    def page_fragments(self, page_number: int) -> list[str]: ...

    def render_page(self, page_number: int, scale: float) -> bytes: ...

    def close(self) -> None: ...


class PdfFile:
    def __init__(self, data: bytes) -> None:
        self._data = data
        try:
            self._reader = PdfReader(io.BytesIO(data))
            if self._reader.is_encrypted and not self._reader.decrypt(""):
                raise PdfReadError("PDF is password protected")
            self._page_count = len(self._reader.pages)
        except PdfReadError:
            raise
        except Exception as e:
            raise PdfReadError(f"Could not open PDF: {e}") from e
        self._render_doc: Any = None

    @property
    def page_count(self) -> int:
        return self._page_count

    def page_fragments(self, page_number: int) -> list[str]:
        """Text-layer fragments of a 1-based page, in content-stream order."""
        fragments: list[str] = []

        def _visit(text: str, cm: Any, tm: Any, font_dict: Any, font_size: Any) -> None:
            fragments.append(text)

        try:
            self._reader.pages[page_number - 1].extract_text(visitor_text=_visit)
        except Exception as e:
            raise PdfReadError(f"Could not read text layer of page {page_number}: {e}") from e
        return fragments

    def render_page(self, page_number: int, scale: float) -> bytes:
        """Rasterise a 1-based page to PNG at ``scale`` x the page's natural size."""
        try:
            if self._render_doc is None:
                self._render_doc = fitz.open(stream=self._data, filetype="pdf")
            page = self._render_doc.load_page(page_number - 1)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            return pix.tobytes("png")
        except Exception as e:
            raise PdfReadError(f"Could not render page {page_number}: {e}") from e

    def close(self) -> None:
        if self._render_doc is not None:
            self._render_doc.close()
            self._render_doc = None


def open_pdf(data: bytes) -> PdfFile:
    doc = PdfFile(data)
    logger.debug("Opened PDF with %d pages", doc.page_count)
    return doc
