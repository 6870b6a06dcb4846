"""Hybrid text extraction: embedded text layer first, OCR for scanned pages.

Pages are processed strictly in order, one at a time. Each page's text is
decided once (embedded or OCR) and appended; a failure on any page aborts
the whole document.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from content_service.config import CONTENT_OCR_MIN_CHARS, CONTENT_OCR_RENDER_SCALE
from content_service.extraction.errors import UnsupportedFileTypeError
from content_service.extraction.ocr.base import OCR_LANGUAGE, OcrEngine
from content_service.extraction.pdf import PdfDocument, open_pdf
from content_service.extraction.types import ExtractResult, PageText, SourceDocument

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Any]

PAGE_SEPARATOR = "\n\n"


async def _run(fn: Callable[..., Any], *args: Any) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fn, *args)


async def _ocr(ocr: OcrEngine, image: bytes, mime_type: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: ocr.recognize(image, mime_type=mime_type, language=OCR_LANGUAGE)
    )


async def iter_pdf_pages(
    doc: PdfDocument,
    ocr: OcrEngine,
    *,
    min_chars: int = CONTENT_OCR_MIN_CHARS,
    render_scale: float = CONTENT_OCR_RENDER_SCALE,
) -> AsyncIterator[PageText]:
    """Yield the chosen text for each page, 1..page_count."""
    total = doc.page_count
    for page in range(1, total + 1):
        fragments: list[str] = await _run(doc.page_fragments, page)
        text = " ".join(fragments).strip()
        used_ocr = False

        if len(text) < min_chars:
            logger.debug("Page %d/%d has %d embedded chars; using OCR", page, total, len(text))
            image: bytes = await _run(doc.render_page, page, render_scale)
            text = await _ocr(ocr, image, "image/png")
            used_ocr = True

        yield PageText(page=page, total=total, text=text, used_ocr=used_ocr)


class PageCollector:
    """Appends page events in arrival order and builds the document result."""

    def __init__(self, *, min_chars: int = CONTENT_OCR_MIN_CHARS) -> None:
        self._min_chars = min_chars
        self._text = ""
        self._ocr_pages: list[int] = []
        self._pages = 0

    def add(self, pt: PageText) -> None:
        self._text += PAGE_SEPARATOR + pt.text
        self._pages = pt.page
        if pt.used_ocr:
            self._ocr_pages.append(pt.page)

    def result(self) -> ExtractResult:
        return ExtractResult(
            text=self._text.strip(),
            used_ocr=bool(self._ocr_pages),
            pages=self._pages,
            extraction_meta={
                "strategy": "hybrid",
                "ocr_pages": list(self._ocr_pages),
                "min_chars": self._min_chars,
            },
        )


async def extract_pdf_text(
    doc: PdfDocument,
    ocr: OcrEngine,
    *,
    on_progress: ProgressCallback | None = None,
    min_chars: int = CONTENT_OCR_MIN_CHARS,
    render_scale: float = CONTENT_OCR_RENDER_SCALE,
) -> ExtractResult:
    collector = PageCollector(min_chars=min_chars)
    async for pt in iter_pdf_pages(doc, ocr, min_chars=min_chars, render_scale=render_scale):
        collector.add(pt)
        if on_progress is not None:
            on_progress(pt.page, pt.total)
    return collector.result()


async def extract_image_text(source: SourceDocument, ocr: OcrEngine) -> ExtractResult:
    """OCR the whole image; there is no embedded text layer to consult."""
    text = await _ocr(ocr, source.data, source.media_type)
    return ExtractResult(
        text=text.strip(),
        used_ocr=True,
        pages=1,
        extraction_meta={"strategy": "ocr_image", "ocr_pages": [1]},
    )


async def iter_document(
    source: SourceDocument,
    ocr: OcrEngine,
    *,
    min_chars: int = CONTENT_OCR_MIN_CHARS,
    render_scale: float = CONTENT_OCR_RENDER_SCALE,
) -> AsyncIterator[PageText | ExtractResult]:
    """Yield one ``PageText`` per page, then the ``ExtractResult`` last.

    An image counts as a single OCR page. The PDF handle is closed whether
    or not the caller consumes every event.
    """
    kind = source.kind
    if kind == "image":
        result = await extract_image_text(source, ocr)
        yield PageText(page=1, total=1, text=result.text, used_ocr=True)
        yield result
        return
    if kind != "pdf":
        raise UnsupportedFileTypeError(source.media_type, source.name)

    doc = await _run(open_pdf, source.data)
    collector = PageCollector(min_chars=min_chars)
    try:
        async for pt in iter_pdf_pages(doc, ocr, min_chars=min_chars, render_scale=render_scale):
            collector.add(pt)
            yield pt
    finally:
        doc.close()
    yield collector.result()


async def extract_document(
    source: SourceDocument,
    ocr: OcrEngine,
    *,
    on_progress: ProgressCallback | None = None,
    min_chars: int = CONTENT_OCR_MIN_CHARS,
    render_scale: float = CONTENT_OCR_RENDER_SCALE,
) -> ExtractResult:
    result: ExtractResult | None = None
    async for event in iter_document(source, ocr, min_chars=min_chars, render_scale=render_scale):
        if isinstance(event, ExtractResult):
            result = event
        elif on_progress is not None:
            on_progress(event.page, event.total)
    assert result is not None

    logger.info(
        "Extracted %d chars from %s (pages=%d, ocr_pages=%s)",
        len(result.text),
        source.name,
        result.pages,
        result.extraction_meta.get("ocr_pages"),
    )
    return result
