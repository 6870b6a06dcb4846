from __future__ import annotations

import logging

from content_service.config import (
    CONTENT_DOC_AI_LOCATION,
    CONTENT_DOC_AI_PROCESSOR_ID,
    CONTENT_DOC_AI_PROJECT,
    CONTENT_OCR_PROVIDER,
    CONTENT_TESSERACT_CMD,
)
from content_service.extraction.ocr.base import OcrEngine

logger = logging.getLogger(__name__)


def build_ocr_engine(provider: str = CONTENT_OCR_PROVIDER) -> OcrEngine:
    if provider == "tesseract":
        from content_service.extraction.ocr.tesseract import TesseractOcr

        return TesseractOcr(tesseract_cmd=CONTENT_TESSERACT_CMD)

    if provider == "documentai":
        missing = [
            k
            for k, v in {
                "CONTENT_DOC_AI_PROJECT": CONTENT_DOC_AI_PROJECT,
                "CONTENT_DOC_AI_PROCESSOR_ID": CONTENT_DOC_AI_PROCESSOR_ID,
            }.items()
            if not v
        ]
        if missing:
            raise ValueError(f"Document AI OCR selected but missing config: {', '.join(missing)}")

        from content_service.extraction.ocr.document_ai import DocAIConfig, DocumentAIOcr

        return DocumentAIOcr(
            cfg=DocAIConfig(
                project=CONTENT_DOC_AI_PROJECT or "",
                location=CONTENT_DOC_AI_LOCATION,
                processor_id=CONTENT_DOC_AI_PROCESSOR_ID or "",
            )
        )

    raise ValueError(f"Unknown CONTENT_OCR_PROVIDER: {provider!r}")


def check_ocr_engine(engine: OcrEngine | None = None) -> bool:
    """Check OCR readiness (builds the configured engine when none is given)."""
    try:
        if engine is None:
            engine = build_ocr_engine()
        return engine.check()
    except Exception:
        logger.warning("OCR engine check failed", exc_info=True)
        return False
