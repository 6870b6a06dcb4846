from __future__ import annotations

import io
import logging

import pytesseract
from PIL import Image, UnidentifiedImageError

from content_service.extraction.errors import OcrError

logger = logging.getLogger(__name__)


class TesseractOcr:
    """Local OCR through the tesseract binary."""

    name = "tesseract"

    def __init__(self, *, tesseract_cmd: str | None = None) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(self, image: bytes, *, mime_type: str, language: str) -> str:
        try:
            with Image.open(io.BytesIO(image)) as img:
                return pytesseract.image_to_string(img, lang=language) or ""
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OcrError(f"Tesseract failed: {e}") from e
        except UnidentifiedImageError as e:
            raise OcrError(f"Unreadable image ({mime_type}): {e}") from e
        except (OSError, Image.DecompressionBombError) as e:
            # truncated data, or pixel count over Pillow's bomb limit
            raise OcrError(f"Could not decode image ({mime_type}): {e}") from e

    def check(self) -> bool:
        try:
            version = pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError:
            logger.warning("tesseract binary not found", exc_info=True)
            return False
        logger.debug("tesseract %s available", version)
        return True
