from __future__ import annotations


class ExtractionError(Exception):
    """Base class for failures while turning an upload into text."""


class FileLoadError(ExtractionError):
    """The uploaded file could not be read."""


class UnsupportedFileTypeError(ExtractionError):
    def __init__(self, media_type: str, name: str = "") -> None:
        label = media_type or "unknown"
        if name:
            label = f"{label} ({name})"
        super().__init__(f"Unsupported file type: {label}")
        self.media_type = media_type
        self.name = name


class PdfReadError(ExtractionError):
    """The PDF could not be parsed or a page could not be rendered."""


class OcrError(ExtractionError):
    """The OCR engine failed to recognise an image."""
