from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SourceDocument:
    data: bytes
    media_type: str
    name: str

    @property
    def kind(self) -> str | None:
        if self.media_type == "application/pdf":
            return "pdf"
        if self.media_type.startswith("image/"):
            return "image"
        return None


@dataclass(frozen=True)
class PageText:
    """Text chosen for one PDF page, emitted in page order."""

    page: int  # 1-based
    total: int
    text: str
    used_ocr: bool


@dataclass(frozen=True)
class ExtractResult:
    text: str
    used_ocr: bool
    pages: int
    extraction_meta: dict[str, Any] = field(default_factory=dict)
