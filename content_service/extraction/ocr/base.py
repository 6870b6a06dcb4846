from __future__ import annotations

from typing import Protocol

# Recognition language is fixed; callers cannot select another model.
OCR_LANGUAGE = "eng"


class OcrEngine(Protocol):
    name: str

    def recognize(self, image: bytes, *, mime_type: str, language: str) -> str: ...

    def check(self) -> bool: ...
