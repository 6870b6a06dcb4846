from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

from content_service.extraction.errors import FileLoadError
from content_service.extraction.types import SourceDocument

_GENERIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

_SUPPORTED_EXTS: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


class _Upload(Protocol):
    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


def _ext(name: str) -> str:
    base = name.lower()
    for e in _SUPPORTED_EXTS:
        if base.endswith(e):
            return e
    return ""


def resolve_media_type(name: str, declared: str | None) -> str:
    """Declared type wins unless it is missing or generic; then the extension decides."""
    mt = (declared or "").split(";", 1)[0].strip().lower()
    if mt not in _GENERIC_TYPES:
        return mt
    return _SUPPORTED_EXTS.get(_ext(name), mt or "application/octet-stream")


async def load_upload(upload: _Upload) -> SourceDocument:
    name = upload.filename or "upload"
    try:
        data = await upload.read()
    except OSError as e:
        raise FileLoadError(f"Could not read {name}: {e}") from e
    if not data:
        raise FileLoadError(f"{name} is empty")
    return SourceDocument(
        data=data,
        media_type=resolve_media_type(name, upload.content_type),
        name=name,
    )


async def load_path(path: Path, *, media_type: str | None = None) -> SourceDocument:
    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(None, path.read_bytes)
    except OSError as e:
        raise FileLoadError(f"Could not read {path}: {e}") from e
    if not data:
        raise FileLoadError(f"{path} is empty")
    return SourceDocument(
        data=data,
        media_type=resolve_media_type(path.name, media_type),
        name=path.name,
    )
