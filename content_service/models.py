"""Pydantic request/response schemas for the content service API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from content_service.generation import GenerationMode

# -- Extraction ---------------------------------------------------------------


class ExtractResponse(BaseModel):
    name: str
    media_type: str
    text: str
    pages: int
    used_ocr: bool
    ocr_pages: list[int]
    strategy: str


class DownloadRequest(BaseModel):
    text: str = Field(..., max_length=5_000_000, description="Extracted text to download")


# -- Generation ---------------------------------------------------------------


class GenerateRequest(BaseModel):
    mode: GenerationMode = Field(..., description="summary, hashtags, rewrite, sentiment or engagement")
    text: str = Field(..., max_length=2_000_000, description="Extracted source text")


class GenerateResponse(BaseModel):
    mode: GenerationMode
    output: str


# -- Contact ------------------------------------------------------------------


class ContactRequest(BaseModel):
    name: str = Field("", max_length=200)
    email: str = Field("", max_length=320)
    message: str = Field("", max_length=10_000)


class ContactResponse(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None


# -- Health -------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    error: str | None = None
