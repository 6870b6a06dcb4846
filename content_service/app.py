"""FastAPI entry point for the social content analyzer service.

Endpoints:
- POST /v1/extract: Upload a PDF or image, get its text (text layer + OCR fallback)
- POST /v1/extract/stream: Same, as NDJSON page progress events followed by the result
- POST /v1/generate: Summary / hashtags / rewrite / sentiment / engagement via Gemini
- POST /v1/download: Return text as a plain-text attachment
- POST /api/contact: Relay the contact form by email
- GET  /liveness: Health check
- GET  /readiness: OCR engine and generation credential check
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from content_service.config import (
    CONTENT_CORS_ALLOW_CREDENTIALS,
    CONTENT_CORS_ALLOW_HEADERS,
    CONTENT_CORS_ALLOW_METHODS,
    CONTENT_CORS_ALLOW_ORIGINS,
    CONTENT_MAX_UPLOAD_BYTES,
)
from content_service.contact import (
    CONTACT_FAILURE,
    ContactMessage,
    MailSender,
    SmtpMailSender,
    relay_contact,
)
from content_service.extraction.errors import (
    ExtractionError,
    FileLoadError,
    OcrError,
    PdfReadError,
    UnsupportedFileTypeError,
)
from content_service.extraction.hybrid import extract_document, iter_document
from content_service.extraction.loader import load_upload
from content_service.extraction.ocr.base import OcrEngine
from content_service.extraction.ocr.factory import build_ocr_engine, check_ocr_engine
from content_service.extraction.types import ExtractResult, SourceDocument
from content_service.generation import (
    GenerationConfigError,
    GenerationError,
    check_generation_service,
    generate_content,
)
from content_service.logging_config import (
    bind_request_id,
    generate_request_id,
    reset_request_id,
    setup_logging,
)
from content_service.models import (
    ContactRequest,
    ContactResponse,
    DownloadRequest,
    ExtractResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "extracted.txt"
CONTACT_PATH = "/api/contact"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info("Content service started")
    yield
    logger.info("Content service stopped")


app = FastAPI(
    title="Social Content Analyzer API",
    version="0.1.0",
    lifespan=lifespan,
)

# -- Rate limiting ------------------------------------------------------------

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})


# -- Validation ---------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The contact form only ever answers {success, message} or {success, error}.
    if request.url.path == CONTACT_PATH:
        logger.warning("Rejected contact form: %s", exc.errors())
        return JSONResponse(status_code=500, content={"success": False, "error": CONTACT_FAILURE})
    return await request_validation_exception_handler(request, exc)


if CONTENT_CORS_ALLOW_CREDENTIALS and "*" in CONTENT_CORS_ALLOW_ORIGINS:
    raise RuntimeError("Invalid CORS config: wildcard origin cannot be combined with credentials=true")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONTENT_CORS_ALLOW_ORIGINS,
    allow_credentials=CONTENT_CORS_ALLOW_CREDENTIALS,
    allow_methods=CONTENT_CORS_ALLOW_METHODS,
    allow_headers=CONTENT_CORS_ALLOW_HEADERS,
)


# -- Body size limit ----------------------------------------------------------


@app.middleware("http")
async def body_size_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with bodies exceeding the upload limit."""
    content_length = request.headers.get("content-length")
    if content_length is not None and int(content_length) > CONTENT_MAX_UPLOAD_BYTES:
        return JSONResponse(status_code=413, content={"detail": "Request body too large"})
    return await call_next(request)


# -- Request ID middleware ----------------------------------------------------


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Attach a unique request ID for trace correlation."""
    request_id = request.headers.get("x-request-id") or generate_request_id()
    request.state.request_id = request_id
    token = bind_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["x-request-id"] = request_id
    return response


# -- Dependencies -------------------------------------------------------------


@lru_cache(maxsize=1)
def _cached_ocr_engine() -> OcrEngine:
    return build_ocr_engine()


def get_ocr_engine() -> OcrEngine:
    try:
        return _cached_ocr_engine()
    except ValueError as e:
        logger.error("OCR engine not configured: %s", e)
        raise HTTPException(status_code=503, detail=f"OCR engine not configured: {e}") from e


def get_mail_sender() -> MailSender:
    return SmtpMailSender()


def _extraction_http_error(e: ExtractionError) -> HTTPException:
    if isinstance(e, UnsupportedFileTypeError):
        return HTTPException(status_code=415, detail=str(e))
    if isinstance(e, FileLoadError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PdfReadError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, OcrError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def _to_response(source: SourceDocument, result: ExtractResult) -> ExtractResponse:
    return ExtractResponse(
        name=source.name,
        media_type=source.media_type,
        text=result.text,
        pages=result.pages,
        used_ocr=result.used_ocr,
        ocr_pages=list(result.extraction_meta.get("ocr_pages", [])),
        strategy=str(result.extraction_meta.get("strategy", "")),
    )


# -- Health -------------------------------------------------------------------


@app.get("/liveness", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/readiness", response_model=HealthResponse)
async def readiness() -> HealthResponse:
    problems: list[str] = []
    try:
        engine = _cached_ocr_engine()
    except ValueError as e:
        problems.append(f"OCR engine misconfigured: {e}")
    else:
        loop = asyncio.get_running_loop()
        if not await loop.run_in_executor(None, check_ocr_engine, engine):
            problems.append("OCR engine unavailable")

    if not check_generation_service():
        problems.append("Generation credential not configured")

    if problems:
        return HealthResponse(status="degraded", error="; ".join(problems))
    return HealthResponse(status="ok")


# -- Extraction ---------------------------------------------------------------


@app.post("/v1/extract", response_model=ExtractResponse)
@limiter.limit("20/minute")
async def extract(
    request: Request,
    file: Annotated[UploadFile, File(description="PDF or image")],
    ocr: Annotated[OcrEngine, Depends(get_ocr_engine)],
) -> ExtractResponse:
    """Extract text from an uploaded PDF (per-page OCR fallback) or image (OCR)."""
    try:
        source = await load_upload(file)
        result = await extract_document(
            source,
            ocr,
            on_progress=lambda page, total: logger.debug("Processing page %d/%d", page, total),
        )
    except ExtractionError as e:
        logger.warning("Extraction failed for %s: %s", file.filename, e)
        raise _extraction_http_error(e) from e

    return _to_response(source, result)


def _ndjson(event: dict[str, object]) -> bytes:
    return (json.dumps(event) + "\n").encode("utf-8")


async def _stream_extraction(source: SourceDocument, ocr: OcrEngine) -> AsyncIterator[bytes]:
    try:
        async for event in iter_document(source, ocr):
            if isinstance(event, ExtractResult):
                yield _ndjson({"event": "result", **_to_response(source, event).model_dump()})
            else:
                yield _ndjson({"event": "progress", "page": event.page, "total": event.total})
    except ExtractionError as e:
        logger.warning("Streaming extraction failed for %s: %s", source.name, e)
        yield _ndjson({"event": "error", "detail": str(e)})
    except Exception as e:
        # Headers are already sent; the error event is the only way to report it.
        logger.exception("Streaming extraction crashed for %s", source.name)
        yield _ndjson({"event": "error", "detail": str(e) or type(e).__name__})


@app.post("/v1/extract/stream")
@limiter.limit("20/minute")
async def extract_stream(
    request: Request,
    file: Annotated[UploadFile, File(description="PDF or image")],
    ocr: Annotated[OcrEngine, Depends(get_ocr_engine)],
) -> StreamingResponse:
    """Stream one progress event per page, then the final result (or an error event)."""
    try:
        source = await load_upload(file)
    except ExtractionError as e:
        raise _extraction_http_error(e) from e
    if source.kind is None:
        raise _extraction_http_error(UnsupportedFileTypeError(source.media_type, source.name))

    return StreamingResponse(_stream_extraction(source, ocr), media_type="application/x-ndjson")


@app.post("/v1/download")
async def download(body: DownloadRequest) -> PlainTextResponse:
    return PlainTextResponse(
        body.text,
        headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
    )


# -- Generation ---------------------------------------------------------------


@app.post("/v1/generate", response_model=GenerateResponse)
@limiter.limit("30/minute")
async def generate(request: Request, body: GenerateRequest) -> GenerateResponse:
    """Run one generation mode over the supplied text."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Please upload or paste text first")

    try:
        output = await generate_content(body.mode, body.text)
    except GenerationConfigError as e:
        logger.error("Generation not configured: %s", e)
        raise HTTPException(status_code=503, detail=str(e)) from e
    except GenerationError as e:
        logger.exception("Generation call failed")
        raise HTTPException(status_code=502, detail=f"Generation failed: {e}") from e

    return GenerateResponse(mode=body.mode, output=output)


# -- Contact ------------------------------------------------------------------


@app.post(CONTACT_PATH, response_model=ContactResponse)
async def contact(
    body: ContactRequest,
    sender: Annotated[MailSender, Depends(get_mail_sender)],
) -> JSONResponse:
    result = await relay_contact(
        ContactMessage(name=body.name, email=body.email, message=body.message),
        sender,
    )
    payload = ContactResponse(success=result.success, message=result.message, error=result.error)
    return JSONResponse(
        status_code=200 if result.success else 500,
        content=payload.model_dump(exclude_none=True),
    )
