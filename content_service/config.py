"""Environment-variable-driven configuration for the content service.

All config comes from env vars; nothing is read from disk.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float, *, minimum: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# -- Extraction ---------------------------------------------------------------
# Pages whose embedded text is shorter than this are treated as scanned.
CONTENT_OCR_MIN_CHARS: int = _env_int("CONTENT_OCR_MIN_CHARS", 10, minimum=0)
CONTENT_OCR_RENDER_SCALE: float = _env_float("CONTENT_OCR_RENDER_SCALE", 2.0, minimum=0.1)
CONTENT_MAX_UPLOAD_BYTES: int = _env_int("CONTENT_MAX_UPLOAD_BYTES", 20 * 1024 * 1024, minimum=1)

# -- OCR ----------------------------------------------------------------------
CONTENT_OCR_PROVIDER: str = os.getenv("CONTENT_OCR_PROVIDER", "tesseract").strip().lower()
CONTENT_TESSERACT_CMD: str | None = os.getenv("CONTENT_TESSERACT_CMD")
CONTENT_DOC_AI_PROJECT: str | None = os.getenv("CONTENT_DOC_AI_PROJECT")
CONTENT_DOC_AI_LOCATION: str = os.getenv("CONTENT_DOC_AI_LOCATION", "us")
CONTENT_DOC_AI_PROCESSOR_ID: str | None = os.getenv("CONTENT_DOC_AI_PROCESSOR_ID")

# -- Generation ---------------------------------------------------------------
CONTENT_GEMINI_MODEL: str = os.getenv("CONTENT_GEMINI_MODEL", "gemini-2.0-flash")

# -- Mail ---------------------------------------------------------------------
EMAIL_USER: str | None = os.getenv("EMAIL_USER")
EMAIL_PASS: str | None = os.getenv("EMAIL_PASS")
SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT: int = _env_int("SMTP_PORT", 465, minimum=1)
SMTP_TIMEOUT_SECONDS: float = _env_float("SMTP_TIMEOUT_SECONDS", 30.0, minimum=0.1)

# -- GCP ----------------------------------------------------------------------
VERTEX_PROJECT: str | None = os.getenv("GOOGLE_CLOUD_PROJECT")
VERTEX_LOCATION: str = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")

# -- CORS ---------------------------------------------------------------------
CONTENT_CORS_ALLOW_ORIGINS: list[str] = _env_csv(
    "CONTENT_CORS_ALLOW_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
)
CONTENT_CORS_ALLOW_METHODS: list[str] = _env_csv(
    "CONTENT_CORS_ALLOW_METHODS",
    "GET,POST,OPTIONS",
)
CONTENT_CORS_ALLOW_HEADERS: list[str] = _env_csv(
    "CONTENT_CORS_ALLOW_HEADERS",
    "Content-Type,X-Request-Id",
)
CONTENT_CORS_ALLOW_CREDENTIALS: bool = _env_bool("CONTENT_CORS_ALLOW_CREDENTIALS", False)

# -- Server -------------------------------------------------------------------
IS_CLOUD_RUN: bool = bool(os.getenv("K_SERVICE"))
