"""Content generation with Gemini models.

Each call formats one fixed instruction around the extracted text and sends
it as a single, independent request. There is no retry, no caching and no
conversation history.
"""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from functools import lru_cache

import httpx
from google import genai
from google.auth import exceptions as google_auth_exceptions
from google.genai import errors as genai_errors

from content_service.config import CONTENT_GEMINI_MODEL, VERTEX_LOCATION, VERTEX_PROJECT

logger = logging.getLogger(__name__)


class GenerationMode(str, Enum):
    SUMMARY = "summary"
    HASHTAGS = "hashtags"
    REWRITE = "rewrite"
    SENTIMENT = "sentiment"
    ENGAGEMENT = "engagement"


PROMPT_TEMPLATES: dict[GenerationMode, str] = {
    GenerationMode.SUMMARY: "Summarize in 5 bullet points:",
    GenerationMode.HASHTAGS: "Generate 12 trending hashtags:",
    GenerationMode.REWRITE: "Rewrite in LinkedIn style:",
    GenerationMode.SENTIMENT: "Analyze sentiment of this text:",
    GenerationMode.ENGAGEMENT: "Suggest ways to improve social media engagement:",
}


class GenerationConfigError(ValueError):
    """No credential is configured; raised before any network call."""


class GenerationError(RuntimeError):
    """The remote generation call failed."""


def _is_gcp_environment() -> bool:
    """Detect if running on GCP (Cloud Run, GCE, etc.)."""
    return bool(os.getenv("K_SERVICE") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS"))


@lru_cache(maxsize=1)
def _get_gemini_client() -> genai.Client:
    """Cached Gemini client with automatic credential detection."""
    if _is_gcp_environment():
        return genai.Client(
            vertexai=True, project=VERTEX_PROJECT, location=VERTEX_LOCATION
        )
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise GenerationConfigError(
            "GEMINI_API_KEY not set. Set it for local dev or run on GCP for ADC."
        )
    return genai.Client(api_key=api_key)


def build_prompt(mode: GenerationMode | str, text: str) -> str:
    """Instruction for ``mode`` followed by a blank line and the untouched text."""
    mode = GenerationMode(mode)
    if not text or not text.strip():
        raise ValueError("Text must not be blank")
    return f"{PROMPT_TEMPLATES[mode]}\n\n{text}"


def generate_text(prompt: str, *, model: str = CONTENT_GEMINI_MODEL) -> str:
    """Send one prompt and return the model's text as-is.

    Raises:
        GenerationConfigError: If no credential is configured.
        GenerationError: If the API call fails.
    """
    client = _get_gemini_client()

    try:
        response = client.models.generate_content(model=model, contents=prompt)
    except genai_errors.APIError as e:
        raise GenerationError(e.message or str(e)) from e
    except (httpx.HTTPError, google_auth_exceptions.GoogleAuthError) as e:
        # Transport and credential failures never reach the API error path.
        raise GenerationError(str(e) or type(e).__name__) from e

    return response.text or ""


async def generate_content(mode: GenerationMode | str, text: str) -> str:
    """Build the prompt for ``mode`` and run the blocking call in an executor."""
    prompt = build_prompt(mode, text)
    # Fail fast on missing credentials before handing off to a worker thread.
    _get_gemini_client()

    loop = asyncio.get_running_loop()
    output = await loop.run_in_executor(None, generate_text, prompt)
    logger.info("Generated %d chars for mode=%s", len(output), GenerationMode(mode).value)
    return output


def check_generation_service() -> bool:
    """True when a credential is configured. Does not call the API."""
    try:
        _get_gemini_client()
    except GenerationConfigError:
        logger.warning("Generation credential not configured")
        return False
    return True
