from __future__ import annotations

import argparse

from content_service.generation import GenerationMode


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="content-analyzer",
        description="Extract text from a PDF or image and turn it into social media content",
    )
    p.add_argument("file", help="PDF or image file to extract text from")
    p.add_argument(
        "--mode",
        action="append",
        default=[],
        choices=[m.value for m in GenerationMode],
        help="Generation mode to run on the extracted text (repeatable)",
    )
    p.add_argument("--out", default=None, help="Write extracted text to this path instead of stdout")
    p.add_argument(
        "--media-type",
        default=None,
        help="Override the media type guessed from the file extension",
    )
    p.add_argument("--ocr-provider", default=None, help="Override CONTENT_OCR_PROVIDER (tesseract, documentai)")
    p.add_argument("--log-level", default="INFO", help="Python logging level (INFO, DEBUG, ...)")
    return p
