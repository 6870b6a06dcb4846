from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from content_service.cli import build_parser
from content_service.extraction.errors import ExtractionError
from content_service.extraction.hybrid import extract_document
from content_service.extraction.loader import load_path
from content_service.extraction.ocr.factory import build_ocr_engine
from content_service.generation import GenerationConfigError, GenerationError, generate_content
from content_service.logging_config import setup_logging


async def _amain(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level.upper())
    logger = logging.getLogger("content_service.cli")

    try:
        if args.ocr_provider:
            ocr = build_ocr_engine(args.ocr_provider.strip().lower())
        else:
            ocr = build_ocr_engine()
    except ValueError as e:
        logger.error("%s", e)
        return 2

    try:
        source = await load_path(Path(args.file), media_type=args.media_type)
        result = await extract_document(
            source,
            ocr,
            on_progress=lambda page, total: logger.info("Processing page %d/%d", page, total),
        )
    except ExtractionError as e:
        logger.error("Extraction failed: %s", e)
        return 2

    if args.out:
        Path(args.out).write_text(result.text, encoding="utf-8")
        logger.info("Wrote %d chars to %s", len(result.text), args.out)
    else:
        sys.stdout.write(result.text + "\n")

    if args.mode and not result.text:
        logger.error("No text was extracted; skipping generation")
        return 2

    for mode in args.mode:
        try:
            output = await generate_content(mode, result.text)
        except (GenerationConfigError, GenerationError) as e:
            logger.error("Generation (%s) failed: %s", mode, e)
            return 2
        sys.stdout.write(f"\n== {mode} ==\n{output}\n")

    return 0


def main() -> None:
    raise SystemExit(asyncio.run(_amain()))


if __name__ == "__main__":
    main()
