from __future__ import annotations

import logging
from dataclasses import dataclass

from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPIError
from google.cloud import documentai_v1 as documentai

from content_service.extraction.errors import OcrError

logger = logging.getLogger(__name__)

# Tesseract-style language codes -> BCP-47 hints understood by Document AI
_LANGUAGE_HINTS = {"eng": "en"}


@dataclass(frozen=True)
class DocAIConfig:
    project: str
    location: str
    processor_id: str

    @property
    def processor_name(self) -> str:
        return f"projects/{self.project}/locations/{self.location}/processors/{self.processor_id}"

    @property
    def api_endpoint(self) -> str:
        return f"{self.location}-documentai.googleapis.com"


class DocumentAIOcr:
    """Online Document AI OCR for single images (rendered pages or uploads)."""

    name = "documentai"

    def __init__(self, *, cfg: DocAIConfig) -> None:
        self._cfg = cfg
        self._doc_client = documentai.DocumentProcessorServiceClient(
            client_options=ClientOptions(api_endpoint=cfg.api_endpoint)
        )

    def recognize(self, image: bytes, *, mime_type: str, language: str) -> str:
        hint = _LANGUAGE_HINTS.get(language, language)
        req = documentai.ProcessRequest(
            name=self._cfg.processor_name,
            raw_document=documentai.RawDocument(content=image, mime_type=mime_type),
            process_options=documentai.ProcessOptions(
                ocr_config=documentai.OcrConfig(
                    hints=documentai.OcrConfig.Hints(language_hints=[hint])
                )
            ),
        )
        try:
            resp = self._doc_client.process_document(request=req)
        except GoogleAPIError as e:
            raise OcrError(f"Document AI OCR failed: {e}") from e
        return resp.document.text or ""

    def check(self) -> bool:
        try:
            self._doc_client.get_processor(name=self._cfg.processor_name)
        except GoogleAPIError:
            logger.warning("Document AI processor check failed", exc_info=True)
            return False
        return True
