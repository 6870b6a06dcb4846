"""Logging setup for the content service and CLI.

On Cloud Run records are emitted as JSON lines that Cloud Logging parses
(``severity``, ``logger``, ``request_id``); locally they are plain text.
The request ID of the HTTP request being served is carried in a context
variable so records logged on the event loop while handling it can be
correlated.
"""

from __future__ import annotations

import contextvars
import logging
import os
import uuid

from pythonjsonlogger.json import JsonFormatter

_NO_REQUEST = "-"

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default=_NO_REQUEST)

# Third-party loggers that flood INFO/DEBUG while parsing, rendering or polling.
_NOISY_LOGGERS = {
    "pypdf": logging.ERROR,
    "fitz": logging.WARNING,
    "PIL": logging.WARNING,
    "httpx": logging.WARNING,
    "google_genai": logging.WARNING,
}


def generate_request_id() -> str:
    """Generate a unique request ID for trace correlation."""
    return uuid.uuid4().hex[:16]


def bind_request_id(request_id: str) -> contextvars.Token[str]:
    return _request_id.set(request_id)


def reset_request_id(token: contextvars.Token[str]) -> None:
    _request_id.reset(token)


def current_request_id() -> str:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` with the request being served, or ``-``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        return True


class GCPJsonFormatter(JsonFormatter):
    """JSON formatter emitting Cloud Logging's ``severity`` field."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["severity"] = record.levelname
        log_record.pop("levelname", None)
        if log_record.get("request_id") == _NO_REQUEST:
            log_record.pop("request_id")


def setup_logging(*, level: str = "INFO") -> None:
    """Install one stderr handler on the root logger (JSON on Cloud Run)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if os.getenv("K_SERVICE"):
        handler.setFormatter(GCPJsonFormatter(
            fmt="%(message)s %(name)s %(funcName)s %(lineno)d %(request_id)s",
            rename_fields={"name": "logger"},
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s:%(lineno)d  %(message)s",
            datefmt="%H:%M:%S",
        ))
    root.addHandler(handler)

    for name, noisy_level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)
