"""Contact form relay: forwards a submission to the site owner's mailbox."""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from content_service.config import (
    EMAIL_PASS,
    EMAIL_USER,
    SMTP_HOST,
    SMTP_PORT,
    SMTP_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

CONTACT_SUCCESS = "Email sent successfully"
CONTACT_FAILURE = "Email not sent"


class MailConfigError(RuntimeError):
    """Mail account identity or credential is missing."""


@dataclass(frozen=True)
class ContactMessage:
    name: str
    email: str
    message: str


@dataclass(frozen=True)
class ContactResult:
    success: bool
    message: str | None = None
    error: str | None = None


class MailSender(Protocol):
    @property
    def address(self) -> str | None: ...

    def send(self, message: EmailMessage) -> None: ...


class SmtpMailSender:
    """Sends through an SMTP server over implicit TLS."""

    def __init__(
        self,
        *,
        user: str | None = EMAIL_USER,
        password: str | None = EMAIL_PASS,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        timeout: float = SMTP_TIMEOUT_SECONDS,
    ) -> None:
        self._user = user
        self._password = password
        self._host = host
        self._port = port
        self._timeout = timeout

    @property
    def address(self) -> str | None:
        return self._user

    def send(self, message: EmailMessage) -> None:
        if not self._user or not self._password:
            raise MailConfigError("EMAIL_USER and EMAIL_PASS are required to send mail")
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout, context=context) as smtp:
            smtp.login(self._user, self._password)
            smtp.send_message(message)


def build_email(contact: ContactMessage, *, mailbox: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = mailbox
    msg["To"] = mailbox
    msg["Subject"] = f"New message from {contact.name}"
    msg.set_content(f"From: {contact.email}\n\n{contact.message}")
    return msg


async def relay_contact(contact: ContactMessage, sender: MailSender) -> ContactResult:
    """Attempt a single send; failures become a structured result, never an exception."""
    logger.info("Contact form submission from %s", contact.email)
    loop = asyncio.get_running_loop()
    try:
        email = build_email(contact, mailbox=sender.address or "")
        await loop.run_in_executor(None, sender.send, email)
    except Exception:
        logger.exception("Email sending failed")
        return ContactResult(success=False, error=CONTACT_FAILURE)

    logger.info("Contact email sent")
    return ContactResult(success=True, message=CONTACT_SUCCESS)
