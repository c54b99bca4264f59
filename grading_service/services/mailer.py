"""Outbound email for the worker.

SmtpMailer runs the blocking smtplib conversation in a thread so the
worker's event loop keeps polling other queues.  When SMTP_HOST is not
configured (dev, test) LogMailer stands in and only logs what it would
have sent.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from grading_service.core.config import Settings

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(self, *, to: str, subject: str, text: str, html: str) -> None: ...


def build_message(
    *, sender: str, to: str, subject: str, text: str, html: str
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    message.add_alternative(html, subtype="html")
    return message


class SmtpMailer:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout

    async def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        message = build_message(
            sender=self._sender, to=to, subject=subject, text=text, html=html
        )
        await asyncio.to_thread(self._deliver, message)
        logger.info("Email sent to=%s subject=%r", to, subject)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._username:
                smtp.starttls()
                smtp.login(self._username, self._password or "")
            smtp.send_message(message)


class LogMailer:
    async def send(self, *, to: str, subject: str, text: str, html: str) -> None:
        logger.info("SMTP not configured; dropping email to=%s subject=%r", to, subject)


def build_mailer(settings: Settings) -> Mailer:
    if not settings.smtp_host:
        return LogMailer()
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.email_from,
        username=settings.smtp_username,
        password=settings.smtp_password,
    )
