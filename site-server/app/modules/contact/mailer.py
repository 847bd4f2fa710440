"""Outbound mail: message rendering and SMTP delivery."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from app.core.config import MailSettings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "web" / "templates" / "email"


class MailTransport(Protocol):
    def send(self, message: EmailMessage) -> None:
        ...


class SmtpMailTransport:
    def __init__(self, settings: MailSettings) -> None:
        self._settings = settings

    def send(self, message: EmailMessage) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout) as client:
            if settings.use_tls:
                client.starttls()
            if settings.username and settings.password:
                client.login(settings.username, settings.password)
            client.send_message(message)


class ConsoleMailTransport:
    """Logs messages instead of sending them; for local development."""

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)
        logger.info(
            "Mail to %s (cc %s): %s",
            message["To"],
            message.get("Cc", "-"),
            message["Subject"],
        )


def build_transport(settings: MailSettings) -> MailTransport:
    if settings.backend == "console":
        return ConsoleMailTransport()
    return SmtpMailTransport(settings)


class EmailRenderer:
    """Renders email bodies from the bundled Jinja2 templates.

    Submission fields are HTML-escaped when they are sanitized, so templates
    render them as-is.
    """

    def __init__(self, template_dir: Path = TEMPLATE_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_name: str, **context: Any) -> str:
        return self._env.get_template(template_name).render(**context)


def compose_message(
    *,
    sender: str,
    to: str,
    subject: str,
    body: str,
    subtype: str = "html",
    reply_to: Optional[str] = None,
    cc: Sequence[str] = (),
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    if reply_to:
        message["Reply-To"] = reply_to
    if cc:
        message["Cc"] = ", ".join(cc)
    message.set_content(body, subtype=subtype, charset="utf-8")
    return message


def sender_address(settings: MailSettings) -> str:
    return formataddr((settings.from_name, settings.from_email))
