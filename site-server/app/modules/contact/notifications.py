"""Notification channels fanned out for every accepted submission."""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from email.utils import formataddr
from typing import Any, Optional, Protocol

from app.core.config import MailSettings
from app.infrastructure.http import http_request_json

from .exceptions import NotificationFailedError
from .mailer import EmailRenderer, MailTransport, compose_message, sender_address
from .models import ChannelResult, QuickSubmission, StoredAttachment, Submission

logger = logging.getLogger(__name__)

OPERATOR_EMAIL = "operator_email"
AUTO_REPLY = "auto_reply"
CHAT_WEBHOOK = "chat_webhook"
CRM_CONTACT = "crm_contact"

RequestJson = Callable[..., tuple[int, bytes]]


def _header(value: str) -> str:
    """Collapse whitespace so user text can never start a new mail header."""
    return " ".join(value.split())


class NotificationChannel(Protocol):
    name: str

    async def deliver(self, submission: Submission, attachments: Sequence[StoredAttachment]) -> None:
        ...


class OperatorEmailChannel:
    """Primary notification to the operator inbox, CC'd to the purpose team."""

    name = OPERATOR_EMAIL

    def __init__(
        self,
        transport: MailTransport,
        renderer: EmailRenderer,
        settings: MailSettings,
        cc_emails: Mapping[str, str],
    ) -> None:
        self._transport = transport
        self._renderer = renderer
        self._settings = settings
        self._cc_emails = cc_emails

    def cc_for(self, purpose: str) -> Optional[str]:
        address = self._cc_emails.get(purpose)
        if address is None and purpose:
            logger.info("No team address for purpose %r, sending without CC", purpose)
        return address

    def build_message(self, submission: Submission, attachments: Sequence[StoredAttachment]):
        body = self._renderer.render("notification.html", s=submission, attachments=attachments)
        cc = self.cc_for(submission.purpose)
        return compose_message(
            sender=sender_address(self._settings),
            to=self._settings.to_email,
            subject=_header(f"New Contact Form Submission - {submission.purpose}"),
            body=body,
            reply_to=formataddr((_header(submission.full_name), submission.email)),
            cc=[cc] if cc else (),
        )

    async def deliver(self, submission: Submission, attachments: Sequence[StoredAttachment]) -> None:
        message = self.build_message(submission, attachments)
        await asyncio.to_thread(self._transport.send, message)


class AutoReplyChannel:
    """Acknowledgement sent back to the submitter."""

    name = AUTO_REPLY
    subject = "Thank you for contacting DIDC - We'll be in touch soon"

    def __init__(
        self,
        transport: MailTransport,
        renderer: EmailRenderer,
        settings: MailSettings,
        site_url: str,
    ) -> None:
        self._transport = transport
        self._renderer = renderer
        self._settings = settings
        self._site_url = site_url.rstrip("/")

    async def deliver(self, submission: Submission, attachments: Sequence[StoredAttachment]) -> None:
        body = self._renderer.render(
            "auto_reply.html",
            s=submission,
            site_url=self._site_url,
            contact_email=self._settings.to_email,
        )
        message = compose_message(
            sender=sender_address(self._settings),
            to=submission.email,
            subject=self.subject,
            body=body,
            reply_to=self._settings.from_email,
        )
        await asyncio.to_thread(self._transport.send, message)


class ChatWebhookChannel:
    """Posts a Slack-style summary to an incoming webhook."""

    name = CHAT_WEBHOOK

    def __init__(self, url: str, timeout: float = 10, request: RequestJson = http_request_json) -> None:
        self._url = url
        self._timeout = timeout
        self._request = request

    @staticmethod
    def build_payload(submission: Submission) -> dict[str, Any]:
        def short(title: str, value: str) -> dict[str, Any]:
            return {"title": title, "value": value, "short": True}

        return {
            "text": "New Contact Form Submission",
            "attachments": [
                {
                    "color": "good",
                    "fields": [
                        short("Name", submission.full_name),
                        short("Company", submission.company),
                        short("Email", submission.email),
                        short("Purpose", submission.purpose),
                        short("Country", submission.country),
                        short("Budget", submission.budget or "Not specified"),
                    ],
                }
            ],
        }

    async def deliver(self, submission: Submission, attachments: Sequence[StoredAttachment]) -> None:
        status, body = await asyncio.to_thread(
            self._request, "POST", self._url, self.build_payload(submission), timeout=self._timeout
        )
        if not 200 <= status < 300:
            raise NotificationFailedError(f"webhook responded {status}: {body[:200]!r}")


class CrmContactChannel:
    """Creates the submitter as a lead in the CRM, updating the contact if it exists."""

    name = CRM_CONTACT

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.hubapi.com",
        timeout: float = 10,
        request: RequestJson = http_request_json,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._request = request

    @staticmethod
    def build_properties(submission: Submission) -> dict[str, str]:
        return {
            "email": submission.email,
            "firstname": submission.first_name,
            "lastname": submission.last_name,
            "company": submission.company,
            "jobtitle": submission.job_title,
            "phone": submission.phone,
            "country": submission.country,
            "hs_lead_status": "NEW",
            "lifecyclestage": "lead",
        }

    def _call(self, method: str, url: str, payload: dict[str, Any]) -> tuple[int, bytes]:
        return self._request(
            method,
            url,
            payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )

    def upsert(self, submission: Submission) -> int:
        properties = self.build_properties(submission)
        collection_url = f"{self._base_url}/crm/v3/objects/contacts"
        status, body = self._call("POST", collection_url, {"properties": properties})
        if status == 409:
            # existing contact: refresh its details but keep its lead/lifecycle state
            properties.pop("hs_lead_status")
            properties.pop("lifecyclestage")
            contact_url = (
                f"{collection_url}/{urllib.parse.quote(submission.email, safe='')}?idProperty=email"
            )
            status, body = self._call("PATCH", contact_url, {"properties": properties})
        if status not in (200, 201):
            raise NotificationFailedError(f"CRM responded {status}: {body[:200]!r}")
        return status

    async def deliver(self, submission: Submission, attachments: Sequence[StoredAttachment]) -> None:
        await asyncio.to_thread(self.upsert, submission)


class QuickNotificationChannel:
    """Plain-text operator email for the short JSON contact form."""

    name = OPERATOR_EMAIL

    def __init__(
        self,
        transport: MailTransport,
        renderer: EmailRenderer,
        settings: MailSettings,
        site_name: str,
    ) -> None:
        self._transport = transport
        self._renderer = renderer
        self._settings = settings
        self._site_name = site_name

    async def deliver(self, submission: QuickSubmission) -> None:
        body = self._renderer.render(
            "quick_notification.txt",
            s=submission,
            site_name=self._site_name,
            submitted_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S %Z"),
        )
        message = compose_message(
            sender=self._settings.from_email,
            to=self._settings.to_email,
            subject=_header(f"[{self._site_name}] Contact Form: {submission.subject}"),
            body=body,
            subtype="plain",
            reply_to=submission.email,
        )
        await asyncio.to_thread(self._transport.send, message)


class Notifier:
    """Runs every channel concurrently; one failing channel never affects another."""

    def __init__(self, channels: Sequence[NotificationChannel], timeout: float = 20) -> None:
        self.channels = list(channels)
        self.timeout = timeout

    async def _run(
        self,
        channel: NotificationChannel,
        submission: Submission,
        attachments: Sequence[StoredAttachment],
    ) -> ChannelResult:
        try:
            await asyncio.wait_for(channel.deliver(submission, attachments), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Notification channel %s timed out after %ss", channel.name, self.timeout)
            return ChannelResult(channel.name, False, "timed out")
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Notification channel %s failed: %s", channel.name, exc)
            return ChannelResult(channel.name, False, str(exc))
        return ChannelResult(channel.name, True)

    async def dispatch(
        self, submission: Submission, attachments: Sequence[StoredAttachment] = ()
    ) -> dict[str, ChannelResult]:
        results = await asyncio.gather(
            *(self._run(channel, submission, attachments) for channel in self.channels)
        )
        return {result.channel: result for result in results}
