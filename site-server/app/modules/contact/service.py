"""Domain service running the contact submission pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.modules.ratelimit import RateLimiter, hash_key

from .audit import AuditLog
from .exceptions import (
    MethodNotAllowedError,
    NotificationFailedError,
    RateLimitedError,
    SpamRejectedError,
    ValidationFailedError,
)
from .models import InboundSubmission, SubmissionResult
from .notifications import AUTO_REPLY, OPERATOR_EMAIL, Notifier, QuickNotificationChannel
from .uploads import AttachmentStore
from .validation import (
    build_quick_submission,
    build_submission,
    is_quick_spam,
    is_spam,
    validate_quick_submission,
    validate_submission,
)

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "Thank you for your submission. We will contact you within 24 hours."
QUICK_ACCEPTED_MESSAGE = "Thank you for your message. We will get back to you soon."

# each form keeps its own per-address counter
CONTACT_SCOPE = "contact"
QUICK_SCOPE = "quick"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ContactService:
    rate_limiter: RateLimiter
    attachments: AttachmentStore
    notifier: Notifier
    audit_log: AuditLog
    quick_channel: Optional[QuickNotificationChannel] = None
    quick_min_message_length: int = 10
    clock: Callable[[], datetime] = _utcnow

    async def _guard(self, inbound: InboundSubmission, scope: str) -> str:
        if inbound.method.upper() != "POST":
            raise MethodNotAllowedError()
        key = hash_key(inbound.client_ip, scope)
        if not await self.rate_limiter.is_allowed(key):
            raise RateLimitedError()
        return key

    async def _claim(self, key: str) -> None:
        """Count an accepted submission, refusing it if a concurrent one took the last slot."""
        if not await self.rate_limiter.record_and_check(key):
            raise RateLimitedError()

    async def submit(self, inbound: InboundSubmission) -> SubmissionResult:
        """Validate a full contact form submission and fan it out to every channel.

        Rejections raise a ``SubmissionRejectedError`` subclass before any side
        effect happens. Once accepted, channel failures are only reported in
        the result.
        """
        key = await self._guard(inbound, CONTACT_SCOPE)

        now = self.clock()
        submission = build_submission(inbound, now=now)
        errors = validate_submission(submission)
        if is_spam(submission):
            logger.info("Spam submission rejected from %s", submission.client_ip)
            raise SpamRejectedError()
        if errors:
            raise ValidationFailedError(errors)
        await self._claim(key)

        attachments = await self.attachments.store_all(inbound.uploads)
        results = await self.notifier.dispatch(submission, attachments)
        email_sent = OPERATOR_EMAIL in results and results[OPERATOR_EMAIL].delivered
        auto_reply_sent = AUTO_REPLY in results and results[AUTO_REPLY].delivered

        await self.audit_log.record_submission(submission, success=email_sent, at=now)
        logger.info(
            "Contact submission accepted from %s (%s), email_sent=%s",
            submission.email,
            submission.purpose,
            email_sent,
        )

        return SubmissionResult(
            message=ACCEPTED_MESSAGE,
            email_sent=email_sent,
            auto_reply_sent=auto_reply_sent,
            attachments=attachments,
            channels=list(results.values()),
        )

    async def submit_quick(self, inbound: InboundSubmission) -> SubmissionResult:
        """Short JSON form: a single plain-text operator email.

        The submission counts against the limit once it passes validation, even
        when the email then fails.
        """
        key = await self._guard(inbound, QUICK_SCOPE)

        submission = build_quick_submission(inbound)
        errors = validate_quick_submission(submission, self.quick_min_message_length)
        if is_quick_spam(submission):
            logger.info("Spam submission rejected from %s", submission.client_ip)
            raise SpamRejectedError()
        if errors:
            raise ValidationFailedError(errors)
        await self._claim(key)

        if self.quick_channel is None:
            raise NotificationFailedError("quick contact channel is not configured")
        try:
            await asyncio.wait_for(self.quick_channel.deliver(submission), timeout=self.notifier.timeout)
        except Exception as exc:
            raise NotificationFailedError(f"operator email failed: {exc}") from exc

        logger.info("Contact form submission from %s", submission.email)
        return SubmissionResult(message=QUICK_ACCEPTED_MESSAGE, email_sent=True)
