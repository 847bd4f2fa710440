"""Sanitizing, validation and spam heuristics for contact submissions."""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from .models import InboundSubmission, QuickSubmission, Submission

TAG_RE = re.compile(r"<[^>]*>")
EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&*+/=?^_`{|}~-]+@"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{10,}$")

SPAM_PATTERNS = (
    re.compile(r"\b(viagra|cialis|casino|poker|loan|mortgage)\b", re.IGNORECASE),
    re.compile(r"\b(make money|work from home|get paid)\b", re.IGNORECASE),
    re.compile(r"\b(click here|visit now|act now)\b", re.IGNORECASE),
)

_FALSEY = {"", "0", "false", "off", "no"}
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def sanitize_input(value: Any) -> str:
    """Trim, drop markup tags and HTML-escape a raw field value."""
    if value is None:
        return ""
    text = str(value).strip()
    text = TAG_RE.sub("", text)
    return html.escape(text, quote=True)


def is_valid_email(value: str) -> bool:
    return bool(value) and len(value) <= 254 and EMAIL_RE.match(value) is not None


def is_valid_phone(value: str) -> bool:
    return PHONE_RE.match(value) is not None


def _flag(fields: Mapping[str, Any], name: str) -> bool:
    if name not in fields:
        return False
    value = fields[name]
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSEY


def _text(fields: Mapping[str, Any], name: str) -> str:
    return sanitize_input(fields.get(name))


def build_submission(inbound: InboundSubmission, now: Optional[datetime] = None) -> Submission:
    fields = inbound.fields
    timestamp = _text(fields, "timestamp")
    if not timestamp:
        timestamp = (now or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)
    return Submission(
        first_name=_text(fields, "firstName"),
        last_name=_text(fields, "lastName"),
        email=_text(fields, "email"),
        company=_text(fields, "company"),
        job_title=_text(fields, "jobTitle"),
        phone=_text(fields, "phone"),
        country=_text(fields, "country"),
        purpose=_text(fields, "purpose"),
        budget=_text(fields, "budget"),
        timeline=_text(fields, "timeline"),
        message=_text(fields, "message"),
        consent=_flag(fields, "consent"),
        newsletter=_flag(fields, "newsletter"),
        website=_text(fields, "website"),
        timestamp=timestamp,
        referrer=_text(fields, "referrer"),
        client_ip=sanitize_input(inbound.client_ip),
        user_agent=sanitize_input(inbound.user_agent),
    )


def validate_submission(submission: Submission) -> list[str]:
    """Return every problem with the submission; an empty list means valid."""
    errors: list[str] = []
    if not submission.first_name:
        errors.append("First name is required")
    if not submission.last_name:
        errors.append("Last name is required")
    if not submission.email or not is_valid_email(submission.email):
        errors.append("Valid email is required")
    if not submission.company:
        errors.append("Company is required")
    if not submission.country:
        errors.append("Country is required")
    if not submission.purpose:
        errors.append("Purpose is required")
    if not submission.message:
        errors.append("Message is required")
    if not submission.consent:
        errors.append("Consent is required")
    if submission.phone and not is_valid_phone(submission.phone):
        errors.append("Invalid phone number format")
    return errors


def contains_spam_phrases(*texts: str) -> bool:
    combined = " ".join(texts)
    return any(pattern.search(combined) for pattern in SPAM_PATTERNS)


def is_spam(submission: Submission) -> bool:
    if submission.website:
        return True
    return contains_spam_phrases(
        submission.first_name,
        submission.last_name,
        submission.company,
        submission.message,
    )


def build_quick_submission(inbound: InboundSubmission) -> QuickSubmission:
    fields = inbound.fields
    return QuickSubmission(
        name=_text(fields, "name"),
        email=_text(fields, "email"),
        company=_text(fields, "company"),
        phone=_text(fields, "phone"),
        subject=_text(fields, "subject") or "General Inquiry",
        message=_text(fields, "message"),
        website=_text(fields, "website"),
        client_ip=sanitize_input(inbound.client_ip),
        user_agent=sanitize_input(inbound.user_agent),
    )


def validate_quick_submission(submission: QuickSubmission, min_message_length: int) -> list[str]:
    errors: list[str] = []
    if not submission.name:
        errors.append("Name is required")
    if not submission.email or not is_valid_email(submission.email):
        errors.append("Valid email is required")
    if not submission.message:
        errors.append("Message is required")
    elif len(submission.message) < min_message_length:
        errors.append("Message is too short")
    if submission.phone and not is_valid_phone(submission.phone):
        errors.append("Invalid phone number format")
    return errors


def is_quick_spam(submission: QuickSubmission) -> bool:
    if submission.website:
        return True
    return contains_spam_phrases(submission.name, submission.company, submission.message)
