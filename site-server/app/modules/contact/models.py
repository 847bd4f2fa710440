"""Contact submission domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import UploadFile


@dataclass(slots=True)
class InboundSubmission:
    """Raw request data handed over by the transport layer, before any checks."""

    method: str
    client_ip: str
    user_agent: str = ""
    fields: Mapping[str, Any] = field(default_factory=dict)
    uploads: list[UploadFile] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Submission:
    first_name: str
    last_name: str
    email: str
    company: str
    job_title: str
    phone: str
    country: str
    purpose: str
    budget: str
    timeline: str
    message: str
    consent: bool
    newsletter: bool
    website: str
    timestamp: str
    referrer: str
    client_ip: str
    user_agent: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True, slots=True)
class QuickSubmission:
    """Short JSON contact form: a single name field and a free subject line."""

    name: str
    email: str
    company: str
    phone: str
    subject: str
    message: str
    website: str
    client_ip: str
    user_agent: str


@dataclass(frozen=True, slots=True)
class StoredAttachment:
    original_name: str
    stored_name: str
    path: str
    size: int

    @property
    def size_mb(self) -> float:
        return round(self.size / 1024 / 1024, 2)


@dataclass(frozen=True, slots=True)
class ChannelResult:
    channel: str
    delivered: bool
    error: Optional[str] = None


@dataclass(slots=True)
class SubmissionResult:
    message: str
    email_sent: bool
    auto_reply_sent: bool = False
    attachments: list[StoredAttachment] = field(default_factory=list)
    channels: list[ChannelResult] = field(default_factory=list)
