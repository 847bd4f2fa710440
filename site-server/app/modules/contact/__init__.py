"""Contact form submission pipeline."""

from .audit import AuditLog
from .exceptions import (
    ContactError,
    MalformedPayloadError,
    MethodNotAllowedError,
    NotificationFailedError,
    RateLimitedError,
    SpamRejectedError,
    SubmissionRejectedError,
    UploadRejectedError,
    ValidationFailedError,
)
from .models import (
    ChannelResult,
    InboundSubmission,
    QuickSubmission,
    StoredAttachment,
    Submission,
    SubmissionResult,
)
from .notifications import Notifier
from .service import ContactService
from .uploads import AttachmentStore

__all__ = [
    "AuditLog",
    "AttachmentStore",
    "ChannelResult",
    "ContactError",
    "ContactService",
    "InboundSubmission",
    "MalformedPayloadError",
    "MethodNotAllowedError",
    "NotificationFailedError",
    "Notifier",
    "QuickSubmission",
    "RateLimitedError",
    "SpamRejectedError",
    "StoredAttachment",
    "Submission",
    "SubmissionRejectedError",
    "SubmissionResult",
    "UploadRejectedError",
    "ValidationFailedError",
]
