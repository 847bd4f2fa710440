"""Contact submission specific exceptions."""

from __future__ import annotations

from typing import Any


class ContactError(Exception):
    """Base class for contact submission errors."""


class SubmissionRejectedError(ContactError):
    """Raised when a submission is refused; carries the response sent back to the caller."""

    status_code: int = 400
    public_message: str = "Submission rejected"

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.public_message}


class MethodNotAllowedError(SubmissionRejectedError):
    """Raised for anything other than a POST request."""

    status_code = 405
    public_message = "Method not allowed"


class RateLimitedError(SubmissionRejectedError):
    """Raised when the requester exhausted the rolling submission window."""

    status_code = 429
    public_message = "Too many requests. Please try again later."


class ValidationFailedError(SubmissionRejectedError):
    """Raised with every field error found in the submission."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)

    def to_payload(self) -> dict[str, Any]:
        return {"errors": self.errors}


class SpamRejectedError(SubmissionRejectedError):
    """Raised when the honeypot is filled or the text matches a spam pattern."""


class UploadRejectedError(ContactError):
    """Raised for a single attachment that fails size or extension checks."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class NotificationFailedError(ContactError):
    """Raised by a notification channel that could not deliver."""


class MalformedPayloadError(SubmissionRejectedError):
    """Raised when a JSON body cannot be decoded into the expected fields."""

    public_message = "Missing required fields"
