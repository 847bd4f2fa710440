"""Pydantic schemas used across the project."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QuickContactRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=254)
    message: Optional[str] = Field(default=None, max_length=10_000)
    company: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    subject: Optional[str] = Field(default=None, max_length=200)
    website: Optional[str] = None


class AttachmentInfo(BaseModel):
    original_name: str
    stored_name: str
    size_bytes: int


class ContactAcceptedResponse(BaseModel):
    success: bool = True
    message: str
    email_sent: bool
    auto_reply_sent: bool
    attachments: list[AttachmentInfo] = Field(default_factory=list)


class QuickContactAcceptedResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    error: str


class ValidationErrorResponse(BaseModel):
    errors: list[str]


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
