"""Public contact form endpoints."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Union

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from app.api.deps import get_contact_service
from app.modules.contact import (
    ContactService,
    InboundSubmission,
    MalformedPayloadError,
    NotificationFailedError,
    SubmissionRejectedError,
    ValidationFailedError,
    SubmissionResult,
)
from app.schemas import (
    AttachmentInfo,
    ContactAcceptedResponse,
    ErrorResponse,
    QuickContactAcceptedResponse,
    QuickContactRequest,
    ValidationErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# every method is routed here so non-POST requests get the JSON 405 body
FORM_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
GENERIC_ERROR = "An error occurred. Please try again later."
DELIVERY_ERROR = "Failed to send message. Please try again later."

REJECTION_RESPONSES: dict[Union[int, str], dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
    status.HTTP_405_METHOD_NOT_ALLOWED: {"model": ErrorResponse},
    status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _field_errors(exc: ValidationError) -> list[str]:
    """Per-field messages for a JSON body that decoded to an object."""
    messages: list[str] = []
    for error in exc.errors():
        if not error["loc"]:
            raise MalformedPayloadError() from exc
        label = str(error["loc"][0]).capitalize()
        if error["type"] == "string_too_long":
            message = f"{label} is too long"
        else:
            message = f"{label} is invalid"
        if message not in messages:
            messages.append(message)
    return messages


def _form_fields(form: FormData) -> dict[str, str]:
    return {key: value for key, value in form.multi_items() if isinstance(value, str)}


def _form_uploads(form: FormData) -> list[UploadFile]:
    uploads: list[UploadFile] = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile) or not value.filename:
            continue
        if key == "files" or key.startswith("files["):
            uploads.append(value)
    return uploads


async def _respond(
    submit: Callable[[InboundSubmission], Awaitable[SubmissionResult]],
    build_inbound: Callable[[], Awaitable[InboundSubmission]],
) -> Union[SubmissionResult, JSONResponse]:
    try:
        inbound = await build_inbound()
        return await submit(inbound)
    except SubmissionRejectedError as exc:
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)
    except NotificationFailedError as exc:
        logger.error("Contact notification failed: %s", exc)
        return JSONResponse({"error": DELIVERY_ERROR}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Contact form error")
        return JSONResponse({"error": GENERIC_ERROR}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.api_route(
    "",
    methods=FORM_METHODS,
    response_model=ContactAcceptedResponse,
    responses=REJECTION_RESPONSES,
    summary="Submit the contact form",
)
async def submit_contact(
    request: Request,
    service: ContactService = Depends(get_contact_service),
):
    async def build_inbound() -> InboundSubmission:
        fields: dict[str, str] = {}
        uploads: list[UploadFile] = []
        if request.method == "POST":
            form = await request.form()
            fields = _form_fields(form)
            uploads = _form_uploads(form)
        return InboundSubmission(
            method=request.method,
            client_ip=_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
            fields=fields,
            uploads=uploads,
        )

    outcome = await _respond(service.submit, build_inbound)
    if isinstance(outcome, JSONResponse):
        return outcome
    return ContactAcceptedResponse(
        message=outcome.message,
        email_sent=outcome.email_sent,
        auto_reply_sent=outcome.auto_reply_sent,
        attachments=[
            AttachmentInfo(
                original_name=item.original_name,
                stored_name=item.stored_name,
                size_bytes=item.size,
            )
            for item in outcome.attachments
        ],
    )


@router.api_route(
    "/quick",
    methods=FORM_METHODS,
    response_model=QuickContactAcceptedResponse,
    responses=REJECTION_RESPONSES,
    summary="Submit the short JSON contact form",
)
async def submit_quick_contact(
    request: Request,
    service: ContactService = Depends(get_contact_service),
):
    async def build_inbound() -> InboundSubmission:
        fields: dict[str, Any] = {}
        if request.method == "POST":
            try:
                body = await request.json()
            except ValueError as exc:
                logger.info("Malformed quick contact payload: %s", exc)
                raise MalformedPayloadError() from exc
            try:
                payload = QuickContactRequest.model_validate(body)
            except ValidationError as exc:
                raise ValidationFailedError(_field_errors(exc)) from exc
            fields = payload.model_dump(exclude_none=True)
        return InboundSubmission(
            method=request.method,
            client_ip=_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
            fields=fields,
        )

    outcome = await _respond(service.submit_quick, build_inbound)
    if isinstance(outcome, JSONResponse):
        return outcome
    return QuickContactAcceptedResponse(message=outcome.message)
