"""Reusable FastAPI dependencies."""

from fastapi import Request

from app.core.container import ApplicationContainer
from app.modules.contact import ContactService


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_contact_service(request: Request) -> ContactService:
    service = get_container(request).contact_service
    if service is None:
        raise RuntimeError("contact service is not initialised")
    return service


__all__ = [
    "get_container",
    "get_contact_service",
]
