from fastapi import APIRouter

from app.api.routers import contact, health


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(contact.router, prefix="/contact", tags=["contact"])
    router.include_router(health.router, tags=["health"])
    return router


__all__ = [
    "create_api_router",
]
