"""Liveness probe."""
from fastapi import APIRouter

from app import __version__
from app.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Service liveness")
async def health() -> HealthResponse:
    return HealthResponse(version=__version__)
