"""Health check."""

from __future__ import annotations

from fastapi import APIRouter

from metapattern.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="OK", message="ExifTool API is running")
