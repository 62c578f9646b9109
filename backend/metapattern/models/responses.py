"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "ExifTool API is running"


class ErrorResponse(BaseModel):
    error: str


class GPSResponse(BaseModel):
    latitude: float
    longitude: float


class MetadataResponse(BaseModel):
    """Reshaped exiftool output. Field names are the wire names."""

    phoneType: str | None = None
    lensType: str | None = None
    lens: str | None = None
    iso: int | float | None = None
    aperture: float | None = None
    flash: bool = False
    orientation: int | None = None
    date: str | None = None
    time: str | None = None
    timeOfDay: str | None = None
    gps: GPSResponse | None = None
    width: int | None = None
    height: int | None = None
    rawMetadata: dict[str, Any] = Field(default_factory=dict)


class PatternParamsResponse(BaseModel):
    metadata: dict[str, Any]
    params: dict[str, Any]
    sources: dict[str, str] = Field(default_factory=dict)
