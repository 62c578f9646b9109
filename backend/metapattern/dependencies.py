"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Depends

from metapattern.config import Settings, settings
from metapattern.engine.extractor import ExifToolService, MetadataExtractor


def get_settings() -> Settings:
    return settings


def get_extractor(settings: Settings = Depends(get_settings)) -> MetadataExtractor:
    """Extractor whose service stage runs exiftool in-process."""
    return MetadataExtractor(service=ExifToolService(settings), settings=settings)
