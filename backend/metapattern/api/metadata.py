"""POST /api/extract-metadata: run exiftool on an uploaded image."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from metapattern.config import Settings
from metapattern.dependencies import get_settings
from metapattern.engine.exiftool import extract_file_metadata
from metapattern.errors import InvalidImageError
from metapattern.models.responses import ErrorResponse, MetadataResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/extract-metadata",
    response_model=MetadataResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def extract_metadata(
    image: UploadFile | None = File(None),
    settings: Settings = Depends(get_settings),
) -> MetadataResponse:
    if image is None or not image.filename:
        raise InvalidImageError("No image file provided")

    content = await image.read()
    logger.info("Received %s (%d bytes)", image.filename, len(content))
    payload = await extract_file_metadata(content, image.filename, settings)
    return MetadataResponse(**payload)
