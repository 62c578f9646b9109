"""POST /api/pattern/params and POST /api/pattern: metadata → parameters → PNG."""

from __future__ import annotations

import asyncio
import io
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from PIL import Image, UnidentifiedImageError

from metapattern.config import Settings
from metapattern.dependencies import get_extractor, get_settings
from metapattern.engine.color import HSBColor
from metapattern.engine.export import EXPORT_FILENAME, export_image
from metapattern.engine.extractor import MetadataExtractor, UploadedImage, validate_upload
from metapattern.engine.mapper import map_metadata
from metapattern.engine.params import ParameterStore, PatternType
from metapattern.engine.renderer import PatternRenderer
from metapattern.errors import InvalidImageError, InvalidParameterError
from metapattern.models.responses import ErrorResponse, PatternParamsResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_FRAMES = 300


def check_tint(tint: str | None) -> None:
    """Reject a tint that is not a hex colour before any processing."""
    if not tint:
        return
    try:
        HSBColor.from_hex(tint)
    except ValueError as e:
        raise InvalidParameterError(f"Invalid tint colour: {tint!r}") from e


async def read_upload(image: UploadFile | None) -> tuple[UploadedImage, Image.Image]:
    """Validate and decode the multipart ``image`` field."""
    if image is None or not image.filename:
        raise InvalidImageError("No image file provided")
    validate_upload(image.filename, image.content_type)

    content = await image.read()
    try:
        decoded = Image.open(io.BytesIO(content))
        decoded.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Please select an image file") from e

    upload = UploadedImage(filename=image.filename, content=content, content_type=image.content_type)
    return upload, decoded


@router.post(
    "/pattern/params",
    response_model=PatternParamsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def pattern_params(
    image: UploadFile | None = File(None),
    seed: int | None = Form(None),
    extractor: MetadataExtractor = Depends(get_extractor),
) -> PatternParamsResponse:
    upload, decoded = await read_upload(image)
    report = await extractor.extract_report(upload, decoded)
    params = map_metadata(report.metadata, seed=seed, rng=extractor.rng)
    return PatternParamsResponse(
        metadata=report.metadata.to_api(),
        params=params.to_dict(),
        sources=report.sources,
    )


@router.post(
    "/pattern",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 400: {"model": ErrorResponse}},
)
async def render_pattern(
    image: UploadFile | None = File(None),
    pattern_type: PatternType | None = Form(None),
    tint: str | None = Form(None),
    rotation: float | None = Form(None),
    scale: float | None = Form(None),
    zoom: float | None = Form(None),
    width: int | None = Form(None),
    height: int | None = Form(None),
    frames: int | None = Form(None),
    seed: int | None = Form(None),
    extractor: MetadataExtractor = Depends(get_extractor),
    settings: Settings = Depends(get_settings),
) -> Response:
    check_tint(tint)
    upload, decoded = await read_upload(image)
    metadata = await extractor.extract(upload, decoded)

    store = ParameterStore(map_metadata(metadata, seed=seed, rng=extractor.rng))
    overrides = {
        "pattern_type": pattern_type,
        "tint": tint,
        "rotation": rotation,
        "scale": scale,
        "zoom": zoom,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        store.update(**overrides)

    if frames is None:
        frames = settings.default_frames
    frame_count = max(1, min(MAX_FRAMES, frames))
    size = (width, height) if width and height else None
    renderer = PatternRenderer(size)
    params = store.snapshot()
    surface = await asyncio.to_thread(renderer.render, params, frame_count)
    png = export_image(surface, scale=settings.export_scale)

    logger.info(
        "Rendered %s for %s: %d frame(s), %d failed",
        params.pattern_type.value,
        upload.filename,
        frame_count,
        renderer.failed_frames,
    )
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
