"""MetadataExtractor: the four-stage best-effort metadata cascade.

Stages run in a fixed order and each one only fills fields that are still
unset (see :mod:`metapattern.engine.merge`):

1. service: an external metadata service (HTTP or in-process exiftool)
2. pixels: brightness / colour-variance statistics
3. tags: embedded EXIF tags, abandoned after a bounded wait
4. file: filename conventions, file size, and random fallbacks

``extract`` never raises: every stage degrades to ``{}`` on error.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

import httpx
from PIL import Image

from metapattern.config import Settings, settings as default_settings
from metapattern.engine.exif import read_embedded_tags
from metapattern.engine.exiftool import extract_file_metadata
from metapattern.engine.heuristics import analyze_pixels, guess_from_file
from metapattern.engine.merge import MergeResult, Stage, cascade
from metapattern.errors import InvalidImageError, MetadataExtractionError
from metapattern.models.metadata import ImageMetadata, api_to_partial

logger = logging.getLogger(__name__)

_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".heif", ".tif", ".tiff", ".bmp")


@dataclass
class UploadedImage:
    """An uploaded file as the extractor sees it."""

    filename: str
    content: bytes = b""
    content_type: str | None = None
    size: int = 0
    last_modified: datetime | None = None

    def __post_init__(self) -> None:
        if not self.size:
            self.size = len(self.content)


def validate_upload(filename: str | None, content_type: str | None) -> None:
    """Reject selections that are not images before any processing."""
    if content_type and content_type.startswith("image/"):
        return
    if not content_type or content_type == "application/octet-stream":
        if filename and filename.lower().endswith(_IMAGE_EXTENSIONS):
            return
    raise InvalidImageError("Please select an image file")


class MetadataService(Protocol):
    async def fetch(self, upload: UploadedImage) -> dict[str, Any] | None: ...


class HttpMetadataService:
    """Posts the file to a running metadata service (``/api/extract-metadata``)."""

    def __init__(
        self,
        url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url if url is not None else default_settings.metadata_service_url
        self.timeout_s = timeout_s if timeout_s is not None else default_settings.metadata_service_timeout_s
        self._transport = transport

    async def fetch(self, upload: UploadedImage) -> dict[str, Any] | None:
        if not self.url:
            return None
        files = {
            "image": (upload.filename, upload.content, upload.content_type or "application/octet-stream")
        }
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(self.url, files=files)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("metadata service returned a non-object payload")
        return payload


class ExifToolService:
    """Runs exiftool in-process instead of over HTTP."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings

    async def fetch(self, upload: UploadedImage) -> dict[str, Any] | None:
        return await extract_file_metadata(upload.content, upload.filename, self.settings)


@dataclass
class ExtractionReport:
    metadata: ImageMetadata
    sources: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)


class MetadataExtractor:
    """Runs the cascade for one upload."""

    def __init__(
        self,
        service: MetadataService | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Any = None,
    ) -> None:
        self.settings = settings or default_settings
        self.service = service
        self.rng = rng or random.Random()
        self._clock = clock or datetime.now

    async def extract(self, upload: UploadedImage, image: Image.Image) -> ImageMetadata:
        return (await self.extract_report(upload, image)).metadata

    async def extract_report(self, upload: UploadedImage, image: Image.Image) -> ExtractionReport:
        logger.info(
            "Extracting metadata: %s (%s, %d bytes, %dx%d)",
            upload.filename,
            upload.content_type,
            upload.size,
            image.width,
            image.height,
        )
        result: MergeResult = await cascade(self.stages(upload, image))
        metadata = ImageMetadata.from_partial(result.record)
        logger.info(
            "Metadata for %s: %d field(s) from %s",
            upload.filename,
            len(result.record),
            sorted(set(result.sources.values())),
        )
        return ExtractionReport(metadata=metadata, sources=result.sources, errors=result.errors)

    def stages(self, upload: UploadedImage, image: Image.Image) -> list[Stage]:
        async def from_service(_: dict[str, Any]) -> dict[str, Any]:
            return await self._from_service(upload)

        def from_pixels(_: dict[str, Any]) -> dict[str, Any]:
            return analyze_pixels(image, upload.size, self.rng)

        async def from_tags(_: dict[str, Any]) -> dict[str, Any]:
            return await self._from_tags(upload)

        def from_file(known: dict[str, Any]) -> dict[str, Any]:
            width, height = image.size
            aspect = width / height if height else 1.0
            return guess_from_file(
                upload.filename,
                upload.size,
                aspect,
                known,
                self.rng,
                last_modified=upload.last_modified,
                now=self._clock(),
            )

        return [
            Stage("service", from_service),
            Stage("pixels", from_pixels),
            Stage("tags", from_tags),
            Stage("file", from_file),
        ]

    async def _from_service(self, upload: UploadedImage) -> dict[str, Any]:
        if self.service is None:
            return {}
        try:
            payload = await self.service.fetch(upload)
        except (httpx.HTTPError, ValueError, MetadataExtractionError, OSError) as e:
            logger.info("Metadata service unavailable, falling back: %s", e)
            return {}
        return api_to_partial(payload or {})

    async def _from_tags(self, upload: UploadedImage) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(read_embedded_tags, upload.content, self.rng),
                timeout=self.settings.tag_parse_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Embedded tag parsing abandoned after %.1fs", self.settings.tag_parse_timeout_s
            )
            return {}
