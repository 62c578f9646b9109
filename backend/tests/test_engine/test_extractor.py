"""Tests for the four-stage MetadataExtractor."""

import asyncio
import random
import time
from datetime import datetime

import httpx
import pytest
from PIL import ExifTags, Image

from metapattern.engine.extractor import (
    HttpMetadataService,
    MetadataExtractor,
    UploadedImage,
    validate_upload,
)
from metapattern.errors import InvalidImageError, MetadataExtractionError
from tests.conftest import E2E_FILENAME, E2E_SIZE, encode, make_image


class FailingService:
    async def fetch(self, upload):
        raise MetadataExtractionError("Failed to extract metadata")


class StaticService:
    def __init__(self, payload):
        self.payload = payload

    async def fetch(self, upload):
        return self.payload


def _extract(extractor, upload, image):
    return asyncio.run(extractor.extract_report(upload, image))


@pytest.mark.parametrize("service", [None, FailingService()])
def test_end_to_end_without_tags_or_service(service, settings):
    """4000x3000 IMG_ file, 7.2 MB, no EXIF, service unavailable."""
    image = make_image(4000, 3000, (235, 235, 235))
    upload = UploadedImage(
        filename=E2E_FILENAME,
        content=encode(make_image()),
        content_type="image/jpeg",
        size=E2E_SIZE,
    )
    extractor = MetadataExtractor(service=service, settings=settings, rng=random.Random(5))

    report = _extract(extractor, upload, image)
    metadata = report.metadata

    assert metadata.date == "2023-06-15"
    assert metadata.time == "14:30:00"
    assert metadata.time_of_day == "day"
    assert metadata.phone_type == "iPhone 15"
    assert metadata.width == 4000
    assert metadata.height == 3000
    assert metadata.season == "summer"
    assert report.sources["phone_type"] == "file"
    assert report.sources["time_of_day"] == "pixels"


def test_service_fields_win(settings, jpeg_bytes, bright_image):
    payload = {"phoneType": "iPhone 14 Pro", "iso": 640, "flash": True, "gps": {"latitude": 1.5, "longitude": -2.5}}
    extractor = MetadataExtractor(service=StaticService(payload), settings=settings, rng=random.Random(1))
    upload = UploadedImage(filename=E2E_FILENAME, content=jpeg_bytes, content_type="image/jpeg")

    report = _extract(extractor, upload, bright_image)

    assert report.metadata.phone_type == "iPhone 14 Pro"
    assert report.metadata.iso == 640
    # pixels say a bright image has no flash; the service got there first
    assert report.metadata.flash is True
    assert report.metadata.gps.longitude == -2.5
    assert report.sources["iso"] == "service"
    assert report.sources["date"] == "file"


def test_embedded_tags_beat_filename(settings, bright_image):
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Google"
    exif[ExifTags.Base.Model] = "Pixel 8"
    exif[ExifTags.Base.DateTime] = "2021:01:05 08:00:00"
    upload = UploadedImage(filename=E2E_FILENAME, content=encode(bright_image, exif=exif), content_type="image/jpeg")
    extractor = MetadataExtractor(settings=settings, rng=random.Random(2))

    metadata = asyncio.run(extractor.extract(upload, bright_image))

    assert metadata.phone_type == "Google Pixel 8"
    assert metadata.lens_type == "Wide"
    assert metadata.date == "2021-01-05"
    assert metadata.season == "winter"


def test_tag_stage_abandoned_after_timeout(monkeypatch, settings, jpeg_bytes, bright_image):
    def slow_tags(content, rng):
        time.sleep(0.5)
        return {"phone_type": "Too Late"}

    monkeypatch.setattr("metapattern.engine.extractor.read_embedded_tags", slow_tags)
    settings.tag_parse_timeout_s = 0.05
    extractor = MetadataExtractor(settings=settings, rng=random.Random(3))
    upload = UploadedImage(filename="IMG_0001.jpg", content=jpeg_bytes, size=7_200_000)

    metadata = asyncio.run(extractor.extract(upload, bright_image))

    assert metadata.phone_type == "iPhone 15"


def test_last_modified_used_when_filename_has_no_timestamp(settings, jpeg_bytes, bright_image):
    upload = UploadedImage(
        filename="holiday.jpg",
        content=jpeg_bytes,
        last_modified=datetime(2020, 7, 4, 20, 0, 0),
    )
    extractor = MetadataExtractor(settings=settings, rng=random.Random(4), clock=lambda: datetime(2024, 1, 1))

    metadata = asyncio.run(extractor.extract(upload, bright_image))

    assert metadata.date == "2020-07-04"
    assert metadata.season == "summer"
    # the bright image already decided daytime
    assert metadata.time_of_day == "day"


def test_http_service_posts_multipart(jpeg_bytes):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"phoneType": "iPhone 15", "iso": 100})

    service = HttpMetadataService("http://meta.test/api/extract-metadata", 1.0, httpx.MockTransport(handler))
    payload = asyncio.run(service.fetch(UploadedImage(filename="a.jpg", content=jpeg_bytes, content_type="image/jpeg")))

    assert payload == {"phoneType": "iPhone 15", "iso": 100}
    assert seen["url"] == "http://meta.test/api/extract-metadata"
    assert b'name="image"' in seen["body"]


def test_http_service_error_falls_back(settings, jpeg_bytes, bright_image):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Failed to extract metadata"})

    service = HttpMetadataService("http://meta.test/api/extract-metadata", 1.0, httpx.MockTransport(handler))
    extractor = MetadataExtractor(service=service, settings=settings, rng=random.Random(6))
    upload = UploadedImage(filename=E2E_FILENAME, content=jpeg_bytes, size=E2E_SIZE)

    report = _extract(extractor, upload, bright_image)

    assert "service" not in report.sources.values()
    assert report.metadata.phone_type == "iPhone 15"


def test_http_service_disabled_without_url(jpeg_bytes):
    service = HttpMetadataService(url="")
    assert asyncio.run(service.fetch(UploadedImage(filename="a.jpg", content=jpeg_bytes))) is None


def test_validate_upload():
    validate_upload("a.jpg", "image/jpeg")
    validate_upload("a.HEIC", "application/octet-stream")
    validate_upload("a.png", None)
    with pytest.raises(InvalidImageError, match="Please select an image file"):
        validate_upload("notes.txt", "text/plain")
    with pytest.raises(InvalidImageError):
        validate_upload("notes.txt", None)


def test_uploaded_image_size_defaults_to_content_length():
    assert UploadedImage(filename="a.jpg", content=b"12345").size == 5
    assert UploadedImage(filename="a.jpg", content=b"12345", size=99).size == 99
