"""Shared test fixtures."""

from __future__ import annotations

import io
import random
import time

import pytest
from PIL import Image

from metapattern.config import Settings


# exiftool -json output for a typical iPhone capture
IPHONE_EXIFTOOL_JSON = [
    {
        "SourceFile": "uploads/1-photo.jpg",
        "Make": "Apple",
        "Model": "iPhone 15 Pro",
        "LensModel": "iPhone 15 Pro back triple camera 6.86mm f/1.78",
        "FocalLength": "6.9 mm",
        "ISO": 125,
        "FNumber": 1.8,
        "Flash": "Off, Did not fire",
        "Orientation": "Rotate 90 CW",
        "DateTimeOriginal": "2023:06:15 14:30:00",
        "GPSLatitude": "40 deg 40' 39.25\" N",
        "GPSLongitude": "73 deg 56' 30.00\" W",
        "ImageWidth": 4032,
        "ImageHeight": 3024,
    }
]

E2E_FILENAME = "IMG_20230615_143000.jpg"
E2E_SIZE = 7_200_000


def make_image(width: int = 64, height: int = 48, color=(230, 230, 230)) -> Image.Image:
    return Image.new("RGB", (width, height), color)


def encode(image: Image.Image, fmt: str = "JPEG", exif: Image.Exif | None = None) -> bytes:
    buf = io.BytesIO()
    if exif is not None:
        image.save(buf, format=fmt, exif=exif)
    else:
        image.save(buf, format=fmt)
    return buf.getvalue()


class FakeExifToolHelper:
    """Stands in for ``exiftool.ExifToolHelper``; no binary needed."""

    def __init__(self, records=None, error: Exception | None = None, delay: float = 0.0, calls=None, **kwargs):
        self.records = IPHONE_EXIFTOOL_JSON if records is None else records
        self.error = error
        self.delay = delay
        self.calls = calls
        self.kwargs = kwargs

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def get_metadata(self, path):
        if self.calls is not None:
            self.calls.append((path, self.kwargs))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.records


def fake_exiftool(records=None, error: Exception | None = None, delay: float = 0.0, calls: list | None = None):
    """Factory to patch over ``exiftool.ExifToolHelper``."""

    def _helper(**kwargs):
        return FakeExifToolHelper(records, error, delay, calls, **kwargs)

    return _helper


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        metadata_service_url="",
        tag_parse_timeout_s=2.0,
        exiftool_timeout_s=2.0,
    )


@pytest.fixture
def bright_image() -> Image.Image:
    return make_image(64, 48, (230, 230, 230))


@pytest.fixture
def jpeg_bytes(bright_image) -> bytes:
    return encode(bright_image)
