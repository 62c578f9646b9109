"""Tests for PNG export."""

import io

import pytest
from PIL import Image

from metapattern.engine.export import EXPORT_FILENAME, export_image
from tests.conftest import make_image


def test_export_upscales_by_two():
    data = export_image(make_image(120, 80), scale=2)
    png = Image.open(io.BytesIO(data))
    assert png.format == "PNG"
    assert png.size == (240, 160)


def test_export_default_scale_from_settings():
    png = Image.open(io.BytesIO(export_image(make_image(50, 40))))
    assert png.size == (100, 80)


def test_export_scale_one_keeps_size():
    png = Image.open(io.BytesIO(export_image(make_image(50, 40), scale=1)))
    assert png.size == (50, 40)


def test_export_rejects_bad_scale():
    with pytest.raises(ValueError):
        export_image(make_image(), scale=-1)
    with pytest.raises(ValueError):
        export_image(make_image(), scale=0)


def test_export_filename():
    assert EXPORT_FILENAME == "pattern.png"
