"""Tests for metadata → RenderParameters mapping."""

import random

import pytest

from metapattern.engine.mapper import (
    map_alignment,
    map_iso_to_density,
    map_metadata,
    map_pattern_type,
    map_shape,
)
from metapattern.engine.params import PatternType, ShapeKind
from metapattern.models.metadata import ImageMetadata


def test_density_endpoints_and_clamping():
    assert map_iso_to_density(24) == 0.05
    assert map_iso_to_density(10) == 0.05
    assert map_iso_to_density(2000) == 1.0
    assert map_iso_to_density(6400) == 1.0
    assert map_iso_to_density(None) == 0.3


def test_density_is_monotonic():
    values = [map_iso_to_density(iso) for iso in range(1, 3000, 7)]
    assert all(a <= b for a, b in zip(values, values[1:]))
    assert all(0.05 <= v <= 1.0 for v in values)


@pytest.mark.parametrize(
    "lens_type, expected",
    [
        ("Front", ShapeKind.CIRCLE),
        ("Wide", ShapeKind.RECTANGLE),
        ("Telephoto", ShapeKind.TRIANGLE),
        ("Ultra Wide", ShapeKind.RHOMBUS),
        (None, ShapeKind.STAR),
    ],
)
def test_shape_from_lens(lens_type, expected):
    assert map_shape(ImageMetadata(lens_type=lens_type)) == expected


def test_alignment_from_orientation():
    assert map_alignment(1) == "horizontal"
    assert map_alignment(3) == "horizontal"
    assert map_alignment(6) == "vertical"
    assert map_alignment(8) == "vertical"
    assert map_alignment(None) == "both"
    assert map_alignment(2) == "both"


def test_pattern_type_rule_order():
    assert map_pattern_type(ImageMetadata(lens_type="Ultra Wide", iso=1600)) == PatternType.WAVE
    assert map_pattern_type(ImageMetadata(lens_type="Telephoto")) == PatternType.TOPOGRAPHIC
    assert map_pattern_type(ImageMetadata(lens_type="Front")) == PatternType.BOUNCING
    assert map_pattern_type(ImageMetadata(iso=100)) == PatternType.WAVE
    assert map_pattern_type(ImageMetadata(iso=400)) == PatternType.CONTOUR
    assert map_pattern_type(ImageMetadata(iso=800)) == PatternType.STATIC
    assert map_pattern_type(ImageMetadata(flash=True)) == PatternType.BOUNCING
    assert map_pattern_type(ImageMetadata(time="23:10:00", time_of_day="day")) == PatternType.STATIC
    assert map_pattern_type(ImageMetadata(time_of_day="day")) == PatternType.WAVE
    assert map_pattern_type(ImageMetadata(season="autumn")) == PatternType.TOPOGRAPHIC
    assert map_pattern_type(ImageMetadata()) == PatternType.CONTOUR


def test_map_metadata_derived_fields():
    metadata = ImageMetadata(iso=800, flash=True, lens_type="Wide", orientation=6, season="summer")
    params = map_metadata(metadata, seed=11)

    assert params.seed == 11
    assert params.shape == ShapeKind.RECTANGLE
    assert params.sharpness == "blurred"
    assert params.alignment == "vertical"
    assert params.noise_scale == pytest.approx(0.05)
    assert params.noise_speed == pytest.approx(1.8)
    assert params.particle_count == 90
    assert params.stream_count == 5
    assert params.turbulence == pytest.approx(0.9)
    assert params.color_shift == 2.0
    assert params.glow_intensity == 0.8
    assert params.central_glow is True
    assert params.iridescent_effect is True
    assert 0 <= params.flow_intensity <= 1
    assert 1 <= params.depth_layers <= 5
    assert params.iso == 800
    assert params.season == "summer"


def test_map_metadata_defaults_without_iso():
    params = map_metadata(ImageMetadata(), seed=1)
    assert params.density == 0.3
    assert params.noise_scale == pytest.approx(0.02)
    assert params.noise_speed == 2
    assert params.particle_count == 100
    assert params.turbulence == 1.0
    assert params.sharpness == "sharp"
    assert params.tint is None
    assert (params.rotation, params.scale, params.zoom, params.animation_speed) == (0.0, 1.0, 1.0, 1.0)


def test_map_metadata_is_deterministic_for_a_seed():
    metadata = ImageMetadata(iso=320, lens_type="Telephoto", time="09:00:00")
    assert map_metadata(metadata, seed=99) == map_metadata(metadata, seed=99)


def test_map_metadata_draws_seed_from_rng():
    a = map_metadata(ImageMetadata(), rng=random.Random(8))
    b = map_metadata(ImageMetadata(), rng=random.Random(8))
    assert a.seed == b.seed
