"""Metadata → RenderParameters mapping.

Each output field has its own independent rule chain over the metadata.
The mapping is pure: the only randomness is the pattern seed, drawn from
the ``rng`` handle when no seed is given.
"""

from __future__ import annotations

import random

from metapattern.engine.exif import hour_of
from metapattern.engine.heuristics import time_of_day
from metapattern.engine.params import PatternType, RenderParameters, ShapeKind
from metapattern.models.metadata import ImageMetadata

# ISO → density linear map endpoints.
MIN_ISO = 24
MAX_ISO = 2000
MIN_DENSITY = 0.05
MAX_DENSITY = 1.0
DEFAULT_DENSITY = 0.3

# ISO thresholds shared by the additive rules.
_ISO_MEDIUM = 400
_ISO_HIGH = 800

_SEED_RANGE = 2**31 - 1


def _lens_text(metadata: ImageMetadata) -> str:
    return " ".join(part for part in (metadata.lens_type, metadata.lens) if part).lower()


def map_shape(metadata: ImageMetadata) -> ShapeKind:
    lens = _lens_text(metadata)
    if not lens:
        return ShapeKind.STAR
    if "front" in lens or "selfie" in lens:
        return ShapeKind.CIRCLE
    if "ultra wide" in lens or "ultra-wide" in lens:
        return ShapeKind.RHOMBUS
    if "telephoto" in lens or "zoom" in lens:
        return ShapeKind.TRIANGLE
    if "wide" in lens:
        return ShapeKind.RECTANGLE
    return ShapeKind.STAR


def map_iso_to_density(iso: float | None) -> float:
    """Linear between (24, 0.05) and (2000, 1.0), clamped outside."""
    if not iso:
        return DEFAULT_DENSITY
    clamped = max(MIN_ISO, min(MAX_ISO, iso))
    normalized = (clamped - MIN_ISO) / (MAX_ISO - MIN_ISO)
    return round(MIN_DENSITY + normalized * (MAX_DENSITY - MIN_DENSITY), 2)


def map_alignment(orientation: int | None) -> str:
    if orientation in (1, 3):
        return "horizontal"
    if orientation in (6, 8):
        return "vertical"
    return "both"


def map_sharpness(flash: bool | None) -> str:
    return "blurred" if flash else "sharp"


def _iso_step(iso: int | None, high: float, medium: float) -> float:
    if iso and iso > _ISO_HIGH:
        return high
    if iso and iso > _ISO_MEDIUM:
        return medium
    return 0.0


def map_flow_intensity(metadata: ImageMetadata) -> float:
    intensity = 0.3 + _iso_step(metadata.iso, 0.4, 0.2)
    lens = _lens_text(metadata)
    if "ultra wide" in lens:
        intensity += 0.3
    elif "wide" in lens:
        intensity += 0.2
    if metadata.flash:
        intensity += 0.2
    return round(min(1.0, intensity), 4)


def map_organic_curves(metadata: ImageMetadata) -> bool:
    lens = _lens_text(metadata)
    return "wide" in lens or "front" in lens


def map_depth_layers(metadata: ImageMetadata) -> int:
    layers = 2 + int(_iso_step(metadata.iso, 2, 1))
    if metadata.flash:
        layers += 1
    return min(5, max(1, layers))


def map_color_gradient(metadata: ImageMetadata) -> bool:
    return bool(metadata.flash) or metadata.season in ("summer", "autumn")


def map_iridescent_effect(metadata: ImageMetadata) -> bool:
    return bool(metadata.flash and metadata.iso and metadata.iso > 600) or metadata.season == "summer"


def map_central_glow(metadata: ImageMetadata) -> bool:
    if metadata.flash:
        return True
    lens = _lens_text(metadata)
    return "front" in lens or "wide" in lens


def map_particle_size(metadata: ImageMetadata) -> float:
    size = 1.0 - _iso_step(metadata.iso, 0.3, 0.1)
    if metadata.flash:
        size += 0.2
    return round(max(0.5, min(3.0, size)), 4)


def map_motion_blur(metadata: ImageMetadata) -> float:
    blur = 0.4 if metadata.flash else 0.0
    blur += _iso_step(metadata.iso, 0.3, 0.1)
    return round(min(1.0, blur), 4)


def day_night_bias(metadata: ImageMetadata) -> str | None:
    """Day/night from the capture hour, else from the stored time of day."""
    hour = hour_of(metadata.time)
    if hour is not None:
        return time_of_day(hour)
    return metadata.time_of_day


_SEASON_PATTERNS = {
    "spring": PatternType.WAVE,
    "summer": PatternType.BOUNCING,
    "autumn": PatternType.TOPOGRAPHIC,
    "winter": PatternType.STATIC,
}


def map_pattern_type(metadata: ImageMetadata) -> PatternType:
    if metadata.lens_type:
        lens = metadata.lens_type.lower()
        if "ultra wide" in lens:
            return PatternType.WAVE
        if "telephoto" in lens:
            return PatternType.TOPOGRAPHIC
        if "front" in lens:
            return PatternType.BOUNCING
        if "wide" in lens:
            return PatternType.CONTOUR

    if metadata.iso:
        if metadata.iso <= 100:
            return PatternType.WAVE
        if metadata.iso <= 400:
            return PatternType.CONTOUR
        return PatternType.STATIC

    if metadata.flash:
        return PatternType.BOUNCING

    bias = day_night_bias(metadata)
    if bias == "night":
        return PatternType.STATIC
    if bias == "day":
        return PatternType.WAVE

    if metadata.season:
        return _SEASON_PATTERNS.get(metadata.season, PatternType.CONTOUR)

    return PatternType.CONTOUR


def map_metadata(
    metadata: ImageMetadata,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> RenderParameters:
    """Derive a full parameter record from ``metadata``."""
    if seed is None:
        seed = (rng or random.Random()).randrange(_SEED_RANGE)

    iso = metadata.iso
    return RenderParameters(
        shape=map_shape(metadata),
        density=map_iso_to_density(iso),
        alignment=map_alignment(metadata.orientation),
        sharpness=map_sharpness(metadata.flash),
        seed=seed,
        flow_intensity=map_flow_intensity(metadata),
        organic_curves=map_organic_curves(metadata),
        depth_layers=map_depth_layers(metadata),
        color_gradient=map_color_gradient(metadata),
        iridescent_effect=map_iridescent_effect(metadata),
        central_glow=map_central_glow(metadata),
        particle_size=map_particle_size(metadata),
        motion_blur=map_motion_blur(metadata),
        noise_scale=0.01 + (iso / 20000 if iso else 0.01),
        noise_speed=1 + (iso / 1000 if iso else 1),
        particle_count=int(50 + (iso / 20 if iso else 50)),
        stream_count=3 + (2 if metadata.flash else 0),
        turbulence=0.5 + (iso / 2000 if iso else 0.5),
        color_shift=2.0 if metadata.flash else 0.5,
        glow_intensity=0.8 if metadata.flash else 0.3,
        pattern_type=map_pattern_type(metadata),
        iso=iso,
        season=metadata.season,
    )
