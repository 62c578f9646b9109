"""Noise dot field ("bump").

Grid spacing, dot sizes, noise scale and drift speed all follow ISO. Hue
is either a full rainbow from noise or a narrow band around the season's
base hue (winter and spring).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from metapattern.engine.canvas import Canvas
from metapattern.engine.color import HSBColor, season_hue
from metapattern.engine.params import PatternType, RenderParameters
from metapattern.engine.patterns.base import PatternState, pattern

_DEFAULT_ISO = 200
_MONOCHROME_SEASONS = ("winter", "spring")
_HUE_BAND = 30.0

# Time advances by 0.01 per frame at unit noise speed; this rescales it to frames.
_FRAMES_PER_TIME_UNIT = 100.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class DotFieldSettings:
    spacing: float
    dot_min: float
    dot_max: float
    noise_scale: float
    speed: float
    monochrome: bool

    @classmethod
    def for_params(cls, params: RenderParameters) -> DotFieldSettings:
        iso = params.iso or _DEFAULT_ISO
        return cls(
            spacing=_clamp(30 - iso / 100, 5, 60),
            dot_min=_clamp(2 - iso / 1000, 0.5, 5),
            dot_max=_clamp(8 + iso / 200, 3, 15),
            noise_scale=_clamp(0.01 + iso / 10000, 0.005, 0.05),
            speed=_clamp(0.01 + iso / 2000, 0.005, 0.05),
            monochrome=params.season in _MONOCHROME_SEASONS,
        )


@pattern(PatternType.BUMP)
class BumpState(PatternState):
    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        field = DotFieldSettings.for_params(params)
        cols = int(canvas.width // field.spacing)
        rows = int(canvas.height // field.spacing)
        if cols == 0 or rows == 0:
            return

        xs = np.arange(cols) * field.spacing
        ys = np.arange(rows) * field.spacing
        gx, gy = np.meshgrid(xs, ys)
        nx, ny = gx * field.noise_scale, gy * field.noise_scale
        nz = t * _FRAMES_PER_TIME_UNIT * field.speed

        sizes = field.dot_min + self.noise(nx, ny, nz) * (field.dot_max - field.dot_min)
        brightness = 30 + self.noise(nx + 1000, ny + 1000, nz) * 70
        hue_noise = self.noise(nx + 2000, ny + 2000, nz)

        if field.monochrome:
            base = season_hue(params.season)
            hues = base - _HUE_BAND + hue_noise * 2 * _HUE_BAND
            saturation = 60.0
        else:
            hues = hue_noise * 360
            saturation = 80.0

        for x, y, size, h, b in zip(gx.ravel(), gy.ravel(), sizes.ravel(), hues.ravel(), brightness.ravel()):
            color = HSBColor(float(h) % 360, saturation, float(b), 90)
            self.draw_point(canvas, params, float(x), float(y), float(size), color, shape="circle")
