"""HSB colours, palettes and the tint blend."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass, replace

# White on the tint slider means "no tint".
NO_TINT = "#FFFFFF"

# Tint slider stops, bottom to top.
TINT_PALETTE = ("#FD0004", "#E86615", "#FFFF00", NO_TINT, "#00FF1E", "#002AFF", "#8015E8")

_HUE_PULL = 0.3
_SATURATION_GAIN = 0.2
_BRIGHTNESS_GAIN = 0.1


@dataclass(frozen=True)
class HSBColor:
    """Hue 0-360, saturation / brightness / alpha 0-100."""

    h: float
    s: float
    b: float
    a: float = 100.0

    def to_rgba(self) -> tuple[int, int, int, int]:
        r, g, b = colorsys.hsv_to_rgb((self.h % 360) / 360, _unit(self.s), _unit(self.b))
        return round(r * 255), round(g * 255), round(b * 255), round(_unit(self.a) * 255)

    def with_alpha(self, a: float) -> HSBColor:
        return replace(self, a=a)

    @classmethod
    def from_hex(cls, value: str) -> HSBColor:
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(c * 2 for c in text)
        if len(text) != 6:
            raise ValueError(f"Not a hex colour: {value!r}")
        r, g, b = (int(text[i : i + 2], 16) / 255 for i in (0, 2, 4))
        h, s, v = colorsys.rgb_to_hsv(r, g, b)
        return cls(h * 360, s * 100, v * 100)


def _unit(value: float) -> float:
    return min(1.0, max(0.0, value / 100))


def is_no_tint(tint: str | None) -> bool:
    return not tint or tint.strip().upper() == NO_TINT


def apply_tint(color: HSBColor, tint: str | None) -> HSBColor:
    """Pull ``color`` toward ``tint``; ``None`` / white leave it untouched."""
    if is_no_tint(tint):
        return color
    target = HSBColor.from_hex(tint)

    # Shorter arc between the two hues.
    delta = (target.h - color.h + 180) % 360 - 180
    h = (color.h + delta * _HUE_PULL) % 360
    s = min(100.0, color.s + target.s * _SATURATION_GAIN)
    b = min(100.0, max(0.0, color.b + (target.b - 50) * _BRIGHTNESS_GAIN))
    return HSBColor(h, s, b, color.a)


def hsb(h: float, s: float, b: float, a: float = 100.0) -> HSBColor:
    return HSBColor(h, s, b, a)


BASE_PALETTE = (
    hsb(200, 80, 100),  # white-blue
    hsb(220, 60, 90),  # light blue
    hsb(40, 70, 100),  # gold
    hsb(30, 80, 90),  # orange
    hsb(0, 0, 100),  # white
    hsb(180, 50, 80),  # light purple
)

CONTOUR_PALETTE = (
    hsb(120, 80, 100),  # green
    hsb(140, 70, 90),  # light green
    hsb(60, 70, 100),  # yellow
    hsb(40, 80, 90),  # orange
    hsb(0, 0, 100),  # white
    hsb(100, 50, 80),  # pale green
)

# Every 30 degrees of hue, used when the iridescent effect is on.
IRIDESCENT_PALETTE = tuple(hsb(h, 80, 90) for h in range(0, 360, 30))

SEASON_HUES = {"winter": 200, "spring": 120, "summer": 40, "autumn": 20}
DEFAULT_SEASON_HUE = 40

GLOW_COLOR = hsb(40, 60, 100)


def season_hue(season: str | None) -> float:
    return SEASON_HUES.get(season or "", DEFAULT_SEASON_HUE)


def palette_for(iridescent: bool) -> tuple[HSBColor, ...]:
    return IRIDESCENT_PALETTE + BASE_PALETTE if iridescent else BASE_PALETTE
