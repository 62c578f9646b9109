"""Vertex builders for the primitive shapes.

All shapes are centred on (x, y). Circles are drawn as ellipses by the
canvas, so they have no builder here.
"""

from __future__ import annotations

import math

Point = tuple[float, float]

STAR_SPIKES = 5
STAR_INNER_RATIO = 0.4


def rectangle(x: float, y: float, size: float) -> list[Point]:
    half = size / 2
    return [(x - half, y - half), (x + half, y - half), (x + half, y + half), (x - half, y + half)]


def triangle(x: float, y: float, size: float) -> list[Point]:
    half = size / 2
    return [(x, y - half), (x - half, y + half), (x + half, y + half)]


def rhombus(x: float, y: float, size: float) -> list[Point]:
    half = size / 2
    return [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]


def star(x: float, y: float, size: float, spikes: int = STAR_SPIKES) -> list[Point]:
    """Alternating outer (``size``) and inner (0.4 * size) radii."""
    points = []
    for i in range(spikes * 2):
        radius = size if i % 2 == 0 else size * STAR_INNER_RATIO
        angle = i * math.pi / spikes
        points.append((x + math.cos(angle) * radius, y + math.sin(angle) * radius))
    return points


POLYGON_BUILDERS = {
    "rectangle": rectangle,
    "triangle": triangle,
    "rhombus": rhombus,
    "star": star,
}
