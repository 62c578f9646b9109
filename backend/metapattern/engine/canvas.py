"""Drawing surface: a Pillow RGB image with a view transform.

Primitives are given in canvas coordinates; ``set_view`` installs one
rotation/zoom affine around the canvas centre that every primitive is
pushed through before it reaches ``ImageDraw``.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PIL import Image, ImageDraw

from metapattern.engine import shapes
from metapattern.engine.color import HSBColor

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (500, 400)
MIN_SIDE = 100
MAX_SIDE = 2000

Size = tuple[int, int]


def _positive(size: Size | None) -> bool:
    return bool(size) and size[0] > 0 and size[1] > 0


def resolve_canvas_size(live: Size | None, last_known: Size | None = None) -> Size:
    """First positive size of live → last known → 500x400, clamped to [100, 2000]."""
    for candidate in (live, last_known):
        if _positive(candidate):
            width, height = candidate
            break
    else:
        logger.warning("No usable canvas size (live=%s, last=%s); using default", live, last_known)
        width, height = DEFAULT_SIZE
    return (
        int(max(MIN_SIDE, min(MAX_SIDE, width))),
        int(max(MIN_SIDE, min(MAX_SIDE, height))),
    )


def view_matrix(width: int, height: int, rotation: float = 0.0, zoom: float = 1.0) -> np.ndarray:
    """3x3 affine: rotate by ``rotation`` degrees and scale by ``zoom`` about the centre."""
    cx, cy = width / 2, height / 2
    theta = math.radians(rotation)
    cos_t, sin_t = math.cos(theta) * zoom, math.sin(theta) * zoom
    to_origin = np.array([[1, 0, -cx], [0, 1, -cy], [0, 0, 1]], dtype=np.float64)
    rotate_scale = np.array([[cos_t, -sin_t, 0], [sin_t, cos_t, 0], [0, 0, 1]], dtype=np.float64)
    back = np.array([[1, 0, cx], [0, 1, cy], [0, 0, 1]], dtype=np.float64)
    return back @ rotate_scale @ to_origin


class Canvas:
    """RGB surface drawn through an RGBA ``ImageDraw`` so fills blend."""

    def __init__(self, width: int, height: int) -> None:
        self.image = Image.new("RGB", (width, height), (0, 0, 0))
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        self._matrix = np.eye(3)
        self._zoom = 1.0

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Size:
        return self.image.size

    # -- surface ---------------------------------------------------------

    def clear(self) -> None:
        self._draw.rectangle((0, 0, self.width, self.height), fill=(0, 0, 0, 255))

    def fade(self, motion_blur: float) -> None:
        """Translucent black overlay; leaves trails of previous frames."""
        opacity = max(0.0, min(1.0, 1 - motion_blur / 2))
        self._draw.rectangle((0, 0, self.width, self.height), fill=(0, 0, 0, round(opacity * 255)))

    def resize(self, width: int, height: int) -> None:
        if (width, height) == self.size:
            return
        resized = Image.new("RGB", (width, height), (0, 0, 0))
        resized.paste(self.image, (0, 0))
        self.image = resized
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        logger.debug("Canvas resized to %dx%d", width, height)

    def snapshot(self) -> Image.Image:
        return self.image.copy()

    # -- view ------------------------------------------------------------

    def set_view(self, rotation: float = 0.0, zoom: float = 1.0) -> None:
        self._matrix = view_matrix(self.width, self.height, rotation, zoom)
        self._zoom = zoom

    def reset_view(self) -> None:
        self._matrix = np.eye(3)
        self._zoom = 1.0

    def transform(self, points: list[tuple[float, float]]) -> list[tuple[float, float]]:
        if not points:
            return []
        pts = np.ones((len(points), 3), dtype=np.float64)
        pts[:, :2] = points
        out = pts @ self._matrix.T
        return [(float(x), float(y)) for x, y in out[:, :2]]

    # -- primitives ------------------------------------------------------

    def ellipse(self, x: float, y: float, diameter: float, color: HSBColor) -> None:
        cx, cy = self.transform([(x, y)])[0]
        r = max(0.5, diameter * self._zoom / 2)
        self._draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=color.to_rgba())

    def polygon(self, points: list[tuple[float, float]], color: HSBColor) -> None:
        self._draw.polygon(self.transform(points), fill=color.to_rgba())

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: HSBColor,
        width: float = 1.0,
    ) -> None:
        stroke = max(1, round(width * self._zoom))
        self._draw.line(self.transform([(x1, y1), (x2, y2)]), fill=color.to_rgba(), width=stroke)

    def polyline(self, points: list[tuple[float, float]], color: HSBColor, width: float = 1.0) -> None:
        if len(points) < 2:
            return
        stroke = max(1, round(width * self._zoom))
        self._draw.line(self.transform(points), fill=color.to_rgba(), width=stroke)

    def fill_shape(self, kind: str, x: float, y: float, size: float, color: HSBColor) -> None:
        """Draw one primitive of ``kind`` (a ShapeKind value) centred on (x, y)."""
        kind = getattr(kind, "value", kind)
        if kind == "circle":
            self.ellipse(x, y, size, color)
            return
        builder = shapes.POLYGON_BUILDERS.get(kind)
        if builder is None:
            raise ValueError(f"Unknown shape: {kind}")
        self.polygon(builder(x, y, size), color)
