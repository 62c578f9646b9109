"""RenderParameters and the ParameterStore handle shared by controls and renderer."""

from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)


class ShapeKind(str, enum.Enum):
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    RHOMBUS = "rhombus"
    STAR = "star"


class PatternType(str, enum.Enum):
    WAVE = "wave"
    BUMP = "bump"
    CONTOUR = "contour"
    # Legacy variants reachable from metadata mapping only
    BOUNCING = "bouncing"
    STATIC = "static"
    TOPOGRAPHIC = "topographic"
    STREAMS = "streams"


# Order of the three-position pattern slider.
SELECTABLE_PATTERNS = (PatternType.WAVE, PatternType.BUMP, PatternType.CONTOUR)


@dataclass(frozen=True)
class RenderParameters:
    shape: ShapeKind = ShapeKind.STAR
    density: float = 0.3
    alignment: str = "both"
    sharpness: str = "sharp"
    seed: int = 0

    flow_intensity: float = 0.3
    organic_curves: bool = False
    depth_layers: int = 2
    color_gradient: bool = False
    iridescent_effect: bool = False
    central_glow: bool = False
    particle_size: float = 1.0
    motion_blur: float = 0.0

    noise_scale: float = 0.02
    noise_speed: float = 2.0
    particle_count: int = 100
    stream_count: int = 3
    turbulence: float = 1.0
    color_shift: float = 0.5
    glow_intensity: float = 0.3

    pattern_type: PatternType = PatternType.CONTOUR
    iso: int | None = None
    season: str | None = None

    # Live controls
    tint: str | None = None
    rotation: float = 0.0
    scale: float = 1.0
    zoom: float = 1.0
    animation_speed: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["shape"] = self.shape.value
        data["pattern_type"] = self.pattern_type.value
        return data


# Fields owned by the user's controls; preserved when metadata is swapped in.
CONTROL_FIELDS = ("tint", "rotation", "scale", "zoom", "animation_speed")


class ParameterStore:
    """Single-owner holder of the current parameter snapshot.

    Writers replace the whole snapshot in one assignment, so a frame that
    already took a snapshot keeps a consistent view.
    """

    def __init__(self, params: RenderParameters | None = None) -> None:
        self._params = params or RenderParameters()
        self.version = 0

    def snapshot(self) -> RenderParameters:
        return self._params

    def update(self, **changes: Any) -> RenderParameters:
        if "pattern_type" in changes:
            changes["pattern_type"] = PatternType(changes["pattern_type"])
        if "shape" in changes:
            changes["shape"] = ShapeKind(changes["shape"])
        self._params = replace(self._params, **changes)
        self.version += 1
        logger.debug("params updated: %s", ", ".join(sorted(changes)))
        return self._params

    def replace(self, params: RenderParameters, keep_controls: bool = False) -> RenderParameters:
        if keep_controls:
            current = self._params
            params = replace(params, **{name: getattr(current, name) for name in CONTROL_FIELDS})
        self._params = params
        self.version += 1
        return self._params
