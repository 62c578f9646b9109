"""Pointer gestures → RenderParameters changes.

Screen coordinates: x grows to the right, y grows downward. Knobs on the
y axis read the delta as ``origin_y - y`` so that dragging up increases
the value.
"""

from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence

from metapattern.engine.color import NO_TINT, TINT_PALETTE
from metapattern.engine.params import SELECTABLE_PATTERNS, ParameterStore, PatternType

logger = logging.getLogger(__name__)

PATTERN_DRAG_THRESHOLD_PX = 50
TINT_DRAG_THRESHOLD_PX = 30

# Base knob sensitivity; per-knob factors below scale it.
KNOB_SENSITIVITY = 0.3


class ClickZoneSelector:
    """Maps a relative click position in [0, 1] to one of the options.

    Zone boundaries are k/n truncated to two decimals, so three options
    split at 0.33 and 0.66.
    """

    def __init__(self, options: Sequence[Any]) -> None:
        if not options:
            raise ValueError("ClickZoneSelector needs at least one option")
        self.options = tuple(options)
        n = len(self.options)
        self.boundaries = [math.floor(k * 100 / n) / 100 for k in range(1, n)]

    def index_at(self, rel: float) -> int:
        rel = min(1.0, max(0.0, rel))
        return bisect.bisect_right(self.boundaries, rel)

    def select(self, rel: float) -> Any:
        return self.options[self.index_at(rel)]


class DragThresholdSelector:
    """Steps through options one at a time once a drag passes ``threshold``.

    ``delta`` is the signed distance along ``axis`` in screen coordinates;
    a positive delta moves toward the end of ``options``.
    """

    def __init__(self, options: Sequence[Any], threshold: float, axis: str = "x") -> None:
        self.options = tuple(options)
        self.threshold = threshold
        self.axis = axis

    def delta(self, dx: float, dy: float) -> float:
        return dx if self.axis == "x" else dy

    def step(self, index: int, delta: float) -> int:
        if abs(delta) <= self.threshold:
            return index
        if delta > 0:
            return min(len(self.options) - 1, index + 1)
        return max(0, index - 1)


@dataclass(frozen=True)
class Knob:
    """A continuous control bound to one parameter field."""

    name: str
    sensitivity: float
    minimum: float
    maximum: float
    decimals: int = 2
    axis: str = "y"
    dead_zone: float = 0.0

    def value_for(self, start: float, dx: float, dy_up: float) -> float | None:
        """New value after a drag, or ``None`` inside the dead zone."""
        delta = dx if self.axis == "x" else dy_up
        if abs(delta) < self.dead_zone:
            return None
        value = max(self.minimum, min(self.maximum, start + delta * self.sensitivity))
        if self.decimals == 0:
            return float(round(value))
        return round(value, self.decimals)


KNOBS = {
    "rotation": Knob("rotation", 0.15, -180, 180, decimals=0, axis="x", dead_zone=3),
    "scale": Knob("scale", KNOB_SENSITIVITY * 0.05, 0.1, 3.0),
    "zoom": Knob("zoom", KNOB_SENSITIVITY * 0.1, 1.0, 5.0),
    "animation_speed": Knob("animation_speed", KNOB_SENSITIVITY * 0.05, 0.1, 3.0),
}


def tint_index(tint: str | None) -> int:
    """Slider stop for ``tint``; unknown or missing tints sit on white."""
    if tint:
        normalized = tint.strip().upper()
        if not normalized.startswith("#"):
            normalized = "#" + normalized
        if normalized in TINT_PALETTE:
            return TINT_PALETTE.index(normalized)
    return TINT_PALETTE.index(NO_TINT)


def pattern_index(pattern_type: PatternType) -> int:
    if pattern_type in SELECTABLE_PATTERNS:
        return SELECTABLE_PATTERNS.index(pattern_type)
    # Metadata-only patterns sit on the default end of the slider.
    return SELECTABLE_PATTERNS.index(PatternType.CONTOUR)


@dataclass
class DragState:
    """Transient gesture state; lives from press to release."""

    control: str
    origin_x: float
    origin_y: float
    start_value: Any


class ControlPanel:
    """Binds the pattern slider, tint slider and knobs to a ParameterStore."""

    def __init__(self, store: ParameterStore) -> None:
        self.store = store
        self.pattern_clicks = ClickZoneSelector(SELECTABLE_PATTERNS)
        self.tint_clicks = ClickZoneSelector(TINT_PALETTE)
        self.selectors = {
            "pattern": DragThresholdSelector(SELECTABLE_PATTERNS, PATTERN_DRAG_THRESHOLD_PX, axis="x"),
            "tint": DragThresholdSelector(TINT_PALETTE, TINT_DRAG_THRESHOLD_PX, axis="y"),
        }
        self.drag: DragState | None = None

    @property
    def controls(self) -> tuple[str, ...]:
        return tuple(self.selectors) + tuple(KNOBS)

    def press(self, control: str, x: float, y: float) -> DragState:
        params = self.store.snapshot()
        if control == "pattern":
            start: Any = pattern_index(params.pattern_type)
        elif control == "tint":
            start = tint_index(params.tint)
        elif control in KNOBS:
            start = getattr(params, control)
        else:
            raise ValueError(f"Unknown control: {control}")
        self.drag = DragState(control, x, y, start)
        return self.drag

    def move(self, x: float, y: float) -> Any:
        """Apply a pointer move; returns the new value, or ``None`` if unchanged."""
        drag = self.drag
        if drag is None:
            return None
        dx = x - drag.origin_x
        dy = y - drag.origin_y

        selector = self.selectors.get(drag.control)
        if selector is not None:
            new_index = selector.step(drag.start_value, selector.delta(dx, dy))
            if new_index == drag.start_value:
                return None
            value = selector.options[new_index]
            field = "pattern_type" if drag.control == "pattern" else "tint"
            self.store.update(**{field: value})
            # Re-anchor so one continuous drag cannot jump several steps at once.
            drag.start_value = new_index
            drag.origin_x, drag.origin_y = x, y
            return value

        value = KNOBS[drag.control].value_for(drag.start_value, dx, -dy)
        if value is None:
            return None
        self.store.update(**{drag.control: value})
        return value

    def release(self) -> None:
        self.drag = None

    def click_pattern(self, rel_x: float) -> PatternType:
        if self.drag is not None:
            return self.store.snapshot().pattern_type
        choice = self.pattern_clicks.select(rel_x)
        self.store.update(pattern_type=choice)
        return choice

    def click_tint(self, rel_y: float) -> str:
        choice = self.tint_clicks.select(rel_y)
        self.store.update(tint=choice)
        return choice
