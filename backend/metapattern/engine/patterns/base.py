"""Pattern state base class and registry.

Every pattern type is a ``PatternState`` subclass registered via decorator:

    @pattern(PatternType.WAVE)
    class WaveState(RibbonState):
        style = RibbonStyle(...)

A state owns its own noise field, random generator and phase; nothing is
shared between states, so switching patterns starts from a clean slate.
"""

from __future__ import annotations

import abc
import logging
import math
from dataclasses import dataclass
from typing import Callable, ClassVar

import numpy as np

from metapattern.engine.canvas import Canvas
from metapattern.engine.color import HSBColor, apply_tint, palette_for
from metapattern.engine.noise import PerlinNoise
from metapattern.engine.params import PatternType, RenderParameters

logger = logging.getLogger(__name__)

# Halo alpha and blur radius per unit of glow intensity.
_HALO_ALPHA = 25.0
_HALO_SPREAD_PX = 20.0

_TWO_PI = 2 * math.pi


class PatternState(abc.ABC):
    """Per-pattern animation state."""

    kind: ClassVar[PatternType]

    def __init__(self, seed: int = 0, started_at: float = 0.0) -> None:
        self.seed = seed
        self.started_at = started_at
        self.rng = np.random.default_rng(seed)
        self.noise = PerlinNoise(seed)
        self.frames = 0

    def local_time(self, now: float) -> float:
        """Time since this state was created; 0 on its first frame."""
        return now - self.started_at

    def render(self, canvas: Canvas, params: RenderParameters, now: float) -> None:
        self.draw(canvas, params, self.local_time(now))
        self.frames += 1

    @abc.abstractmethod
    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        """Draw one frame at state-local time ``t``."""

    # -- shared drawing helpers ------------------------------------------

    def draw_point(
        self,
        canvas: Canvas,
        params: RenderParameters,
        x: float,
        y: float,
        size: float,
        color: HSBColor,
        shape: str | None = None,
    ) -> None:
        """One primitive with tint, motion-blur trail and glow halo."""
        shape = shape or params.shape.value
        size *= params.scale
        color = apply_tint(color, params.tint)

        if params.motion_blur > 0:
            _draw_trail(canvas, shape, x, y, size, color, params.motion_blur)

        if params.glow_intensity > 0:
            halo = color.with_alpha(min(color.a, _HALO_ALPHA * params.glow_intensity * 2))
            canvas.ellipse(x, y, size + params.glow_intensity * _HALO_SPREAD_PX, halo)

        canvas.fill_shape(shape, x, y, size, color)


def _draw_trail(
    canvas: Canvas,
    shape: str,
    x: float,
    y: float,
    size: float,
    color: HSBColor,
    blur: float,
) -> None:
    steps = int(blur * 5) + 1
    for i in range(steps):
        offset = (i - steps / 2) * blur * 3
        alpha = color.a * 0.7 * (1 - (i / steps) * 0.5)
        step_size = size * (1 - i * 0.1)
        if step_size <= 0:
            break
        canvas.fill_shape(shape, x + offset, y + offset, step_size, color.with_alpha(alpha))


@dataclass(frozen=True)
class RibbonStyle:
    """Geometry of one family of flowing ribbons around the canvas centre."""

    points: int
    min_streams: int
    turns: float
    radius: float
    radius_noise: float
    noise_step: float
    wobble: tuple[float, float, float, float]  # sin freq, x amp, cos freq, y amp
    flow: tuple[float, float, float, float]  # same, scaled by flow_intensity
    size_base: float
    size_jitter: float


class RibbonState(PatternState):
    """Streams of noise-perturbed points orbiting the centre."""

    style: ClassVar[RibbonStyle]

    # Angular drift per unit of time, radians.
    spin: ClassVar[float] = 0.2

    def palette(self, params: RenderParameters) -> tuple[HSBColor, ...]:
        return palette_for(params.iridescent_effect)

    def ribbon(self, index: int, total: int, params: RenderParameters, cx: float, cy: float, t: float):
        style = self.style
        u = np.arange(style.points) / style.points
        angle = u * _TWO_PI * style.turns + index * (_TWO_PI / total) + t * self.spin
        radius = style.radius + self.noise(index, u * style.noise_step, t * 0.1) * style.radius_noise

        sin_f, sin_a, cos_f, cos_a = style.wobble
        x = cx + np.cos(angle) * radius + np.sin(u * math.pi * sin_f) * sin_a
        y = cy + np.sin(angle) * radius + np.cos(u * math.pi * cos_f) * cos_a

        fx_f, fx_a, fy_f, fy_a = style.flow
        x += np.sin(u * math.pi * fx_f + index + t) * params.flow_intensity * fx_a
        y += np.cos(u * math.pi * fy_f + index + t) * params.flow_intensity * fy_a
        return x, y

    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        style = self.style
        total = max(style.min_streams, int(params.stream_count))
        cx, cy = canvas.width / 2, canvas.height / 2
        palette = self.palette(params)

        for index in range(total):
            xs, ys = self.ribbon(index, total, params, cx, cy, t)
            sizes = (style.size_base + self.rng.random(style.points) * style.size_jitter) * params.particle_size
            picks = self.rng.integers(0, len(palette), style.points)
            for x, y, size, pick in zip(xs, ys, sizes, picks):
                if 0 <= x < canvas.width and 0 <= y < canvas.height:
                    self.draw_point(canvas, params, float(x), float(y), float(size), palette[pick])


# -- registry --------------------------------------------------------------

_PATTERNS: dict[PatternType, type[PatternState]] = {}


def pattern(kind: PatternType) -> Callable[[type[PatternState]], type[PatternState]]:
    """Class decorator registering the state for ``kind``."""

    def decorator(cls: type[PatternState]) -> type[PatternState]:
        if kind in _PATTERNS:
            raise ValueError(f"Duplicate pattern: {kind.value}")
        cls.kind = kind
        _PATTERNS[kind] = cls
        logger.debug("Registered pattern %s -> %s", kind.value, cls.__name__)
        return cls

    return decorator


def get_pattern(kind: PatternType | str) -> type[PatternState]:
    return _PATTERNS[PatternType(kind)]


def registered_patterns() -> dict[PatternType, type[PatternState]]:
    return dict(_PATTERNS)


def create_state(kind: PatternType | str, seed: int = 0, started_at: float = 0.0) -> PatternState:
    return get_pattern(kind)(seed=seed, started_at=started_at)
