"""PatternRenderer: draws one frame per call from a parameter snapshot.

The renderer never lets a frame failure escape: any exception is logged
and the frame is replaced by the fallback glyph, so the animation loop
keeps running.
"""

from __future__ import annotations

import logging

from PIL import Image

from metapattern.engine.canvas import Canvas, Size, resolve_canvas_size
from metapattern.engine.color import GLOW_COLOR, HSBColor
from metapattern.engine.params import RenderParameters
from metapattern.engine.patterns import PatternState, create_state

logger = logging.getLogger(__name__)

# Time advanced per frame at unit noise speed and unit animation speed.
TIME_STEP = 0.01

FALLBACK_DIAMETER = 50
FALLBACK_COLOR = HSBColor.from_hex("#FF0064")

# Central glow rings: radius 50 + 20 i, alpha 20 - 3 i.
_GLOW_RINGS = 5


class PatternRenderer:
    """Owns the canvas, the time accumulator and the active pattern state."""

    def __init__(self, size: Size | None = None) -> None:
        width, height = resolve_canvas_size(size)
        self.canvas = Canvas(width, height)
        self.time = 0.0
        self.frame_count = 0
        self.failed_frames = 0
        self.last_error: str | None = None
        self._state: PatternState | None = None
        self._last_size: Size = (width, height)

    @property
    def state(self) -> PatternState | None:
        return self._state

    @property
    def image(self) -> Image.Image:
        return self.canvas.image

    def state_for(self, params: RenderParameters) -> PatternState:
        """The active state, recreated when the pattern type or seed changes."""
        current = self._state
        if current is None or current.kind != params.pattern_type or current.seed != params.seed:
            self._state = create_state(params.pattern_type, seed=params.seed, started_at=self.time)
            logger.info("Pattern switched to %s (seed %d)", params.pattern_type.value, params.seed)
        return self._state

    def render_frame(self, params: RenderParameters) -> Image.Image:
        canvas = self.canvas
        try:
            if params.motion_blur > 0:
                canvas.fade(params.motion_blur)
            else:
                canvas.clear()

            self.time += params.noise_speed * TIME_STEP * params.animation_speed
            canvas.set_view(params.rotation, params.zoom)

            if params.central_glow:
                self.draw_central_glow()

            self.state_for(params).render(canvas, params, self.time)
        except Exception as e:
            self.failed_frames += 1
            self.last_error = str(e)
            logger.exception("Frame %d failed, drawing fallback", self.frame_count)
            self.draw_fallback()
        finally:
            canvas.reset_view()

        self.frame_count += 1
        return canvas.image

    def render(self, params: RenderParameters, frames: int = 1) -> Image.Image:
        """Render ``frames`` frames back to back and return the surface."""
        for _ in range(max(1, frames)):
            self.render_frame(params)
        return self.canvas.image

    def draw_central_glow(self) -> None:
        cx, cy = self.canvas.width / 2, self.canvas.height / 2
        for i in range(_GLOW_RINGS):
            radius = 50 + i * 20
            self.canvas.ellipse(cx, cy, radius * 2, GLOW_COLOR.with_alpha(20 - i * 3))

    def draw_fallback(self) -> None:
        self.canvas.reset_view()
        self.canvas.clear()
        self.canvas.ellipse(self.canvas.width / 2, self.canvas.height / 2, FALLBACK_DIAMETER, FALLBACK_COLOR)

    def resize(self, live: Size | None, last_known: Size | None = None) -> Size:
        """Resize the surface; the time accumulator and state are kept."""
        size = resolve_canvas_size(live, last_known or self._last_size)
        self.canvas.resize(*size)
        self._last_size = size
        return size
