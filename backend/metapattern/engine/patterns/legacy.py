"""Legacy patterns reachable only through metadata mapping.

``bouncing``, ``static`` and ``topographic`` are stateless per frame;
``streams`` keeps persistent particles and ribbons that move under flow,
turbulence and damping.
"""

from __future__ import annotations

import numpy as np
from skimage import measure

from metapattern.engine.canvas import Canvas
from metapattern.engine.color import CONTOUR_PALETTE, HSBColor, apply_tint, palette_for
from metapattern.engine.params import PatternType, RenderParameters
from metapattern.engine.patterns.base import PatternState, RibbonState, RibbonStyle, pattern

_NOISE_OFFSET = 1000.0


@pattern(PatternType.BOUNCING)
class BouncingState(PatternState):
    """Grid displaced by noise along the alignment axis."""

    color = HSBColor(200, 80, 100, 90)

    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        spacing = max(10.0, 50 * (1 - params.density))
        gx, gy = np.meshgrid(np.arange(0, canvas.width, spacing), np.arange(0, canvas.height, spacing))
        nx = self.noise(gx * params.noise_scale, gy * params.noise_scale, t)
        ny = self.noise(gx * params.noise_scale + _NOISE_OFFSET, gy * params.noise_scale + _NOISE_OFFSET, t)

        if params.alignment == "horizontal":
            dx, dy = nx * 60 - 30, np.zeros_like(ny)
        elif params.alignment == "vertical":
            dx, dy = np.zeros_like(nx), ny * 60 - 30
        else:
            dx, dy = nx * 40 - 20, ny * 40 - 20

        sizes = self.rng.uniform(2, 8, gx.shape) * params.particle_size
        for x, y, size in zip((gx + dx).ravel(), (gy + dy).ravel(), sizes.ravel()):
            self.draw_point(canvas, params, float(x), float(y), float(size), self.color)


@pattern(PatternType.STATIC)
class StaticState(RibbonState):
    """Slow contour ribbons in the green palette."""

    style = RibbonStyle(
        points=60,
        min_streams=3,
        turns=1.5,
        radius=60.0,
        radius_noise=100.0,
        noise_step=3.0,
        wobble=(4.0, 30.0, 3.0, 20.0),
        flow=(6.0, 25.0, 5.0, 15.0),
        size_base=2.0,
        size_jitter=6.0,
    )
    spin = 0.05

    def palette(self, params: RenderParameters) -> tuple[HSBColor, ...]:
        return CONTOUR_PALETTE


@pattern(PatternType.TOPOGRAPHIC)
class TopographicState(PatternState):
    """Contour lines of a warped noise elevation map."""

    grid_px = 4
    levels = tuple(round(0.1 * i, 1) for i in range(10))
    line_color = HSBColor(0, 0, 100, 60)

    def elevation(self, width: int, height: int, noise_scale: float, t: float):
        cols = width // self.grid_px + 1
        rows = height // self.grid_px + 1
        gx, gy = np.meshgrid(np.arange(cols) * self.grid_px, np.arange(rows) * self.grid_px)
        nx, ny = gx * noise_scale, gy * noise_scale
        warp_x = self.noise(nx + 2000, ny + 2000, t * 0.1) * 3 - 1.5
        warp_y = self.noise(nx + 3000, ny + 3000, t * 0.1) * 3 - 1.5
        return self.noise(nx, ny, t * 0.3), warp_x, warp_y

    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        elevation, warp_x, warp_y = self.elevation(canvas.width, canvas.height, params.noise_scale, t)
        color = apply_tint(self.line_color, params.tint)
        max_row, max_col = elevation.shape[0] - 1, elevation.shape[1] - 1

        for level in self.levels:
            for contour in measure.find_contours(elevation, level):
                rows = contour[:, 0]
                cols = contour[:, 1]
                ri = np.clip(np.rint(rows).astype(int), 0, max_row)
                ci = np.clip(np.rint(cols).astype(int), 0, max_col)
                xs = cols * self.grid_px + warp_x[ri, ci]
                ys = rows * self.grid_px + warp_y[ri, ci]
                canvas.polyline(list(zip(xs.tolist(), ys.tolist())), color, width=1)


class Particles:
    """Struct-of-arrays particle system."""

    def __init__(self, rng: np.random.Generator, count: int, width: int, height: int, params: RenderParameters):
        palette = palette_for(params.iridescent_effect)
        self.rng = rng
        self.x = rng.uniform(0, width, count)
        self.y = rng.uniform(0, height, count)
        self.vx = rng.uniform(-2, 2, count)
        self.vy = rng.uniform(-2, 2, count)
        self.size = rng.uniform(2, 8, count) * params.particle_size
        picks = rng.integers(0, len(palette), count)
        self.hue = np.array([palette[i].h for i in picks], dtype=np.float64)
        self.sat = np.array([palette[i].s for i in picks], dtype=np.float64)
        self.bri = np.array([palette[i].b for i in picks], dtype=np.float64)
        self.life = np.zeros(count)
        self.max_life = rng.uniform(200, 500, count)

    def __len__(self) -> int:
        return len(self.x)

    def update(self, noise, t: float, params: RenderParameters, width: int, height: int) -> None:
        ns = params.noise_scale
        fi = params.flow_intensity
        flow_x = noise(self.x * ns, self.y * ns, t) * 2 * fi - fi
        flow_y = noise(self.x * ns + _NOISE_OFFSET, self.y * ns + _NOISE_OFFSET, t) * 2 * fi - fi
        turb_x = np.sin(t * 2 + self.x * 0.01) * params.turbulence
        turb_y = np.cos(t * 1.5 + self.y * 0.01) * params.turbulence

        self.vx = (self.vx + flow_x + turb_x) * 0.98
        self.vy = (self.vy + flow_y + turb_y) * 0.98
        self.x += self.vx
        self.y += self.vy
        _wrap(self.x, width)
        _wrap(self.y, height)

        self.life += 1
        expired = self.life > self.max_life
        if expired.any():
            n = int(expired.sum())
            self.life[expired] = 0
            self.x[expired] = self.rng.uniform(0, width, n)
            self.y[expired] = self.rng.uniform(0, height, n)

        if params.color_shift > 0:
            self.hue = (self.hue + params.color_shift * 0.1) % 360

    def colors(self) -> list[HSBColor]:
        alpha = self.life / self.max_life * 100
        return [
            HSBColor(float(h), float(s), float(b), float(a))
            for h, s, b, a in zip(self.hue, self.sat, self.bri, alpha)
        ]


class Ribbon:
    """A persistent stream of points, drawn as a connected line."""

    points = 50

    def __init__(self, index: int, total: int, noise, rng: np.random.Generator, width: int, height: int, params: RenderParameters):
        u = np.arange(self.points) / self.points
        angle = u * 2 * np.pi * 2 + index * (2 * np.pi / total)
        radius = 100 + noise(index, u * 5) * 150
        self.u = u
        self.x = width / 2 + np.cos(angle) * radius + np.sin(u * np.pi * 4) * 50
        self.y = height / 2 + np.sin(angle) * radius + np.cos(u * np.pi * 3) * 30
        self.size = rng.uniform(3, 12, self.points) * params.particle_size
        palette = palette_for(params.iridescent_effect)
        picks = rng.integers(0, len(palette), self.points)
        self.colors = [palette[i] for i in picks]

    def update(self, noise, t: float, params: RenderParameters, width: int, height: int) -> None:
        ns = params.noise_scale
        flow_x = np.sin(t * 2 + self.u * np.pi * 6) * params.flow_intensity * 30
        flow_y = np.cos(t * 1.5 + self.u * np.pi * 4) * params.flow_intensity * 20
        drift_x = noise(self.x * ns, self.y * ns, t) * 2 - 1
        drift_y = noise(self.x * ns + _NOISE_OFFSET, self.y * ns + _NOISE_OFFSET, t) * 2 - 1
        self.x += drift_x + flow_x
        self.y += drift_y + flow_y
        _wrap(self.x, width)
        _wrap(self.y, height)
        if params.color_shift > 0:
            shift = params.color_shift * 0.05
            self.colors = [HSBColor((c.h + shift) % 360, c.s, c.b, c.a) for c in self.colors]


def _wrap(values: np.ndarray, limit: float) -> None:
    values[values < 0] = limit
    values[values > limit] = 0


def _lerp_color(a: HSBColor, b: HSBColor, t: float) -> HSBColor:
    return HSBColor(a.h + (b.h - a.h) * t, a.s + (b.s - a.s) * t, a.b + (b.b - a.b) * t, a.a + (b.a - a.a) * t)


@pattern(PatternType.STREAMS)
class StreamsState(PatternState):
    """Persistent particles plus ribbon streams."""

    def __init__(self, seed: int = 0, started_at: float = 0.0) -> None:
        super().__init__(seed=seed, started_at=started_at)
        self.particles: Particles | None = None
        self.ribbons: list[Ribbon] = []

    def _populate(self, canvas: Canvas, params: RenderParameters) -> None:
        w, h = canvas.size
        total = max(1, int(params.stream_count))
        self.ribbons = [Ribbon(i, total, self.noise, self.rng, w, h, params) for i in range(total)]
        self.particles = Particles(self.rng, int(params.particle_count), w, h, params)

    def draw(self, canvas: Canvas, params: RenderParameters, t: float) -> None:
        if self.particles is None:
            self._populate(canvas, params)
        w, h = canvas.size

        for ribbon in self.ribbons:
            ribbon.update(self.noise, t, params, w, h)
            n = len(ribbon.colors)
            for i in range(n - 1):
                color = apply_tint(_lerp_color(ribbon.colors[i], ribbon.colors[i + 1], i / n), params.tint)
                x1, y1 = float(ribbon.x[i]), float(ribbon.y[i])
                canvas.line(x1, y1, float(ribbon.x[i + 1]), float(ribbon.y[i + 1]), color, width=ribbon.size[i] * 0.5)
                canvas.ellipse(x1, y1, float(ribbon.size[i]) * params.scale, color)

        self.particles.update(self.noise, t, params, w, h)
        for x, y, size, color in zip(self.particles.x, self.particles.y, self.particles.size, self.particles.colors()):
            self.draw_point(canvas, params, float(x), float(y), float(size), color)
