"""Sinusoidal wave ribbons."""

from __future__ import annotations

from metapattern.engine.params import PatternType
from metapattern.engine.patterns.base import RibbonState, RibbonStyle, pattern


@pattern(PatternType.WAVE)
class WaveState(RibbonState):
    style = RibbonStyle(
        points=50,
        min_streams=2,
        turns=2.0,
        radius=80.0,
        radius_noise=120.0,
        noise_step=5.0,
        wobble=(6.0, 40.0, 4.0, 25.0),
        flow=(8.0, 30.0, 6.0, 20.0),
        size_base=3.0,
        size_jitter=8.0,
    )
