"""Flowing shape contours: the default pattern."""

from __future__ import annotations

from metapattern.engine.params import PatternType
from metapattern.engine.patterns.base import RibbonState, RibbonStyle, pattern


@pattern(PatternType.CONTOUR)
class ContourState(RibbonState):
    style = RibbonStyle(
        points=70,
        min_streams=4,
        turns=2.5,
        radius=70.0,
        radius_noise=110.0,
        noise_step=4.0,
        wobble=(5.0, 35.0, 4.0, 25.0),
        flow=(7.0, 35.0, 6.0, 25.0),
        size_base=4.0,
        size_jitter=10.0,
    )
