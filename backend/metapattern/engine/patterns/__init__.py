"""Pattern states, one per PatternType; importing this package registers them all."""

from metapattern.engine.patterns.base import (
    PatternState,
    RibbonState,
    RibbonStyle,
    create_state,
    get_pattern,
    pattern,
    registered_patterns,
)
from metapattern.engine.patterns import bump, contour, legacy, wave  # noqa: F401

__all__ = [
    "PatternState",
    "RibbonState",
    "RibbonStyle",
    "create_state",
    "get_pattern",
    "pattern",
    "registered_patterns",
]
