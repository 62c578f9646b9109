"""Tests for click zones, drag thresholds and knobs."""

import pytest

from metapattern.engine.color import NO_TINT, TINT_PALETTE
from metapattern.engine.controls import (
    KNOBS,
    ClickZoneSelector,
    ControlPanel,
    DragThresholdSelector,
    tint_index,
)
from metapattern.engine.params import SELECTABLE_PATTERNS, ParameterStore, PatternType, RenderParameters


@pytest.fixture
def panel() -> ControlPanel:
    return ControlPanel(ParameterStore(RenderParameters(pattern_type=PatternType.WAVE)))


def test_click_zones():
    selector = ClickZoneSelector(SELECTABLE_PATTERNS)
    assert selector.select(0.1) == PatternType.WAVE
    assert selector.select(0.5) == PatternType.BUMP
    assert selector.select(0.9) == PatternType.CONTOUR
    assert selector.select(0.33) == PatternType.BUMP
    assert selector.select(0.66) == PatternType.CONTOUR
    assert selector.select(-1) == PatternType.WAVE
    assert selector.select(2) == PatternType.CONTOUR


def test_click_pattern_updates_store(panel):
    assert panel.click_pattern(0.5) == PatternType.BUMP
    assert panel.store.snapshot().pattern_type == PatternType.BUMP


def test_drag_threshold_step():
    selector = DragThresholdSelector(SELECTABLE_PATTERNS, 50)
    assert selector.step(0, 50) == 0
    assert selector.step(0, 51) == 1
    assert selector.step(0, 500) == 1
    assert selector.step(0, -80) == 0
    assert selector.step(2, 80) == 2


def test_drag_below_threshold_changes_nothing(panel):
    version = panel.store.version
    panel.press("pattern", 100, 10)
    assert panel.move(140, 10) is None
    assert panel.move(60, 10) is None
    assert panel.store.snapshot().pattern_type == PatternType.WAVE
    assert panel.store.version == version


def test_drag_crossing_threshold_advances_exactly_one_step(panel):
    panel.press("pattern", 100, 10)
    # one big jump, far past two thresholds
    assert panel.move(400, 10) == PatternType.BUMP
    assert panel.store.snapshot().pattern_type == PatternType.BUMP
    # origin re-anchored at 400: a small further move does nothing
    assert panel.move(420, 10) is None
    assert panel.store.snapshot().pattern_type == PatternType.BUMP
    # crossing again from the new origin takes the next step
    assert panel.move(460, 10) == PatternType.CONTOUR


def test_tint_drag_moves_down_the_strip(panel):
    panel.press("tint", 0, 100)
    assert panel.move(0, 120) is None
    assert panel.move(0, 140) == TINT_PALETTE[tint_index(NO_TINT) + 1]
    panel.release()

    panel.press("tint", 0, 100)
    assert panel.move(0, 60) == NO_TINT


def test_tint_index():
    assert tint_index(None) == 3
    assert tint_index("#fd0004") == 0
    assert tint_index("8015E8") == 6
    assert tint_index("#123456") == 3


def test_rotation_knob_dead_zone_and_clamp(panel):
    panel.press("rotation", 100, 100)
    assert panel.move(102, 100) is None
    assert panel.move(200, 100) == 15
    assert panel.move(10_000, 100) == 180
    assert panel.store.snapshot().rotation == 180


def test_scale_knob_up_increases(panel):
    panel.press("scale", 0, 200)
    assert panel.move(0, 100) == pytest.approx(2.5)
    assert panel.move(0, 300) == pytest.approx(0.1)
    panel.release()
    assert panel.drag is None


def test_zoom_knob_range(panel):
    panel.press("zoom", 0, 500)
    assert panel.move(0, 400) == pytest.approx(4.0)
    assert panel.move(0, -1000) == 5.0
    assert panel.move(0, 800) == 1.0


def test_knob_rounding():
    assert KNOBS["scale"].value_for(1.0, 0, 2) == 1.03
    assert KNOBS["rotation"].value_for(0.0, 7, 0) == 1.0
    assert KNOBS["animation_speed"].value_for(1.0, 0, 100) == 2.5


def test_move_without_press_is_ignored(panel):
    assert panel.move(10, 10) is None


def test_unknown_control(panel):
    with pytest.raises(ValueError):
        panel.press("frequency", 0, 0)


def test_click_ignored_while_dragging(panel):
    panel.press("zoom", 0, 0)
    assert panel.click_pattern(0.9) == PatternType.WAVE
