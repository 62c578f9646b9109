"""Tests for HSB colours and the tint blend."""

import pytest

from metapattern.engine.color import (
    BASE_PALETTE,
    CONTOUR_PALETTE,
    NO_TINT,
    TINT_PALETTE,
    HSBColor,
    apply_tint,
    season_hue,
)


def test_from_hex():
    red = HSBColor.from_hex("#FF0000")
    assert (red.h, red.s, red.b) == (0, 100, 100)
    blue = HSBColor.from_hex("#002AFF")
    assert blue.h == pytest.approx(230.1, abs=0.1)
    assert HSBColor.from_hex("fff").s == 0
    with pytest.raises(ValueError):
        HSBColor.from_hex("#12345")


def test_to_rgba():
    assert HSBColor(0, 100, 100).to_rgba() == (255, 0, 0, 255)
    assert HSBColor(120, 100, 100, 50).to_rgba() == (0, 255, 0, 128)
    assert HSBColor(0, 0, 0).to_rgba() == (0, 0, 0, 255)


@pytest.mark.parametrize("tint", [None, "", NO_TINT, "#ffffff"])
def test_no_op_tint_leaves_colours_unchanged(tint):
    for color in BASE_PALETTE + CONTOUR_PALETTE:
        assert apply_tint(color, tint) == color


def test_tint_pulls_hue_along_shorter_arc():
    # 350 -> red (0): shorter arc crosses 360
    tinted = apply_tint(HSBColor(350, 50, 50), "#FF0000")
    assert tinted.h == pytest.approx(353)
    assert tinted.s == pytest.approx(70)
    assert tinted.b == pytest.approx(55)


def test_tint_caps_saturation_and_keeps_alpha():
    tinted = apply_tint(HSBColor(200, 95, 100, 40), "#002AFF")
    assert tinted.s == 100
    assert tinted.b == 100
    assert tinted.a == 40


def test_tint_is_not_idempotent():
    color = HSBColor(200, 50, 50)
    once = apply_tint(color, "#FD0004")
    assert apply_tint(once, "#FD0004") != once


def test_palettes():
    assert len(TINT_PALETTE) == 7
    assert TINT_PALETTE[3] == NO_TINT
    assert len(BASE_PALETTE) == 6
    assert season_hue("winter") == 200
    assert season_hue("autumn") == 20
    assert season_hue(None) == 40
