"""Tests for the seeded Perlin noise field."""

import numpy as np

from metapattern.engine.noise import PerlinNoise


def test_scalar_in_scalar_out():
    value = PerlinNoise(1)(0.3, 0.7, 0.1)
    assert isinstance(value, float)
    assert 0.0 <= value <= 1.0


def test_values_in_unit_range():
    noise = PerlinNoise(7)
    xs = np.linspace(-50, 50, 2000)
    values = noise(xs, xs * 0.5, 3.0)
    assert values.shape == (2000,)
    assert values.min() >= 0.0
    assert values.max() <= 1.0
    # not a constant field
    assert values.std() > 0.01


def test_same_seed_same_field():
    xs = np.linspace(0, 10, 50)
    assert np.array_equal(PerlinNoise(3)(xs, 1.0, 2.0), PerlinNoise(3)(xs, 1.0, 2.0))
    assert not np.array_equal(PerlinNoise(3)(xs, 1.0, 2.0), PerlinNoise(4)(xs, 1.0, 2.0))


def test_broadcasts_grids():
    gx, gy = np.meshgrid(np.arange(4) * 0.1, np.arange(3) * 0.1)
    assert PerlinNoise(0)(gx, gy, 0.0).shape == (3, 4)


def test_smooth_between_neighbours():
    noise = PerlinNoise(11)
    xs = np.linspace(0, 5, 5001)
    values = noise(xs, 0.25, 0.5)
    assert np.abs(np.diff(values)).max() < 0.05
