"""Seeded improved Perlin noise, vectorised over numpy arrays.

Octaves are summed the way p5's ``noise()`` does it: each octave doubles
the frequency and multiplies the amplitude by ``falloff``. The sum is
normalised so every sample lies in [0, 1].
"""

from __future__ import annotations

import numpy as np

_PERIOD = 256


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(t: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _grad(h: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    h = h & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, z))
    return np.where(h & 1, -u, u) + np.where(h & 2, -v, v)


class PerlinNoise:
    """3-D gradient noise keyed by a seed; same seed gives the same field."""

    def __init__(self, seed: int = 0, octaves: int = 4, falloff: float = 0.5) -> None:
        self.seed = seed
        self.octaves = max(1, int(octaves))
        self.falloff = falloff
        perm = np.random.default_rng(seed).permutation(_PERIOD)
        self._perm = np.concatenate([perm, perm]).astype(np.int64)

    def _single(self, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        """One octave in roughly [-1, 1]."""
        fx, fy, fz = np.floor(x), np.floor(y), np.floor(z)
        xi = fx.astype(np.int64) & 255
        yi = fy.astype(np.int64) & 255
        zi = fz.astype(np.int64) & 255
        x, y, z = x - fx, y - fy, z - fz
        u, v, w = _fade(x), _fade(y), _fade(z)

        p = self._perm
        a = p[xi] + yi
        aa = p[a] + zi
        ab = p[a + 1] + zi
        b = p[xi + 1] + yi
        ba = p[b] + zi
        bb = p[b + 1] + zi

        return _lerp(
            w,
            _lerp(
                v,
                _lerp(u, _grad(p[aa], x, y, z), _grad(p[ba], x - 1, y, z)),
                _lerp(u, _grad(p[ab], x, y - 1, z), _grad(p[bb], x - 1, y - 1, z)),
            ),
            _lerp(
                v,
                _lerp(u, _grad(p[aa + 1], x, y, z - 1), _grad(p[ba + 1], x - 1, y, z - 1)),
                _lerp(u, _grad(p[ab + 1], x, y - 1, z - 1), _grad(p[bb + 1], x - 1, y - 1, z - 1)),
            ),
        )

    def __call__(self, x, y=0.0, z=0.0):
        """Sample at (x, y, z); scalars in give a float out, arrays give an array."""
        scalar = np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0
        x, y, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )

        total = np.zeros(x.shape, dtype=np.float64)
        amplitude, frequency, norm = 0.5, 1.0, 0.0
        for _ in range(self.octaves):
            sample = self._single(x * frequency, y * frequency, z * frequency)
            total += amplitude * (sample + 1.0) * 0.5
            norm += amplitude
            amplitude *= self.falloff
            frequency *= 2.0

        result = np.clip(total / norm, 0.0, 1.0)
        return float(result) if scalar else result
