"""Coherent noise for archipelago generation.

Provides 2D simplex noise built from a seeded permutation table, and fractal
summation variants: fBm (base terrain), ridged (mountain and coast ridges),
and billowy (erosion texture). Every function accepts scalars or numpy arrays.
"""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .rng import RandomSource

# 12 gradient directions; the permutation table selects one per lattice corner
GRADIENTS_2D = np.array(
    [
        [1, 1], [-1, 1], [1, -1], [-1, -1],
        [1, 0], [-1, 0], [1, 0], [-1, 0],
        [0, 1], [0, -1], [0, 1], [0, -1],
    ],
    dtype=np.float64,
)

# Skew/unskew factors for the 2D simplex lattice
F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0


def _as_output(values: NDArray[np.float64]) -> NDArray[np.float64] | float:
    """Return a Python float for scalar input, the array otherwise."""
    if values.ndim == 0:
        return float(values)
    return values


class SimplexNoise2D:
    """2D simplex noise with a permutation table drawn from a RandomSource."""

    def __init__(self, rng: RandomSource):
        base = list(range(256))
        rng.shuffle_in_place(base)

        # Duplicate to 512 entries so corner lookups never wrap mid-sum
        self._perm = np.array([base[i & 255] for i in range(512)], dtype=np.int64)
        self._perm_mod12 = self._perm % 12

    @property
    def permutation(self) -> NDArray[np.int64]:
        """The 512-entry permutation table."""
        return self._perm

    def noise(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64] | float:
        """Evaluate noise at (x, y).

        Args:
            x: X coordinates (scalar or array).
            y: Y coordinates, broadcastable against x.

        Returns:
            Noise values in [-1, 1], a float for scalar input.
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        # Skew input space to find the simplex cell
        s = (x + y) * F2
        i = np.floor(x + s)
        j = np.floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Lower triangle when x0 > y0, upper otherwise
        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        perm = self._perm
        mod12 = self._perm_mod12
        gi0 = mod12[(ii + perm[jj]) & 511]
        gi1 = mod12[(ii + i1 + perm[(jj + j1) & 511]) & 511]
        gi2 = mod12[(ii + 1 + perm[(jj + 1) & 511]) & 511]

        total = (
            _corner_contribution(x0, y0, gi0)
            + _corner_contribution(x1, y1, gi1)
            + _corner_contribution(x2, y2, gi2)
        )
        return _as_output(70.0 * total)


def _corner_contribution(
    dx: NDArray[np.float64],
    dy: NDArray[np.float64],
    gradient_index: NDArray[np.int64],
) -> NDArray[np.float64]:
    """Radially attenuated gradient contribution of one simplex corner."""
    t = 0.5 - dx * dx - dy * dy
    t = np.where(t < 0.0, 0.0, t)
    t2 = t * t
    gradients = GRADIENTS_2D[gradient_index]
    return t2 * t2 * (gradients[..., 0] * dx + gradients[..., 1] * dy)


@dataclass(frozen=True)
class FractalParams:
    """Parameters for fractal noise summation."""

    octaves: int = 4
    frequency: float = 1.0
    amplitude: float = 1.0
    lacunarity: float = 2.0
    gain: float = 0.5


class FractalNoise:
    """Fractal (multi-octave) sums of simplex noise."""

    def __init__(self, rng: RandomSource):
        self.simplex = SimplexNoise2D(rng)

    def _layers(self, x: NDArray[np.float64], y: NDArray[np.float64], params: FractalParams):
        """Yield (noise, amplitude) per octave.

        Non-positive octave counts are clamped to one; zero lacunarity or gain
        fall back to 2.0 and 0.5.
        """
        octaves = max(1, int(params.octaves))
        lacunarity = params.lacunarity or 2.0
        gain = params.gain or 0.5
        frequency = params.frequency
        amplitude = params.amplitude

        for _ in range(octaves):
            yield np.asarray(self.simplex.noise(x * frequency, y * frequency)), amplitude
            frequency *= lacunarity
            amplitude *= gain

    def _sum(self, x: ArrayLike, y: ArrayLike, params: FractalParams, shape) -> NDArray[np.float64] | float:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        value = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
        max_value = 0.0
        for layer, amplitude in self._layers(x, y, params):
            value = value + shape(layer) * amplitude
            max_value += amplitude

        if max_value == 0.0:
            return _as_output(np.zeros_like(value))
        return _as_output(value / max_value)

    def fbm(self, x: ArrayLike, y: ArrayLike, params: FractalParams) -> NDArray[np.float64] | float:
        """Fractal Brownian motion, normalized to [-1, 1].

        Args:
            x: X coordinates.
            y: Y coordinates.
            params: Octave/frequency/amplitude parameters.

        Returns:
            Noise values in [-1, 1].
        """
        return self._sum(x, y, params, lambda n: n)

    def ridged(
        self,
        x: ArrayLike,
        y: ArrayLike,
        params: FractalParams,
        offset: float = 1.0,
    ) -> NDArray[np.float64] | float:
        """Ridged noise: ``offset - |n|`` per layer gives sharp crests.

        Args:
            x: X coordinates.
            y: Y coordinates.
            params: Octave/frequency/amplitude parameters.
            offset: Value |noise| is subtracted from (controls ridge height).

        Returns:
            Noise values, in [0, 1] for the default offset.
        """
        return self._sum(x, y, params, lambda n: offset - np.abs(n))

    def billowy(self, x: ArrayLike, y: ArrayLike, params: FractalParams) -> NDArray[np.float64] | float:
        """Billowy noise: ``|n|`` per layer gives rounded, cloud-like shapes.

        Returns:
            Noise values in [0, 1].
        """
        return self._sum(x, y, params, np.abs)


def smoothstep(edge0: float, edge1: float, x: ArrayLike) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Edges may be given in decreasing order to get a falling curve.

    Args:
        edge0: Input mapped to 0.
        edge1: Input mapped to 1.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> NDArray[np.float64]:
    """Linear interpolation from a to b."""
    a = np.asarray(a, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)
    return a + (np.asarray(b, dtype=np.float64) - a) * t
