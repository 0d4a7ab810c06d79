"""Coastline smoothing of the composed height field."""

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .noise import lerp

DEFAULT_SMOOTHING_PASSES = 3

# 3x3 box kernel, center included
MEAN_KERNEL = np.full((3, 3), 1.0 / 9.0, dtype=np.float64)


def pass_strengths(strength: float, passes: int) -> list[float]:
    """Per-pass blend strengths, decaying linearly from ``strength`` toward 0."""
    return [strength * (1 - index / passes) for index in range(passes)]


def smooth_heightmap(
    height: NDArray[np.float64],
    strength: float,
    passes: int | None = None,
) -> NDArray[np.float64]:
    """Apply decaying 3x3 mean smoothing to a height field.

    Each pass reads the previous pass's result and blends the neighborhood
    mean into every interior cell. Row/column 0 and the last row/column are
    left as they are; there is no wraparound or reflection.

    A window cut from a larger grid with a halo of ``passes`` cells on each
    side gives the same interior values as smoothing the whole grid, since
    each pass spreads influence by one cell.

    Args:
        height: Height field, shape (rows, cols).
        strength: Blend strength of the first pass (0-1).
        passes: Number of passes; None or 0 uses the default of 3.

    Returns:
        New smoothed array; the input is not modified.
    """
    passes = passes or DEFAULT_SMOOTHING_PASSES
    result = np.array(height, dtype=np.float64, copy=True)
    if result.shape[0] < 3 or result.shape[1] < 3:
        return result

    for pass_strength in pass_strengths(strength, passes):
        mean = ndimage.convolve(result, MEAN_KERNEL, mode="constant", cval=0.0)
        interior = (slice(1, -1), slice(1, -1))
        smoothed = result.copy()
        smoothed[interior] = lerp(result[interior], mean[interior], pass_strength)
        result = smoothed

    return result
