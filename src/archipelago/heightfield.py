"""Height field composition: per-island noise terrain blended into one grid."""

import math
from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray

from .exceptions import CancelCheck, raise_if_cancelled
from .layout import IslandSpec
from .noise import FractalNoise, FractalParams, smoothstep

logger = structlog.get_logger()

# Sample spacing of the three noise layers, in noise units per grid cell
BASE_NOISE_SCALE = 0.01
RIDGE_NOISE_SCALE = 0.005
EROSION_NOISE_SCALE = 0.02

RIDGE_WEIGHT = 0.3
BASE_HEIGHT = 0.7


@dataclass(frozen=True)
class GridWindow:
    """A rectangle of global grid cells: columns x0.., rows z0.."""

    x0: int
    z0: int
    width: int
    height: int

    @property
    def x1(self) -> int:
        """Exclusive end column."""
        return self.x0 + self.width

    @property
    def z1(self) -> int:
        """Exclusive end row."""
        return self.z0 + self.height

    def expanded(self, pad: int, max_width: int, max_height: int) -> "GridWindow":
        """Grow by ``pad`` cells on every side, clipped to the world extent."""
        x0 = max(0, self.x0 - pad)
        z0 = max(0, self.z0 - pad)
        x1 = min(max_width, self.x1 + pad)
        z1 = min(max_height, self.z1 + pad)
        return GridWindow(x0=x0, z0=z0, width=x1 - x0, height=z1 - z0)


@dataclass
class Grid:
    """Parallel per-cell fields over a window, shape (height, width).

    biome holds an index into the island list, -1 where unclassified.
    """

    window: GridWindow
    height: NDArray[np.float64]
    mask: NDArray[np.float64]
    biome: NDArray[np.int16]

    @classmethod
    def empty(cls, window: GridWindow) -> "Grid":
        shape = (window.height, window.width)
        return cls(
            window=window,
            height=np.zeros(shape, dtype=np.float64),
            mask=np.zeros(shape, dtype=np.float64),
            biome=np.full(shape, -1, dtype=np.int16),
        )

    def crop(self, window: GridWindow) -> "Grid":
        """Return the sub-grid covering ``window`` (which must lie inside)."""
        rows = slice(window.z0 - self.window.z0, window.z1 - self.window.z0)
        cols = slice(window.x0 - self.window.x0, window.x1 - self.window.x0)
        return Grid(
            window=window,
            height=self.height[rows, cols].copy(),
            mask=self.mask[rows, cols].copy(),
            biome=self.biome[rows, cols].copy(),
        )


def island_height(
    x: NDArray[np.float64],
    z: NDArray[np.float64],
    distance: NDArray[np.float64],
    island: IslandSpec,
    fractal: FractalNoise,
) -> NDArray[np.float64]:
    """Terrain height of one island at the given cells.

    Combines base fBm, ridged crests and billowy erosion, then shapes the
    result with a linear radial falloff.

    Args:
        x: Global grid x of each cell.
        z: Global grid z of each cell.
        distance: Distance of each cell from the island center.
        island: Island being evaluated.
        fractal: Shared fractal noise source.

    Returns:
        Height per cell (roughly 0-1, not clamped).
    """
    noise = island.noise
    falloff = np.maximum(0.0, 1.0 - distance / island.base_radius)

    base = fractal.fbm(
        x * BASE_NOISE_SCALE,
        z * BASE_NOISE_SCALE,
        FractalParams(
            octaves=noise.octaves or 4,
            frequency=noise.base_frequency or 1.0,
            lacunarity=noise.lacunarity or 2.0,
            gain=noise.gain or 0.5,
        ),
    )
    ridge = fractal.ridged(
        x * RIDGE_NOISE_SCALE,
        z * RIDGE_NOISE_SCALE,
        FractalParams(octaves=2, frequency=noise.ridge_frequency or 2.0),
        offset=noise.ridge_offset,
    )
    erosion = fractal.billowy(
        x * EROSION_NOISE_SCALE,
        z * EROSION_NOISE_SCALE,
        FractalParams(octaves=3, frequency=noise.erosion_frequency or 3.0, gain=0.4),
    ) * noise.erosion_strength

    combined = base + RIDGE_WEIGHT * ridge - np.abs(erosion)
    return falloff * (BASE_HEIGHT + combined * island.height_variation)


def blend_weight(
    distance: NDArray[np.float64],
    radius: float,
    island_weight: float,
    island_blending: float,
) -> NDArray[np.float64]:
    """Influence of an island on cells at ``distance`` from its center.

    Smoothstep from 1 at the center to 0 at the radius, scaled by the island's
    own weight and the global blending factor.
    """
    falloff = smoothstep(radius, 0.0, distance)
    weight = falloff * island_weight * island_blending
    return np.where(distance >= radius, 0.0, weight)


def compose_heightfield(
    islands: list[IslandSpec],
    fractal: FractalNoise,
    window: GridWindow,
    island_blending: float,
    cancel_check: CancelCheck | None = None,
) -> Grid:
    """Blend every island into one height field and influence mask.

    Height is the weight-averaged island height; the mask is the summed weight
    saturated at 1. Cells no island reaches stay at height 0, mask 0. Only
    the window is allocated, and each cell's value depends on its global
    coordinates alone, so adjacent windows agree exactly.

    Args:
        islands: Planned islands in global grid coordinates.
        fractal: Shared fractal noise source.
        window: Region of the global grid to compose.
        island_blending: Global influence multiplier.
        cancel_check: Optional cooperative cancellation predicate.

    Returns:
        Grid with height and mask filled.
    """
    grid = Grid.empty(window)
    total_height = np.zeros_like(grid.height)
    total_weight = np.zeros_like(grid.mask)

    for island in islands:
        raise_if_cancelled(cancel_check, "heightfield")
        radius = island.base_radius

        # Cells at or beyond the radius carry zero weight and are skipped
        x_lo = max(window.x0, math.floor(island.center_x - radius))
        x_hi = min(window.x1 - 1, math.ceil(island.center_x + radius))
        z_lo = max(window.z0, math.floor(island.center_z - radius))
        z_hi = min(window.z1 - 1, math.ceil(island.center_z + radius))
        if x_lo > x_hi or z_lo > z_hi:
            continue

        xs, zs = np.meshgrid(
            np.arange(x_lo, x_hi + 1, dtype=np.float64),
            np.arange(z_lo, z_hi + 1, dtype=np.float64),
        )
        distance = np.sqrt((xs - island.center_x) ** 2 + (zs - island.center_z) ** 2)
        inside = distance < radius
        if not inside.any():
            continue

        cell_x = xs[inside]
        cell_z = zs[inside]
        cell_distance = distance[inside]

        heights = island_height(cell_x, cell_z, cell_distance, island, fractal)
        weights = blend_weight(cell_distance, radius, island.weight, island_blending)

        rows = cell_z.astype(np.int64) - window.z0
        cols = cell_x.astype(np.int64) - window.x0
        total_height[rows, cols] += heights * weights
        total_weight[rows, cols] += weights

    covered = total_weight > 0
    grid.height[covered] = total_height[covered] / total_weight[covered]
    grid.mask = np.minimum(1.0, total_weight)

    logger.debug(
        "heightfield_composed",
        window=(window.x0, window.z0, window.width, window.height),
        islands=len(islands),
        covered_cells=int(covered.sum()),
    )
    return grid
