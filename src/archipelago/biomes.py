"""Nearest-island biome classification."""

import numpy as np
from numpy.typing import NDArray

from .heightfield import Grid, GridWindow
from .layout import IslandSpec

BIOME_MASK_THRESHOLD = 0.1


def nearest_islands(
    islands: list[IslandSpec],
    window: GridWindow,
) -> tuple[NDArray[np.int16], NDArray[np.float64]]:
    """Find the nearest island center for every cell of a window.

    Plain Euclidean distance over a linear scan of the island list. Ties go
    to the island that comes first in the list.

    Args:
        islands: Planned islands in global grid coordinates.
        window: Region of the global grid.

    Returns:
        Tuple of (island index, distance to that island's center), each of
        shape (window.height, window.width). With no islands the index is -1
        and the distance infinite.
    """
    shape = (window.height, window.width)
    nearest_index = np.full(shape, -1, dtype=np.int16)
    nearest_distance = np.full(shape, np.inf, dtype=np.float64)

    xs, zs = np.meshgrid(
        np.arange(window.x0, window.x1, dtype=np.float64),
        np.arange(window.z0, window.z1, dtype=np.float64),
    )
    for index, island in enumerate(islands):
        distance = np.sqrt((xs - island.center_x) ** 2 + (zs - island.center_z) ** 2)
        # Strict comparison keeps the earlier island on ties
        closer = distance < nearest_distance
        nearest_index[closer] = index
        nearest_distance[closer] = distance[closer]

    return nearest_index, nearest_distance


def classify_biomes(
    grid: Grid,
    nearest_index: NDArray[np.int16],
    threshold: float = BIOME_MASK_THRESHOLD,
) -> None:
    """Tag every cell with enough island influence with its nearest island.

    Writes ``grid.biome`` in place; cells at or below the threshold get -1.
    """
    grid.biome = np.where(grid.mask > threshold, nearest_index, -1).astype(np.int16)


def biome_counts(grid: Grid, islands: list[IslandSpec]) -> dict[str, int]:
    """Count classified cells per island style."""
    counts: dict[str, int] = {}
    indices, totals = np.unique(grid.biome[grid.biome >= 0], return_counts=True)
    for index, total in zip(indices, totals):
        island_type = islands[int(index)].island_type.value
        counts[island_type] = counts.get(island_type, 0) + int(total)
    return counts
