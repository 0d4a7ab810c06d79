"""Conversion of a classified grid into block placements."""

import math

import numpy as np
from numpy.typing import NDArray

from .heightfield import Grid
from .layout import IslandSpec
from .rng import RandomSource
from .types import BlockType, Placement

PLACEMENT_MASK_THRESHOLD = 0.3


def select_block_type(
    height_value: float,
    island: IslandSpec,
    use_gradient: bool,
    rng: RandomSource,
) -> BlockType:
    """Choose the block for one cell.

    Gradient mode maps the height (clamped to 0-1) onto the palette, low to
    high. It needs at least two palette entries; otherwise, and when gradient
    mode is off, the block is drawn from the island's palette with its
    optional weights.

    Args:
        height_value: Smoothed height of the cell.
        island: Island owning the cell.
        use_gradient: Whether gradient mode is enabled.
        rng: Placement random stream (only drawn from in random mode).

    Returns:
        Selected block type.
    """
    palette = island.block_palette
    if use_gradient and len(palette) > 1:
        clamped = min(1.0, max(0.0, height_value))
        index = math.floor(clamped * len(palette))
        return palette[min(index, len(palette) - 1)]

    return rng.pick(palette, island.palette_weights)


def emit_placements(
    grid: Grid,
    islands: list[IslandSpec],
    nearest_index: NDArray[np.int16],
    nearest_distance: NDArray[np.float64],
    origin_x: int,
    origin_z: int,
    y_level: int,
    use_gradient: bool,
    rng: RandomSource,
    threshold: float = PLACEMENT_MASK_THRESHOLD,
) -> list[Placement]:
    """Emit one placement per cell whose mask exceeds the threshold.

    Cells are visited in row-major order (z, then x) over the grid's window.
    World coordinates are ``origin + global grid coordinate``.

    Args:
        grid: Smoothed, classified grid.
        islands: Planned islands.
        nearest_index: Nearest island index per cell.
        nearest_distance: Distance to that island per cell.
        origin_x: World x of global grid column 0.
        origin_z: World z of global grid row 0.
        y_level: Y coordinate of every placement.
        use_gradient: Whether gradient block selection is enabled.
        rng: Placement random stream.
        threshold: Mask value a cell must exceed to emit.

    Returns:
        Placements in scan order.
    """
    window = grid.window
    placements = []

    rows, cols = np.nonzero(grid.mask > threshold)
    for row, col in zip(rows.tolist(), cols.tolist()):
        island = islands[int(nearest_index[row, col])]
        height_value = float(grid.height[row, col])
        placements.append(
            Placement(
                x=origin_x + window.x0 + col,
                y=y_level,
                z=origin_z + window.z0 + row,
                block_type=select_block_type(height_value, island, use_gradient, rng),
                island_id=island.island_id,
                distance_from_center=float(nearest_distance[row, col]),
                height_value=height_value,
                biome=island.island_type,
            )
        )

    return placements
