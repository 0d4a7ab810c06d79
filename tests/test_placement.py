"""Tests for block placement emission."""

from typing import Callable

import numpy as np

from archipelago.biomes import classify_biomes, nearest_islands
from archipelago.heightfield import Grid, GridWindow
from archipelago.layout import IslandSpec
from archipelago.placement import emit_placements, select_block_type
from archipelago.rng import RandomSource
from archipelago.types import BlockType, IslandType

PALETTE = (BlockType.STONE, BlockType.WOOD, BlockType.LEAF)


class TestSelectBlockType:
    """Tests for palette selection."""

    def test_gradient_by_height(self, make_island: Callable[..., IslandSpec]) -> None:
        """Height picks the palette entry from low to high."""
        island = make_island(block_palette=PALETTE)
        rng = RandomSource(1)
        assert select_block_type(0.1, island, True, rng) == BlockType.STONE
        assert select_block_type(0.5, island, True, rng) == BlockType.WOOD
        assert select_block_type(0.9, island, True, rng) == BlockType.LEAF

    def test_gradient_clamps_height(self, make_island: Callable[..., IslandSpec]) -> None:
        """Heights outside 0-1 map to the first or last entry."""
        island = make_island(block_palette=PALETTE)
        rng = RandomSource(1)
        assert select_block_type(-0.3, island, True, rng) == BlockType.STONE
        assert select_block_type(1.0, island, True, rng) == BlockType.LEAF
        assert select_block_type(1.7, island, True, rng) == BlockType.LEAF

    def test_gradient_draws_nothing(self, make_island: Callable[..., IslandSpec]) -> None:
        """Gradient mode leaves the random stream untouched."""
        island = make_island(block_palette=PALETTE)
        rng = RandomSource(1)
        select_block_type(0.5, island, True, rng)
        assert rng.state == RandomSource(1).state

    def test_single_entry_palette_uses_draw(self, make_island: Callable[..., IslandSpec]) -> None:
        """Gradient mode needs two entries; one entry is drawn instead."""
        island = make_island(block_palette=(BlockType.NUMBER_7,))
        assert select_block_type(0.5, island, True, RandomSource(1)) == BlockType.NUMBER_7

    def test_random_mode_respects_weights(self, make_island: Callable[..., IslandSpec]) -> None:
        """Weighted draws never pick zero-weight entries."""
        island = make_island(block_palette=PALETTE, palette_weights=(0.0, 1.0, 0.0))
        rng = RandomSource(3)
        picks = {select_block_type(0.5, island, False, rng) for _ in range(100)}
        assert picks == {BlockType.WOOD}

    def test_random_mode_stays_in_palette(self, make_island: Callable[..., IslandSpec]) -> None:
        """Unweighted draws come from the island palette."""
        island = make_island(block_palette=PALETTE)
        rng = RandomSource(3)
        picks = {select_block_type(0.5, island, False, rng) for _ in range(200)}
        assert picks == set(PALETTE)


class TestEmitPlacements:
    """Tests for grid to placement conversion."""

    def _grid(self, island: IslandSpec, window: GridWindow) -> tuple[Grid, np.ndarray, np.ndarray]:
        grid = Grid.empty(window)
        grid.mask[:] = [[0.2, 0.31, 0.9], [0.3, 1.0, 0.0]]
        grid.height[:] = [[0.0, 0.1, 0.5], [0.2, 0.95, 0.0]]
        index, distance = nearest_islands([island], window)
        classify_biomes(grid, index)
        return grid, index, distance

    def test_threshold_and_scan_order(self, make_island: Callable[..., IslandSpec]) -> None:
        """Cells above 0.3 emit, row by row, at origin + grid coordinate."""
        island = make_island(center_x=0.0, center_z=0.0, block_palette=PALETTE)
        window = GridWindow(x0=0, z0=0, width=3, height=2)
        grid, index, distance = self._grid(island, window)
        placements = emit_placements(
            grid, [island], index, distance, -10, 100, 7, True, RandomSource(1)
        )
        assert [p.position for p in placements] == [(-9, 7, 100), (-8, 7, 100), (-9, 7, 101)]
        assert [p.block_type for p in placements] == [
            BlockType.STONE,
            BlockType.WOOD,
            BlockType.LEAF,
        ]

    def test_metadata(self, make_island: Callable[..., IslandSpec]) -> None:
        """Placements carry owner, distance, height and biome."""
        island = make_island(
            island_id="island_3",
            center_x=0.0,
            center_z=0.0,
            island_type=IslandType.VOLCANIC,
            block_palette=PALETTE,
        )
        window = GridWindow(x0=0, z0=0, width=3, height=2)
        grid, index, distance = self._grid(island, window)
        placement = emit_placements(
            grid, [island], index, distance, 0, 0, 0, True, RandomSource(1)
        )[-1]
        assert placement.island_id == "island_3"
        assert placement.biome == IslandType.VOLCANIC
        assert placement.height_value == 0.95
        assert placement.distance_from_center == np.sqrt(2.0)

    def test_window_offset(self, make_island: Callable[..., IslandSpec]) -> None:
        """Windowed grids emit global coordinates."""
        island = make_island(center_x=0.0, center_z=0.0, block_palette=PALETTE)
        window = GridWindow(x0=32, z0=64, width=3, height=2)
        grid, index, distance = self._grid(island, window)
        placements = emit_placements(
            grid, [island], index, distance, 0, 0, 0, True, RandomSource(1)
        )
        assert placements[0].position == (33, 0, 64)
