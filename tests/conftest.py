"""Shared test fixtures for archipelago tests."""

from typing import Callable

import pytest

from archipelago.config import ArchipelagoConfig, LODLevel, MassiveArchipelagoConfig, NoiseConfig
from archipelago.layout import IslandSpec
from archipelago.noise import FractalNoise
from archipelago.rng import RandomSource
from archipelago.types import BlockType, IslandType, Pattern


@pytest.fixture
def scenario_config() -> ArchipelagoConfig:
    """Seed "test-1", circular pattern, 5 islands on a 128x128 grid."""
    return ArchipelagoConfig(
        seed="test-1",
        pattern=Pattern.CIRCULAR,
        island_count=5,
        width=128,
        height=128,
    )


@pytest.fixture
def small_massive_config() -> MassiveArchipelagoConfig:
    """128x128 world of 16 chunks, two islands, LOD covering everything."""
    return MassiveArchipelagoConfig(
        seed="massive-test",
        width=128,
        height=128,
        chunk_size=32,
        origin_x=-64,
        origin_z=-64,
        island_count_min=2,
        island_count_max=2,
        island_radius_min=25,
        island_radius_max=30,
        min_island_distance=10,
        candidate_attempts=5,
        lod_levels=[LODLevel(max_distance=10_000, block_density=1.0)],
    )


@pytest.fixture
def fractal() -> FractalNoise:
    """Fractal noise seeded from a fixed stream."""
    return FractalNoise(RandomSource(42))


@pytest.fixture
def make_island() -> Callable[..., IslandSpec]:
    """Factory for hand-built island specs."""

    def _make(
        island_id: str = "island_0",
        center_x: float = 16.0,
        center_z: float = 16.0,
        base_radius: int = 10,
        island_type: IslandType = IslandType.TEMPERATE,
        block_palette: tuple[BlockType, ...] = (
            BlockType.WOOD,
            BlockType.STONE,
            BlockType.LEAF,
        ),
        palette_weights: tuple[float, ...] | None = None,
        weight: float = 1.0,
        height_variation: float = 0.5,
    ) -> IslandSpec:
        return IslandSpec(
            island_id=island_id,
            center_x=center_x,
            center_z=center_z,
            base_radius=base_radius,
            height_variation=height_variation,
            island_type=island_type,
            noise=NoiseConfig(),
            block_palette=block_palette,
            palette_weights=palette_weights,
            weight=weight,
        )

    return _make
