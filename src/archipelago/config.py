"""Archipelago generation configuration models."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from .types import BlockType, IslandType, Pattern


class NoiseConfig(BaseModel):
    """Noise parameters shared by every island (and overridden per style)."""

    base_frequency: float = Field(default=1.0, description="Base terrain frequency")
    ridge_frequency: float = Field(default=2.0, description="Ridge noise frequency")
    erosion_frequency: float = Field(default=3.0, description="Erosion noise frequency")
    octaves: int = Field(default=4, description="Octaves of the base fBm")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    gain: float = Field(default=0.5, description="Amplitude multiplier per octave")
    ridge_offset: float = Field(
        default=1.0, description="Offset subtracted from |noise| in ridged layers"
    )
    erosion_strength: float = Field(
        default=0.3, description="How strongly erosion carves the coastline"
    )
    smoothing_passes: int = Field(
        default=3, description="Coastline smoothing passes (0 = default of 3)"
    )


class PatternParams(BaseModel):
    """Pattern-specific layout parameters."""

    radius: float | None = Field(
        default=None, description="Ring radius for circular (None = 0.3 * min side)"
    )
    direction: float = Field(default=0.0, description="Line angle in radians for linear")
    spiral_tightness: float = Field(default=0.5, description="Angle step (x pi) for spiral")
    cluster_density: float = Field(default=0.7, description="Disk scale for cluster")


def _default_biome_palettes() -> dict[IslandType, list[BlockType]]:
    return {
        IslandType.TROPICAL: [BlockType.LEAF, BlockType.WOOD, BlockType.STONE],
        IslandType.TEMPERATE: [BlockType.WOOD, BlockType.STONE, BlockType.LEAF],
        IslandType.VOLCANIC: [BlockType.STONE, BlockType.NUMBER_4, BlockType.NUMBER_6],
        IslandType.ARCTIC: [BlockType.FROSTED_GLASS, BlockType.STONE, BlockType.WOOD],
        IslandType.DESERT: [BlockType.NUMBER_5, BlockType.STONE, BlockType.WOOD],
        IslandType.MYSTICAL: [
            BlockType.NUMBER_7,
            BlockType.FROSTED_GLASS,
            BlockType.NUMBER_6,
        ],
    }


class PipelineConfig(BaseModel):
    """Settings shared by the standard and massive generators."""

    seed: int | str = Field(default="archipelago", description="Seed (int or text)")
    y_level: int = Field(default=0, description="Y coordinate of every placement")
    min_island_distance: float = Field(
        default=20, description="Required gap between island edges"
    )

    global_noise: NoiseConfig = Field(
        default_factory=lambda: NoiseConfig(
            base_frequency=0.8,
            ridge_frequency=1.5,
            erosion_frequency=2.0,
            erosion_strength=0.25,
            smoothing_passes=4,
        )
    )
    coastline_smoothing: float = Field(
        default=0.8, description="Smoothing strength of the first pass (0-1)"
    )
    island_blending: float = Field(
        default=0.9, description="Global multiplier on island influence (0-1)"
    )

    default_palette: list[BlockType] = Field(
        default_factory=lambda: [BlockType.STONE, BlockType.WOOD, BlockType.LEAF],
        description="Palette for styles without a biome palette",
    )
    biome_palettes: dict[IslandType, list[BlockType]] = Field(
        default_factory=_default_biome_palettes
    )
    palette_weights: dict[IslandType, list[float]] = Field(
        default_factory=dict,
        description="Optional draw weights per biome palette (random mode only)",
    )
    use_gradient_placement: bool = Field(
        default=True, description="Pick blocks by height instead of random draws"
    )

    def palette_for(self, island_type: IslandType) -> list[BlockType]:
        """Resolve the palette for a style, falling back to the default."""
        return self.biome_palettes.get(island_type) or self.default_palette


class ArchipelagoConfig(PipelineConfig):
    """Complete configuration of a single-grid archipelago."""

    pattern: Pattern = Field(default=Pattern.CIRCULAR)
    width: int = Field(default=256, description="Grid width in cells")
    height: int = Field(default=256, description="Grid height in cells")
    origin_x: int = Field(default=-128, description="World x of grid column 0")
    origin_z: int = Field(default=-128, description="World z of grid row 0")

    island_count: int = Field(default=5, description="Number of islands")
    min_island_radius: int = Field(default=25, description="Smallest base radius")
    max_island_radius: int = Field(default=45, description="Largest base radius")

    pattern_params: PatternParams = Field(default_factory=PatternParams)

    include_debug_grids: bool = Field(
        default=False, description="Attach height/mask/biome grids to the result"
    )


class LODLevel(BaseModel):
    """One level-of-detail band, keyed by distance from the focus point."""

    max_distance: float = Field(description="Chunks whose center is within this range")
    block_density: float = Field(
        default=1.0, description="Fraction of placements kept (0-1)"
    )


class MassiveArchipelagoConfig(PipelineConfig):
    """Configuration of a chunked, budget-filtered massive archipelago."""

    seed: int | str = Field(default="massive-archipelago")
    width: int = Field(default=2048, description="World width in cells")
    height: int = Field(default=2048, description="World height in cells")
    chunk_size: int = Field(default=32, description="Chunk edge length in cells")
    origin_x: int = Field(default=-1024, description="World x of column 0")
    origin_z: int = Field(default=-1024, description="World z of row 0")

    island_count_min: int = Field(default=5)
    island_count_max: int = Field(default=10)
    island_radius_min: int = Field(default=200)
    island_radius_max: int = Field(default=500)
    min_island_distance: float = Field(default=300)
    candidate_attempts: int = Field(
        default=20, description="Candidate positions tried per island"
    )

    lod_levels: list[LODLevel] = Field(
        default_factory=lambda: [
            LODLevel(max_distance=500, block_density=1.0),
            LODLevel(max_distance=1000, block_density=0.8),
            LODLevel(max_distance=2000, block_density=0.6),
        ]
    )
    lod_focus_x: float | None = Field(
        default=None, description="Grid x of the LOD focus (None = world center)"
    )
    lod_focus_z: float | None = Field(
        default=None, description="Grid z of the LOD focus (None = world center)"
    )

    block_budget: int | None = Field(
        default=None, description="Maximum placements returned (None = unlimited)"
    )
    max_cached_chunks: int = Field(default=500, description="LRU chunk cache capacity")
    max_world_cells: int = Field(
        default=4096 * 4096, description="Ceiling on width * height"
    )
    max_workers: int = Field(
        default=1, description="Threads for chunk generation (1 = sequential)"
    )


def load_config(config_path: Path) -> ArchipelagoConfig:
    """Load an archipelago configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed ArchipelagoConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return ArchipelagoConfig.model_validate(data)


def load_massive_config(config_path: Path) -> MassiveArchipelagoConfig:
    """Load a massive archipelago configuration from a TOML file."""
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return MassiveArchipelagoConfig.model_validate(data)
