"""Core types for archipelago generation: block types, biomes, placements."""

from dataclasses import dataclass
from enum import Enum


class BlockType(str, Enum):
    """Block types a placement can carry."""

    STONE = "stone"
    LEAF = "leaf"
    WOOD = "wood"
    FROSTED_GLASS = "frosted_glass"
    NUMBER_4 = "number_4"
    NUMBER_5 = "number_5"
    NUMBER_6 = "number_6"
    NUMBER_7 = "number_7"


class IslandType(str, Enum):
    """Biome/style tag that drives an island's palette and noise character."""

    TROPICAL = "tropical"
    TEMPERATE = "temperate"
    VOLCANIC = "volcanic"
    ARCTIC = "arctic"
    DESERT = "desert"
    MYSTICAL = "mystical"


# Selection order for the position hash; must stay stable across releases
ISLAND_TYPE_ORDER: tuple[IslandType, ...] = (
    IslandType.TROPICAL,
    IslandType.TEMPERATE,
    IslandType.VOLCANIC,
    IslandType.ARCTIC,
    IslandType.DESERT,
    IslandType.MYSTICAL,
)


class Pattern(str, Enum):
    """Island distribution patterns."""

    CIRCULAR = "circular"
    LINEAR = "linear"
    SPIRAL = "spiral"
    CLUSTER = "cluster"
    CHAIN = "chain"
    RANDOM = "random"


@dataclass(frozen=True)
class Placement:
    """A single block placement emitted by the generator."""

    x: int
    y: int
    z: int
    block_type: BlockType
    island_id: str
    distance_from_center: float
    height_value: float
    biome: IslandType

    @property
    def position(self) -> tuple[int, int, int]:
        """Integer (x, y, z) coordinate."""
        return (self.x, self.y, self.z)
