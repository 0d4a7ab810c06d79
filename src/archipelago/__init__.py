"""Procedural archipelago generation.

This package synthesizes multi-island terrain for a voxel world: seeded
layout planning, noise-based height fields, coastline smoothing, biome
classification and block placement, plus a chunked variant for very large
worlds with level of detail and a block budget.
"""

from .chunks import ChunkCache, ChunkResult
from .config import (
    ArchipelagoConfig,
    LODLevel,
    MassiveArchipelagoConfig,
    NoiseConfig,
    PatternParams,
    load_config,
    load_massive_config,
)
from .exceptions import (
    ArchipelagoError,
    ConfigurationError,
    GenerationCancelled,
    ResourceExhaustionError,
)
from .generator import GenerationResult, GenerationStats, generate_archipelago
from .integration import CommitResult, WorldStore, commit_placements, remove_placements
from .layout import IslandSpec, LayoutResult, plan_layout, plan_scattered_layout
from .massive import MassiveArchipelagoGenerator, MassiveGenerationResult, MassiveStats
from .noise import FractalNoise, FractalParams, SimplexNoise2D
from .rng import RandomSource, derive_stream, hash_seed
from .types import BlockType, IslandType, Pattern, Placement
from .validation import ValidationResult, validate_config, validate_massive_config

__all__ = [
    # Types
    "BlockType",
    "IslandType",
    "Pattern",
    "Placement",
    # Config
    "ArchipelagoConfig",
    "MassiveArchipelagoConfig",
    "NoiseConfig",
    "PatternParams",
    "LODLevel",
    "load_config",
    "load_massive_config",
    "ValidationResult",
    "validate_config",
    "validate_massive_config",
    # Randomness and noise
    "RandomSource",
    "derive_stream",
    "hash_seed",
    "SimplexNoise2D",
    "FractalNoise",
    "FractalParams",
    # Layout
    "IslandSpec",
    "LayoutResult",
    "plan_layout",
    "plan_scattered_layout",
    # Generation
    "GenerationResult",
    "GenerationStats",
    "generate_archipelago",
    "MassiveArchipelagoGenerator",
    "MassiveGenerationResult",
    "MassiveStats",
    "ChunkCache",
    "ChunkResult",
    # Integration
    "CommitResult",
    "WorldStore",
    "commit_placements",
    "remove_placements",
    # Exceptions
    "ArchipelagoError",
    "ConfigurationError",
    "ResourceExhaustionError",
    "GenerationCancelled",
]
