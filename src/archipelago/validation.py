"""Semantic validation of generation configs, run before anything is allocated."""

import structlog

from .config import ArchipelagoConfig, MassiveArchipelagoConfig, PipelineConfig
from .exceptions import ConfigurationError
from .types import IslandType

logger = structlog.get_logger()

# Beyond this many islands the linear nearest-island scan gets slow
RECOMMENDED_MAX_ISLANDS = 12


class ValidationResult:
    """Result of config validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)

    def raise_for_errors(self) -> None:
        """Log warnings, then raise ConfigurationError if any check failed."""
        for warning in self.warnings:
            logger.warning("config_warning", detail=warning)
        if not self.passed:
            raise ConfigurationError("; ".join(self.errors))


def check_config(config: ArchipelagoConfig) -> ValidationResult:
    """Collect every problem with a single-grid config.

    Args:
        config: Config to check.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()
    _check_pipeline(config, result)

    _check_positive("width", config.width, result)
    _check_positive("height", config.height, result)
    if config.island_count < 1:
        result.add_error(f"island_count must be at least 1, got {config.island_count}")
    elif config.island_count > RECOMMENDED_MAX_ISLANDS:
        result.add_warning(
            f"island_count {config.island_count} exceeds {RECOMMENDED_MAX_ISLANDS}; "
            "generation will be slow"
        )
    _check_positive("min_island_radius", config.min_island_radius, result)
    _check_bounds("island radius", config.min_island_radius, config.max_island_radius, result)

    return result


def check_massive_config(config: MassiveArchipelagoConfig) -> ValidationResult:
    """Collect every problem with a massive config.

    The world-size ceiling is not checked here; it raises
    ResourceExhaustionError when the generator is built.
    """
    result = ValidationResult()
    _check_pipeline(config, result)

    _check_positive("width", config.width, result)
    _check_positive("height", config.height, result)
    _check_positive("chunk_size", config.chunk_size, result)
    if config.island_count_min < 1:
        result.add_error(
            f"island_count_min must be at least 1, got {config.island_count_min}"
        )
    _check_bounds("island count", config.island_count_min, config.island_count_max, result)
    _check_positive("island_radius_min", config.island_radius_min, result)
    _check_bounds(
        "island radius", config.island_radius_min, config.island_radius_max, result
    )
    _check_positive("candidate_attempts", config.candidate_attempts, result)
    _check_positive("max_cached_chunks", config.max_cached_chunks, result)
    _check_positive("max_workers", config.max_workers, result)
    if config.block_budget is not None:
        _check_positive("block_budget", config.block_budget, result)

    previous = 0.0
    for index, level in enumerate(config.lod_levels):
        if level.max_distance <= previous:
            result.add_error(
                f"lod_levels[{index}].max_distance must be positive and increasing"
            )
        if not 0.0 <= level.block_density <= 1.0:
            result.add_error(
                f"lod_levels[{index}].block_density must be within 0-1, "
                f"got {level.block_density}"
            )
        previous = level.max_distance

    return result


def validate_config(config: ArchipelagoConfig) -> None:
    """Raise ConfigurationError if a single-grid config is unusable."""
    check_config(config).raise_for_errors()


def validate_massive_config(config: MassiveArchipelagoConfig) -> None:
    """Raise ConfigurationError if a massive config is unusable."""
    check_massive_config(config).raise_for_errors()


def _check_pipeline(config: PipelineConfig, result: ValidationResult) -> None:
    """Checks shared by both generators: noise, blending and palettes."""
    noise = config.global_noise
    if noise.octaves <= 0:
        result.add_error(f"global_noise.octaves must be positive, got {noise.octaves}")
    if noise.smoothing_passes < 0:
        result.add_error(
            f"global_noise.smoothing_passes must not be negative, "
            f"got {noise.smoothing_passes}"
        )
    if not 0.0 <= config.coastline_smoothing <= 1.0:
        result.add_error(
            f"coastline_smoothing must be within 0-1, got {config.coastline_smoothing}"
        )
    if config.island_blending < 0.0:
        result.add_error(
            f"island_blending must not be negative, got {config.island_blending}"
        )
    if config.min_island_distance < 0:
        result.add_error(
            f"min_island_distance must not be negative, got {config.min_island_distance}"
        )

    if not config.default_palette:
        result.add_error("default_palette must not be empty")
    for island_type, palette in config.biome_palettes.items():
        if not palette:
            result.add_error(f"biome_palettes[{island_type.value}] must not be empty")

    for island_type, weights in config.palette_weights.items():
        _check_weights(config, island_type, weights, result)


def _check_weights(
    config: PipelineConfig,
    island_type: IslandType,
    weights: list[float],
    result: ValidationResult,
) -> None:
    palette = config.palette_for(island_type)
    if len(weights) != len(palette):
        result.add_error(
            f"palette_weights[{island_type.value}] has {len(weights)} weights "
            f"for {len(palette)} blocks"
        )
    elif any(weight < 0 for weight in weights) or sum(weights) <= 0:
        result.add_error(
            f"palette_weights[{island_type.value}] must be non-negative "
            "with a positive total"
        )


def _check_positive(name: str, value: int, result: ValidationResult) -> None:
    if value <= 0:
        result.add_error(f"{name} must be positive, got {value}")


def _check_bounds(name: str, lo: int, hi: int, result: ValidationResult) -> None:
    if lo > hi:
        result.add_error(f"{name} bounds are inverted: min {lo} > max {hi}")
