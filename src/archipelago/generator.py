"""Main archipelago generation orchestration."""

import time
from dataclasses import dataclass, field

import structlog

from .biomes import biome_counts, classify_biomes, nearest_islands
from .config import ArchipelagoConfig, PipelineConfig
from .exceptions import CancelCheck, raise_if_cancelled
from .heightfield import Grid, GridWindow, compose_heightfield
from .layout import IslandSpec, plan_layout
from .noise import FractalNoise
from .placement import emit_placements
from .rng import RandomSource, derive_stream
from .smoothing import DEFAULT_SMOOTHING_PASSES, smooth_heightmap
from .types import IslandType, Placement
from .validation import validate_config

logger = structlog.get_logger()

NOISE_STREAM = "noise"
PLACEMENT_STREAM = "placement"


@dataclass
class GenerationStats:
    """Aggregate statistics of one generation run."""

    total_blocks: int
    island_sizes: dict[str, int]
    biome_distribution: dict[IslandType, int]
    coverage_area: float
    generation_time_ms: float
    relaxation_converged: bool
    relaxation_iterations: int


@dataclass
class GenerationResult:
    """Result of archipelago generation.

    grid is only set when the config asks for debug grids.
    """

    islands: list[IslandSpec]
    placements: list[Placement]
    stats: GenerationStats
    grid: Grid | None = field(default=None)


def synthesize_window(
    islands: list[IslandSpec],
    fractal: FractalNoise,
    config: PipelineConfig,
    window: GridWindow,
    world_width: int,
    world_height: int,
    origin_x: int,
    origin_z: int,
    rng: RandomSource,
    cancel_check: CancelCheck | None = None,
) -> tuple[Grid, list[Placement]]:
    """Run compose, smooth, classify and emit over one window of the world.

    The height field is composed over the window grown by one cell per
    smoothing pass, so windows tiling a world smooth exactly like the whole
    world would.

    Args:
        islands: Planned islands in global grid coordinates.
        fractal: Shared fractal noise source.
        config: Pipeline settings.
        window: Region to generate.
        world_width: Width of the whole grid, in cells.
        world_height: Height of the whole grid, in cells.
        origin_x: World x of global grid column 0.
        origin_z: World z of global grid row 0.
        rng: Placement random stream.
        cancel_check: Optional cooperative cancellation predicate.

    Returns:
        Tuple of (grid over the window, placements in scan order).
    """
    passes = config.global_noise.smoothing_passes or DEFAULT_SMOOTHING_PASSES
    padded = window.expanded(passes, world_width, world_height)

    grid = compose_heightfield(
        islands, fractal, padded, config.island_blending, cancel_check
    )

    raise_if_cancelled(cancel_check, "smoothing")
    grid.height = smooth_heightmap(grid.height, config.coastline_smoothing, passes)
    if padded != window:
        grid = grid.crop(window)

    raise_if_cancelled(cancel_check, "classification")
    nearest_index, nearest_distance = nearest_islands(islands, window)
    classify_biomes(grid, nearest_index)

    raise_if_cancelled(cancel_check, "placement")
    placements = emit_placements(
        grid,
        islands,
        nearest_index,
        nearest_distance,
        origin_x,
        origin_z,
        config.y_level,
        config.use_gradient_placement,
        rng,
    )
    return grid, placements


def compute_stats(
    islands: list[IslandSpec],
    placements: list[Placement],
    cell_count: int,
    generation_time_ms: float,
    relaxation_converged: bool,
    relaxation_iterations: int,
) -> GenerationStats:
    """Aggregate per-island and per-biome counts for a placement list.

    Every island appears in island_sizes, with 0 when it emitted nothing.
    """
    island_sizes = {island.island_id: 0 for island in islands}
    biome_distribution: dict[IslandType, int] = {}
    for placement in placements:
        island_sizes[placement.island_id] = island_sizes.get(placement.island_id, 0) + 1
        biome_distribution[placement.biome] = biome_distribution.get(placement.biome, 0) + 1

    return GenerationStats(
        total_blocks=len(placements),
        island_sizes=island_sizes,
        biome_distribution=biome_distribution,
        coverage_area=len(placements) / cell_count if cell_count else 0.0,
        generation_time_ms=generation_time_ms,
        relaxation_converged=relaxation_converged,
        relaxation_iterations=relaxation_iterations,
    )


def generate_archipelago(
    config: ArchipelagoConfig,
    cancel_check: CancelCheck | None = None,
) -> GenerationResult:
    """Generate a complete archipelago from configuration.

    The layout uses the seed's own stream; noise and placement draws come
    from sub-streams derived from the seed, so changing one never shifts
    the others.

    Args:
        config: Archipelago generation configuration.
        cancel_check: Optional predicate checked between stages and islands.

    Returns:
        GenerationResult with islands, placements and statistics.

    Raises:
        ConfigurationError: If the config is invalid (nothing is generated).
        GenerationCancelled: If cancel_check returned True.
    """
    start = time.perf_counter()
    validate_config(config)

    logger.info(
        "archipelago_generation_started",
        seed=config.seed,
        pattern=config.pattern.value,
        width=config.width,
        height=config.height,
        islands=config.island_count,
    )

    raise_if_cancelled(cancel_check, "layout")
    layout = plan_layout(config, RandomSource(config.seed))
    logger.info(
        "layout_planned",
        islands=len(layout.islands),
        converged=layout.converged,
        iterations=layout.iterations,
    )

    fractal = FractalNoise(derive_stream(config.seed, NOISE_STREAM))
    window = GridWindow(x0=0, z0=0, width=config.width, height=config.height)
    grid, placements = synthesize_window(
        layout.islands,
        fractal,
        config,
        window,
        config.width,
        config.height,
        config.origin_x,
        config.origin_z,
        derive_stream(config.seed, PLACEMENT_STREAM),
        cancel_check,
    )
    logger.debug("biomes_classified", cells=biome_counts(grid, layout.islands))

    elapsed_ms = (time.perf_counter() - start) * 1000
    stats = compute_stats(
        layout.islands,
        placements,
        config.width * config.height,
        elapsed_ms,
        layout.converged,
        layout.iterations,
    )

    logger.info(
        "archipelago_generation_complete",
        blocks=stats.total_blocks,
        coverage=round(stats.coverage_area, 4),
        elapsed_ms=round(elapsed_ms, 1),
    )

    return GenerationResult(
        islands=layout.islands,
        placements=placements,
        stats=stats,
        grid=grid if config.include_debug_grids else None,
    )
