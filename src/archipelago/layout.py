"""Island layout planning: pattern placement, style tags, separation relaxation."""

import math
from dataclasses import dataclass

import structlog
from pydantic import BaseModel

from .config import ArchipelagoConfig, MassiveArchipelagoConfig, NoiseConfig, PatternParams, PipelineConfig
from .rng import RandomSource, to_int32
from .types import ISLAND_TYPE_ORDER, BlockType, IslandType, Pattern

logger = structlog.get_logger()

MAX_RELAXATION_ITERATIONS = 50
# Slack allowed when checking separation, absorbs float round-off after a push
SEPARATION_TOLERANCE = 1e-6


class IslandSpec(BaseModel, frozen=True):
    """Immutable description of one island, shared by every downstream stage."""

    island_id: str
    center_x: float
    center_z: float
    base_radius: int
    height_variation: float
    island_type: IslandType
    noise: NoiseConfig
    block_palette: tuple[BlockType, ...]
    palette_weights: tuple[float, ...] | None = None
    weight: float

    def distance_to(self, x: float, z: float) -> float:
        """Euclidean distance from the island center to (x, z)."""
        return math.sqrt((x - self.center_x) ** 2 + (z - self.center_z) ** 2)


@dataclass
class LayoutResult:
    """Planned islands plus how the separation relaxation went."""

    islands: list[IslandSpec]
    converged: bool
    iterations: int


def pattern_position(
    index: int,
    count: int,
    pattern: Pattern,
    params: PatternParams,
    width: int,
    height: int,
    rng: RandomSource,
) -> tuple[float, float]:
    """Compute an island center for a distribution pattern.

    All patterns except random and chain are centered on the grid midpoint.

    Args:
        index: Island index.
        count: Total number of islands.
        pattern: Distribution pattern.
        params: Pattern-specific parameters.
        width: Grid width.
        height: Grid height.
        rng: Layout random stream.

    Returns:
        (x, z) center in grid coordinates.
    """
    center_x = width / 2
    center_z = height / 2
    short_side = min(width, height)

    if pattern == Pattern.CIRCULAR:
        radius = params.radius or short_side * 0.3
        angle = (index / count) * math.pi * 2
        jitter = (rng.next() - 0.5) * radius * 0.2
        return (
            center_x + math.cos(angle) * (radius + jitter),
            center_z + math.sin(angle) * (radius + jitter),
        )

    if pattern == Pattern.LINEAR:
        spacing = short_side / (count + 1)
        offset = (index - (count - 1) / 2) * spacing
        jitter = (rng.next() - 0.5) * spacing * 0.3
        return (
            center_x + math.cos(params.direction) * (offset + jitter),
            center_z + math.sin(params.direction) * (offset + jitter),
        )

    if pattern == Pattern.SPIRAL:
        tightness = params.spiral_tightness or 0.5
        angle = index * tightness * math.pi
        radius = (index / count) * short_side * 0.4
        return (
            center_x + math.cos(angle) * radius,
            center_z + math.sin(angle) * radius,
        )

    if pattern == Pattern.CLUSTER:
        density = params.cluster_density or 0.7
        cluster_radius = short_side * 0.25 * density
        angle = rng.next() * math.pi * 2
        # sqrt keeps samples uniform over the disk area
        distance = math.sqrt(rng.next()) * cluster_radius
        return (
            center_x + math.cos(angle) * distance,
            center_z + math.sin(angle) * distance,
        )

    if pattern == Pattern.CHAIN:
        progress = index / (count - 1) if count > 1 else 0.5
        curve = math.sin(progress * math.pi * 2) * height * 0.2
        return (
            progress * width * 0.8 + width * 0.1,
            center_z + curve + (rng.next() - 0.5) * height * 0.1,
        )

    x = rng.next() * width * 0.8 + width * 0.1
    z = rng.next() * height * 0.8 + height * 0.1
    return (x, z)


def select_island_type(index: int, x: float, z: float) -> IslandType:
    """Pick a style tag from a hash of the position and index.

    No randomness is drawn, so a layout always yields the same biome for the
    same coordinates.
    """
    hashed = (
        to_int32(x * 73856093) ^ to_int32(z * 19349663) ^ to_int32(index * 83492791)
    ) & 0xFFFFFFFF
    return ISLAND_TYPE_ORDER[hashed % len(ISLAND_TYPE_ORDER)]


def resolve_island_noise(island_type: IslandType, base: NoiseConfig) -> NoiseConfig:
    """Apply the per-style overrides to the global noise parameters."""
    if island_type == IslandType.VOLCANIC:
        return base.model_copy(
            update={
                "ridge_frequency": base.ridge_frequency * 1.5,
                "erosion_strength": base.erosion_strength * 0.7,
                "octaves": base.octaves + 1,
            }
        )
    if island_type == IslandType.TROPICAL:
        return base.model_copy(
            update={
                "base_frequency": base.base_frequency * 0.8,
                "smoothing_passes": base.smoothing_passes + 1,
            }
        )
    if island_type == IslandType.ARCTIC:
        return base.model_copy(
            update={
                "erosion_strength": base.erosion_strength * 0.3,
                "smoothing_passes": base.smoothing_passes + 2,
            }
        )
    return base.model_copy()


def relax_positions(
    centers: list[list[float]],
    radii: list[int],
    min_distance: float,
    width: int,
    height: int,
    max_iterations: int = MAX_RELAXATION_ITERATIONS,
) -> tuple[bool, int]:
    """Push overlapping islands apart until they respect the minimum gap.

    Each violating pair moves apart by half the deficit along the line between
    their centers. Unlike unclamped relaxation, every move is clamped to the
    grid extent [0, width] x [0, height], so centers can end up exactly on an
    edge or corner, and impossible layouts stop at the iteration cap instead
    of drifting off the grid.

    Args:
        centers: Mutable [x, z] pairs, adjusted in place.
        radii: Base radius per island.
        min_distance: Required gap between island edges.
        width: Grid width.
        height: Grid height.
        max_iterations: Pass cap.

    Returns:
        Tuple of (converged, passes run).
    """
    count = len(centers)
    iterations = 0

    for _ in range(max_iterations):
        iterations += 1
        adjusted = False

        for i in range(count):
            for j in range(i + 1, count):
                first, second = centers[i], centers[j]
                dx = second[0] - first[0]
                dz = second[1] - first[1]
                distance = math.sqrt(dx * dx + dz * dz)
                required = min_distance + radii[i] + radii[j]

                if distance < required - SEPARATION_TOLERANCE:
                    push = (required - distance) / 2
                    angle = math.atan2(dz, dx)
                    first[0] = _clamp(first[0] - math.cos(angle) * push, 0.0, width)
                    first[1] = _clamp(first[1] - math.sin(angle) * push, 0.0, height)
                    second[0] = _clamp(second[0] + math.cos(angle) * push, 0.0, width)
                    second[1] = _clamp(second[1] + math.sin(angle) * push, 0.0, height)
                    adjusted = True

        if not adjusted:
            return True, iterations

    return _is_separated(centers, radii, min_distance), iterations


def _is_separated(centers: list[list[float]], radii: list[int], min_distance: float) -> bool:
    for i in range(len(centers)):
        for j in range(i + 1, len(centers)):
            distance = math.dist(centers[i], centers[j])
            if distance < min_distance + radii[i] + radii[j] - SEPARATION_TOLERANCE:
                return False
    return True


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class _IslandDraft:
    """Mutable island data before relaxation freezes it into an IslandSpec."""

    center: list[float]
    radius: int
    island_type: IslandType
    height_variation: float
    weight: float


def _draft(index: int, x: float, z: float, radius: int, rng: RandomSource) -> _IslandDraft:
    # Draw order matters for determinism: height variation, then weight
    return _IslandDraft(
        center=[x, z],
        radius=radius,
        island_type=select_island_type(index, x, z),
        height_variation=0.3 + rng.next() * 0.4,
        weight=0.8 + rng.next() * 0.4,
    )


def _freeze(drafts: list[_IslandDraft], config: PipelineConfig) -> list[IslandSpec]:
    islands = []
    for index, draft in enumerate(drafts):
        weights = config.palette_weights.get(draft.island_type)
        islands.append(
            IslandSpec(
                island_id=f"island_{index}",
                center_x=draft.center[0],
                center_z=draft.center[1],
                base_radius=draft.radius,
                height_variation=draft.height_variation,
                island_type=draft.island_type,
                noise=resolve_island_noise(draft.island_type, config.global_noise),
                block_palette=tuple(config.palette_for(draft.island_type)),
                palette_weights=tuple(weights) if weights else None,
                weight=draft.weight,
            )
        )
    return islands


def _relax_and_freeze(
    drafts: list[_IslandDraft],
    config: PipelineConfig,
    width: int,
    height: int,
) -> LayoutResult:
    converged, iterations = relax_positions(
        [draft.center for draft in drafts],
        [draft.radius for draft in drafts],
        config.min_island_distance,
        width,
        height,
    )
    if not converged:
        logger.warning(
            "relaxation_not_converged",
            islands=len(drafts),
            iterations=iterations,
            min_island_distance=config.min_island_distance,
        )
    return LayoutResult(
        islands=_freeze(drafts, config),
        converged=converged,
        iterations=iterations,
    )


def plan_layout(config: ArchipelagoConfig, rng: RandomSource) -> LayoutResult:
    """Plan island specs for a single-grid archipelago.

    Args:
        config: Validated archipelago configuration.
        rng: Layout random stream.

    Returns:
        LayoutResult with frozen island specs.
    """
    drafts = []
    for index in range(config.island_count):
        x, z = pattern_position(
            index,
            config.island_count,
            config.pattern,
            config.pattern_params,
            config.width,
            config.height,
            rng,
        )
        radius = rng.next_int(config.min_island_radius, config.max_island_radius)
        drafts.append(_draft(index, x, z, radius, rng))

    return _relax_and_freeze(drafts, config, config.width, config.height)


def plan_scattered_layout(
    config: MassiveArchipelagoConfig,
    rng: RandomSource,
) -> LayoutResult:
    """Plan island specs for a massive world.

    The island count is drawn from the configured range. Each center is the
    best of several candidate positions, scored by distance to the islands
    already placed.

    Args:
        config: Validated massive configuration.
        rng: Layout random stream.

    Returns:
        LayoutResult with frozen island specs.
    """
    count = rng.next_int(config.island_count_min, config.island_count_max)
    margin = config.island_radius_max
    x_lo = min(margin, config.width // 2)
    x_hi = max(x_lo, config.width - margin)
    z_lo = min(margin, config.height // 2)
    z_hi = max(z_lo, config.height - margin)

    drafts: list[_IslandDraft] = []
    for index in range(count):
        best: tuple[float, float] | None = None
        best_score = -1.0
        fallback: tuple[float, float] | None = None
        fallback_score = -1.0

        for _ in range(config.candidate_attempts):
            candidate = (float(rng.next_int(x_lo, x_hi)), float(rng.next_int(z_lo, z_hi)))
            score = _position_score(candidate, drafts)
            if score > fallback_score:
                fallback, fallback_score = candidate, score
            if score > best_score and score >= config.min_island_distance:
                best, best_score = candidate, score

        # Crowded worlds keep the farthest candidate and leave it to relaxation
        x, z = best or fallback or (config.width / 2, config.height / 2)
        radius = rng.next_int(config.island_radius_min, config.island_radius_max)
        drafts.append(_draft(index, x, z, radius, rng))

    return _relax_and_freeze(drafts, config, config.width, config.height)


def _position_score(position: tuple[float, float], drafts: list[_IslandDraft]) -> float:
    """Distance from a candidate to the nearest placed island."""
    if not drafts:
        return math.inf
    return min(math.dist(position, draft.center) for draft in drafts)
