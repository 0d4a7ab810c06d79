"""Chunked, level-of-detail aware generation of very large archipelagos."""

import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from .chunks import ChunkCache, ChunkResult, chunk_window, chunks_for_region
from .config import MassiveArchipelagoConfig
from .exceptions import CancelCheck, ResourceExhaustionError, raise_if_cancelled
from .generator import NOISE_STREAM, PLACEMENT_STREAM, synthesize_window
from .layout import IslandSpec, LayoutResult, plan_scattered_layout
from .noise import FractalNoise
from .rng import LCG_MODULUS, RandomSource, derive_stream, to_int32
from .smoothing import DEFAULT_SMOOTHING_PASSES
from .types import BlockType, IslandType, Placement
from .validation import validate_massive_config

logger = structlog.get_logger()

BASE_PRIORITY = 100.0
NON_STONE_BONUS = 25.0
FEATURED_BIOME_BONUS = 20.0
FEATURED_BIOMES = frozenset({IslandType.VOLCANIC, IslandType.MYSTICAL})
MAX_SIZE_BONUS = 50.0

# Rough footprints used for the memory estimate
PLACEMENT_BYTES = 200
GRID_CELL_BYTES = 18


@dataclass
class MassiveStats:
    """Statistics of one massive generation run."""

    island_count: int
    total_chunks: int
    generated_chunks: int
    deferred_chunks: int
    blocks_generated: int
    blocks_thinned: int
    blocks_kept: int
    blocks_filtered: int
    budget_reached: bool
    cache_hits: int
    cache_misses: int
    estimated_memory_mb: float
    generation_time_ms: float
    relaxation_converged: bool
    relaxation_iterations: int


@dataclass
class MassiveGenerationResult:
    """Result of massive generation: islands, budget-filtered placements, stats."""

    islands: list[IslandSpec]
    placements: list[Placement]
    stats: MassiveStats


def block_priority(placement: Placement, island: IslandSpec) -> float:
    """Rank a placement for budget filtering (higher is kept first).

    Args:
        placement: Candidate placement.
        island: Island that owns it.

    Returns:
        Priority score.
    """
    priority = BASE_PRIORITY
    priority += max(0.0, 100.0 - placement.distance_from_center / 10)
    if placement.block_type != BlockType.STONE:
        priority += NON_STONE_BONUS
    if placement.biome in FEATURED_BIOMES:
        priority += FEATURED_BIOME_BONUS
    priority += min(MAX_SIZE_BONUS, island.base_radius / 10)
    return priority


def position_fraction(x: int, z: int) -> float:
    """Hash a world position to a stable value in [0, 1)."""
    hashed = (to_int32(x * 73856093) ^ to_int32(z * 19349663)) & 0xFFFFFFFF
    return (hashed * 2654435761 % LCG_MODULUS) / LCG_MODULUS


def thin_placements(placements: list[Placement], density: float) -> list[Placement]:
    """Keep roughly ``density`` of the placements, chosen by position hash."""
    if density >= 1.0:
        return list(placements)
    return [p for p in placements if position_fraction(p.x, p.z) < density]


class MassiveArchipelagoGenerator:
    """Generates a massive archipelago chunk by chunk.

    The island layout is planned once on construction and shared read-only by
    every chunk. Generated chunks are kept in an LRU cache owned by this
    instance, so repeated and overlapping queries reuse work.
    """

    def __init__(self, config: MassiveArchipelagoConfig):
        validate_massive_config(config)
        cells = config.width * config.height
        if cells > config.max_world_cells:
            raise ResourceExhaustionError(cells, config.max_world_cells)

        self.config = config
        self.cache = ChunkCache(config.max_cached_chunks)
        self.layout: LayoutResult = plan_scattered_layout(config, RandomSource(config.seed))
        self._fractal = FractalNoise(derive_stream(config.seed, NOISE_STREAM))
        self._islands_by_id = {island.island_id: island for island in self.layout.islands}

        logger.info(
            "massive_layout_planned",
            seed=config.seed,
            width=config.width,
            height=config.height,
            islands=len(self.layout.islands),
            converged=self.layout.converged,
        )

    @property
    def islands(self) -> list[IslandSpec]:
        return self.layout.islands

    @property
    def chunk_count_x(self) -> int:
        """Number of chunks along x axis."""
        return (self.config.width + self.config.chunk_size - 1) // self.config.chunk_size

    @property
    def chunk_count_z(self) -> int:
        """Number of chunks along z axis."""
        return (self.config.height + self.config.chunk_size - 1) // self.config.chunk_size

    def all_chunks(self) -> list[tuple[int, int]]:
        """Every chunk of the world, row-major."""
        return [
            (cx, cz)
            for cz in range(self.chunk_count_z)
            for cx in range(self.chunk_count_x)
        ]

    def lod_density(self, chunk_x: int, chunk_z: int) -> float | None:
        """Placement density for a chunk, or None when the chunk is deferred.

        The distance is measured from the chunk center to the focus point
        (the world center unless configured). With no LOD levels every chunk
        is generated at full density.
        """
        levels = self.config.lod_levels
        if not levels:
            return 1.0

        size = self.config.chunk_size
        focus_x = self.config.lod_focus_x
        focus_z = self.config.lod_focus_z
        if focus_x is None:
            focus_x = self.config.width / 2
        if focus_z is None:
            focus_z = self.config.height / 2

        distance = math.dist(
            (chunk_x * size + size / 2, chunk_z * size + size / 2),
            (focus_x, focus_z),
        )
        for level in levels:
            if distance <= level.max_distance:
                return level.block_density
        return None

    def _build_chunk(
        self, key: tuple[int, int], cancel_check: CancelCheck | None
    ) -> ChunkResult:
        raise_if_cancelled(cancel_check, f"chunk {key}")
        chunk_x, chunk_z = key
        config = self.config
        window = chunk_window(chunk_x, chunk_z, config.width, config.height, config.chunk_size)
        # Per-chunk stream keeps random-mode draws independent of chunk order
        rng = derive_stream(config.seed, f"{PLACEMENT_STREAM}:{chunk_x}:{chunk_z}")
        _, placements = synthesize_window(
            self.layout.islands,
            self._fractal,
            config,
            window,
            config.width,
            config.height,
            config.origin_x,
            config.origin_z,
            rng,
        )
        return ChunkResult(chunk_x=chunk_x, chunk_z=chunk_z, window=window, placements=placements)

    def _load_chunks(
        self,
        keys: list[tuple[int, int]],
        cancel_check: CancelCheck | None,
    ) -> list[ChunkResult]:
        """Fetch chunks from the cache, generating the missing ones.

        Results come back in the order of ``keys`` whether or not a thread
        pool is used.
        """
        found: dict[tuple[int, int], ChunkResult] = {}
        missing = []
        for key in keys:
            cached = self.cache.get(key)
            if cached is None:
                missing.append(key)
            else:
                found[key] = cached

        # Chunks finished before a cancellation stay cached
        if self.config.max_workers > 1 and len(missing) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                for chunk in executor.map(
                    lambda key: self._build_chunk(key, cancel_check), missing
                ):
                    self.cache.put(chunk)
                    found[chunk.key] = chunk
        else:
            for key in missing:
                chunk = self._build_chunk(key, cancel_check)
                self.cache.put(chunk)
                found[key] = chunk

        return [found[key] for key in keys]

    def generate(self, cancel_check: CancelCheck | None = None) -> MassiveGenerationResult:
        """Generate the whole world under the LOD policy and block budget.

        Args:
            cancel_check: Optional predicate checked before each chunk.

        Returns:
            MassiveGenerationResult with the kept placements.

        Raises:
            GenerationCancelled: If cancel_check returned True.
        """
        start = time.perf_counter()
        config = self.config
        hits_before, misses_before = self.cache.hits, self.cache.misses

        active: list[tuple[tuple[int, int], float]] = []
        deferred = 0
        for key in self.all_chunks():
            density = self.lod_density(*key)
            if density is None:
                deferred += 1
            else:
                active.append((key, density))

        chunks = self._load_chunks([key for key, _ in active], cancel_check)

        generated = 0
        candidates: list[Placement] = []
        for chunk, (_, density) in zip(chunks, active):
            generated += len(chunk.placements)
            candidates.extend(thin_placements(chunk.placements, density))

        kept = self.apply_budget(candidates)
        elapsed_ms = (time.perf_counter() - start) * 1000

        stats = MassiveStats(
            island_count=len(self.layout.islands),
            total_chunks=self.chunk_count_x * self.chunk_count_z,
            generated_chunks=len(active),
            deferred_chunks=deferred,
            blocks_generated=generated,
            blocks_thinned=generated - len(candidates),
            blocks_kept=len(kept),
            blocks_filtered=len(candidates) - len(kept),
            budget_reached=config.block_budget is not None
            and len(candidates) >= config.block_budget,
            cache_hits=self.cache.hits - hits_before,
            cache_misses=self.cache.misses - misses_before,
            estimated_memory_mb=self.estimated_memory_mb(len(kept)),
            generation_time_ms=elapsed_ms,
            relaxation_converged=self.layout.converged,
            relaxation_iterations=self.layout.iterations,
        )

        logger.info(
            "massive_generation_complete",
            chunks=stats.generated_chunks,
            deferred=stats.deferred_chunks,
            generated=stats.blocks_generated,
            kept=stats.blocks_kept,
            budget_reached=stats.budget_reached,
            elapsed_ms=round(elapsed_ms, 1),
        )
        return MassiveGenerationResult(
            islands=self.layout.islands, placements=kept, stats=stats
        )

    def apply_budget(self, placements: list[Placement]) -> list[Placement]:
        """Truncate placements to the block budget, highest priority first.

        Under budget the scan order is kept. Over budget the list is sorted
        by priority; the sort is stable, so equal priorities keep scan order.
        """
        budget = self.config.block_budget
        if budget is None or len(placements) <= budget:
            return placements

        ranked = sorted(
            placements,
            key=lambda p: block_priority(p, self._islands_by_id[p.island_id]),
            reverse=True,
        )
        logger.info("block_budget_applied", candidates=len(placements), budget=budget)
        return ranked[:budget]

    def generate_region(
        self,
        x: int,
        z: int,
        width: int,
        height: int,
        cancel_check: CancelCheck | None = None,
    ) -> list[Placement]:
        """Full-density placements inside a rectangle of world coordinates.

        Chunks are served from the cache when present. LOD and the block
        budget do not apply to explicit region queries.

        Args:
            x, z: World coordinates of the region's top-left corner.
            width, height: Size of the region in cells.
            cancel_check: Optional predicate checked before each chunk.

        Returns:
            Placements in chunk order, row-major within each chunk.
        """
        grid_x = x - self.config.origin_x
        grid_z = z - self.config.origin_z
        keys = chunks_for_region(
            grid_x,
            grid_z,
            width,
            height,
            self.chunk_count_x,
            self.chunk_count_z,
            self.config.chunk_size,
        )
        placements = []
        for chunk in self._load_chunks(keys, cancel_check):
            placements.extend(
                p
                for p in chunk.placements
                if x <= p.x < x + width and z <= p.z < z + height
            )
        return placements

    def estimated_memory_mb(self, placements_held: int = 0) -> float:
        """Approximate memory held by the cache, a placement list and working grids."""
        passes = self.config.global_noise.smoothing_passes or DEFAULT_SMOOTHING_PASSES
        padded_edge = self.config.chunk_size + 2 * passes
        grid_bytes = padded_edge**2 * GRID_CELL_BYTES * self.config.max_workers
        placement_bytes = (self.cache.cached_placements() + placements_held) * PLACEMENT_BYTES
        return (grid_bytes + placement_bytes) / (1024 * 1024)
