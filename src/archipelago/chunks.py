"""Chunk-based partitioning and caching for massive archipelagos."""

from collections import OrderedDict
from dataclasses import dataclass, field

import structlog

from .heightfield import GridWindow
from .types import Placement

logger = structlog.get_logger()

CHUNK_SIZE = 32


def chunk_coords(x: int, z: int, chunk_size: int = CHUNK_SIZE) -> tuple[int, int]:
    """Convert grid coordinates to chunk coordinates."""
    return (x // chunk_size, z // chunk_size)


def world_coords(
    chunk_x: int, chunk_z: int, local_x: int, local_z: int, chunk_size: int = CHUNK_SIZE
) -> tuple[int, int]:
    """Convert chunk + local offset to grid coordinates."""
    return (chunk_x * chunk_size + local_x, chunk_z * chunk_size + local_z)


def local_coords(x: int, z: int, chunk_size: int = CHUNK_SIZE) -> tuple[int, int]:
    """Convert grid coordinates to local coordinates within a chunk."""
    return (x % chunk_size, z % chunk_size)


def chunk_window(
    chunk_x: int, chunk_z: int, width: int, height: int, chunk_size: int = CHUNK_SIZE
) -> GridWindow:
    """Grid window covered by a chunk; edge chunks are clipped to the grid."""
    x0, z0 = world_coords(chunk_x, chunk_z, 0, 0, chunk_size)
    return GridWindow(
        x0=x0,
        z0=z0,
        width=min(chunk_size, width - x0),
        height=min(chunk_size, height - z0),
    )


def chunks_for_region(
    x: int,
    z: int,
    width: int,
    height: int,
    count_x: int,
    count_z: int,
    chunk_size: int = CHUNK_SIZE,
) -> list[tuple[int, int]]:
    """Return chunk coordinates that overlap a rectangle of grid cells.

    Args:
        x, z: Top-left corner of the region in grid coordinates.
        width, height: Size of the region in cells.
        count_x, count_z: Number of chunks along each axis.
        chunk_size: Chunk edge length.

    Returns:
        List of (chunk_x, chunk_z) tuples in row-major order.
    """
    if width <= 0 or height <= 0:
        return []
    start_cx = max(0, x // chunk_size)
    start_cz = max(0, z // chunk_size)
    end_cx = min(count_x, (x + width - 1) // chunk_size + 1)
    end_cz = min(count_z, (z + height - 1) // chunk_size + 1)

    chunks = []
    for cz in range(start_cz, end_cz):
        for cx in range(start_cx, end_cx):
            chunks.append((cx, cz))
    return chunks


@dataclass
class ChunkResult:
    """Full-density placements generated for one chunk."""

    chunk_x: int
    chunk_z: int
    window: GridWindow
    placements: list[Placement] = field(default_factory=list)

    @property
    def key(self) -> tuple[int, int]:
        return (self.chunk_x, self.chunk_z)


class ChunkCache:
    """Fixed-capacity LRU cache of generated chunks.

    Owned by one generator session; nothing is shared between sessions.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._entries: OrderedDict[tuple[int, int], ChunkResult] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[int, int]) -> bool:
        return key in self._entries

    def get(self, key: tuple[int, int]) -> ChunkResult | None:
        """Look up a chunk, marking it most recently used on a hit."""
        chunk = self._entries.get(key)
        if chunk is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return chunk

    def put(self, chunk: ChunkResult) -> None:
        """Store a chunk, evicting the least recently used beyond capacity."""
        self._entries[chunk.key] = chunk
        self._entries.move_to_end(chunk.key)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("chunk_evicted", chunk=evicted)

    def keys(self) -> list[tuple[int, int]]:
        """Cached chunk keys, least recently used first."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop every cached chunk and reset the counters."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def cached_placements(self) -> int:
        """Total placements held across cached chunks."""
        return sum(len(chunk.placements) for chunk in self._entries.values())
