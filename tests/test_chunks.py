"""Tests for chunk coordinates and the chunk cache."""

from archipelago.chunks import (
    CHUNK_SIZE,
    ChunkCache,
    ChunkResult,
    chunk_coords,
    chunk_window,
    chunks_for_region,
    local_coords,
    world_coords,
)
from archipelago.heightfield import GridWindow


def _chunk(cx: int, cz: int) -> ChunkResult:
    return ChunkResult(
        chunk_x=cx,
        chunk_z=cz,
        window=GridWindow(x0=cx * CHUNK_SIZE, z0=cz * CHUNK_SIZE, width=CHUNK_SIZE, height=CHUNK_SIZE),
    )


class TestCoordinateConversion:
    """Tests for coordinate conversion functions."""

    def test_chunk_coords_origin(self) -> None:
        """Position (0,0) is in chunk (0,0)."""
        assert chunk_coords(0, 0) == (0, 0)

    def test_chunk_coords_boundaries(self) -> None:
        """Positions 0-31 are in chunk 0, 32 starts chunk 1."""
        assert chunk_coords(31, 31) == (0, 0)
        assert chunk_coords(32, 0) == (1, 0)
        assert chunk_coords(0, 32) == (0, 1)

    def test_custom_chunk_size(self) -> None:
        """Chunk size can be overridden."""
        assert chunk_coords(100, 200, chunk_size=64) == (1, 3)

    def test_local_coords(self) -> None:
        """Local coordinates are the offset within the chunk."""
        assert local_coords(33, 70) == (1, 6)

    def test_round_trip(self) -> None:
        """chunk + local converts back to the original position."""
        for x, z in [(0, 0), (31, 95), (1000, 7)]:
            cx, cz = chunk_coords(x, z)
            lx, lz = local_coords(x, z)
            assert world_coords(cx, cz, lx, lz) == (x, z)


class TestChunkWindow:
    """Tests for chunk windows."""

    def test_interior_chunk(self) -> None:
        """Interior chunks cover a full square."""
        assert chunk_window(1, 2, 128, 128) == GridWindow(x0=32, z0=64, width=32, height=32)

    def test_edge_chunk_clipped(self) -> None:
        """Chunks on the far edge are clipped to the grid."""
        assert chunk_window(2, 0, 80, 40) == GridWindow(x0=64, z0=0, width=16, height=32)


class TestChunksForRegion:
    """Tests for region to chunk mapping."""

    def test_single_chunk(self) -> None:
        """A region inside one chunk touches only that chunk."""
        assert chunks_for_region(5, 5, 10, 10, 4, 4) == [(0, 0)]

    def test_spanning_region_row_major(self) -> None:
        """A region crossing boundaries lists chunks row by row."""
        assert chunks_for_region(30, 30, 4, 4, 4, 4) == [(0, 0), (1, 0), (0, 1), (1, 1)]

    def test_clipped_to_world(self) -> None:
        """Chunks outside the world are not returned."""
        assert chunks_for_region(-50, 100, 100, 100, 4, 4) == [(0, 3), (1, 3)]

    def test_empty_region(self) -> None:
        """Zero-size regions touch nothing."""
        assert chunks_for_region(0, 0, 0, 10, 4, 4) == []


class TestChunkCache:
    """Tests for the LRU chunk cache."""

    def test_hit_and_miss_counters(self) -> None:
        """Lookups count hits and misses."""
        cache = ChunkCache(4)
        assert cache.get((0, 0)) is None
        cache.put(_chunk(0, 0))
        assert cache.get((0, 0)) is not None
        assert (cache.hits, cache.misses) == (1, 1)

    def test_evicts_least_recently_used(self) -> None:
        """A hit refreshes an entry so the older one is evicted."""
        cache = ChunkCache(2)
        cache.put(_chunk(0, 0))
        cache.put(_chunk(1, 0))
        cache.get((0, 0))
        cache.put(_chunk(2, 0))
        assert (1, 0) not in cache
        assert cache.keys() == [(0, 0), (2, 0)]

    def test_capacity_respected(self) -> None:
        """The cache never holds more than its capacity."""
        cache = ChunkCache(3)
        for cx in range(10):
            cache.put(_chunk(cx, 0))
        assert len(cache) == 3
        assert cache.keys() == [(7, 0), (8, 0), (9, 0)]

    def test_contains_does_not_count(self) -> None:
        """Membership checks leave the counters alone."""
        cache = ChunkCache(2)
        cache.put(_chunk(0, 0))
        assert (0, 0) in cache
        assert (cache.hits, cache.misses) == (0, 0)

    def test_clear(self) -> None:
        """Clearing drops entries and counters."""
        cache = ChunkCache(2)
        cache.put(_chunk(0, 0))
        cache.get((0, 0))
        cache.clear()
        assert len(cache) == 0
        assert cache.hits == 0
