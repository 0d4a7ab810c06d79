"""Tests for committing placements into a world store."""

import pytest

from archipelago.config import ArchipelagoConfig
from archipelago.generator import generate_archipelago
from archipelago.integration import DEFAULT_ACTOR_ID, commit_placements, remove_placements
from archipelago.types import BlockType, IslandType, Placement


class FakeWorldStore:
    """In-memory world store with a block ceiling."""

    def __init__(self, max_blocks: int = 1_000_000):
        self.max_blocks = max_blocks
        self.blocks: dict[tuple[int, int, int], BlockType] = {}
        self.actors: set[str] = set()

    def add_block(
        self, position: tuple[int, int, int], block_type: BlockType, actor_id: str
    ) -> bool:
        if len(self.blocks) >= self.max_blocks or position in self.blocks:
            return False
        self.blocks[position] = block_type
        self.actors.add(actor_id)
        return True

    def remove_block(self, position: tuple[int, int, int], actor_id: str) -> bool:
        return self.blocks.pop(position, None) is not None


def _placements(count: int) -> list[Placement]:
    return [
        Placement(x, 0, 0, BlockType.WOOD, "island_0", 1.0, 0.5, IslandType.TROPICAL)
        for x in range(count)
    ]


class TestCommitPlacements:
    """Tests for commit_placements."""

    def test_all_placed(self) -> None:
        """Every placement reaches an unlimited store."""
        store = FakeWorldStore()
        result = commit_placements(_placements(120), store)
        assert result.placed == 120
        assert result.rejected == 0
        assert result.complete
        assert store.blocks[(5, 0, 0)] == BlockType.WOOD
        assert store.actors == {DEFAULT_ACTOR_ID}

    def test_store_ceiling_rejects(self) -> None:
        """Blocks the store refuses are counted as rejected."""
        store = FakeWorldStore(max_blocks=30)
        result = commit_placements(_placements(100), store)
        assert result.placed == 30
        assert result.rejected == 70
        assert result.total == 100
        assert not result.complete

    def test_progress_reported_per_batch(self) -> None:
        """Progress is reported at start, after each batch and on completion."""
        events = []
        commit_placements(
            _placements(120),
            FakeWorldStore(),
            on_progress=lambda fraction, stage, detail: events.append((fraction, stage, detail)),
            batch_size=50,
        )
        assert [round(fraction, 3) for fraction, _, _ in events] == [0.0, 0.417, 0.833, 1.0, 1.0]
        assert events[1][2] == "50/120 blocks placed"
        assert events[-1][1] == "complete"

    def test_empty_placements(self) -> None:
        """Nothing to commit still completes."""
        events = []
        result = commit_placements([], FakeWorldStore(), on_progress=lambda *args: events.append(args))
        assert result.total == 0
        assert result.complete
        assert events[-1][0] == 1.0

    def test_invalid_batch_size(self) -> None:
        """Batch size must be positive."""
        with pytest.raises(ValueError):
            commit_placements(_placements(1), FakeWorldStore(), batch_size=0)

    def test_generated_archipelago_commits(self) -> None:
        """A generated archipelago commits cleanly since coordinates are unique."""
        config = ArchipelagoConfig(seed="commit", width=64, height=64, island_count=2)
        placements = generate_archipelago(config).placements
        store = FakeWorldStore()
        result = commit_placements(placements, store, actor_id="tester")
        assert result.placed == len(placements)
        assert store.actors <= {"tester"}


class TestRemovePlacements:
    """Tests for remove_placements."""

    def test_removes_committed_blocks(self) -> None:
        """Committed blocks are removed, missing ones are skipped."""
        store = FakeWorldStore()
        placements = _placements(10)
        commit_placements(placements[:6], store)
        assert remove_placements(placements, store) == 6
        assert store.blocks == {}
