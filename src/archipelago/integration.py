"""Committing generated placements into a caller's world store."""

import time
from dataclasses import dataclass
from typing import Callable, Protocol

import structlog

from .types import BlockType, Placement

logger = structlog.get_logger()

DEFAULT_ACTOR_ID = "archipelago-generator"
DEFAULT_BATCH_SIZE = 50

ProgressCallback = Callable[[float, str, str | None], None]


class WorldStore(Protocol):
    """Mutable block store owned by the embedding application.

    The store enforces its own block ceiling by returning False.
    """

    def add_block(
        self, position: tuple[int, int, int], block_type: BlockType, actor_id: str
    ) -> bool: ...

    def remove_block(self, position: tuple[int, int, int], actor_id: str) -> bool: ...


@dataclass
class CommitResult:
    """Outcome of pushing placements into a world store."""

    placed: int
    rejected: int
    total: int
    elapsed_ms: float

    @property
    def complete(self) -> bool:
        """True when the store accepted every placement."""
        return self.placed == self.total


def commit_placements(
    placements: list[Placement],
    store: WorldStore,
    on_progress: ProgressCallback | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    actor_id: str = DEFAULT_ACTOR_ID,
) -> CommitResult:
    """Add placements to a world store one at a time, reporting per batch.

    Rejected placements (the store returned False) are counted, not retried.

    Args:
        placements: Placements to commit, in order.
        store: Destination world store.
        on_progress: Optional callback receiving (fraction, stage, detail).
        batch_size: Placements per progress report.
        actor_id: Actor recorded by the store for each block.

    Returns:
        CommitResult with placed/rejected counts.

    Raises:
        ValueError: If batch_size is not positive.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    start = time.perf_counter()
    total = len(placements)
    placed = 0

    if on_progress:
        on_progress(0.0, "placing", f"Placing {total} blocks")

    for offset in range(0, total, batch_size):
        for placement in placements[offset : offset + batch_size]:
            if store.add_block(placement.position, placement.block_type, actor_id):
                placed += 1

        if on_progress:
            done = min(offset + batch_size, total)
            on_progress(done / total, "placing", f"{placed}/{total} blocks placed")

    elapsed_ms = (time.perf_counter() - start) * 1000
    if on_progress:
        on_progress(1.0, "complete", None)

    if placed < total:
        logger.warning("placements_rejected", placed=placed, total=total)
    logger.info("placements_committed", placed=placed, total=total)

    return CommitResult(
        placed=placed,
        rejected=total - placed,
        total=total,
        elapsed_ms=elapsed_ms,
    )


def remove_placements(
    placements: list[Placement],
    store: WorldStore,
    actor_id: str = DEFAULT_ACTOR_ID,
) -> int:
    """Remove previously committed placements; returns how many were removed."""
    removed = 0
    for placement in placements:
        if store.remove_block(placement.position, actor_id):
            removed += 1
    logger.info("placements_removed", removed=removed, total=len(placements))
    return removed
