"""Custom exceptions for archipelago generation."""

from typing import Callable


class ArchipelagoError(Exception):
    """Base exception for archipelago generation errors."""

    pass


class ConfigurationError(ArchipelagoError):
    """Raised when a generation config is invalid.

    Always raised before any grid is allocated, so no partial result exists.
    """

    pass


class ResourceExhaustionError(ArchipelagoError):
    """Raised when a massive world exceeds the allowed cell budget."""

    def __init__(self, requested_cells: int, max_cells: int):
        self.requested_cells = requested_cells
        self.max_cells = max_cells
        super().__init__(
            f"World of {requested_cells:,} cells exceeds the ceiling of "
            f"{max_cells:,} cells"
        )


class GenerationCancelled(ArchipelagoError):
    """Raised when the caller's cancel check asks generation to stop."""

    pass


CancelCheck = Callable[[], bool]


def raise_if_cancelled(cancel_check: CancelCheck | None, stage: str) -> None:
    """Raise GenerationCancelled if the caller asked to stop.

    Args:
        cancel_check: Caller-supplied predicate, or None for no cancellation.
        stage: Label of the stage being checked, included in the message.
    """
    if cancel_check is not None and cancel_check():
        raise GenerationCancelled(f"Generation cancelled during {stage}")
