"""Deterministic random number generation for archipelago synthesis.

A linear congruential generator (Numerical Recipes constants) gives bit-identical
sequences on every platform. Text seeds are hashed to integers, and independent
sub-streams are derived from a base seed plus a label.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")

# Linear congruential generator constants
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32

Seed = int | str


def to_int32(value: float | int) -> int:
    """Wrap a number to a signed 32-bit integer (truncating toward zero)."""
    wrapped = int(value) % 2**32
    if wrapped >= 2**31:
        wrapped -= 2**32
    return wrapped


def hash_seed(seed: Seed) -> int:
    """Convert a seed to a non-negative integer.

    Text seeds use a polynomial rolling hash (h = h * 31 + c, wrapped to 32 bits)
    over UTF-16 code units. Integer seeds pass through unchanged.

    Args:
        seed: Integer or text seed.

    Returns:
        Integer seed.
    """
    if isinstance(seed, int):
        return seed

    encoded = seed.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = to_int32((h << 5) - h + code_unit)
    return abs(h)


def _normalize_state(value: int) -> int:
    """Seeds must be positive: zero and negatives map to abs(value) + 1."""
    if value <= 0:
        return abs(value) + 1
    return value


class RandomSource:
    """Seeded, reproducible pseudo-random generator.

    Two instances built from the same seed produce identical sequences.
    """

    def __init__(self, seed: Seed):
        self._state = _normalize_state(hash_seed(seed))

    @classmethod
    def _from_state(cls, state: int) -> "RandomSource":
        source = cls.__new__(cls)
        source._state = state
        return source

    @property
    def state(self) -> int:
        """Current internal state."""
        return self._state

    def next(self) -> float:
        """Return the next float in [0, 1)."""
        self._state = (LCG_MULTIPLIER * self._state + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def next_int(self, lo: int, hi: int) -> int:
        """Return an integer in [lo, hi] inclusive.

        Raises:
            ValueError: If lo > hi.
        """
        if lo > hi:
            raise ValueError(f"Invalid range: min ({lo}) > max ({hi})")
        span = hi - lo + 1
        return lo + int(self.next() * span)

    def pick(self, items: Sequence[T], weights: Sequence[float] | None = None) -> T:
        """Pick one item, uniformly or by weight.

        Args:
            items: Candidates to pick from.
            weights: Optional weights, one per item.

        Returns:
            The chosen item.

        Raises:
            ValueError: On empty input, a weight count mismatch, or a
                non-positive total weight.
        """
        if len(items) == 0:
            raise ValueError("Cannot pick from an empty sequence")

        if weights is None:
            return items[int(self.next() * len(items))]

        if len(weights) != len(items):
            raise ValueError(
                f"Got {len(weights)} weights for {len(items)} items"
            )
        total = sum(weights)
        if total <= 0:
            raise ValueError("Total weight must be positive")

        remaining = self.next() * total
        for item, weight in zip(items, weights):
            remaining -= weight
            if remaining <= 0:
                return item

        # Floating point leftovers land on the last item
        return items[-1]

    def shuffle_in_place(self, items: list) -> None:
        """Shuffle a list in place (Fisher-Yates, from the top)."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]

    def reseed(self, seed: Seed) -> None:
        """Reset the generator with a new seed."""
        self._state = _normalize_state(hash_seed(seed))

    def clone(self) -> "RandomSource":
        """Return an independent generator continuing from the current state."""
        return RandomSource._from_state(self._state)


def derive_stream(base_seed: Seed, label: str) -> RandomSource:
    """Derive an independent sub-stream from a base seed.

    The same (base_seed, label) pair always yields the same stream, and
    different labels do not share draws.

    Args:
        base_seed: Seed of the whole generation run.
        label: Name of the subsystem, e.g. "noise" or "placement".

    Returns:
        A new RandomSource.
    """
    return RandomSource(hash_seed(f"{base_seed}:{label}"))


def generate_sequence(seed: Seed, count: int) -> list[float]:
    """Draw the first ``count`` floats of a seed's stream."""
    source = RandomSource(seed)
    return [source.next() for _ in range(count)]


def check_determinism(seed: Seed, iterations: int = 1000) -> bool:
    """Check that two sources built from one seed agree for ``iterations`` draws."""
    first = RandomSource(seed)
    second = RandomSource(seed)
    return all(first.next() == second.next() for _ in range(iterations))
