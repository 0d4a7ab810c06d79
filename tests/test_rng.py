"""Tests for deterministic random number generation."""

import pytest

from archipelago.rng import (
    LCG_MODULUS,
    RandomSource,
    check_determinism,
    derive_stream,
    generate_sequence,
    hash_seed,
    to_int32,
)


class TestHashSeed:
    """Tests for seed hashing."""

    def test_integer_passes_through(self) -> None:
        """Integer seeds are used unchanged."""
        assert hash_seed(12345) == 12345

    def test_text_rolling_hash(self) -> None:
        """Text is hashed with h = h * 31 + code unit."""
        assert hash_seed("a") == 97
        assert hash_seed("ab") == 97 * 31 + 98

    def test_empty_text(self) -> None:
        """Empty text hashes to 0."""
        assert hash_seed("") == 0

    def test_long_text_is_non_negative_32_bit(self) -> None:
        """Long text wraps to 32 bits and stays non-negative."""
        value = hash_seed("a considerably longer seed string " * 10)
        assert 0 <= value <= 2**31

    def test_to_int32_wraps(self) -> None:
        """Values past the signed range wrap around."""
        assert to_int32(2**31) == -(2**31)
        assert to_int32(2**32 + 5) == 5
        assert to_int32(-1) == -1


class TestRandomSource:
    """Tests for the LCG random source."""

    def test_first_value_matches_lcg(self) -> None:
        """First draw follows (1664525 * s + 1013904223) mod 2^32."""
        source = RandomSource(1)
        assert source.next() == (1664525 + 1013904223) / LCG_MODULUS

    def test_same_seed_same_sequence(self) -> None:
        """Two sources with one seed produce identical draws."""
        first = RandomSource("island")
        second = RandomSource("island")
        assert [first.next() for _ in range(100)] == [second.next() for _ in range(100)]

    def test_different_seeds_differ(self) -> None:
        """Different seeds give different sequences."""
        assert generate_sequence("a", 10) != generate_sequence("b", 10)

    def test_values_in_unit_interval(self) -> None:
        """Every draw is in [0, 1)."""
        source = RandomSource(7)
        assert all(0.0 <= source.next() < 1.0 for _ in range(1000))

    def test_non_positive_seeds_are_normalized(self) -> None:
        """Zero behaves like 1, negatives like abs(seed) + 1."""
        assert RandomSource(0).state == 1
        assert RandomSource(-5).state == 6
        assert generate_sequence(0, 5) == generate_sequence(1, 5)

    def test_next_int_inclusive_bounds(self) -> None:
        """next_int stays within [lo, hi] and reaches both ends."""
        source = RandomSource(99)
        values = {source.next_int(1, 3) for _ in range(500)}
        assert values == {1, 2, 3}

    def test_next_int_single_value(self) -> None:
        """Equal bounds always return that value."""
        source = RandomSource(3)
        assert source.next_int(4, 4) == 4

    def test_next_int_inverted_bounds(self) -> None:
        """lo > hi is rejected."""
        with pytest.raises(ValueError):
            RandomSource(1).next_int(5, 2)

    def test_clone_continues_from_current_state(self) -> None:
        """Clone yields the same future draws, not a reset sequence."""
        source = RandomSource(11)
        source.next()
        source.next()
        clone = source.clone()
        assert [clone.next() for _ in range(5)] == [source.next() for _ in range(5)]

    def test_clone_is_independent(self) -> None:
        """Drawing from a clone does not advance the original."""
        source = RandomSource(11)
        clone = source.clone()
        clone.next()
        assert source.state != clone.state

    def test_reseed_restarts_sequence(self) -> None:
        """Reseeding matches a fresh source with that seed."""
        source = RandomSource(1)
        source.next()
        source.reseed("fresh")
        assert source.next() == RandomSource("fresh").next()


class TestPick:
    """Tests for uniform and weighted picking."""

    def test_empty_input(self) -> None:
        """Picking from nothing fails."""
        with pytest.raises(ValueError):
            RandomSource(1).pick([])

    def test_weight_count_mismatch(self) -> None:
        """Weights must match the item count."""
        with pytest.raises(ValueError):
            RandomSource(1).pick(["a", "b"], [1.0])

    def test_non_positive_total_weight(self) -> None:
        """Zero total weight fails."""
        with pytest.raises(ValueError):
            RandomSource(1).pick(["a", "b"], [0.0, 0.0])

    def test_uniform_pick_returns_member(self) -> None:
        """Uniform picks come from the input."""
        source = RandomSource(5)
        items = ["a", "b", "c"]
        assert all(source.pick(items) in items for _ in range(100))

    def test_weighted_pick_respects_zero_weights(self) -> None:
        """Items with zero weight are never chosen."""
        source = RandomSource(5)
        picks = {source.pick(["a", "b", "c"], [0.0, 0.0, 1.0]) for _ in range(200)}
        assert picks == {"c"}


class TestShuffle:
    """Tests for in-place shuffling."""

    def test_is_permutation(self) -> None:
        """Shuffle keeps every element."""
        items = list(range(50))
        RandomSource(8).shuffle_in_place(items)
        assert sorted(items) == list(range(50))
        assert items != list(range(50))

    def test_deterministic(self) -> None:
        """Same seed, same shuffle."""
        first = list(range(20))
        second = list(range(20))
        RandomSource("s").shuffle_in_place(first)
        RandomSource("s").shuffle_in_place(second)
        assert first == second


class TestDeriveStream:
    """Tests for labelled sub-streams."""

    def test_same_label_same_stream(self) -> None:
        """A (seed, label) pair always yields the same stream."""
        assert derive_stream("world", "noise").next() == derive_stream("world", "noise").next()

    def test_labels_are_independent(self) -> None:
        """Different labels give different streams."""
        noise = derive_stream("world", "noise")
        placement = derive_stream("world", "placement")
        assert [noise.next() for _ in range(5)] != [placement.next() for _ in range(5)]

    def test_differs_from_base_stream(self) -> None:
        """A derived stream is not the base seed's own stream."""
        assert derive_stream(42, "noise").next() != RandomSource(42).next()

    def test_matches_suffixed_text_seed(self) -> None:
        """Derived streams are seeded from "seed:label"."""
        assert derive_stream(42, "noise").next() == RandomSource("42:noise").next()


class TestHelpers:
    """Tests for sequence helpers."""

    def test_generate_sequence_length(self) -> None:
        """generate_sequence returns the requested number of draws."""
        assert len(generate_sequence("x", 17)) == 17

    def test_check_determinism(self) -> None:
        """Two sources from one seed always agree."""
        assert check_determinism("anything", iterations=200)
