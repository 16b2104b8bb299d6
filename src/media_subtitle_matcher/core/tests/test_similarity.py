"""Tests for filename similarity measures."""

import pytest

from ..similarity import INFINITE, DistanceThreshold, edit_distance


class TestEditDistance:
    """Test cases for edit_distance."""

    @pytest.mark.parametrize(
        "left,right",
        [
            ("kitten", "sitting"),
            ("Show.S01E0", "Show.S01E"),
            ("", "abc"),
            ("字幕", "字幕组"),
            ("The.Movie.2019", "the movie 2019"),
        ],
    )
    def test_symmetric(self, left: str, right: str) -> None:
        """Test that distance does not depend on argument order."""
        assert edit_distance(left, right) == edit_distance(right, left)

    def test_zero_only_for_identical(self) -> None:
        """Test that only identical strings have zero distance."""
        assert edit_distance("Show.S01E", "Show.S01E") == 0
        assert edit_distance("Show.S01E", "Show.S01e") == 1
        assert edit_distance("", "") == 0

    def test_known_values(self) -> None:
        """Test textbook distances."""
        assert edit_distance("kitten", "sitting") == 3
        assert edit_distance("", "abc") == 3

    def test_counts_characters_not_bytes(self) -> None:
        """Test that multi-byte characters count once."""
        assert edit_distance("字幕", "字幕组") == 1


class TestDistanceThreshold:
    """Test cases for DistanceThreshold."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.threshold = DistanceThreshold(0.6)

    def test_strictly_below_bound(self) -> None:
        """Test that a distance equal to the bound is rejected."""
        # 0.6 x (4 + 6) == 6
        assert not self.threshold.accepts(6, "aaaa", "bbbbbb")
        assert self.threshold.accepts(5, "aaaa", "bbbbbb")

    def test_fractional_bound_not_truncated(self) -> None:
        """Test that a bound of 5.4 accepts a distance of 5."""
        assert self.threshold.accepts(5, "aaaa", "bbbbb")
        assert not self.threshold.accepts(6, "aaaa", "bbbbb")

    def test_infinite_rejected(self) -> None:
        """Test that the infinite sentinel is never accepted."""
        assert not self.threshold.accepts(INFINITE, "a" * 100, "b" * 100)

    def test_bound_is_exact_for_repeating_fractions(self) -> None:
        """Test that 0.6 x 15 is compared as exactly 9."""
        assert not self.threshold.accepts(9, "a" * 7, "b" * 8)
        assert self.threshold.accepts(8, "a" * 7, "b" * 8)
