"""Filename similarity measures used by the matchers."""

import math
from fractions import Fraction

from rapidfuzz.distance import Levenshtein

INFINITE = math.inf


def edit_distance(left: str, right: str) -> int:
    """
    Levenshtein distance between two strings, counted in characters.

    Example:
        >>> edit_distance("kitten", "sitting")
        3
    """
    return Levenshtein.distance(left, right)


class DistanceThreshold:
    """Accepts a distance only if it is below a fraction of the combined lengths."""

    def __init__(self, ratio: float = 0.6):
        """
        Initialize the threshold.

        Args:
            ratio: Fraction of the combined character lengths a distance must stay under
        """
        self.ratio = ratio
        # exact rational so that a distance sitting on the bound is rejected
        self._exact = Fraction(str(ratio))

    def accepts(self, distance: float, left: str, right: str) -> bool:
        """Check if a distance is strictly below ratio x (len(left) + len(right))."""
        if distance == INFINITE:
            return False
        return distance < self._exact * (len(left) + len(right))
