"""Small statistics helpers for response-time windows."""
from __future__ import annotations

from typing import Iterable, List, Sequence

__all__ = ["median", "accuracy"]


def median(values: Iterable[float]) -> float:
    """Return the median of ``values``.

    Values are sorted in descending order; an even-length window averages the
    two middle entries. The input is not mutated.

    Raises
    ------
    ValueError
        If ``values`` is empty.
    """

    ordered: List[float] = sorted((float(v) for v in values), reverse=True)
    n = len(ordered)
    if n == 0:
        raise ValueError("median() of an empty sequence")
    mid = n // 2
    if n % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2.0
    return ordered[mid]


def accuracy(correct: Sequence[int]) -> float:
    """Fraction of entries equal to 1. Raises ``ValueError`` when empty."""

    if not correct:
        raise ValueError("accuracy() of an empty sequence")
    return sum(1 for c in correct if c == 1) / float(len(correct))
