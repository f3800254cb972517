"""
Baseline estimation over a bucketed metric series.

Population statistics (divide by N), matching how the z-score detector treats
the whole series as the reference population.
"""

from __future__ import annotations

from math import sqrt
from typing import Sequence

from .schema import BaselineStats


def compute_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_std_dev(values: Sequence[float], mean: float) -> float:
    """Population standard deviation around a precomputed mean."""
    if not values:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return sqrt(variance)


def compute_median(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def compute_baseline(values: Sequence[float]) -> BaselineStats:
    """
    Compute mean, population std dev and median.

    An empty series yields all-zero stats instead of raising; callers check
    the sample count against min_data_points before trusting the result.
    """
    values = [float(v) for v in values]
    mean = compute_mean(values)
    return BaselineStats(
        mean=mean,
        std_dev=compute_std_dev(values, mean),
        median=compute_median(values),
        count=len(values),
    )
