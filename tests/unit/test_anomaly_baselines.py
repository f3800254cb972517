"""
Unit tests for baseline statistics.
"""

from math import isclose, sqrt

from metric_sentinel.anomaly.baselines import compute_baseline, compute_median
from metric_sentinel.anomaly.schema import BaselineStats


def test_population_std_dev():
    stats = compute_baseline([2, 4, 4, 4, 5, 5, 7, 9])

    assert stats.mean == 5.0
    assert stats.std_dev == 2.0  # divide by N, not N-1
    assert stats.count == 8


def test_even_count_median_averages_middle_values():
    stats = compute_baseline([4, 1, 3, 2])

    assert stats.median == 2.5
    assert isclose(stats.std_dev, sqrt(1.25), rel_tol=1e-9)


def test_odd_count_median():
    assert compute_median([3, 1, 2]) == 2


def test_empty_series_yields_zero_stats():
    stats = compute_baseline([])

    assert stats == BaselineStats(mean=0.0, std_dev=0.0, median=0.0, count=0)


def test_rounded_stats():
    stats = compute_baseline([10, 10, 10, 10, 10, 10, 10, 100]).rounded()

    assert stats.mean == 21.25
    assert stats.std_dev == 29.76
    assert stats.median == 10.0
    assert stats.count == 8
