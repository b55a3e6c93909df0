"""Tests for the statistics engine."""

import math

import numpy as np
import pytest

from vismap.stats import Stats, attr_stats, finite_values, override_stats, pad_range, sigma_filter


def rows(*values):
    return [{"v": v} for v in values]


class TestAttrStats:
    def test_empty_input(self):
        stats = attr_stats([], "v")
        assert stats == Stats(count=0, na_count=0, min=0.0, max=0.0, range=0.0, sum=0.0,
                              mean=None, variance=None, stdev=None, median=None)

    def test_non_finite_values_are_counted_as_missing(self):
        data = rows(1, None, "3", math.nan, math.inf, True, 4) + [{}]
        stats = attr_stats(data, "v")
        assert stats.count == 2
        assert stats.na_count == 6
        assert stats.count + stats.na_count == len(data)
        assert stats.min == 1
        assert stats.max == 4
        assert stats.range == 3

    def test_sample_variance(self):
        stats = attr_stats(rows(2, 4, 4, 4, 5, 5, 7, 9), "v")
        assert stats.mean == pytest.approx(5)
        assert stats.sum == pytest.approx(40)
        assert stats.variance == pytest.approx(32 / 7)
        assert stats.stdev == pytest.approx(math.sqrt(32 / 7))

    def test_single_value_has_no_variance(self):
        stats = attr_stats(rows(7), "v")
        assert stats.count == 1
        assert stats.mean == 7
        assert stats.variance is None
        assert stats.stdev is None
        assert stats.median == 7

    def test_zero_variance_gives_zero_stdev(self):
        stats = attr_stats(rows(3, 3, 3), "v")
        assert stats.variance == 0.0
        assert stats.stdev == 0.0

    def test_median_odd_count(self):
        assert attr_stats(rows(3, 1, 2), "v").median == 2

    def test_median_even_count_averages_middle_pair(self):
        assert attr_stats(rows(4, 1, 3, 2), "v").median == 2.5

    def test_function_accessor_and_numpy_scalars(self):
        data = [np.float64(1.5), np.int64(2), np.float32(3.5)]
        stats = attr_stats(data, lambda d: d)
        assert stats.count == 3
        assert stats.sum == pytest.approx(7.0)

    def test_fields_are_plain_python_numbers(self):
        stats = attr_stats(rows(np.float32(1.5), 2, 7), "v")
        for name in ("min", "max", "range", "sum", "mean", "variance", "stdev", "median"):
            assert type(getattr(stats, name)) is float
        assert type(stats.count) is int

    def test_finite_values_marks_missing_as_nan(self):
        values = finite_values(rows(1, None, "x", 2.5), "v")
        assert values[0] == 1.0
        assert values[3] == 2.5
        assert np.isnan(values[1]) and np.isnan(values[2])

    @pytest.mark.parametrize("values", [
        [1, 2, 3],
        [0.1, 0.1, 0.1],
        [-5, 100, 3.25, 7],
        [1e9, 1e9 + 1, -1e9],
    ])
    def test_mean_between_min_and_max(self, values):
        stats = attr_stats(rows(*values), "v")
        tolerance = 1e-9 * max(1.0, abs(stats.max), abs(stats.min))
        assert stats.min - tolerance <= stats.mean <= stats.max + tolerance
        assert stats.na_count + stats.count == len(values)


class TestOverrides:
    def test_pinned_range_is_recomputed(self):
        stats = override_stats(attr_stats(rows(20, 30), "v"), {"min": 0, "max": 100})
        assert stats.min == 0
        assert stats.max == 100
        assert stats.range == 100

    def test_explicit_range_wins(self):
        stats = override_stats(attr_stats(rows(20, 30), "v"), {"min": 0, "range": 50})
        assert stats.range == 50

    def test_unknown_field_raises(self):
        with pytest.raises(ValueError):
            override_stats(Stats(), {"maximum": 3})

    def test_pad_range(self):
        padded = pad_range(attr_stats(rows(0, 10), "v"), 0.1)
        assert padded.min == pytest.approx(-1)
        assert padded.max == pytest.approx(11)
        assert padded.range == pytest.approx(12)


class TestSigmaFilter:
    def test_drops_outliers_and_missing_values(self):
        data = rows(1, 2, 3, 4, 100, None)
        kept = sigma_filter(data, "v", 1)
        assert [d["v"] for d in kept] == [1, 2, 3, 4]

    def test_no_spread_drops_everything(self):
        assert sigma_filter(rows(5, 5, 5), "v", 2) == []
