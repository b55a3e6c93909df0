"""Tests for linear regression."""

import pytest

from vismap.regression import linear_regression


class TestLinearRegression:
    def test_exact_line(self):
        data = [{"x": x, "y": 2 * x + 1} for x in range(10)]
        fit = linear_regression(data, "x", "y")
        assert fit.m == pytest.approx(2)
        assert fit.b == pytest.approx(1)
        assert fit(4) == pytest.approx(9)
        assert fit.predict({"x": 10}) == pytest.approx(21)

    def test_missing_values_are_skipped(self):
        data = [{"x": 0, "y": 0}, {"x": 1, "y": None}, {"x": 2, "y": 2}, {"x": None, "y": 7}]
        fit = linear_regression(data, "x", "y")
        assert fit.m == pytest.approx(1)
        assert fit.predict({"x": None}) is None

    @pytest.mark.parametrize("data", [
        [],
        [{"x": 1, "y": 1}],
        [{"x": 1, "y": 1}, {"x": 1, "y": 5}],
    ])
    def test_degenerate_input_raises(self, data):
        with pytest.raises(ValueError):
            linear_regression(data, "x", "y")
