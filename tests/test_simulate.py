# tests/test_simulate.py
"""
Tests for ARMA simulation and contaminated innovations.
"""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from rarma.core.exceptions import DimensionError, ParameterError
from rarma.models.time_series.simulate import (
    generate_innovations_with_outliers, is_invertible, is_stationary, simulate_arma
)


class TestRootChecks:
    """Tests for stationarity and invertibility checks."""

    @pytest.mark.parametrize("phi, expected", [
        ([], True),
        ([0.5], True),
        ([-0.99], True),
        ([1.0], False),
        ([1.2], False),
        ([0.5, 0.3], True),
        ([0.5, 0.6], False),
    ])
    def test_is_stationary(self, phi, expected):
        assert is_stationary(phi) is expected

    @pytest.mark.parametrize("theta, expected", [
        ([], True),
        ([0.5], True),
        ([-1.5], False),
        ([0.2, -0.4], True),
    ])
    def test_is_invertible(self, theta, expected):
        assert is_invertible(theta) is expected

    @given(phi=st.floats(min_value=-0.95, max_value=0.95))
    @settings(max_examples=25, deadline=None)
    def test_ar1_stationary_inside_unit_interval(self, phi):
        assert is_stationary([phi])


class TestSimulateARMA:
    """Tests for path simulation."""

    def test_length_and_reproducibility(self):
        a = simulate_arma([0.5], [0.3], mu=1.0, n=200, seed=5)
        b = simulate_arma([0.5], [0.3], mu=1.0, n=200, seed=5)
        assert a.shape == (200,)
        np.testing.assert_array_equal(a, b)

    def test_moments(self):
        y = simulate_arma([0.5], [], mu=3.0, n=20000, seed=6)
        assert np.mean(y) == pytest.approx(3.0, abs=0.1)
        assert np.var(y) == pytest.approx(1.0 / (1.0 - 0.25), rel=0.1)

    def test_given_innovations(self):
        e = np.zeros(60)
        y = simulate_arma([0.5], [0.2], mu=2.0, n=50, burn_in=10, innovations=e)
        np.testing.assert_allclose(y, 2.0)

    def test_white_noise(self):
        e = np.arange(30.0)
        y = simulate_arma([], [], mu=1.0, n=20, burn_in=10, innovations=e)
        np.testing.assert_allclose(y, 1.0 + e[10:])

    def test_innovations_wrong_length(self):
        with pytest.raises(DimensionError):
            simulate_arma([0.5], [], n=50, burn_in=10, innovations=np.zeros(50))

    def test_non_stationary(self):
        with pytest.raises(ParameterError):
            simulate_arma([1.1], [], n=50)

    def test_non_invertible(self):
        with pytest.raises(ParameterError):
            simulate_arma([0.5], [2.0], n=50)

    @pytest.mark.parametrize("n", [0, -5])
    def test_invalid_length(self, n):
        with pytest.raises(ParameterError):
            simulate_arma([0.5], [], n=n)


class TestInnovationsWithOutliers:
    """Tests for contaminated innovations."""

    def test_number_of_outliers(self):
        clean = np.random.default_rng(8).standard_normal(1000)
        e = generate_innovations_with_outliers(1000, 0.1, 5.0, seed=8)
        shifted = np.abs(e - clean) > 1e-12
        assert shifted.sum() == 100
        np.testing.assert_allclose(np.abs((e - clean)[shifted]), 5.0)

    def test_no_contamination(self):
        e = generate_innovations_with_outliers(100, 0.0, seed=9)
        np.testing.assert_array_equal(e, np.random.default_rng(9).standard_normal(100))

    @pytest.mark.parametrize("contamination", [-0.1, 1.5])
    def test_invalid_fraction(self, contamination):
        with pytest.raises(ParameterError):
            generate_innovations_with_outliers(100, contamination)
