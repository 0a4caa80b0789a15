# tests/test_arma.py
"""
Tests for the ARMA model and its residual recursions.
"""

import numpy as np
import pandas as pd
import pytest

from rarma.core.exceptions import DataError, DimensionError, ParameterError
from rarma.core.parameters import ARMAParameters
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.robust import median, scale
from rarma.models.time_series.simulate import simulate_arma


class TestARMAModelConstruction:
    """Tests for model construction and validation."""

    def test_attributes(self, arma11_process):
        model = ARMAModel(arma11_process, 1, 1)
        assert (model.p, model.q, model.r) == (1, 1, 1)
        assert model.n == len(arma11_process)
        assert model.num_params == 3
        assert model.mu == median(arma11_process)
        assert model.sigma == pytest.approx(scale(arma11_process - median(arma11_process)))

    def test_series_is_copied_and_read_only(self, arma11_process):
        y = arma11_process.copy()
        model = ARMAModel(y, 1, 1)
        y[0] = 1e6
        assert model.y[0] != 1e6
        with pytest.raises(ValueError):
            model.y[0] = 0.0

    def test_pandas_series(self, arma11_series):
        model = ARMAModel(arma11_series, 1, 1)
        assert model.index is not None
        assert model.index.equals(arma11_series.index)
        np.testing.assert_array_equal(model.y, arma11_series.to_numpy())

    def test_list_input(self):
        model = ARMAModel([1.0, 2.0, 3.0, 2.0, 1.0], 0, 1)
        assert model.n == 5
        assert model.index is None

    def test_too_short(self):
        with pytest.raises(DimensionError):
            ARMAModel([1.0, 2.0], 2, 1)

    @pytest.mark.parametrize("p, q", [(-1, 0), (0, -2), (1.5, 0), (True, 0)])
    def test_invalid_orders(self, arma11_process, p, q):
        with pytest.raises(ParameterError):
            ARMAModel(arma11_process, p, q)

    def test_non_finite_data(self, arma11_process):
        y = arma11_process.copy()
        y[10] = np.nan
        with pytest.raises(DataError):
            ARMAModel(y, 1, 1)

    def test_repr(self, arma11_model):
        assert repr(arma11_model) == "ARMAModel(p=1, q=1, n=500)"


class TestUnpack:
    """Tests for conversion of flat parameter vectors."""

    def test_flat_vector(self, arma11_model):
        params = arma11_model.unpack(np.array([0.5, 0.2, 1.0]))
        np.testing.assert_array_equal(params.phi, [0.5])
        np.testing.assert_array_equal(params.theta, [0.2])
        assert params.mu == 1.0

    def test_wrong_length(self, arma11_model):
        with pytest.raises(ParameterError):
            arma11_model.unpack(np.array([0.5, 1.0]))

    def test_parameters_pass_through(self, arma11_model):
        params = ARMAParameters([0.5], [0.2], 1.0)
        assert arma11_model.unpack(params) is params


class TestResiduals:
    """Tests for the classical and BIP residual recursions."""

    def test_zero_below_r(self, arma11_process):
        model = ARMAModel(arma11_process, 3, 2)
        e = model.residuals(np.array([0.5, 0.1, -0.1, 0.3, 0.2, 2.0]))
        assert e.shape == (model.n,)
        np.testing.assert_array_equal(e[:3], 0.0)
        assert np.all(e[3:] != 0.0)

    def test_idempotent(self, arma11_model):
        x = np.array([0.7, 0.3, 2.0])
        np.testing.assert_array_equal(arma11_model.residuals(x), arma11_model.residuals(x))

    def test_recover_ar_innovations(self):
        """At the true AR parameters the residuals are the innovations."""
        rng = np.random.default_rng(7)
        n, burn_in = 300, 50
        e = rng.standard_normal(n + burn_in)
        y = simulate_arma([0.6], [], mu=1.5, n=n, burn_in=burn_in, innovations=e)

        residuals = ARMAModel(y, 1, 0).residuals(ARMAParameters([0.6], [], 1.5))
        np.testing.assert_allclose(residuals[1:], e[burn_in + 1:], atol=1e-10)

    def test_white_noise_residuals_are_centered_data(self, white_noise):
        model = ARMAModel(white_noise, 0, 0)
        np.testing.assert_allclose(model.residuals(np.array([0.25])), white_noise - 0.25)

    def test_bip_matches_classical_for_large_sigma(self, arma11_model):
        """The BIP recursion reduces to the classical one when nothing is clipped."""
        x = np.array([0.7, 0.3, 2.0])
        np.testing.assert_allclose(
            arma11_model.bip_residuals(x, sigma=1e8),
            arma11_model.residuals(x),
            atol=1e-8
        )

    def test_bip_zero_below_r(self, arma11_model):
        e = arma11_model.bip_residuals(np.array([0.7, 0.3, 2.0]))
        assert e[0] == 0.0

    def test_bip_bounds_outlier_propagation(self):
        y = simulate_arma([], [0.5], mu=0.0, n=300, seed=11)
        y[100] += 50.0
        model = ARMAModel(y, 0, 1)
        x = np.array([0.5, 0.0])

        classical = model.residuals(x)
        bip = model.bip_residuals(x)

        # The outlier enters the next classical residual through theta
        assert abs(classical[101]) > 15.0
        assert abs(bip[101]) < 10.0
