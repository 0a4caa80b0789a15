# tests/test_initial.py
"""
Tests for the Hannan-Rissanen initial estimator.
"""

import numpy as np
import pytest

from rarma.core.exceptions import DimensionError
from rarma.core.results import EstimationMethod
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.initial import hannan_rissanen
from rarma.models.time_series.simulate import simulate_arma


class TestHannanRissanen:
    """Tests for the two-stage regression estimate."""

    def test_result_fields(self, arma11_model):
        fit = hannan_rissanen(arma11_model)
        assert fit.method == EstimationMethod.HANNAN_RISSANEN
        assert fit.convergence is True
        assert fit.final_cost == 0.0
        assert fit.initial_params is None
        assert fit.initial_result is None
        assert fit.model is arma11_model

    def test_parameter_shapes(self, arma11_process):
        model = ARMAModel(arma11_process, 2, 3)
        fit = hannan_rissanen(model)
        assert fit.params.phi.shape == (2,)
        assert fit.params.theta.shape == (3,)

    def test_recovers_arma11(self):
        y = simulate_arma([0.7], [0.3], mu=2.0, n=5000, seed=21)
        fit = hannan_rissanen(ARMAModel(y, 1, 1))
        assert fit.params.phi[0] == pytest.approx(0.7, abs=0.1)
        assert fit.params.theta[0] == pytest.approx(0.3, abs=0.1)
        assert fit.params.mu == pytest.approx(np.mean(y))

    def test_recovers_ar2(self):
        y = simulate_arma([0.5, -0.3], [], mu=0.0, n=5000, seed=22)
        fit = hannan_rissanen(ARMAModel(y, 2, 0))
        np.testing.assert_allclose(fit.params.phi, [0.5, -0.3], atol=0.05)

    def test_white_noise_only_mean(self, white_noise):
        fit = hannan_rissanen(ARMAModel(white_noise, 0, 0))
        assert fit.params.p == 0 and fit.params.q == 0
        assert fit.params.mu == pytest.approx(np.mean(white_noise))

    def test_too_short_for_regressions(self):
        # r = 1 admits the model, but the long AR of order 3 needs more data
        with pytest.raises(DimensionError):
            hannan_rissanen(ARMAModel(np.arange(5.0), 1, 1))
