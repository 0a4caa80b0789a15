# tests/test_results.py
"""
Tests for parameter containers, result objects and their rendering.
"""

import dataclasses

import numpy as np
import pandas as pd
import pytest

from rarma.core.exceptions import ParameterError
from rarma.core.parameters import ARMAParameters
from rarma.core.results import ARMAFit, EstimationMethod, EstimationResult
from rarma.models.time_series.arma import ARMAModel


@pytest.fixture
def fit(arma11_process) -> ARMAFit:
    model = ARMAModel(arma11_process, 1, 1)
    return ARMAFit(
        model=model,
        params=ARMAParameters([0.7123], [0.3], 2.0),
        result=EstimationResult(EstimationMethod.MM, True, 0.51234),
        initial_params=ARMAParameters([0.6], [0.25], 1.9),
        initial_result=EstimationResult(EstimationMethod.S, False, 1.1),
    )


class TestARMAParameters:
    """Tests for the parameter container."""

    def test_round_trip_shapes(self):
        params = ARMAParameters.from_array([0.5, -0.2, 0.3, 1.0], 2, 1)
        np.testing.assert_array_equal(params.phi, [0.5, -0.2])
        np.testing.assert_array_equal(params.theta, [0.3])
        assert params.mu == 1.0
        assert (params.p, params.q, params.size) == (2, 1, 4)
        np.testing.assert_array_equal(params.to_array(), [0.5, -0.2, 0.3, 1.0])

    def test_blocks_do_not_alias(self):
        x = np.array([0.5, 0.3, 1.0])
        params = ARMAParameters.from_array(x, 1, 1)
        x[0] = 9.0
        assert params.phi[0] == 0.5

    def test_empty_blocks(self):
        params = ARMAParameters.from_array([1.0], 0, 0)
        assert params.phi.shape == (0,)
        assert params.theta.shape == (0,)

    def test_wrong_length(self):
        with pytest.raises(ParameterError):
            ARMAParameters.from_array([0.5, 1.0], 1, 1)

    def test_non_finite(self):
        with pytest.raises(ParameterError):
            ARMAParameters([np.inf], [], 0.0)
        with pytest.raises(ParameterError):
            ARMAParameters([], [], np.nan)

    def test_to_dict(self):
        params = ARMAParameters([0.5, 0.1], [0.3], 2.0)
        assert params.to_dict() == {"phi1": 0.5, "phi2": 0.1, "theta1": 0.3, "mu": 2.0}

    def test_copy_and_equality(self):
        params = ARMAParameters([0.5], [0.3], 2.0)
        other = params.copy()
        assert other == params
        other.phi[0] = 0.4
        assert other != params


class TestEstimationResult:
    """Tests for the result block."""

    def test_summary(self):
        result = EstimationResult(EstimationMethod.OLS, True, 12.3456789)
        lines = result.summary().splitlines()
        assert lines[0].startswith("estimation method   OLS")
        assert lines[1].startswith("convergence         TRUE")
        assert lines[2].startswith("final cost          12.3457")

    def test_failed_convergence(self):
        result = EstimationResult(EstimationMethod.FTAU, False, 1.0)
        assert "FALSE" in str(result)

    def test_immutable(self):
        result = EstimationResult(EstimationMethod.OLS, True, 1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.convergence = False

    def test_method_names(self):
        assert str(EstimationMethod.HANNAN_RISSANEN) == "Hannan-Rissanen"
        assert str(EstimationMethod.BS) == "BS"

    def test_to_dict(self):
        result = EstimationResult(EstimationMethod.MLE, True, 2.0, report="done")
        assert result.to_dict() == {
            "method": "MLE", "convergence": True, "final_cost": 2.0, "report": "done"
        }


class TestARMAFit:
    """Tests for fit rendering and export."""

    def test_properties(self, fit):
        assert fit.method == EstimationMethod.MM
        assert fit.convergence is True
        assert fit.final_cost == 0.51234

    def test_summary(self, fit):
        text = fit.summary()
        assert text.startswith("ARMA estimation summary")
        assert "Initial values" in text
        assert "Estimated parameters" in text
        assert "0.7123" in text
        assert "0.5123" in text
        # Initial block precedes the final estimates
        assert text.index("Initial values") < text.index("Estimated parameters")
        assert str(fit) == text

    def test_summary_without_initial(self, fit):
        bare = dataclasses.replace(fit, initial_params=None, initial_result=None)
        assert "Initial values" not in bare.summary()

    def test_to_dataframe(self, fit):
        frame = fit.to_dataframe()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["Estimate", "Initial"]
        assert list(frame.index) == ["phi1", "theta1", "mu"]
        assert frame.index.name == "Parameter"
        assert frame.loc["phi1", "Estimate"] == pytest.approx(0.7123)

    def test_to_dict(self, fit):
        data = fit.to_dict()
        assert (data["p"], data["q"], data["n"]) == (1, 1, 500)
        assert data["result"]["method"] == "MM"
        assert data["initial_result"]["convergence"] is False
