# tests/test_estimators.py
"""
Tests for the ARMA estimators and the estimator dispatch.
"""

import numpy as np
import pandas as pd
import pytest

from rarma.core.exceptions import ModelSpecificationError
from rarma.core.results import ARMAFit, EstimationMethod
from rarma.models.time_series import estimators
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.costs import BMMCost, MMCost
from rarma.models.time_series.estimators import (
    bip_mm, bip_s, bmm_stage, estimate, ftau, mle, mm, mm_stage, ols, s,
    sigma_mle, sigma_ols
)
from rarma.models.time_series.initial import hannan_rissanen
from rarma.models.time_series.simulate import (
    generate_innovations_with_outliers, simulate_arma
)
from rarma.models.time_series.solver import SolverOptions


class TestClassicalEstimators:
    """Tests for the least-squares and likelihood estimators."""

    def test_ols_consistency(self):
        y = simulate_arma([0.7], [0.2, -0.4], mu=2.0, n=10000, seed=123)
        fit = ols(ARMAModel(y, 1, 2))
        assert fit.method == EstimationMethod.OLS
        assert abs(fit.params.phi[0] - 0.7) < 0.05

    def test_ols_seeded_by_hannan_rissanen(self, arma11_model):
        fit = ols(arma11_model)
        seed = hannan_rissanen(arma11_model)
        assert fit.initial_params == seed.params
        assert fit.initial_result.method == EstimationMethod.HANNAN_RISSANEN

    def test_mle(self, arma11_model):
        fit = mle(arma11_model)
        assert fit.method == EstimationMethod.MLE
        assert fit.convergence
        assert fit.params.phi[0] == pytest.approx(0.7, abs=0.15)
        assert fit.params.mu == pytest.approx(2.0, abs=0.5)

    def test_sigma_ols(self, arma11_model):
        assert sigma_ols(ols(arma11_model)) == pytest.approx(1.0, abs=0.2)

    def test_sigma_mle(self, arma11_model):
        assert sigma_mle(mle(arma11_model)) == pytest.approx(1.0, abs=0.2)


class TestRobustEstimators:
    """Tests for the S, BIP-S, MM, BIP-MM and filtered-tau estimators."""

    @pytest.mark.parametrize("estimator, method", [
        (s, EstimationMethod.S),
        (bip_s, EstimationMethod.BS),
        (ftau, EstimationMethod.FTAU),
    ])
    def test_single_stage(self, arma11_model, quiet_estimation, estimator, method):
        fit = estimator(arma11_model)
        assert isinstance(fit, ARMAFit)
        assert fit.method == method
        assert np.isfinite(fit.final_cost)
        assert fit.initial_result.method == EstimationMethod.HANNAN_RISSANEN

    def test_s_cost_is_a_scale(self, arma11_model, quiet_estimation):
        fit = s(arma11_model)
        assert 0.5 < fit.final_cost < 2.0

    def test_mm_seeded_by_s(self, arma11_model, quiet_estimation):
        fit = mm(arma11_model)
        assert fit.method == EstimationMethod.MM
        assert fit.initial_result.method == EstimationMethod.S

    def test_mm_does_not_increase_cost(self, arma11_model, quiet_estimation):
        fit = mm(arma11_model)
        sigma = fit.initial_result.final_cost
        seed_cost = MMCost(arma11_model, sigma)(fit.initial_params.to_array())
        assert fit.final_cost <= seed_cost + 1e-12

    def test_bmm_does_not_increase_cost(self, arma11_model, quiet_estimation):
        seed = bip_s(arma11_model)
        sigma = seed.final_cost
        fit = bmm_stage(arma11_model, sigma, seed)
        assert fit.method == EstimationMethod.BMM
        seed_cost = BMMCost(arma11_model, sigma)(seed.params.to_array())
        assert fit.final_cost <= seed_cost + 1e-12

    def test_mm_stage_fixed_scale(self, arma11_model, quiet_estimation):
        seed = hannan_rissanen(arma11_model)
        fit = mm_stage(arma11_model, 1.0, seed)
        assert fit.initial_params == seed.params
        assert fit.final_cost == pytest.approx(MMCost(arma11_model, 1.0)(fit.params.to_array()))

    def test_bip_mm_selects_lower_cost(self, arma11_model, quiet_estimation):
        fit = bip_mm(arma11_model)
        assert fit.method in (EstimationMethod.MM, EstimationMethod.BMM)

        s_fit = s(arma11_model)
        bs_fit = bip_s(arma11_model)
        sigma = min(s_fit.final_cost, bs_fit.final_cost)
        other = (bmm_stage(arma11_model, sigma, bs_fit) if fit.method == EstimationMethod.MM
                 else mm_stage(arma11_model, sigma, s_fit))
        assert fit.final_cost <= other.final_cost

    def test_bip_mm_robust_to_additive_outliers(self, quiet_estimation):
        y = simulate_arma([0.5], [], mu=0.0, n=500, seed=31)
        rng = np.random.default_rng(32)
        positions = rng.choice(np.arange(1, 500), size=25, replace=False)
        y[positions] += 10.0

        model = ARMAModel(y, 1, 0)
        robust = bip_mm(model)
        classical = ols(model)
        assert abs(robust.params.phi[0] - 0.5) < abs(classical.params.phi[0] - 0.5)
        assert abs(robust.params.phi[0] - 0.5) < 0.2

    @pytest.mark.parametrize("seed", [10, 15, 19])
    def test_bip_s_under_contamination(self, quiet_estimation, seed):
        """Explosive trial points of the optimizer must not abort the fit."""
        e = generate_innovations_with_outliers(600, 0.1, 5.0, seed=seed)
        y = simulate_arma([0.8], [-0.7], mu=0.0, n=500, burn_in=100, innovations=e)
        model = ARMAModel(y, 1, 1)

        fit = bip_s(model)
        assert isinstance(fit, ARMAFit)
        assert np.all(np.isfinite(fit.params.to_array()))

        fit = bip_mm(model)
        assert fit.method in (EstimationMethod.MM, EstimationMethod.BMM)
        assert np.all(np.isfinite(fit.params.to_array()))

    @pytest.mark.slow
    def test_ftau_convergence_under_contamination(self, quiet_estimation):
        trials = 10
        converged = 0
        for seed in range(trials):
            e = generate_innovations_with_outliers(600, 0.1, 5.0, seed=seed)
            y = simulate_arma([0.8], [-0.7], mu=0.0, n=500, burn_in=100,
                              innovations=e)
            converged += ftau(ARMAModel(y, 1, 1)).convergence
        assert converged / trials > 0.8


class TestEmptyBlocks:
    """Estimators on models without an AR or an MA part."""

    @pytest.mark.parametrize("estimator", [ols, mle, ftau, s, bip_s, mm, bip_mm])
    @pytest.mark.parametrize("p, q", [(0, 0), (0, 1), (1, 0), (2, 0)])
    def test_orders(self, arma11_process, quiet_estimation, estimator, p, q):
        fit = estimator(ARMAModel(arma11_process, p, q))
        assert isinstance(fit, ARMAFit)
        assert fit.params.phi.shape == (p,)
        assert fit.params.theta.shape == (q,)
        assert np.isfinite(fit.final_cost)


class TestEstimate:
    """Tests for dispatch by name."""

    @pytest.mark.parametrize("name, method", [
        ("hr", EstimationMethod.HANNAN_RISSANEN),
        ("ols", EstimationMethod.OLS),
        ("OLS", EstimationMethod.OLS),
        ("mle", EstimationMethod.MLE),
        ("s", EstimationMethod.S),
        ("bs", EstimationMethod.BS),
        ("bip-s", EstimationMethod.BS),
        ("mm", EstimationMethod.MM),
    ])
    def test_names(self, arma11_model, quiet_estimation, name, method):
        assert estimate(arma11_model, name).method == method

    def test_bip_mm_aliases(self, arma11_model, quiet_estimation):
        for name in ("bip_mm", "bmm"):
            fit = estimate(arma11_model, name)
            assert fit.method in (EstimationMethod.MM, EstimationMethod.BMM)

    def test_enum(self, arma11_model):
        fit = estimate(arma11_model, EstimationMethod.OLS)
        assert fit.method == EstimationMethod.OLS

    def test_bmm_enum_runs_bip_mm(self, arma11_model, quiet_estimation):
        fit = estimate(arma11_model, EstimationMethod.BMM)
        assert fit.method in (EstimationMethod.MM, EstimationMethod.BMM)
        assert fit.final_cost == bip_mm(arma11_model).final_cost

    def test_unknown_name(self, arma11_model):
        with pytest.raises(ModelSpecificationError):
            estimate(arma11_model, "lad")

    def test_series_with_orders(self, arma11_series):
        fit = estimate(arma11_series, "ols", p=1, q=1)
        assert isinstance(fit.model, ARMAModel)
        assert isinstance(fit.model.index, pd.DatetimeIndex)

    def test_series_without_orders(self, arma11_process):
        with pytest.raises(ModelSpecificationError):
            estimate(arma11_process, "ols")

    def test_model_fit_delegates(self, arma11_model):
        fit = arma11_model.fit("ols")
        assert fit.method == EstimationMethod.OLS

    def test_options_forwarded(self, arma11_model, quiet_estimation):
        options = SolverOptions(method="Nelder-Mead", max_iterations=5)
        fit = estimate(arma11_model, "ols", options=options)
        assert not fit.convergence

    def test_registry_complete(self):
        assert set(estimators.ESTIMATORS) == {
            "hr", "ols", "mle", "ftau", "s", "bip_s", "bs", "mm", "bip_mm", "bmm"
        }
