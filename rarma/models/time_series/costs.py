"""
Objective functions of the ARMA estimators.

Each estimator minimizes a scalar function of the flat parameter vector
``[phi, theta, mu]``. The classes below bind that function to an
``ARMAModel`` and expose it as a callable suitable for
``scipy.optimize.minimize``:

=============  ============================================================
``OLSCost``    sum of squared classical residuals
``MLECost``    concentrated exact Gaussian likelihood (Kalman filter)
``FTauCost``   tau-scale of robustly filtered prediction errors
``SCost``      M-scale of classical residuals
``BIPSCost``   M-scale of BIP residuals
``MMCost``     mean efficiency loss of classical residuals at a fixed scale
``BMMCost``    mean efficiency loss of BIP residuals at a fixed scale
=============  ============================================================

Residuals are scored from index ``r = max(p, q)`` on. A degenerate parameter
vector yields a non-finite value rather than an exception, so that the
optimizer reports non-convergence instead of aborting the estimation.
"""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Tuple, Union

import numpy as np

from rarma.core.config import get_numerical_config
from rarma.core.parameters import ARMAParameters
from rarma.core.results import EstimationMethod
from rarma.core.types import ParameterVector, Vector
from rarma.models.time_series._numba_core import kalman_filter, robust_kalman_filter
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.robust import median, scale
from rarma.models.time_series.state_space import StateSpaceBuilder
from rarma.models.time_series.utils import (
    autocov_matrix, bip_sigma, robust_autocov_matrix
)
from rarma.models.time_series.weights import BIP, TAU

logger = logging.getLogger("rarma.models.time_series.costs")


class CostFunction(ABC):
    """Base class for estimator objectives.

    Attributes:
        model: The model whose parameters are estimated
        method: Estimator tag recorded in the result
    """

    method: ClassVar[EstimationMethod]

    def __init__(self, model: ARMAModel):
        self.model = model
        numerical = get_numerical_config()
        self.scale_tol = numerical.scale_tol
        self.scale_max_iter = numerical.scale_max_iter

    def __call__(self, x: ParameterVector) -> float:
        x = np.asarray(x, dtype=np.float64)
        if not np.all(np.isfinite(x)):
            return np.inf
        return self.evaluate(ARMAParameters.from_array(x, self.model.p, self.model.q))

    @abstractmethod
    def evaluate(self, params: ARMAParameters) -> float:
        """Objective value at ``params``."""

    def _scale(self, residuals: Vector) -> float:
        """M-scale of residuals under the BIP scale loss, breakdown ``rho_max / 2``."""
        return scale(residuals, BIP.delta, BIP.rho1, self.scale_tol, self.scale_max_iter)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model!r})"


class OLSCost(CostFunction):
    """Sum of squared classical residuals."""

    method = EstimationMethod.OLS

    def evaluate(self, params: ARMAParameters) -> float:
        e = self.model.residuals(params)[self.model.r:]
        return float(np.dot(e, e))


class StateSpaceCost(CostFunction):
    """Common setup of the objectives built on the state-space form."""

    def __init__(self, model: ARMAModel):
        super().__init__(model)
        self.builder = StateSpaceBuilder(model.p, model.q)


class MLECost(StateSpaceCost):
    """
    Concentrated exact Gaussian likelihood.

    With one-step innovations ``v_t`` and their variances ``f_t`` (relative
    to the innovation variance) from the Kalman filter, the loss is::

        n * log(sum(v_t^2 / f_t)) + sum(log f_t)

    which is ``-2`` times the exact log-likelihood with the innovation
    variance profiled out, up to an additive constant. The filter starts
    from the stationary mean and covariance; for a non-stable transition
    matrix the sample autocovariance matrix is used instead.
    """

    method = EstimationMethod.MLE

    def __init__(self, model: ARMAModel):
        super().__init__(model)
        dim = self.builder.dim
        self._fallback_cov = autocov_matrix(model.y, dim, dim)

    def innovations(self, params: Union[ARMAParameters, ParameterVector]) -> Tuple[Vector, Vector]:
        """One-step prediction errors and their relative variances."""
        system = self.builder.build(self.model.unpack(params))
        initial_cov = system.initial_cov if system.is_stable else self._fallback_cov
        return kalman_filter(
            self.model.y, system.transition, system.loading, system.drift,
            system.initial_state, initial_cov
        )

    def evaluate(self, params: ARMAParameters) -> float:
        v, f = self.innovations(params)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(self.model.n * np.log(np.sum(v * v / f)) + np.sum(np.log(f)))


class FTauCost(StateSpaceCost):
    """
    Filtered-tau objective.

    A robust scale ``sigma`` of the median-centered series is computed once.
    The robust filter yields prediction errors ``u_t`` and their standard
    deviations ``s_t``; with ``a_t = s_t / sigma`` the loss is::

        n * log(tau2(u / a)) + sum(log a_t^2)

    where ``tau2`` is the squared tau-scale of the tau weight family.
    """

    method = EstimationMethod.FTAU

    def __init__(self, model: ARMAModel):
        super().__init__(model)
        self.sigma = TAU.s(model.y - median(model.y), self.scale_tol, self.scale_max_iter)
        dim = self.builder.dim
        self._fallback_cov = robust_autocov_matrix(model.y, dim, dim)

    def filter(self, params: Union[ARMAParameters, ParameterVector]) -> Tuple[Vector, Vector]:
        """Robustly filtered prediction errors and their standard deviations."""
        system = self.builder.build(self.model.unpack(params))
        if system.is_stable:
            initial_cov = self.sigma ** 2 * system.initial_cov
        else:
            initial_cov = self._fallback_cov
        return robust_kalman_filter(
            self.model.y, system.transition, system.loading, system.drift,
            system.initial_state, initial_cov, self.sigma
        )

    def evaluate(self, params: ARMAParameters) -> float:
        u, s = self.filter(params)
        with np.errstate(divide="ignore", invalid="ignore"):
            a = s / self.sigma
            tau2 = TAU.tau2(u / a, self.scale_tol, self.scale_max_iter)
            return float(self.model.n * np.log(tau2) + np.sum(np.log(a * a)))


class SCost(CostFunction):
    """M-scale of the classical residuals."""

    method = EstimationMethod.S

    def evaluate(self, params: ARMAParameters) -> float:
        return self._scale(self.model.residuals(params)[self.model.r:])


class BIPSCost(CostFunction):
    """
    M-scale of the BIP residuals.

    The BIP recursion runs with the innovation scale implied by the
    parameters (``bip_sigma``), recomputed at every evaluation.
    """

    method = EstimationMethod.BS

    def __init__(self, model: ARMAModel, lags: Optional[int] = None):
        super().__init__(model)
        self.lags = lags if lags is not None else get_numerical_config().impulse_response_lags

    def evaluate(self, params: ARMAParameters) -> float:
        sigma = bip_sigma(self.model.sigma, params.phi, params.theta, self.lags)
        return self._scale(self.model.bip_residuals(params, sigma)[self.model.r:])


class MMCost(CostFunction):
    """Mean BIP efficiency loss of the classical residuals at a fixed scale."""

    method = EstimationMethod.MM

    def __init__(self, model: ARMAModel, sigma: float):
        super().__init__(model)
        self.sigma = float(sigma)

    def evaluate(self, params: ARMAParameters) -> float:
        e = self.model.residuals(params)[self.model.r:]
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.mean(BIP.rho2(e / self.sigma)))


class BMMCost(CostFunction):
    """Mean BIP efficiency loss of the BIP residuals at a fixed scale."""

    method = EstimationMethod.BMM

    def __init__(self, model: ARMAModel, sigma: float):
        super().__init__(model)
        self.sigma = float(sigma)

    def evaluate(self, params: ARMAParameters) -> float:
        e = self.model.bip_residuals(params, self.sigma)[self.model.r:]
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.mean(BIP.rho2(e / self.sigma)))
