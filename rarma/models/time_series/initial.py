"""
Hannan-Rissanen initial estimator.

Closed-form two-stage least-squares estimate of an ARMA(p,q) model, used to
seed every iterative estimator:

1. Fit a long autoregression of order ``m = max(2p + 1, 2q + 1)`` to the
   mean-centered series and keep its residuals as proxies for the
   innovations.
2. Regress the centered series on ``p`` of its own lags and ``q`` lags of
   the innovation proxies.

The location is the sample mean. Nothing is minimized iteratively, so the
result is reported as converged with zero cost.
"""

import logging

import numpy as np

from rarma.core.exceptions import raise_dimension_error
from rarma.core.parameters import ARMAParameters
from rarma.core.results import ARMAFit, EstimationMethod, EstimationResult
from rarma.core.types import Matrix, Vector
from rarma.models.time_series.arma import ARMAModel

logger = logging.getLogger("rarma.models.time_series.initial")


def _lag_matrix(x: Vector, start: int, lags: int) -> Matrix:
    """Design matrix whose column ``i`` is ``x`` lagged by ``i + 1`` from ``start``."""
    rows = x.shape[0] - start
    design = np.empty((rows, lags))
    for i in range(lags):
        design[:, i] = x[start - i - 1:start - i - 1 + rows]
    return design


def hannan_rissanen(model: ARMAModel) -> ARMAFit:
    """
    Hannan-Rissanen estimate of ``model``.

    Args:
        model: Model to estimate

    Returns:
        ARMAFit: Fit with method ``HANNAN_RISSANEN``, ``convergence=True`` and
        ``final_cost=0``; it has no initial parameters.
    """
    p, q = model.p, model.q
    mu = float(np.mean(model.y))
    centered = model.y - mu

    phi = np.zeros(p)
    theta = np.zeros(q)

    if p + q > 0:
        m = max(2 * p + 1, 2 * q + 1)
        rr = max(p + 1, q + 1)
        if model.n <= m + rr:
            raise_dimension_error(
                f"Series of length {model.n} is too short for the Hannan-Rissanen "
                f"estimate of an ARMA({p},{q}) model",
                array_name="y",
                expected_shape=f"(n,) with n > {m + rr}",
                actual_shape=model.y.shape
            )

        long_ar = _lag_matrix(centered, m, m)
        target = centered[m:]
        ar_coef = np.linalg.lstsq(long_ar, target, rcond=None)[0]
        innovations = target - long_ar @ ar_coef

        design = np.hstack([
            _lag_matrix(target, rr, p),
            _lag_matrix(innovations, rr, q),
        ])
        beta = np.linalg.lstsq(design, target[rr:], rcond=None)[0]
        phi = beta[:p]
        theta = beta[p:p + q]

    logger.debug(f"Hannan-Rissanen estimate: phi={phi}, theta={theta}, mu={mu:.4f}")

    return ARMAFit(
        model=model,
        params=ARMAParameters(phi, theta, mu),
        result=EstimationResult(
            method=EstimationMethod.HANNAN_RISSANEN,
            convergence=True,
            final_cost=0.0
        )
    )
