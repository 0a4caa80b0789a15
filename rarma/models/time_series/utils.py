"""
Time series utilities for robust ARMA estimation.

Sample and robust autocovariance matrices, the impulse response (causal
MA(infinity) coefficients) of an ARMA model, and the innovation scale used by
the BIP residual recursion.
"""

import logging
from typing import Optional

import numpy as np
from statsmodels.tsa.arima_process import arma2ma

from rarma.core.config import get_numerical_config
from rarma.core.types import Matrix, Vector
from rarma.models.time_series.robust import huber, median
from rarma.models.time_series.weights import BIP

logger = logging.getLogger("rarma.models.time_series.utils")


def _lagged_product_matrix(centered: np.ndarray, rows: int, cols: int) -> Matrix:
    """Matrix with entry (i, j) the lag-|i - j| mean product of ``centered``."""
    n = centered.shape[0]
    max_lag = max(rows, cols)
    gamma = np.zeros(max_lag)
    for h in range(min(max_lag, n)):
        gamma[h] = np.dot(centered[:n - h], centered[h:]) / (n - h)

    lags = np.abs(np.subtract.outer(np.arange(rows), np.arange(cols)))
    return gamma[lags]


def autocov_matrix(y: Vector, rows: int, cols: int) -> Matrix:
    """
    Sample autocovariance matrix of ``y``.

    Entry (i, j) is the lag ``h = |i - j|`` autocovariance of the mean-centered
    series with denominator ``N - h``; lags that do not fit in the series are 0.
    """
    values = np.asarray(y, dtype=np.float64)
    return _lagged_product_matrix(values - values.mean(), rows, cols)


def robust_autocov_matrix(y: Vector, rows: int, cols: int) -> Matrix:
    """
    Robust autocovariance matrix of ``y``.

    Same layout as ``autocov_matrix`` but computed on the Huber psi of the
    median-centered series, so isolated outliers have bounded effect.
    """
    values = np.asarray(y, dtype=np.float64)
    return _lagged_product_matrix(huber(values - median(values)), rows, cols)


def impulse_response(phi: Vector, theta: Vector, lags: int = 100) -> Vector:
    """
    Causal MA(infinity) coefficients of an ARMA model.

    Returns ``psi_1 .. psi_{lags-1}`` of ``theta(B) / phi(B)``; the leading
    ``psi_0 = 1`` is dropped.

    Args:
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        lags: Number of coefficients including ``psi_0``
    """
    ar = np.r_[1.0, -np.asarray(phi, dtype=np.float64)]
    ma = np.r_[1.0, np.asarray(theta, dtype=np.float64)]
    return arma2ma(ar, ma, lags=lags)[1:]


def bip_sigma(sigma: float, phi: Vector, theta: Vector,
              lags: Optional[int] = None) -> float:
    """
    Innovation scale used by the BIP residual recursion.

    The dispersion ``sigma`` of the observed series is deflated by the energy
    of the impulse response::

        sigma / (1 + kappa^2 * sum(psi_j^2)),   kappa = 0.8725

    Args:
        sigma: Robust dispersion of the observed series
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        lags: Number of impulse-response coefficients (configuration default
            when None)
    """
    if lags is None:
        lags = get_numerical_config().impulse_response_lags

    psi = impulse_response(phi, theta, lags)
    return float(sigma / (1.0 + BIP.kappa ** 2 * np.dot(psi, psi)))
