"""
Robust-statistics primitives.

Location, dispersion and M-scale estimators shared by the model, the weight
families and every robust objective. All functions accept anything convertible
to a float64 array and never modify their input.
"""

import logging
from typing import Optional

import numpy as np

from rarma.core.exceptions import warn_numeric
from rarma.core.types import RhoFunction, Vector

logger = logging.getLogger("rarma.models.time_series.robust")

# Consistency constant making the MAD unbiased for the normal scale
MADN_CONSTANT = 0.675
# Normal consistency constant of the starting value of the M-scale iteration
SCALE_START_CONSTANT = 0.6745
HUBER_K = 1.345
BISQUARE_K = 1.547645


def median(x: Vector) -> float:
    """
    Median of ``x``; the mean of the two central values for even lengths.

    The input is sorted as a copy.
    """
    values = np.sort(np.asarray(x, dtype=np.float64).ravel())
    n = values.shape[0]
    half = n // 2
    if n % 2 == 1:
        return float(values[half])
    return float(0.5 * (values[half - 1] + values[half]))


def mad(x: Vector) -> float:
    """Median absolute deviation from the median."""
    values = np.asarray(x, dtype=np.float64)
    return median(np.abs(values - median(values)))


def madn(x: Vector) -> float:
    """Normalized MAD, a consistent estimate of the normal standard deviation."""
    return mad(x) / MADN_CONSTANT


def huber(x: Vector, k: float = HUBER_K) -> np.ndarray:
    """Huber psi: identity on ``[-k, k]``, clipped outside."""
    return np.clip(np.asarray(x, dtype=np.float64), -k, k)


def bisquare(x: Vector, k: float = BISQUARE_K) -> np.ndarray:
    """
    Tukey bisquare rho, normalized to a maximum of 1.

    ``1 - (1 - (x/k)^2)^3`` for ``|x| <= k`` and 1 otherwise.
    """
    u = np.asarray(x, dtype=np.float64) / k
    return np.where(np.abs(u) <= 1.0, 1.0 - (1.0 - u * u) ** 3, 1.0)


def scale(x: Vector,
          b: float = 0.5,
          rho: Optional[RhoFunction] = None,
          tol: float = 1e-6,
          max_iter: int = 100) -> float:
    """
    Robust M-estimate of scale.

    Solves ``mean(rho(x / sigma)) = b`` by the fixed-point iteration::

        sigma_0 = median(|x|) / 0.6745
        sigma_1 = sqrt(sigma_0^2 * mean(rho(x / sigma_0)) / b)

    stopping once the relative change falls below ``tol`` or after
    ``max_iter`` iterations. ``x`` is assumed to be centered already.

    With ``rho`` bounded by 1, ``b`` is the breakdown point of the estimator.
    The default bisquare constant 1.547645 together with ``b = 0.5`` gives a
    50% breakdown point and consistency at the normal distribution.

    Args:
        x: Centered values
        b: Right-hand side of the estimating equation
        rho: Even loss function applied elementwise; bisquare by default
        tol: Relative tolerance of the iteration
        max_iter: Maximum number of iterations

    Returns:
        float: The scale estimate. When at least half of ``x`` is zero the
        starting value is 0 and the result degenerates to 0 or NaN; a
        ``NumericWarning`` is issued in that case.
    """
    if rho is None:
        rho = bisquare

    values = np.asarray(x, dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # numpy scalar so that huge residuals overflow to inf
        sigma_0 = np.float64(median(np.abs(values)) / SCALE_START_CONSTANT)
        err = 1.0
        iteration = 0
        while err > tol and iteration < max_iter:
            sigma_1 = np.sqrt(sigma_0 * sigma_0 * np.mean(rho(values / sigma_0)) / b)
            err = abs(sigma_1 - sigma_0) / sigma_0
            sigma_0 = sigma_1
            iteration += 1

    if not np.isfinite(sigma_0) or sigma_0 == 0.0:
        logger.debug(f"Degenerate M-scale after {iteration} iterations")
        warn_numeric(
            "M-scale estimate is not finite",
            operation="scale",
            issue="zero starting scale or non-finite input",
            value=float(sigma_0)
        )

    return float(sigma_0)
