"""
Simulation of ARMA processes.

Generates stationary, invertible ARMA(p,q) paths, optionally driven by
innovations contaminated with additive outliers, for testing and for
Monte Carlo studies of the robust estimators.
"""

import logging
from typing import Optional

import numpy as np
from statsmodels.tsa.arima_process import ArmaProcess

from rarma.core.config import get_config
from rarma.core.exceptions import raise_dimension_error, raise_parameter_error
from rarma.core.types import Vector
from rarma.core.validation import validate_coefficients, validate_order, validate_time_series
from rarma.models.time_series._numba_core import arma_simulate

logger = logging.getLogger("rarma.models.time_series.simulate")


def _process(phi: Vector, theta: Vector) -> ArmaProcess:
    phi = validate_coefficients(phi, name="phi")
    theta = validate_coefficients(theta, name="theta")
    return ArmaProcess(np.r_[1.0, -phi], np.r_[1.0, theta])


def is_stationary(phi: Vector) -> bool:
    """True if all roots of ``1 - phi_1 z - ... - phi_p z^p`` lie outside the unit circle."""
    return bool(_process(phi, []).isstationary)


def is_invertible(theta: Vector) -> bool:
    """True if all roots of ``1 + theta_1 z + ... + theta_q z^q`` lie outside the unit circle."""
    return bool(_process([], theta).isinvertible)


def _default_rng(seed: Optional[int]) -> np.random.Generator:
    if seed is None:
        seed = get_config("core", "random_seed")
    return np.random.default_rng(seed)


def simulate_arma(phi: Vector,
                  theta: Vector,
                  mu: float = 0.0,
                  n: int = 500,
                  burn_in: int = 100,
                  seed: Optional[int] = None,
                  innovations: Optional[Vector] = None) -> np.ndarray:
    """
    Simulate an ARMA(p,q) path.

    Args:
        phi: Autoregressive coefficients; must describe a stationary process
        theta: Moving average coefficients; must describe an invertible process
        mu: Mean of the process
        n: Number of observations returned
        burn_in: Number of leading observations discarded
        seed: Seed of the innovation generator; the configured
            ``core.random_seed`` when None
        innovations: Innovations of length ``n + burn_in``; standard normal
            draws when None

    Returns:
        np.ndarray: The last ``n`` values of the path

    Raises:
        ParameterError: If the parameters are not stationary and invertible,
            or ``n`` is not positive
        DimensionError: If ``innovations`` has the wrong length

    Examples:
        >>> from rarma.models.time_series.simulate import simulate_arma
        >>> y = simulate_arma([0.5], [0.3], mu=1.0, n=200, seed=1)
        >>> y.shape
        (200,)
    """
    phi = validate_coefficients(phi, name="phi")
    theta = validate_coefficients(theta, name="theta")
    n = validate_order(n, "n")
    burn_in = validate_order(burn_in, "burn_in")
    mu = float(mu)

    if n == 0:
        raise_parameter_error(
            "Number of observations must be positive",
            param_name="n",
            param_value=n,
            constraint="n > 0"
        )
    if not np.isfinite(mu):
        raise_parameter_error(
            "mu must be finite",
            param_name="mu",
            param_value=mu,
            constraint="finite value"
        )
    if not is_stationary(phi):
        raise_parameter_error(
            "Autoregressive coefficients do not describe a stationary process",
            param_name="phi",
            param_value=phi,
            constraint="roots of the AR polynomial outside the unit circle"
        )
    if not is_invertible(theta):
        raise_parameter_error(
            "Moving average coefficients do not describe an invertible process",
            param_name="theta",
            param_value=theta,
            constraint="roots of the MA polynomial outside the unit circle"
        )

    total = n + burn_in
    if innovations is None:
        e = _default_rng(seed).standard_normal(total)
    else:
        e = validate_time_series(innovations, data_name="innovations")
        if e.shape[0] != total:
            raise_dimension_error(
                f"Innovations must have length n + burn_in = {total}",
                array_name="innovations",
                expected_shape=(total,),
                actual_shape=e.shape
            )

    path = arma_simulate(np.ascontiguousarray(e), phi, theta, mu)
    logger.debug(
        f"Simulated ARMA({phi.shape[0]},{theta.shape[0]}) path of length {n} "
        f"after {burn_in} burn-in observations"
    )
    return path[burn_in:].copy()


def generate_innovations_with_outliers(n: int,
                                       contamination: float = 0.1,
                                       magnitude: float = 5.0,
                                       seed: Optional[int] = None) -> np.ndarray:
    """
    Standard normal innovations with additive outliers.

    ``round(contamination * n)`` positions, drawn without replacement, are
    shifted by ``magnitude`` with a random sign.

    Args:
        n: Number of innovations
        contamination: Fraction of contaminated positions, in [0, 1]
        magnitude: Size of the added outliers
        seed: Seed of the generator; the configured ``core.random_seed`` when None

    Returns:
        np.ndarray: Innovations of length ``n``

    Raises:
        ParameterError: If ``contamination`` is outside [0, 1] or ``n`` is not positive
    """
    n = validate_order(n, "n")
    if n == 0:
        raise_parameter_error(
            "Number of innovations must be positive",
            param_name="n",
            param_value=n,
            constraint="n > 0"
        )
    if not 0.0 <= contamination <= 1.0:
        raise_parameter_error(
            "Contamination must be a fraction",
            param_name="contamination",
            param_value=contamination,
            constraint="0 <= contamination <= 1"
        )

    rng = _default_rng(seed)
    e = rng.standard_normal(n)
    count = int(round(contamination * n))
    if count > 0:
        positions = rng.choice(n, size=count, replace=False)
        signs = rng.choice(np.array([-1.0, 1.0]), size=count)
        e[positions] += signs * magnitude
    return e
