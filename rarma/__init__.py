# rarma/__init__.py
"""
RARMA Toolbox - Robust ARMA estimation for Python

Estimation of ARMA(p,q) models that stays reliable when the observed series
contains outliers. The toolbox provides:
- Classical estimators: least squares (OLS) and exact Gaussian maximum likelihood (MLE)
- Robust estimators: filtered-tau, S, BIP-S, MM and BIP-MM
- Hannan-Rissanen initial estimates
- Robust location and scale primitives and the BIP and tau weight families
- Simulation of ARMA processes with contaminated innovations

Example:
    >>> import rarma
    >>> y = rarma.simulate_arma([0.7], [0.2], mu=1.0, n=500, seed=0)
    >>> fit = rarma.estimate(y, "bip_mm", p=1, q=1)  # doctest: +SKIP
    >>> print(fit)  # doctest: +SKIP
"""

import logging
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("rarma")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)

from .version import __version__, __title__, __description__, __license__

from . import core
from . import models
from . import utils

from .core.config import get_config, reset_config, save_config, set_config
from .core.exceptions import (
    ConvergenceWarning, DataError, DimensionError, ModelSpecificationError,
    NumericError, NumericWarning, ParameterError, RARMAError
)
from .core.parameters import ARMAParameters
from .core.results import ARMAFit, EstimationMethod, EstimationResult
from .models.time_series import (
    ARMAModel, SolverOptions, bip_mm, bip_s, estimate, ftau, hannan_rissanen,
    mle, mm, ols, s, sigma_mle, sigma_ols, simulate_arma,
    generate_innovations_with_outliers
)


def set_log_level(level: Union[int, str]) -> None:
    """
    Set the level of the ``rarma`` package logger.

    Args:
        level: A logging level such as ``logging.DEBUG`` or ``"DEBUG"``
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)


__all__ = [
    "__version__",
    "set_log_level",
    "get_config",
    "set_config",
    "reset_config",
    "save_config",
    "RARMAError",
    "ParameterError",
    "DimensionError",
    "NumericError",
    "DataError",
    "ModelSpecificationError",
    "ConvergenceWarning",
    "NumericWarning",
    "ARMAParameters",
    "ARMAFit",
    "EstimationMethod",
    "EstimationResult",
    "ARMAModel",
    "SolverOptions",
    "estimate",
    "hannan_rissanen",
    "ols",
    "mle",
    "ftau",
    "s",
    "bip_s",
    "mm",
    "bip_mm",
    "sigma_ols",
    "sigma_mle",
    "simulate_arma",
    "generate_innovations_with_outliers",
]
