"""
Robust ARMA time series models.

Contents:
- ``ARMAModel``: observed series with orders (p, q) and the residual recursions
- ``estimators``: OLS, MLE, filtered-tau, S, BIP-S, MM and BIP-MM estimators
- ``initial``: Hannan-Rissanen starting values
- ``robust`` and ``weights``: robust location/scale and the BIP and tau weight families
- ``state_space``: state-space form used by the likelihood and filtered-tau objectives
- ``simulate``: ARMA simulation with contaminated innovations
"""

import logging

logger = logging.getLogger("rarma.models.time_series")

from .arma import ARMAModel
from .costs import (
    CostFunction, OLSCost, MLECost, FTauCost, SCost, BIPSCost, MMCost, BMMCost
)
from .estimators import (
    estimate, ols, mle, ftau, s, bip_s, mm_stage, bmm_stage, mm, bip_mm,
    sigma_ols, sigma_mle
)
from .initial import hannan_rissanen
from .robust import bisquare, huber, mad, madn, median, scale
from .simulate import (
    generate_innovations_with_outliers, is_invertible, is_stationary, simulate_arma
)
from .solver import SolverOptions, solve
from .state_space import StateSpaceBuilder, StateSpaceSystem
from .utils import autocov_matrix, bip_sigma, impulse_response, robust_autocov_matrix
from .weights import BIP, TAU, BIPWeights, TauWeights, WeightFamily

__all__ = [
    "ARMAModel",
    "CostFunction",
    "OLSCost",
    "MLECost",
    "FTauCost",
    "SCost",
    "BIPSCost",
    "MMCost",
    "BMMCost",
    "estimate",
    "ols",
    "mle",
    "ftau",
    "s",
    "bip_s",
    "mm_stage",
    "bmm_stage",
    "mm",
    "bip_mm",
    "sigma_ols",
    "sigma_mle",
    "hannan_rissanen",
    "median",
    "mad",
    "madn",
    "huber",
    "bisquare",
    "scale",
    "simulate_arma",
    "generate_innovations_with_outliers",
    "is_stationary",
    "is_invertible",
    "SolverOptions",
    "solve",
    "StateSpaceBuilder",
    "StateSpaceSystem",
    "autocov_matrix",
    "robust_autocov_matrix",
    "impulse_response",
    "bip_sigma",
    "BIP",
    "TAU",
    "BIPWeights",
    "TauWeights",
    "WeightFamily",
]
