"""
ARMA estimators.

Every estimator starts from the Hannan-Rissanen fit of the model and
minimizes its objective from ``costs`` with the solver adapter. The MM-type
estimators are two-stage: an S-type fit supplies both the starting point and
the fixed scale of the efficiency step.

Example:
    >>> from rarma.models.time_series import ARMAModel, estimate
    >>> fit = estimate(ARMAModel(y, 1, 1), "bip_mm")  # doctest: +SKIP
    >>> print(fit.summary())  # doctest: +SKIP
"""

import logging
from typing import Callable, Dict, Optional, Union

import numpy as np

from rarma.core.exceptions import ModelSpecificationError
from rarma.core.results import ARMAFit, EstimationMethod
from rarma.core.types import TimeSeriesData
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.costs import (
    BIPSCost, BMMCost, FTauCost, MLECost, MMCost, OLSCost, SCost
)
from rarma.models.time_series.initial import hannan_rissanen
from rarma.models.time_series.solver import SolverOptions, solve

logger = logging.getLogger("rarma.models.time_series.estimators")

Estimator = Callable[[ARMAModel, Optional[SolverOptions]], ARMAFit]


def ols(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """Least-squares estimate (sum of squared classical residuals)."""
    return solve(model, hannan_rissanen(model), OLSCost(model), options=options)


def mle(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """Exact Gaussian maximum-likelihood estimate."""
    return solve(model, hannan_rissanen(model), MLECost(model), options=options)


def ftau(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """Filtered-tau estimate."""
    return solve(model, hannan_rissanen(model), FTauCost(model), options=options)


def s(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """S-estimate: minimum M-scale of the classical residuals.

    The final cost is the residual scale, which the MM stage uses as its
    fixed scale.
    """
    return solve(model, hannan_rissanen(model), SCost(model), options=options)


def bip_s(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """BIP S-estimate: minimum M-scale of the BIP residuals."""
    return solve(model, hannan_rissanen(model), BIPSCost(model), options=options)


def mm_stage(model: ARMAModel, sigma: float, initial: ARMAFit,
             options: Optional[SolverOptions] = None) -> ARMAFit:
    """Efficiency step on the classical residuals at the fixed scale ``sigma``."""
    return solve(model, initial, MMCost(model, sigma), options=options)


def bmm_stage(model: ARMAModel, sigma: float, initial: ARMAFit,
              options: Optional[SolverOptions] = None) -> ARMAFit:
    """Efficiency step on the BIP residuals at the fixed scale ``sigma``."""
    return solve(model, initial, BMMCost(model, sigma), options=options)


def mm(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """MM-estimate seeded by, and at the scale of, the S-estimate."""
    s_fit = s(model, options)
    sigma = s_fit.result.final_cost
    logger.debug(f"MM stage with S scale {sigma:.6f}")
    return mm_stage(model, sigma, s_fit, options)


def bip_mm(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    """
    BIP-MM estimate.

    Runs the S and BIP-S estimators, takes the smaller of their scales as the
    common scale, runs the MM step from the S fit and the BMM step from the
    BIP-S fit, and returns whichever reaches the lower cost. Ties go to MM.
    """
    s_fit = s(model, options)
    bs_fit = bip_s(model, options)
    sigma = min(s_fit.result.final_cost, bs_fit.result.final_cost)
    logger.debug(
        f"BIP-MM scales: S={s_fit.result.final_cost:.6f}, "
        f"BS={bs_fit.result.final_cost:.6f}, using {sigma:.6f}"
    )

    mm_fit = mm_stage(model, sigma, s_fit, options)
    bmm_fit = bmm_stage(model, sigma, bs_fit, options)
    if bmm_fit.result.final_cost < mm_fit.result.final_cost:
        logger.debug("BIP-MM selected the BMM stage")
        return bmm_fit
    logger.debug("BIP-MM selected the MM stage")
    return mm_fit


def _hannan_rissanen(model: ARMAModel, options: Optional[SolverOptions] = None) -> ARMAFit:
    return hannan_rissanen(model)


ESTIMATORS: Dict[str, Estimator] = {
    "hr": _hannan_rissanen,
    "ols": ols,
    "mle": mle,
    "ftau": ftau,
    "s": s,
    "bip_s": bip_s,
    "bs": bip_s,
    "mm": mm,
    "bip_mm": bip_mm,
    "bmm": bip_mm,
}

_METHOD_NAMES = {
    EstimationMethod.HANNAN_RISSANEN: "hr",
    EstimationMethod.OLS: "ols",
    EstimationMethod.MLE: "mle",
    EstimationMethod.FTAU: "ftau",
    EstimationMethod.S: "s",
    EstimationMethod.BS: "bip_s",
    EstimationMethod.MM: "mm",
    # BIP-MM pipeline; the stage alone is bmm_stage
    EstimationMethod.BMM: "bip_mm",
}


def estimate(model_or_series: Union[ARMAModel, TimeSeriesData],
             method: Union[str, EstimationMethod] = "bip_mm",
             p: Optional[int] = None,
             q: Optional[int] = None,
             options: Optional[SolverOptions] = None) -> ARMAFit:
    """
    Estimate an ARMA model by name.

    Args:
        model_or_series: An ``ARMAModel``, or a series together with ``p`` and ``q``
        method: Estimator name (``"hr"``, ``"ols"``, ``"mle"``, ``"ftau"``,
            ``"s"``, ``"bip_s"``/``"bs"``, ``"mm"``, ``"bip_mm"``/``"bmm"``)
            or an ``EstimationMethod``. ``"bmm"`` and
            ``EstimationMethod.BMM`` run the full BIP-MM pipeline, whose
            result is tagged ``MM`` or ``BMM`` after the stage it selects;
            ``bmm_stage`` runs the BMM step alone
        p: Autoregressive order when a series is given
        q: Moving average order when a series is given
        options: Optimizer options

    Returns:
        ARMAFit: The fitted model

    Raises:
        ModelSpecificationError: If the estimator is unknown, or a series is
            given without its orders
    """
    if isinstance(method, EstimationMethod):
        name = _METHOD_NAMES[method]
    else:
        name = str(method).strip().lower().replace("-", "_")

    estimator = ESTIMATORS.get(name)
    if estimator is None:
        raise ModelSpecificationError(
            f"Unknown estimator '{method}'",
            model_type="ARMA",
            parameter="method",
            valid_options=sorted(ESTIMATORS)
        )

    if isinstance(model_or_series, ARMAModel):
        model = model_or_series
    else:
        if p is None or q is None:
            raise ModelSpecificationError(
                "Orders p and q are required when estimating from a series",
                model_type="ARMA",
                parameter="p, q"
            )
        model = ARMAModel(model_or_series, p, q)

    logger.info(f"Estimating ARMA({model.p},{model.q}) with {name} on {model.n} observations")
    return estimator(model, options)


def sigma_ols(fit: ARMAFit) -> float:
    """Innovation variance of a least-squares fit, ``sum(e^2) / n``."""
    e = fit.model.residuals(fit.params)
    return float(np.dot(e, e) / fit.model.n)


def sigma_mle(fit: ARMAFit) -> float:
    """Innovation variance of a likelihood fit, ``mean(v^2 / f)``."""
    v, f = MLECost(fit.model).innovations(fit.params)
    return float(np.mean(v * v / f))
