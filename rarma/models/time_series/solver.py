"""
Solver adapter.

Runs ``scipy.optimize.minimize`` on an estimator objective, starting from the
parameters of a seeding fit, and packages the outcome as an ``ARMAFit``.
Non-convergence is recorded in the result and reported as a
``ConvergenceWarning``; it never raises.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import optimize

from rarma.core.config import VALID_OPTIMIZATION_METHODS, get_numerical_config
from rarma.core.exceptions import raise_parameter_error, warn_convergence
from rarma.core.parameters import ARMAParameters
from rarma.core.results import ARMAFit, EstimationMethod, EstimationResult
from rarma.core.solver_logging import initialize_solver_logging
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.costs import CostFunction
from rarma.utils.differentiation import gradient_2sided

logger = logging.getLogger("rarma.models.time_series.solver")

# Methods that take no gradient
GRADIENT_FREE_METHODS = ("Powell", "Nelder-Mead")


@dataclass
class SolverOptions:
    """
    Options of the numerical optimizer.

    Attributes:
        method: ``scipy.optimize.minimize`` method name
        max_iterations: Maximum number of optimizer iterations
        tolerance: Convergence tolerance passed as ``tol``
        finite_difference_step: Fixed gradient step; None selects a step
            scaled by the magnitude of each parameter
        record_report: Whether to keep the optimizer report in the result
    """

    method: str = "L-BFGS-B"
    max_iterations: int = 1000
    tolerance: float = 1e-8
    finite_difference_step: Optional[float] = None
    record_report: bool = True

    def __post_init__(self) -> None:
        if self.method not in VALID_OPTIMIZATION_METHODS:
            raise_parameter_error(
                f"Unknown optimization method '{self.method}'",
                param_name="method",
                param_value=self.method,
                constraint=f"one of {', '.join(VALID_OPTIMIZATION_METHODS)}"
            )
        if int(self.max_iterations) <= 0:
            raise_parameter_error(
                "max_iterations must be positive",
                param_name="max_iterations",
                param_value=self.max_iterations,
                constraint="positive integer"
            )
        if not self.tolerance > 0:
            raise_parameter_error(
                "tolerance must be positive",
                param_name="tolerance",
                param_value=self.tolerance,
                constraint="positive float"
            )
        self.max_iterations = int(self.max_iterations)

    @classmethod
    def from_config(cls) -> 'SolverOptions':
        """Options taken from the ``numerical`` configuration section."""
        numerical = get_numerical_config()
        return cls(
            method=numerical.optimization_method,
            max_iterations=numerical.max_iterations,
            tolerance=numerical.optimization_tol,
            finite_difference_step=numerical.finite_difference_step
        )


def _report(result: optimize.OptimizeResult) -> str:
    message = result.message
    if isinstance(message, bytes):
        message = message.decode()
    return (
        f"{message} (iterations: {getattr(result, 'nit', 'n/a')}, "
        f"function evaluations: {getattr(result, 'nfev', 'n/a')})"
    )


def solve(model: ARMAModel,
          initial: ARMAFit,
          cost: CostFunction,
          method: Optional[EstimationMethod] = None,
          options: Optional[SolverOptions] = None) -> ARMAFit:
    """
    Minimize ``cost`` starting from the parameters of ``initial``.

    Args:
        model: Model being estimated
        initial: Fit whose parameters seed the optimizer
        cost: Objective of the estimator
        method: Estimator tag of the result; ``cost.method`` when None
        options: Optimizer options; taken from the configuration when None

    Returns:
        ARMAFit: Fit with the optimized parameters, the cost at those
        parameters, and ``initial``'s parameters and result as its seed
    """
    initialize_solver_logging()
    if options is None:
        options = SolverOptions.from_config()
    if method is None:
        method = cost.method

    x0 = model.unpack(initial.params).to_array()
    step = options.finite_difference_step

    def jacobian(x: np.ndarray) -> np.ndarray:
        return gradient_2sided(cost, x, epsilon=step)

    jac = None if options.method in GRADIENT_FREE_METHODS else jacobian

    logger.debug(f"Starting {method} optimization with {options.method} from {x0}")
    result = optimize.minimize(
        cost,
        x0,
        method=options.method,
        jac=jac,
        tol=options.tolerance,
        options={"maxiter": options.max_iterations}
    )

    x = np.asarray(result.x, dtype=np.float64)
    convergence = bool(result.success)
    report = _report(result)
    if not np.all(np.isfinite(x)):
        # The starting point is the best finite point known
        x = x0
        convergence = False
        report = f"non-finite parameters returned, starting values kept; {report}"

    params = ARMAParameters.from_array(x, model.p, model.q)
    final_cost = cost(params.to_array())

    if convergence:
        logger.debug(f"{method} optimization converged: {report}")
    else:
        logger.warning(f"{method} optimization did not converge: {report}")
        warn_convergence(
            f"{method} optimization did not converge",
            iterations=getattr(result, "nit", None),
            method=options.method,
            final_value=final_cost,
            details=report
        )

    return ARMAFit(
        model=model,
        params=params,
        result=EstimationResult(
            method=method,
            convergence=convergence,
            final_cost=final_cost,
            report=report if options.record_report else None
        ),
        initial_params=initial.params.copy(),
        initial_result=initial.result
    )
