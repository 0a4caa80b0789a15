"""
Numerical differentiation.

Central finite-difference gradients of scalar objectives. The ARMA cost
functions are compositions of recursions and iterative scale solvers, so the
optimizer is given these gradients in place of analytic ones.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from rarma.core.exceptions import raise_dimension_error, raise_numeric_error, warn_numeric
from rarma.core.types import ObjectiveFunction, Vector

logger = logging.getLogger("rarma.utils.differentiation")


def default_step(x: Vector) -> np.ndarray:
    """
    Per-coordinate step of the central difference.

    ``eps^(1/3) * max(|x_i|, 1)``, which balances truncation and rounding
    error for a central difference.
    """
    x = np.asarray(x, dtype=np.float64)
    return np.finfo(np.float64).eps ** (1.0 / 3.0) * np.maximum(np.abs(x), 1.0)


def gradient_2sided(func: ObjectiveFunction,
                    x: Vector,
                    epsilon: Optional[float] = None,
                    args: Tuple = ()) -> Vector:
    """
    Compute two-sided numerical gradient of a function.

    For a function f(x) the gradient is approximated by::

        df/dx_i ~ [f(x + h_i e_i) - f(x - h_i e_i)] / (2 h_i)

    where e_i is the i-th unit vector.

    Args:
        func: Function to differentiate, taking a vector and returning a scalar
        x: Point at which to compute the gradient
        epsilon: Fixed step size; when None a per-coordinate step scaled by
            the magnitude of ``x`` is used (see ``default_step``)
        args: Additional arguments passed to ``func``

    Returns:
        Gradient vector of the same shape as x

    Raises:
        DimensionError: If x is not a 1D array
        NumericError: If the function raises during evaluation

    Examples:
        >>> import numpy as np
        >>> from rarma.utils.differentiation import gradient_2sided
        >>> def f(x): return x[0]**2 + x[1]**2
        >>> np.round(gradient_2sided(f, np.array([1.0, 2.0])), 6)
        array([2., 4.])
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise_dimension_error(
            "Input must be a 1D vector",
            array_name="x",
            expected_shape="(n,)",
            actual_shape=x.shape
        )

    if epsilon is None:
        steps = default_step(x)
    else:
        if not epsilon > 0:
            raise_numeric_error(
                "Finite-difference step must be positive",
                operation="gradient_2sided",
                values=epsilon,
                error_type="invalid_step"
            )
        steps = np.full(x.shape[0], float(epsilon))

    def evaluate(point: np.ndarray, index: int) -> float:
        try:
            return float(func(point, *args))
        except (ArithmeticError, ValueError, np.linalg.LinAlgError) as e:
            raise_numeric_error(
                f"Function evaluation failed in gradient_2sided at index {index}: {str(e)}",
                operation="gradient_2sided",
                values=point.copy(),
                error_type="function_evaluation_error"
            )

    n = x.shape[0]
    grad = np.zeros(n, dtype=np.float64)
    x_plus = x.copy()
    x_minus = x.copy()

    for i in range(n):
        x_plus[i] = x[i] + steps[i]
        f_plus = evaluate(x_plus, i)

        x_minus[i] = x[i] - steps[i]
        f_minus = evaluate(x_minus, i)

        with np.errstate(invalid="ignore", over="ignore"):
            grad[i] = (f_plus - f_minus) / (x_plus[i] - x_minus[i])

        if not np.isfinite(grad[i]):
            warn_numeric(
                f"Non-finite gradient detected at index {i}",
                operation="gradient_2sided",
                issue="non_finite_gradient",
                value=grad[i]
            )

        x_plus[i] = x[i]
        x_minus[i] = x[i]

    return grad
