"""
ARMA model and residual generators.

``ARMAModel`` is an immutable view over an observed series together with the
orders ``(p, q)``. It carries two robust statistics computed once at
construction (the median as location and an M-scale of the centered series
as dispersion) and turns parameter values into residual sequences, either by
the classical recursion or by the bounded-influence-propagation (BIP)
recursion. The recursions themselves live in ``_numba_core``.
"""

import logging
from typing import TYPE_CHECKING, Optional, Union

import numpy as np
import pandas as pd

from rarma.core.exceptions import raise_dimension_error
from rarma.core.parameters import ARMAParameters
from rarma.core.types import ParameterVector, TimeSeriesData, Vector
from rarma.core.validation import validate_order, validate_time_series
from rarma.models.time_series._numba_core import arma_residuals, bip_arma_residuals
from rarma.models.time_series.robust import median, scale

if TYPE_CHECKING:
    from rarma.core.results import ARMAFit
    from rarma.models.time_series.solver import SolverOptions

logger = logging.getLogger("rarma.models.time_series.arma")


class ARMAModel:
    """Observed series and ARMA(p,q) specification.

    The series is copied on construction and stored read-only, so a model can
    be shared freely between cost functions, fits and threads.

    Attributes:
        y: Observed series (read-only float64 array)
        p: Order of the autoregressive component
        q: Order of the moving average component
        r: ``max(p, q)``, the first index with a defined residual
        n: Length of the series
        mu: Median of the series
        sigma: M-scale of the median-centered series
        index: Index of the input when it was a Pandas Series, else None
    """

    __slots__ = ("y", "p", "q", "r", "n", "mu", "sigma", "index")

    def __init__(self, y: TimeSeriesData, p: int, q: int):
        """Initialize the model.

        Args:
            y: Observed series
            p: Order of the autoregressive component
            q: Order of the moving average component

        Raises:
            ParameterError: If an order is not a non-negative integer
            DimensionError: If the series is not longer than ``max(p, q)``
            DataError: If the series contains NaN or infinite values
        """
        p = validate_order(p, "p")
        q = validate_order(q, "q")
        values = validate_time_series(y, min_length=1, data_name="y")

        r = max(p, q)
        if values.shape[0] <= r:
            raise_dimension_error(
                f"Series of length {values.shape[0]} is too short for an ARMA({p},{q}) model",
                array_name="y",
                expected_shape=f"(n,) with n > {r}",
                actual_shape=values.shape
            )

        values.setflags(write=False)
        self.y = values
        self.p = p
        self.q = q
        self.r = r
        self.n = values.shape[0]
        self.index = y.index if isinstance(y, pd.Series) else None
        self.mu = median(values)
        self.sigma = scale(values - self.mu)

        logger.debug(
            f"Created ARMA({p},{q}) model: n={self.n}, mu={self.mu:.4f}, sigma={self.sigma:.4f}"
        )

    @property
    def num_params(self) -> int:
        """Length of the flat parameter vector ``[phi, theta, mu]``."""
        return self.p + self.q + 1

    def unpack(self, params: Union[ARMAParameters, ParameterVector]) -> ARMAParameters:
        """Convert a flat parameter vector to ``ARMAParameters`` for this model."""
        if isinstance(params, ARMAParameters):
            if params.p != self.p or params.q != self.q:
                return ARMAParameters.from_array(params.to_array(), self.p, self.q)
            return params
        return ARMAParameters.from_array(params, self.p, self.q)

    def residuals(self, params: Union[ARMAParameters, ParameterVector]) -> Vector:
        """Classical residuals; zero below ``r``.

        Args:
            params: Parameters as ``ARMAParameters`` or a flat vector

        Returns:
            np.ndarray: Residuals of length ``n``
        """
        params = self.unpack(params)
        return arma_residuals(self.y, params.phi, params.theta, params.mu)

    def bip_residuals(self,
                      params: Union[ARMAParameters, ParameterVector],
                      sigma: Optional[float] = None) -> Vector:
        """Bounded-influence-propagation residuals; zero below ``r``.

        Args:
            params: Parameters as ``ARMAParameters`` or a flat vector
            sigma: Nuisance scale of the recursion; the model dispersion
                ``self.sigma`` when None

        Returns:
            np.ndarray: Residuals of length ``n``
        """
        params = self.unpack(params)
        if sigma is None:
            sigma = self.sigma
        return bip_arma_residuals(self.y, params.phi, params.theta, params.mu, float(sigma))

    def fit(self, method: str = "bip_mm",
            options: Optional['SolverOptions'] = None) -> 'ARMAFit':
        """Estimate the model with one of the estimators in ``estimators``.

        Args:
            method: Estimator name, e.g. ``"ols"``, ``"mle"``, ``"mm"``, ``"bip_mm"``
            options: Optimizer options

        Returns:
            ARMAFit: The fitted model
        """
        from rarma.models.time_series.estimators import estimate
        return estimate(self, method, options=options)

    def __repr__(self) -> str:
        return f"ARMAModel(p={self.p}, q={self.q}, n={self.n})"
