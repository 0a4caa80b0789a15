"""
State-space representation of ARMA models.

The ARMA(p,q) model is written in the companion (Harvey) form with state
dimension ``m = max(p, q + 1)``::

    a[t+1] = F a[t] + c + H e[t+1]
    y[t]   = z' a[t]

where ``F`` has the AR coefficients in its first column and ones on the
superdiagonal, ``H = (1, theta_1, ..., theta_q, 0, ...)``, ``z`` is the first
unit vector and ``c`` carries the mean offset ``mu * (1 - sum(phi))``.

``StateSpaceBuilder`` builds these matrices; the exact-likelihood and the
filtered-tau objectives both use it and feed the matrices to the filters in
``_numba_core``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import linalg

from rarma.core.parameters import ARMAParameters
from rarma.core.types import CovarianceMatrix, Matrix, Vector

logger = logging.getLogger("rarma.models.time_series.state_space")


@dataclass(frozen=True)
class StateSpaceSystem:
    """Matrices of one ARMA state-space model.

    Attributes:
        transition: Transition matrix F
        loading: Innovation loading vector H
        drift: Constant vector c
        initial_state: Mean of the state before the first observation
        initial_cov: Covariance of the state before the first observation,
            for unit innovation variance; None when F is not stable
    """

    transition: Matrix
    loading: Vector
    drift: Vector
    initial_state: Vector
    initial_cov: Optional[CovarianceMatrix]

    @property
    def is_stable(self) -> bool:
        """Whether a stationary initial covariance exists."""
        return self.initial_cov is not None


class StateSpaceBuilder:
    """Builds the companion-form matrices for fixed orders ``(p, q)``.

    Attributes:
        p: Order of the autoregressive component
        q: Order of the moving average component
        dim: State dimension ``max(p, q + 1)``
    """

    def __init__(self, p: int, q: int):
        self.p = p
        self.q = q
        self.dim = max(p, q + 1)

    def transition(self, phi: Vector) -> Matrix:
        """Companion transition matrix with ``phi`` in the first column."""
        F = np.zeros((self.dim, self.dim))
        F[:-1, 1:] = np.eye(self.dim - 1)
        F[:self.p, 0] = phi
        return F

    def loading(self, theta: Vector) -> Vector:
        """Innovation loading ``(1, theta, 0, ...)``."""
        H = np.zeros(self.dim)
        H[0] = 1.0
        H[1:self.q + 1] = theta
        return H

    def measurement(self) -> Vector:
        """Measurement vector selecting the first state component."""
        z = np.zeros(self.dim)
        z[0] = 1.0
        return z

    def drift(self, phi: Vector, mu: float) -> Vector:
        """Constant vector ``(mu * (1 - sum(phi)), 0, ...)``."""
        c = np.zeros(self.dim)
        c[0] = mu * (1.0 - np.sum(phi))
        return c

    @staticmethod
    def is_stable(F: Matrix) -> bool:
        """Whether all eigenvalues of ``F`` lie strictly inside the unit circle."""
        return bool(np.max(np.abs(np.linalg.eigvals(F))) < 1.0)

    @staticmethod
    def initial_covariance(F: Matrix, H: Vector) -> CovarianceMatrix:
        """
        Stationary state covariance for unit innovation variance.

        Solves the discrete Lyapunov equation ``P = F P F' + H H'``, i.e.
        ``vec(P) = (I - F kron F)^-1 vec(H H')``. Only meaningful when ``F`` is
        stable.
        """
        P = linalg.solve_discrete_lyapunov(F, np.outer(H, H), method="direct")
        # Symmetrize against round-off in the Kronecker solve
        return np.ascontiguousarray(0.5 * (P + P.T))

    def initial_state(self, F: Matrix, c: Vector) -> Vector:
        """Stationary state mean ``(I - F)^-1 c``; requires a stable ``F``."""
        return np.linalg.solve(np.eye(self.dim) - F, c)

    def build(self, params: ARMAParameters) -> StateSpaceSystem:
        """Build all matrices for the given parameters."""
        F = self.transition(params.phi)
        H = self.loading(params.theta)
        c = self.drift(params.phi, params.mu)

        if self.is_stable(F):
            P0 = self.initial_covariance(F, H)
            a0 = self.initial_state(F, c)
        else:
            logger.debug("Transition matrix is not stable, no stationary initialization")
            P0 = None
            a0 = np.zeros(self.dim)

        return StateSpaceSystem(
            transition=F,
            loading=H,
            drift=c,
            initial_state=a0,
            initial_cov=P0
        )
