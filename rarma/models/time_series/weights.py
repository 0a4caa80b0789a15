"""
Bounded-influence weight families.

Two families of redescending loss functions are used by the robust
estimators. They are structurally identical (a loss ``rho``, its influence
function ``psi`` and the implied weight ``psi(x) / x``) but numerically
distinct, so each is a small strategy class satisfying ``WeightFamily`` and
an estimator picks the one it needs when it is constructed.

``BIPWeights``
    The family of Muler, Pena and Yohai (2009) used by the S, BIP-S, MM and
    BMM estimators and by the BIP residual recursion. ``rho1`` is the
    scale-type loss, ``rho2`` the efficiency loss of the MM step.

``TauWeights``
    The family of Bianco et al. (1996) used by the filtered-tau estimator.

The constants are the published tuning values; each one fixes a specific
breakdown point or asymptotic efficiency, so they must not be changed.
"""

from dataclasses import dataclass
from typing import ClassVar, Protocol, Union, runtime_checkable

import numpy as np

from rarma.core.types import Vector
from rarma.models.time_series import _numba_core as core
from rarma.models.time_series.robust import scale

ArrayOrFloat = Union[np.ndarray, float]


def _elementwise(kernel, x) -> ArrayOrFloat:
    """Apply an array kernel to a scalar or an array of any shape."""
    values = np.asarray(x, dtype=np.float64)
    result = kernel(np.ascontiguousarray(values.ravel())).reshape(values.shape)
    if values.ndim == 0:
        return float(result)
    return result


@runtime_checkable
class WeightFamily(Protocol):
    """Interface shared by the weight families."""

    rho_max: ClassVar[float]

    def rho(self, x: Vector) -> ArrayOrFloat:
        """Scale-type loss, bounded by ``rho_max``."""
        ...

    def psi(self, x: Vector) -> ArrayOrFloat:
        """Bounded influence function."""
        ...

    def weight(self, x: Vector) -> ArrayOrFloat:
        """Implied weight ``psi(x) / x``, zero at the origin."""
        ...


@dataclass(frozen=True)
class BIPWeights:
    """
    Bounded-influence-propagation weight family.

    Attributes:
        rho_max: Supremum of ``rho2`` (and of ``rho1``)
        scale_constant: Rescaling of ``rho2`` that defines ``rho1``
        kappa: Efficiency constant of the BIP innovation scale
    """

    rho_max: ClassVar[float] = core.BIP_RHO_MAX
    scale_constant: ClassVar[float] = core.BIP_SCALE_CONSTANT
    kappa: ClassVar[float] = 0.8725

    @property
    def delta(self) -> float:
        """Right-hand side of the S-scale equation, ``rho_max / 2``."""
        return self.rho_max / 2.0

    def eta(self, x: Vector) -> ArrayOrFloat:
        """Redescending psi: identity on [-2, 2], polynomial on (2, 3], zero beyond."""
        return _elementwise(core.bip_eta_array, x)

    def psi(self, x: Vector) -> ArrayOrFloat:
        return self.eta(x)

    def rho1(self, x: Vector) -> ArrayOrFloat:
        """Scale-type loss, ``rho2(x / 0.405)``."""
        return _elementwise(core.bip_rho1_array, x)

    def rho(self, x: Vector) -> ArrayOrFloat:
        return self.rho1(x)

    def rho2(self, x: Vector) -> ArrayOrFloat:
        """Efficiency loss: ``x^2 / 2`` on [-2, 2], polynomial on (2, 3], 3.25 beyond."""
        return _elementwise(core.bip_rho2_array, x)

    def weight(self, x: Vector) -> ArrayOrFloat:
        return _elementwise(core.bip_weight_array, x)


@dataclass(frozen=True)
class TauWeights:
    """
    Tau-estimator weight family.

    Attributes:
        c1: Cutoff of the breakdown-tuned loss ``rho1`` and of ``psi``
        c2: Cutoff of the efficiency-tuned loss ``rho2``
        rho_max: Supremum of ``rho1``
    """

    c1: ClassVar[float] = core.TAU_C1
    c2: ClassVar[float] = core.TAU_C2
    rho_max: ClassVar[float] = 1.0

    def rho1(self, x: Vector) -> ArrayOrFloat:
        return _elementwise(core.tau_rho1_array, x)

    def rho(self, x: Vector) -> ArrayOrFloat:
        return self.rho1(x)

    def rho2(self, x: Vector) -> ArrayOrFloat:
        return _elementwise(core.tau_rho2_array, x)

    def psi(self, x: Vector) -> ArrayOrFloat:
        """Huber psi clipped at ``c1``."""
        return _elementwise(core.tau_psi_array, x)

    def weight(self, x: Vector) -> ArrayOrFloat:
        return _elementwise(core.tau_weight_array, x)

    def s(self, u: Vector, tol: float = 1e-6, max_iter: int = 100) -> float:
        """M-scale of ``u`` under ``rho1`` with ``b = 0.5``."""
        return scale(u, 0.5, self.rho1, tol, max_iter)

    def tau2(self, u: Vector, tol: float = 1e-6, max_iter: int = 100) -> float:
        """Squared tau-scale, ``s^2 * sum(rho2(u / s))``."""
        values = np.asarray(u, dtype=np.float64)
        s = self.s(values, tol, max_iter)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(s * s * np.sum(self.rho2(values / s)))


BIP = BIPWeights()
TAU = TauWeights()
