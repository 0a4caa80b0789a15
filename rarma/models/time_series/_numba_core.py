"""
Numba-accelerated core functions for robust ARMA estimation.

Every objective evaluated by the optimizer runs one of the recursions below
over the full series, often thousands of times per fit, so they are compiled
with Numba's ``@jit``. The module holds:
- scalar kernels of the BIP and tau weight families, together with array
  versions used by the vectorized wrappers in ``weights.py``
- classical and bounded-influence-propagation (BIP) residual recursions
- the Kalman filter and its robust (filtered-tau) variant
- the ARMA simulation recursion

Kernels that divide by a scale or a variance use Numba's ``numpy`` error model,
so a zero denominator yields Inf/NaN instead of raising.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

# Set up module-level logger
logger = logging.getLogger("rarma.models.time_series._numba_core")

# ============================================================================
# Weight-family constants
# ============================================================================

# Bounded-influence-propagation family (Muler, Pena and Yohai, 2009)
BIP_INNER = 2.0
BIP_OUTER = 3.0
BIP_RHO_MAX = 3.25
BIP_SCALE_CONSTANT = 0.405

# Tau family (Bianco, Garcia Ben, Martinez and Yohai, 1996)
TAU_C1 = 1.55
TAU_C2 = 2.8


# ============================================================================
# Scalar weight kernels
# ============================================================================

@jit(nopython=True, cache=True)
def bip_eta(x: float) -> float:
    """Redescending influence function of the BIP family."""
    ax = abs(x)
    if ax <= BIP_INNER:
        return x
    if ax <= BIP_OUTER:
        return 0.016 * x ** 7 - 0.312 * x ** 5 + 1.728 * x ** 3 - 1.944 * x
    return 0.0


@jit(nopython=True, cache=True)
def bip_rho2(x: float) -> float:
    """Efficiency loss of the BIP family; quadratic near zero, 3.25 beyond 3."""
    ax = abs(x)
    if ax <= BIP_INNER:
        return 0.5 * x * x
    if ax <= BIP_OUTER:
        x2 = x * x
        return (0.002 * x2 ** 4 - 0.052 * x2 ** 3 + 0.432 * x2 ** 2
                - 0.972 * x2 + 1.792)
    return BIP_RHO_MAX


@jit(nopython=True, cache=True)
def bip_rho1(x: float) -> float:
    """Scale loss of the BIP family, a rescaled ``bip_rho2``."""
    return bip_rho2(x / BIP_SCALE_CONSTANT)


@jit(nopython=True, cache=True)
def tau_rho1(x: float) -> float:
    """Breakdown-tuned loss of the tau family, bounded by 1."""
    if abs(x) <= TAU_C1:
        d2 = (x / TAU_C1) ** 2
        return 3.0 * d2 - 3.0 * d2 ** 2 + d2 ** 3
    return 1.0


@jit(nopython=True, cache=True)
def tau_rho2(x: float) -> float:
    """Efficiency-tuned loss of the tau family."""
    if abs(x) <= TAU_C2:
        x2 = x * x
        return 0.14 * x2 + 0.012 * x2 ** 2 - 0.0018 * x2 ** 3
    return 1.0


@jit(nopython=True, cache=True)
def tau_psi(x: float) -> float:
    """Huber-type psi of the tau family, clipped at +/-1.55."""
    if x > TAU_C1:
        return TAU_C1
    if x < -TAU_C1:
        return -TAU_C1
    return x


@jit(nopython=True, cache=True)
def tau_weight(x: float) -> float:
    """Weight ``psi(x) / x`` of the tau family, 0 at the origin."""
    if x == 0.0:
        return 0.0
    return tau_psi(x) / x


@jit(nopython=True, cache=True)
def bip_weight(x: float) -> float:
    """Weight ``eta(x) / x`` of the BIP family, 0 at the origin."""
    if x == 0.0:
        return 0.0
    return bip_eta(x) / x


# ============================================================================
# Array versions of the weight kernels
# ============================================================================

@jit(nopython=True, cache=True)
def bip_eta_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = bip_eta(x[i])
    return out


@jit(nopython=True, cache=True)
def bip_rho1_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = bip_rho1(x[i])
    return out


@jit(nopython=True, cache=True)
def bip_rho2_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = bip_rho2(x[i])
    return out


@jit(nopython=True, cache=True)
def bip_weight_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = bip_weight(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_rho1_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = tau_rho1(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_rho2_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = tau_rho2(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_psi_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = tau_psi(x[i])
    return out


@jit(nopython=True, cache=True)
def tau_weight_array(x: np.ndarray) -> np.ndarray:
    out = np.empty_like(x)
    for i in range(x.shape[0]):
        out[i] = tau_weight(x[i])
    return out


# ============================================================================
# Residual recursions
# ============================================================================

@jit(nopython=True, cache=True)
def arma_residuals(data: np.ndarray,
                   phi: np.ndarray,
                   theta: np.ndarray,
                   mu: float) -> np.ndarray:
    """
    Compute classical ARMA residuals.

    For ``t >= r = max(p, q)``::

        e[t] = y[t] - mu * (1 - sum(phi)) - sum_j phi[j] * y[t-j-1]
                    - sum_k theta[k] * e[t-k-1]

    Residuals below ``r`` are left at zero.

    Args:
        data: Observed series
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        mu: Location of the process

    Returns:
        np.ndarray: Residual series of the same length as ``data``
    """
    n = data.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    r = max(p, q)
    residuals = np.zeros(n)

    constant = mu * (1.0 - np.sum(phi))

    for t in range(r, n):
        ar = 0.0
        for j in range(p):
            ar += phi[j] * data[t - j - 1]
        ma = 0.0
        for k in range(q):
            ma += theta[k] * residuals[t - k - 1]
        residuals[t] = data[t] - constant - ar - ma

    return residuals


@jit(nopython=True, cache=True, error_model="numpy")
def bip_arma_residuals(data: np.ndarray,
                       phi: np.ndarray,
                       theta: np.ndarray,
                       mu: float,
                       sigma: float) -> np.ndarray:
    """
    Compute bounded-influence-propagation (BIP) ARMA residuals.

    Past residuals re-enter the recursion only through ``sigma * eta(e / sigma)``,
    so a single outlier cannot propagate unboundedly into later residuals.
    For ``t >= r``::

        ar = sum_j phi[j] * (y[t-j-1] - e[t-j-1])
        rq = sum_k theta[k] * sigma * eta(e[t-k-1] / sigma)
        rp = sum_j phi[j] * sigma * eta(e[t-j-1] / sigma)
        e[t] = y[t] - mu * (1 - sum(phi)) - ar - rq - rp

    Args:
        data: Observed series
        phi: Autoregressive coefficients
        theta: Moving average coefficients
        mu: Location of the process
        sigma: Nuisance scale of the innovations

    Returns:
        np.ndarray: Residual series of the same length as ``data``
    """
    n = data.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    r = max(p, q)
    residuals = np.zeros(n)

    constant = mu * (1.0 - np.sum(phi))

    for t in range(r, n):
        ar = 0.0
        rp = 0.0
        for j in range(p):
            lagged = residuals[t - j - 1]
            ar += phi[j] * (data[t - j - 1] - lagged)
            rp += phi[j] * sigma * bip_eta(lagged / sigma)
        rq = 0.0
        for k in range(q):
            rq += theta[k] * sigma * bip_eta(residuals[t - k - 1] / sigma)
        residuals[t] = data[t] - constant - ar - rq - rp

    return residuals


# ============================================================================
# State-space filters
# ============================================================================

@jit(nopython=True, cache=True)
def _predict(state: np.ndarray,
             cov: np.ndarray,
             transition: np.ndarray,
             noise_cov: np.ndarray,
             drift: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """One prediction step: ``a = F a + c``, ``P = F P F' + Q``."""
    m = state.shape[0]

    new_state = np.empty(m)
    for i in range(m):
        acc = drift[i]
        for j in range(m):
            acc += transition[i, j] * state[j]
        new_state[i] = acc

    fp = np.zeros((m, m))
    for i in range(m):
        for k in range(m):
            f_ik = transition[i, k]
            if f_ik != 0.0:
                for j in range(m):
                    fp[i, j] += f_ik * cov[k, j]

    new_cov = noise_cov.copy()
    for i in range(m):
        for j in range(m):
            acc = 0.0
            for k in range(m):
                acc += fp[i, k] * transition[j, k]
            new_cov[i, j] += acc

    return new_state, new_cov


@jit(nopython=True, cache=True, error_model="numpy")
def kalman_filter(data: np.ndarray,
                  transition: np.ndarray,
                  loading: np.ndarray,
                  drift: np.ndarray,
                  initial_state: np.ndarray,
                  initial_cov: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the single-output Kalman filter of an ARMA state-space model.

    The measurement picks the first state component. Each step predicts
    (``a = F a + c``, ``P = F P F' + H H'``) and then updates with the
    one-step innovation ``v = y - a[0]`` and its variance ``f = P[0, 0]``.

    Returns:
        Tuple[np.ndarray, np.ndarray]: Innovations ``v`` and their variances ``f``
    """
    n = data.shape[0]
    m = initial_state.shape[0]

    noise_cov = np.outer(loading, loading)
    state = initial_state.copy()
    cov = initial_cov.copy()

    innovations = np.empty(n)
    variances = np.empty(n)

    for t in range(n):
        state, cov = _predict(state, cov, transition, noise_cov, drift)

        f = cov[0, 0]
        v = data[t] - state[0]
        innovations[t] = v
        variances[t] = f

        gain = cov[:, 0].copy()
        row = cov[0, :].copy()
        for i in range(m):
            state[i] += gain[i] * v / f
        for i in range(m):
            for j in range(m):
                cov[i, j] -= gain[i] * row[j] / f

    return innovations, variances


@jit(nopython=True, cache=True, error_model="numpy")
def robust_kalman_filter(data: np.ndarray,
                         transition: np.ndarray,
                         loading: np.ndarray,
                         drift: np.ndarray,
                         initial_state: np.ndarray,
                         initial_cov: np.ndarray,
                         sigma: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the robust filter used by the filtered-tau estimator.

    The prediction step uses ``sigma^2 H H'`` as state noise. The update
    replaces the raw standardized innovation by the bounded ``psi(u / s)`` and
    scales the covariance correction by the weight ``w(u / s)``::

        m = P[:, 0];  s = sqrt(m[0]);  u = y - a[0]
        a += m / s * psi(u / s)
        P -= m m' / s^2 * w(u / s)

    Returns:
        Tuple[np.ndarray, np.ndarray]: Prediction errors ``u`` and their
        standard deviations ``s``
    """
    n = data.shape[0]
    m = initial_state.shape[0]

    noise_cov = sigma * sigma * np.outer(loading, loading)
    state = initial_state.copy()
    cov = initial_cov.copy()

    errors = np.empty(n)
    scales = np.empty(n)

    for t in range(n):
        state, cov = _predict(state, cov, transition, noise_cov, drift)

        column = cov[:, 0].copy()
        s = np.sqrt(column[0])
        u = data[t] - state[0]
        errors[t] = u
        scales[t] = s

        z = u / s
        psi = tau_psi(z)
        weight = tau_weight(z)
        for i in range(m):
            state[i] += column[i] / s * psi
        for i in range(m):
            for j in range(m):
                cov[i, j] -= column[i] * column[j] / (s * s) * weight

    return errors, scales


# ============================================================================
# Simulation
# ============================================================================

@jit(nopython=True, cache=True)
def arma_simulate(innovations: np.ndarray,
                  phi: np.ndarray,
                  theta: np.ndarray,
                  mu: float) -> np.ndarray:
    """
    Generate an ARMA path from a vector of innovations.

    The first ``max(p, q)`` values are set to ``mu``; from there on::

        x[t] = mu * (1 - sum(phi)) + e[t] + sum_j phi[j] * x[t-j-1]
                    + sum_k theta[k] * e[t-k-1]
    """
    n = innovations.shape[0]
    p = phi.shape[0]
    q = theta.shape[0]
    r = max(p, q)

    path = np.full(n, mu)
    constant = mu * (1.0 - np.sum(phi))

    for t in range(r, n):
        acc = constant + innovations[t]
        for j in range(p):
            acc += phi[j] * path[t - j - 1]
        for k in range(q):
            acc += theta[k] * innovations[t - k - 1]
        path[t] = acc

    return path
