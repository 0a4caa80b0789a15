'''
Pytest configuration and fixtures for the RARMA Toolbox test suite.

Provides seeded random generators, simulated ARMA processes with and without
outliers, and hypothesis strategies shared across the test modules.
'''

import warnings
from typing import Tuple

import numpy as np
import pandas as pd
import pytest
from hypothesis import strategies as st

from rarma.core.config import reset_config
from rarma.core.exceptions import ConvergenceWarning, NumericWarning
from rarma.models.time_series.arma import ARMAModel
from rarma.models.time_series.simulate import (
    generate_innovations_with_outliers, simulate_arma
)


# ---- Global test settings ----

@pytest.fixture
def clean_config():
    """Restore the default configuration around a test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def quiet_estimation():
    """Silence convergence and numeric warnings of exploratory fits."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        warnings.simplefilter("ignore", NumericWarning)
        yield


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_size() -> int:
    """Default sample size for test data."""
    return 500


@pytest.fixture
def white_noise(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Standard normal white noise."""
    return rng.standard_normal(sample_size)


@pytest.fixture
def ar1_process(sample_size: int) -> np.ndarray:
    """AR(1) process with phi = 0.7 and mean 1."""
    return simulate_arma([0.7], [], mu=1.0, n=sample_size, seed=1)


@pytest.fixture
def ma1_process(sample_size: int) -> np.ndarray:
    """MA(1) process with theta = 0.5."""
    return simulate_arma([], [0.5], mu=0.0, n=sample_size, seed=2)


@pytest.fixture
def arma11_process(sample_size: int) -> np.ndarray:
    """ARMA(1,1) process with phi = 0.7, theta = 0.3 and mean 2."""
    return simulate_arma([0.7], [0.3], mu=2.0, n=sample_size, seed=3)


@pytest.fixture
def contaminated_arma11_process(sample_size: int) -> Tuple[np.ndarray, np.ndarray]:
    """ARMA(1,1) process driven by innovations with 10% additive outliers.

    Returns:
        Tuple containing (series, innovations)
    """
    burn_in = 100
    e = generate_innovations_with_outliers(sample_size + burn_in, 0.1, 5.0, seed=4)
    y = simulate_arma([0.8], [-0.7], mu=0.0, n=sample_size, burn_in=burn_in, innovations=e)
    return y, e


@pytest.fixture
def arma11_model(arma11_process: np.ndarray) -> ARMAModel:
    """ARMA(1,1) model over the simulated ARMA(1,1) process."""
    return ARMAModel(arma11_process, 1, 1)


@pytest.fixture
def arma11_series(arma11_process: np.ndarray) -> pd.Series:
    """The simulated ARMA(1,1) process as a Pandas Series with a DatetimeIndex."""
    dates = pd.date_range(start="2020-01-01", periods=len(arma11_process), freq="D")
    return pd.Series(arma11_process, index=dates)


# ---- Hypothesis Strategies ----

finite_samples = st.lists(
    st.floats(min_value=-1e3, max_value=1e3, allow_nan=False, allow_infinity=False),
    min_size=5,
    max_size=50
)

positive_factors = st.floats(min_value=1e-2, max_value=1e2)

stationary_coefficients = st.floats(min_value=-0.9, max_value=0.9)
