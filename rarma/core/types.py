# rarma/core/types.py

"""
Core type annotations for the RARMA Toolbox.

The aliases below document intent (vector versus matrix, parameter vector
versus series) rather than enforce shapes; all numeric containers are plain
NumPy arrays at runtime.
"""

from typing import Callable, Sequence, Union

import numpy as np
import pandas as pd

# NumPy array aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array
ParameterVector = np.ndarray  # Flat optimizer vector [phi, theta, mu]
CovarianceMatrix = np.ndarray  # Symmetric positive semi-definite matrix

# Anything that can be turned into a univariate series
TimeSeriesData = Union[np.ndarray, pd.Series, Sequence[float]]

# Function types
RhoFunction = Callable[[np.ndarray], np.ndarray]  # Elementwise loss or weight
ObjectiveFunction = Callable[[np.ndarray], float]  # Scalar objective of a parameter vector
