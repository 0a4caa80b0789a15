# rarma/core/validation.py

"""
Validation utilities for the RARMA Toolbox.

These helpers run before any numeric work: they normalize user input into
contiguous float64 arrays and raise the toolbox exceptions with informative
context when the input cannot be used.
"""

import numbers
from typing import Any, Optional

import numpy as np
import pandas as pd

from rarma.core.exceptions import (
    raise_data_error, raise_dimension_error, raise_parameter_error
)
from rarma.core.types import TimeSeriesData, Vector


def validate_time_series(
    data: TimeSeriesData,
    min_length: int = 1,
    data_name: str = "y"
) -> Vector:
    """Validate a univariate series and return it as a float64 vector.

    Args:
        data: Series as a NumPy array, Pandas Series or sequence of floats
        min_length: Minimum required length
        data_name: Name of the data for error messages

    Returns:
        np.ndarray: Contiguous 1D float64 copy of the data

    Raises:
        TypeError: If data is None or not convertible
        DimensionError: If data is not one-dimensional
        DataError: If data is too short or contains NaN/Inf values
    """
    if data is None:
        raise TypeError(f"{data_name} cannot be None")

    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise_dimension_error(
                f"{data_name} must be univariate, got a DataFrame with {data.shape[1]} columns",
                array_name=data_name,
                expected_shape="(n,)",
                actual_shape=data.shape
            )
        data = data.iloc[:, 0]

    if isinstance(data, pd.Series):
        values = data.to_numpy(dtype=np.float64, copy=True)
    else:
        try:
            values = np.array(data, dtype=np.float64, copy=True)
        except (TypeError, ValueError) as e:
            raise TypeError(
                f"{data_name} must be numeric, got {type(data).__name__}"
            ) from e

    if values.ndim == 2 and 1 in values.shape:
        values = values.ravel()
    if values.ndim != 1:
        raise_dimension_error(
            f"{data_name} must be 1-dimensional, got {values.ndim} dimensions",
            array_name=data_name,
            expected_shape="(n,)",
            actual_shape=values.shape
        )

    if values.shape[0] < min_length:
        raise_data_error(
            f"{data_name} is too short (length {values.shape[0]}), "
            f"minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {values.shape[0]} < {min_length}"
        )

    if np.isnan(values).any():
        raise_data_error(
            f"{data_name} contains NaN values",
            data_name=data_name,
            issue="contains NaN values",
            index=int(np.flatnonzero(np.isnan(values))[0])
        )
    if np.isinf(values).any():
        raise_data_error(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values",
            index=int(np.flatnonzero(np.isinf(values))[0])
        )

    return np.ascontiguousarray(values)


def validate_order(value: Any, name: str) -> int:
    """Validate a model order and return it as a Python int.

    Raises:
        ParameterError: If the order is not a non-negative integer
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise_parameter_error(
            f"{name} must be an integer, got {type(value).__name__}",
            param_name=name,
            param_value=value,
            constraint="non-negative integer"
        )
    if value < 0:
        raise_parameter_error(
            f"{name} must be non-negative, got {value}",
            param_name=name,
            param_value=value,
            constraint="non-negative integer"
        )
    return int(value)


def validate_coefficients(
    values: Optional[Any],
    expected_length: Optional[int] = None,
    name: str = "coefficients"
) -> Vector:
    """Validate a block of AR or MA coefficients.

    ``None`` is treated as an empty block. The returned array is always a new
    float64 array, so an empty block never shares storage with another one.

    Raises:
        ParameterError: If the block has the wrong length or non-finite values
    """
    if values is None:
        coefficients = np.empty(0, dtype=np.float64)
    else:
        coefficients = np.array(values, dtype=np.float64, copy=True).ravel()

    if expected_length is not None and coefficients.shape[0] != expected_length:
        raise_parameter_error(
            f"{name} has length {coefficients.shape[0]}, expected {expected_length}",
            param_name=name,
            param_value=coefficients,
            constraint=f"length {expected_length}"
        )

    if not np.all(np.isfinite(coefficients)):
        raise_parameter_error(
            f"{name} must be finite",
            param_name=name,
            param_value=coefficients,
            constraint="finite values"
        )

    return coefficients
