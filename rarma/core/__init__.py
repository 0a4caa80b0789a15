"""
RARMA Toolbox Core Module

Foundations shared by the estimators: the parameter container, result
objects, type aliases, input validation, the exception hierarchy,
configuration management and solver logging.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("rarma.core")

from .exceptions import (
    RARMAError,
    ParameterError,
    DimensionError,
    NumericError,
    DataError,
    ModelSpecificationError,
    ConfigurationError,
    RARMAWarning,
    ConvergenceWarning,
    NumericWarning
)

from .parameters import ARMAParameters

from .results import ARMAFit, EstimationMethod, EstimationResult

from .validation import validate_coefficients, validate_order, validate_time_series

from .config import (
    get_config,
    set_config,
    reset_config,
    save_config,
    get_config_manager,
    get_numerical_config,
    get_logging_config
)

from .solver_logging import initialize_solver_logging

__all__ = [
    "RARMAError",
    "ParameterError",
    "DimensionError",
    "NumericError",
    "DataError",
    "ModelSpecificationError",
    "ConfigurationError",
    "RARMAWarning",
    "ConvergenceWarning",
    "NumericWarning",
    "ARMAParameters",
    "ARMAFit",
    "EstimationMethod",
    "EstimationResult",
    "validate_coefficients",
    "validate_order",
    "validate_time_series",
    "get_config",
    "set_config",
    "reset_config",
    "save_config",
    "get_config_manager",
    "get_numerical_config",
    "get_logging_config",
    "initialize_solver_logging",
]
