"""
RARMA Toolbox Models

Models implemented by the toolbox. Currently the ``time_series`` subpackage
with ARMA estimation.
"""

from . import time_series

__all__ = ["time_series"]
