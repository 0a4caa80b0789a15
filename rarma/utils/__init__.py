"""
Numerical utilities shared by the estimators.
"""

from rarma.utils.differentiation import default_step, gradient_2sided

__all__ = ["default_step", "gradient_2sided"]
