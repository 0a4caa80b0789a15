"""
RARMA Toolbox Test Suite

Tests of the robust ARMA estimation toolbox: robust primitives, weight
families, residual recursions, the state-space form, the estimators, the
simulator, configuration and result rendering.
"""
