"""
Linear algebra kernels for RobustFit.

All functions follow these conventions:
    - Inputs are array-likes, converted to float64 numpy arrays
    - Inputs are never modified; results are new arrays
    - Shape mismatches raise DimensionError before any arithmetic
    - Solver breakdowns raise NumericalError subclasses immediately

Submodules:
    dense: elementary operations, robust scale, elimination and Cholesky
        solvers, OLS/WLS/regularized WLS
"""

from robustfit.core.compute.linalg.dense import (
    add_intercept,
    cholesky_solve,
    dot_product,
    gaussian_solve,
    matvec,
    median,
    median_absolute_deviation,
    multiply,
    ols,
    regularized_wls,
    residuals,
    transpose,
    vector_norm_diff,
    wls,
)

__all__ = [
    # Elementary operations
    "transpose",
    "multiply",
    "matvec",
    "dot_product",
    "vector_norm_diff",
    # Design helpers
    "add_intercept",
    "residuals",
    # Robust location / scale
    "median",
    "median_absolute_deviation",
    # Solvers
    "gaussian_solve",
    "cholesky_solve",
    # Least squares
    "ols",
    "wls",
    "regularized_wls",
]
