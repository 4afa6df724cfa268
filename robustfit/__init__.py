"""
RobustFit: outlier-resistant linear regression for Python.

Fits linear models by ordinary least squares or by iteratively reweighted
least squares (IRLS) with a pluggable robust loss (Huber, Tukey bisquare,
or any object implementing the LossFunction protocol).

Submodules:
    regression: OLS and IRLS fitting, losses, regressors
    core: exceptions, validation, result envelope, linear algebra kernels
"""

__version__ = "0.1.0"

from robustfit import regression
from robustfit.regression import (
    HuberLoss,
    OLSRegressor,
    RobustRegressor,
    TukeyLoss,
    fit,
    robust_fit,
)

__all__ = [
    "__version__",
    "regression",
    "fit",
    "robust_fit",
    "OLSRegressor",
    "RobustRegressor",
    "HuberLoss",
    "TukeyLoss",
]
