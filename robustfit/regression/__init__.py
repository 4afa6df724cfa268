"""
Linear and robust linear regression.

Public API:
    fit(X, y, ...) -> LinearSolution
    robust_fit(X, y, loss, ...) -> RobustSolution
    OLSRegressor, RobustRegressor: stateful fit/predict wrappers
    HuberLoss, TukeyLoss: robust losses for IRLS

The fit functions handle:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Example:
    >>> from robustfit.regression import robust_fit, HuberLoss
    >>> result = robust_fit(X, y, HuberLoss(c=1.345))
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from robustfit.regression.design import Design
from robustfit.regression.losses import HuberLoss, LossFunction, TukeyLoss, resolve_loss
from robustfit.regression.solution import (
    LinearParams,
    LinearSolution,
    RobustParams,
    RobustSolution,
)
from robustfit.regression.solvers import fit, robust_fit
from robustfit.regression.models import (
    OLSRegressor,
    RegressorKind,
    RobustRegressor,
    make_regressor,
)

__all__ = [
    "fit",
    "robust_fit",
    "Design",
    "LossFunction",
    "HuberLoss",
    "TukeyLoss",
    "resolve_loss",
    "LinearParams",
    "LinearSolution",
    "RobustParams",
    "RobustSolution",
    "OLSRegressor",
    "RobustRegressor",
    "RegressorKind",
    "make_regressor",
]
