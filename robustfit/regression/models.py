"""
Stateful regressors.

OLSRegressor and RobustRegressor wrap fit() and robust_fit() for callers
that want an object holding the fitted coefficients. Both follow the same
one-way life cycle: unfitted until fit() succeeds, fitted afterwards.
Re-fitting overwrites the coefficients; a fit that raises leaves the
previous state untouched.

Instances are not synchronized. Concurrent predict() calls on a fitted
model are safe; fit() concurrent with anything else on the same instance
is not.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from robustfit.core.exceptions import NotFittedError
from robustfit.regression.losses import HuberLoss, LossFunction, TukeyLoss
from robustfit.regression.solution import (
    LinearSolution,
    RobustSolution,
    predict_from_coefficients,
)
from robustfit.regression.solvers import (
    DEFAULT_INITIAL_ESTIMATE,
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    check_convergence,
    fit,
    run_irls,
)


class _Regressor:
    """Coefficient storage and prediction shared by both regressors."""

    def __init__(self, fit_intercept: bool = True):
        self.fit_intercept = fit_intercept
        self._coefficients: NDArray[np.floating[Any]] = np.empty(0, dtype=np.float64)

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Fitted coefficients, intercept first; empty before fit()."""
        return self._coefficients

    @property
    def is_fitted(self) -> bool:
        return len(self._coefficients) > 0

    @property
    def intercept(self) -> float:
        self._check_fitted()
        return float(self._coefficients[0]) if self.fit_intercept else 0.0

    def predict(self, x: ArrayLike) -> float | NDArray[np.floating[Any]]:
        """
        Predict from the fitted coefficients.

        Args:
            x: A scalar (single-feature model), one observation as a 1-D
               sequence of p features, or a batch as a 2-D array with one
               observation per row

        Returns:
            float for a single observation, (m,) array for a batch

        Raises:
            NotFittedError: If called before fit()
            DimensionError: If the feature count does not match
        """
        self._check_fitted()
        return predict_from_coefficients(self._coefficients, self.fit_intercept, x)

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise NotFittedError(
                f"{type(self).__name__} is not fitted. Call fit(...) first."
            )

    def __repr__(self) -> str:
        state = 'fitted' if self.is_fitted else 'unfitted'
        return f"{type(self).__name__}(fit_intercept={self.fit_intercept}, {state})"


class OLSRegressor(_Regressor):
    """
    Ordinary least squares regressor.

    Example:
        >>> model = OLSRegressor().fit([[1], [2], [3]], [3, 5, 7])
        >>> model.coefficients       # array([1., 2.])
        >>> model.predict([4])       # 9.0
    """

    def __init__(self, fit_intercept: bool = True):
        super().__init__(fit_intercept)
        self.solution: LinearSolution | None = None

    def fit(self, X: ArrayLike, y: ArrayLike) -> OLSRegressor:
        """
        Fit by OLS and store the coefficients.

        Raises:
            ValidationError: If X or y is absent or invalid
            DimensionError: If row counts differ
            SingularMatrixError: If XA'XA is singular
        """
        solution = fit(X, y, fit_intercept=self.fit_intercept)
        self.solution = solution
        self._coefficients = solution.coefficients
        return self


class RobustRegressor(_Regressor):
    """
    Robust regressor fitted by IRLS.

    A loss may be bound at construction; fit() then uses it whenever its
    own loss argument is None.

    Example:
        >>> model = RobustRegressor().fit([1, 2, 3, 4, 5], [2, 4, 6, 8, 100],
        ...                               loss=TukeyLoss())
        >>> model.converged, model.n_iter
    """

    def __init__(
        self,
        fit_intercept: bool = True,
        loss: str | LossFunction | None = None,
    ):
        super().__init__(fit_intercept)
        self.loss = loss
        self.solution: RobustSolution | None = None

    @property
    def converged(self) -> bool:
        """Whether the last fit met tol before exhausting max_iter."""
        self._check_fitted()
        return self.solution.converged

    @property
    def n_iter(self) -> int:
        """Iterations run by the last fit."""
        self._check_fitted()
        return self.solution.n_iter

    def fit(
        self,
        X: ArrayLike,
        y: ArrayLike,
        loss: str | LossFunction | None = None,
        alpha: float = 0.0,
        max_iter: int = DEFAULT_MAX_ITER,
        tol: float = DEFAULT_TOL,
        initial_estimate: str = DEFAULT_INITIAL_ESTIMATE,
    ) -> RobustRegressor:
        """
        Fit by IRLS and store the coefficients.

        Reaching max_iter without meeting tol still stores the last
        iterate; check converged afterwards.

        Raises:
            ValidationError: If X, y or loss is absent, or settings invalid
            DimensionError: If row counts differ
            NumericalError: If an inner solve fails

        Warns:
            RuntimeWarning: If max_iter is exhausted
        """
        solution = run_irls(
            X, y,
            loss if loss is not None else self.loss,
            fit_intercept=self.fit_intercept,
            alpha=alpha,
            max_iter=max_iter,
            tol=tol,
            initial_estimate=initial_estimate,
        )
        self.solution = solution
        self._coefficients = solution.coefficients
        check_convergence(solution, tol, stacklevel=3)
        return self


# =====================================================================
# Regressor kinds
# =====================================================================

class RegressorKind(Enum):
    """The regressors the package provides."""
    OLS = 'ols'
    HUBER = 'huber'
    TUKEY = 'tukey'


def make_regressor(
    kind: RegressorKind | str,
    fit_intercept: bool = True,
) -> OLSRegressor | RobustRegressor:
    """
    Build an unfitted regressor of the given kind.

    HUBER and TUKEY return a RobustRegressor bound to the loss with its
    default tuning constant.

    Raises:
        ValueError: If kind is not a RegressorKind or its value
    """
    kind = RegressorKind(kind.lower() if isinstance(kind, str) else kind)
    if kind is RegressorKind.OLS:
        return OLSRegressor(fit_intercept=fit_intercept)
    if kind is RegressorKind.HUBER:
        return RobustRegressor(fit_intercept=fit_intercept, loss=HuberLoss())
    return RobustRegressor(fit_intercept=fit_intercept, loss=TukeyLoss())
