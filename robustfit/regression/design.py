"""
Regression Design.

Design takes the raw feature matrix and response vector, validates them
once, and builds the augmented design matrix the solvers work on. Backends
trust a Design: all boundary checks happen here.

A Design is created per fit and discarded with it; only the coefficients
derived from it persist on a model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from robustfit.core.compute.linalg import add_intercept
from robustfit.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_finite,
    check_min_samples,
)
from robustfit.core.exceptions import DimensionError


@dataclass(frozen=True)
class Design:
    """
    Regression design specification.

    Holds X (n x p features), y (n,) and the augmented matrix XA
    (n x (p + 1) with a leading column of ones when fit_intercept is set,
    otherwise X itself). Immutable after construction.

    Construction:
        Design.from_arrays(X, y)                       # with intercept
        Design.from_arrays(X, y, fit_intercept=False)  # through the origin
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _XA: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _fit_intercept: bool

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        fit_intercept: bool = True,
    ) -> Design:
        """
        Build Design directly from array-likes.

        A 1-D X of length n is a single feature and becomes an n x 1 matrix.
        A column-shaped y (n x 1) is flattened.

        Raises:
            ValidationError: If X or y is None, non-numeric, non-finite,
                or has fewer rows than coefficients to estimate
            DimensionError: If shapes are wrong or row counts differ
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        return cls._build(X_arr, y_arr, fit_intercept=fit_intercept)

    @classmethod
    def _build(cls, X: NDArray, y: NDArray, fit_intercept: bool) -> Design:
        """Internal builder with validation."""
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()

        check_2d(X, 'X')
        check_1d(y, 'y')
        check_finite(X, 'X')
        check_finite(y, 'y')
        check_consistent_length(X, y, names=('X', 'y'))

        n, p = X.shape
        if not fit_intercept and p == 0:
            raise DimensionError("X: no feature columns and fit_intercept=False")

        n_coef = p + (1 if fit_intercept else 0)
        check_min_samples(X, max(n_coef, 1), 'X')

        XA = add_intercept(X) if fit_intercept else X.copy()

        return cls(_X=X, _y=y, _XA=XA, _n=n, _p=p, _fit_intercept=fit_intercept)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Feature matrix (n x p), without intercept column."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def XA(self) -> NDArray[np.floating[Any]]:
        """Augmented design matrix the solvers operate on."""
        return self._XA

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of features (excluding intercept)."""
        return self._p

    @property
    def n_coef(self) -> int:
        """Number of coefficients: p, plus one with an intercept."""
        return self._XA.shape[1]

    @property
    def fit_intercept(self) -> bool:
        return self._fit_intercept

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute XA'XA (for standard errors)."""
        return self._XA.T @ self._XA

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute XA'y."""
        return self._XA.T @ self._y
