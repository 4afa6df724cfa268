"""
Tests for the RobustFit exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via RobustFitError)
    - The three failure families stay disjoint: validation, numerical,
      not-fitted
    - Diagnostic attributes, both constructed directly and as filled in
      by gaussian_solve, cholesky_solve and robust_fit
"""

import numpy as np
import pytest

from robustfit.core.compute.linalg import cholesky_solve, gaussian_solve
from robustfit.core.exceptions import (
    ConvergenceError,
    DimensionError,
    NotFittedError,
    NotPositiveDefiniteError,
    NumericalError,
    RobustFitError,
    SingularMatrixError,
    ValidationError,
)
from robustfit.regression import robust_fit


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via RobustFitError."""

    @pytest.mark.parametrize("exc", [
        ValidationError("bad input"),
        DimensionError("wrong shape"),
        NumericalError("computation failed"),
        SingularMatrixError("singular"),
        NotPositiveDefiniteError("not PD"),
        NotFittedError("not fitted"),
        ConvergenceError("did not converge", iterations=50),
    ])
    def test_all_are_robustfit_errors(self, exc):
        with pytest.raises(RobustFitError):
            raise exc

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_singular_matrix_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise SingularMatrixError("singular")

    def test_not_positive_definite_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise NotPositiveDefiniteError("not PD")

    def test_not_fitted_is_neither_validation_nor_numerical(self):
        err = NotFittedError("not fitted")
        assert not isinstance(err, ValidationError)
        assert not isinstance(err, NumericalError)

    def test_numerical_error_is_not_validation_error(self):
        assert not isinstance(SingularMatrixError("s"), ValidationError)

    def test_convergence_error_is_not_numerical_error(self):
        err = ConvergenceError("did not converge", iterations=100)
        assert not isinstance(err, NumericalError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestAttributes:
    """Optional diagnostics default to None and round-trip when given."""

    @pytest.mark.parametrize("cls, kwargs", [
        (SingularMatrixError, {"matrix_name": "XA'XA", "pivot_index": 1, "pivot": 3e-17}),
        (NotPositiveDefiniteError, {"matrix_name": "X'WX + alpha*I", "min_eigenvalue": -0.5}),
        (ConvergenceError, {"iterations": 7, "final_change": 0.02,
                            "reason": "max_iterations", "threshold": 1e-6}),
    ])
    def test_given_values_stored(self, cls, kwargs):
        err = cls("fit failed", **kwargs)
        assert str(err) == "fit failed"
        for attr, value in kwargs.items():
            assert getattr(err, attr) == value

    @pytest.mark.parametrize("err, attrs", [
        (SingularMatrixError("s"), ("matrix_name", "pivot_index", "pivot")),
        (NotPositiveDefiniteError("npd"), ("matrix_name", "min_eigenvalue")),
        (ConvergenceError("nc", 3), ("final_change", "reason", "threshold")),
    ])
    def test_omitted_values_are_none(self, err, attrs):
        assert all(getattr(err, attr) is None for attr in attrs)

    def test_iterations_positional(self):
        assert ConvergenceError("nc", 12).iterations == 12


# ═══════════════════════════════════════════════════════════════════════
# Diagnostics as raised by the solvers
# ═══════════════════════════════════════════════════════════════════════


class TestRaisedDiagnostics:
    """Solvers fill in the diagnostic attributes when they raise."""

    def test_singular_pivot_reported(self):
        A = np.array([[1.0, 2.0], [2.0, 4.0]])
        with pytest.raises(SingularMatrixError) as exc_info:
            gaussian_solve(A, np.array([1.0, 2.0]))
        err = exc_info.value
        assert err.pivot_index == 1
        assert abs(err.pivot) < 1e-12
        assert err.matrix_name is not None

    def test_zero_leading_pivot_reported(self):
        A = np.array([[0.0, 1.0], [1.0, 0.0]])
        with pytest.raises(SingularMatrixError) as exc_info:
            gaussian_solve(A, np.array([1.0, 1.0]))
        assert exc_info.value.pivot_index == 0
        assert exc_info.value.pivot == 0.0

    def test_cholesky_reports_min_eigenvalue(self):
        A = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            cholesky_solve(A, np.array([1.0, 1.0]))
        np.testing.assert_allclose(exc_info.value.min_eigenvalue, -1.0, atol=1e-12)

    def test_convergence_error_from_robust_fit(self, rng):
        X = rng.standard_normal((60, 2))
        y = X @ np.array([1.0, -1.0]) + rng.standard_cauchy(60)
        with pytest.raises(ConvergenceError) as exc_info:
            robust_fit(X, y, 'tukey', max_iter=1, tol=0.0, raise_on_nonconvergence=True)
        err = exc_info.value
        assert err.iterations == 1
        assert err.reason == "max_iterations"
        assert err.threshold == 0.0
        assert err.final_change > 0.0
