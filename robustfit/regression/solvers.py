"""
Solver dispatch for regression.

This module provides the fit() and robust_fit() functions (public API),
the IRLS run and non-convergence policy they share with the regressors,
and backend selection.
"""

from typing import Literal
import numbers
import warnings

from numpy.typing import ArrayLike

from robustfit.core.exceptions import ConvergenceError, ValidationError
from robustfit.regression.design import Design
from robustfit.regression.losses import LossFunction, resolve_loss
from robustfit.regression.solution import LinearSolution, RobustSolution
from robustfit.regression.backends.cpu import CPUNormalEquationsBackend
from robustfit.regression.backends.cpu_irls import CPUIRLSBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu']

DEFAULT_MAX_ITER = 50
DEFAULT_TOL = 1e-6
DEFAULT_INITIAL_ESTIMATE = 'ols'


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    fit_intercept: bool = True,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression model by ordinary least squares.

    Solves min_b ||y - XA b||^2 where XA is X with a leading column of
    ones when fit_intercept is set.

    Args:
        X: Feature matrix (n x p), or a 1-D array for a single feature
        y: Response vector (n,)
        fit_intercept: Prepend an intercept column
        backend: 'auto' or 'cpu'

    Returns:
        LinearSolution with coefficients, diagnostics, and summary methods

    Raises:
        ValidationError: If inputs are absent or invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If XA'XA is singular

    Example:
        >>> from robustfit.regression import fit
        >>> result = fit([[1], [2], [3]], [3, 5, 7])
        >>> result.coefficients          # array([1., 2.])
    """
    # This is the boundary - validate here, trust everywhere else
    design = Design.from_arrays(X, y, fit_intercept=fit_intercept)

    backend_impl = _get_linear_backend(backend)
    result = backend_impl.solve(design)

    return LinearSolution(_result=result, _design=design)


def robust_fit(
    X: ArrayLike,
    y: ArrayLike,
    loss: str | LossFunction = 'huber',
    *,
    fit_intercept: bool = True,
    alpha: float = 0.0,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    initial_estimate: str = DEFAULT_INITIAL_ESTIMATE,
    raise_on_nonconvergence: bool = False,
    backend: BackendChoice = 'auto',
) -> RobustSolution:
    """
    Fit a robust linear regression by IRLS.

    Args:
        X: Feature matrix (n x p), or a 1-D array for a single feature
        y: Response vector (n,)
        loss: LossFunction instance or name ('huber', 'tukey', 'bisquare')
        fit_intercept: Prepend an intercept column
        alpha: Ridge penalty added to X'WX; 0 uses plain WLS
        max_iter: Iteration budget (>= 1)
        tol: Stop once ||beta_new - beta|| < tol
        initial_estimate: 'ols', 'median', or anything else for zeros
        raise_on_nonconvergence: Raise ConvergenceError instead of
            warning and returning the last iterate when max_iter is
            exhausted
        backend: 'auto' or 'cpu'

    Returns:
        RobustSolution with coefficients, final weights, scale and
        convergence metadata

    Raises:
        ValidationError: If inputs or settings are invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If a WLS system is singular
        NotPositiveDefiniteError: If a regularized system is not PD
        ConvergenceError: Only with raise_on_nonconvergence=True

    Warns:
        RuntimeWarning: If max_iter is exhausted and
            raise_on_nonconvergence is False

    Example:
        >>> from robustfit.regression import robust_fit, TukeyLoss
        >>> result = robust_fit([1, 2, 3, 4, 5], [2, 4, 6, 8, 100], TukeyLoss())
        >>> result.coefficients[1]       # close to 2
    """
    solution = run_irls(
        X, y, loss,
        fit_intercept=fit_intercept,
        alpha=alpha,
        max_iter=max_iter,
        tol=tol,
        initial_estimate=initial_estimate,
        backend=backend,
    )
    check_convergence(solution, tol, raise_on_nonconvergence, stacklevel=3)
    return solution


def run_irls(
    X: ArrayLike,
    y: ArrayLike,
    loss: str | LossFunction | None,
    *,
    fit_intercept: bool = True,
    alpha: float = 0.0,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    initial_estimate: str = DEFAULT_INITIAL_ESTIMATE,
    backend: BackendChoice = 'auto',
) -> RobustSolution:
    """robust_fit() without the convergence check; the solution may be unconverged."""
    loss_impl = resolve_loss(loss)
    _check_settings(alpha, max_iter, tol, initial_estimate)

    design = Design.from_arrays(X, y, fit_intercept=fit_intercept)

    backend_impl = _get_robust_backend(backend)
    result = backend_impl.solve(
        design,
        loss=loss_impl,
        alpha=float(alpha),
        max_iter=int(max_iter),
        tol=float(tol),
        initial_estimate=initial_estimate,
    )
    return RobustSolution(_result=result, _design=design)


def check_convergence(
    solution: RobustSolution,
    tol: float,
    raise_on_nonconvergence: bool = False,
    stacklevel: int = 2,
) -> None:
    """
    Apply the non-convergence policy to a finished IRLS fit.

    stacklevel counts from this function, as in warnings.warn: 2 blames
    the direct caller, 3 the caller's caller.

    Raises:
        ConvergenceError: If unconverged and raise_on_nonconvergence is set

    Warns:
        RuntimeWarning: If unconverged otherwise
    """
    if solution.converged:
        return
    if raise_on_nonconvergence:
        raise ConvergenceError(
            f"IRLS did not converge in {solution.n_iter} iterations",
            iterations=solution.n_iter,
            final_change=solution.final_change,
            reason='max_iterations',
            threshold=float(tol),
        )
    warnings.warn(
        f"IRLS did not converge after {solution.n_iter} iterations "
        f"(last change {solution.final_change:.3e}, tol {tol:.3e}). "
        f"Returning the last iterate.",
        RuntimeWarning,
        stacklevel=stacklevel,
    )


def _check_settings(alpha, max_iter, tol, initial_estimate) -> None:
    """Validate IRLS settings before any computation."""
    if isinstance(max_iter, bool) or not isinstance(max_iter, numbers.Integral):
        raise ValidationError(f"max_iter: expected an integer, got {max_iter!r}")
    if max_iter < 1:
        raise ValidationError(f"max_iter: must be >= 1, got {max_iter}")
    if not tol >= 0:
        raise ValidationError(f"tol: must be >= 0, got {tol}")
    if not alpha >= 0:
        raise ValidationError(f"alpha: must be >= 0, got {alpha}")
    if not isinstance(initial_estimate, str):
        raise ValidationError(
            f"initial_estimate: expected a string, got {type(initial_estimate).__name__}"
        )


def _get_linear_backend(choice: BackendChoice) -> CPUNormalEquationsBackend:
    """
    Select and instantiate the OLS backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu'):
        return CPUNormalEquationsBackend()
    raise ValueError(f"Unknown backend: {choice!r}")


def _get_robust_backend(choice: BackendChoice) -> CPUIRLSBackend:
    """
    Select and instantiate the IRLS backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu'):
        return CPUIRLSBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
