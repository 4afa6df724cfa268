"""
Exceptions raised by RobustFit.

Everything derives from RobustFitError. A fit can fail in three ways,
each with its own family:

    - ValidationError: the inputs were rejected before any arithmetic ran
    - NumericalError: a linear solve broke down part way through
    - NotFittedError: predict() was called on a model with no coefficients

ConvergenceError is separate: running out of IRLS iterations is reported
through the solution unless the caller opts into an exception.

Exceptions keep their diagnostics as attributes, and messages state the
offending value next to what was expected.
"""


class RobustFitError(Exception):
    """Root of the RobustFit exception tree."""
    pass


class ValidationError(RobustFitError):
    """
    An argument was absent, empty, non-finite or otherwise unusable.

    Raised at the API boundary (Design construction, solver entry points,
    loss constructors). Nothing has been computed when it is raised.
    """
    pass


class DimensionError(ValidationError):
    """
    Shapes disagree: X rows vs len(y), weights vs rows, or the number of
    features seen at predict() vs at fit().
    """
    pass


class NumericalError(RobustFitError):
    """
    A linear solve failed.

    IRLS does not retry, so one of these aborts the whole fit and reaches
    the caller unchanged.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Elimination met a pivot too small to divide by.

    The elimination solver does not pivot rows, so this is also raised for
    some nonsingular systems whose leading entry vanishes.

    Attributes:
        matrix_name: Which system failed (e.g. "XA'XA")
        pivot_index: Elimination step at which the pivot was checked
        pivot: The pivot value that was rejected
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        pivot_index: int | None = None,
        pivot: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.pivot_index = pivot_index
        self.pivot = pivot


class NotPositiveDefiniteError(NumericalError):
    """
    Cholesky factorization of a regularized system failed.

    Attributes:
        matrix_name: Which system failed (e.g. "X'WX + alpha*I")
        min_eigenvalue: Smallest eigenvalue of the symmetric part
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue


class NotFittedError(RobustFitError):
    """predict() or coefficients requested before a successful fit()."""
    pass


class ConvergenceError(RobustFitError):
    """
    IRLS used up max_iter without the coefficient change dropping below tol.

    Only raised by robust_fit(..., raise_on_nonconvergence=True).

    Attributes:
        iterations: Iterations performed
        final_change: ||beta_new - beta|| at the last iteration
        reason: 'max_iterations'
        threshold: The tol that was not reached
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
