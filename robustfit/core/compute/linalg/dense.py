"""
Dense linear algebra primitives.

Stateless functions over explicit numpy arrays. Nothing here keeps state
between calls and no argument is modified in place; every function
returns a new array.

Solvers:
    gaussian_solve: Gaussian elimination with naive row normalization
        (no pivoting). Used for the unregularized OLS/WLS path.
    cholesky_solve: LL' factorization via LAPACK (scipy.linalg). Used for
        the regularized WLS path, whose system is symmetric positive
        definite when alpha > 0.

Least squares:
    ols:             (X'X) b = X'y           via gaussian_solve
    wls:             rows scaled by sqrt(w), then ols
    regularized_wls: (X'WX + aI) b = X'Wy    via cholesky_solve

Robust scale:
    median_absolute_deviation: lower-median of |r| times MAD_CONSISTENCY,
        floored at MAD_FLOOR.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import LinAlgError, cho_factor, cho_solve

from robustfit.core.compute.tolerances import MAD_CONSISTENCY, MAD_FLOOR, PIVOT_RTOL
from robustfit.core.exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    SingularMatrixError,
    ValidationError,
)
from robustfit.core.validation import check_non_negative


def _as_matrix(A: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    A = np.asarray(A, dtype=np.float64)
    if A.ndim != 2:
        raise DimensionError(f"{name}: expected 2D array, got {A.ndim}D with shape {A.shape}")
    return A


def _as_vector(v: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    v = np.asarray(v, dtype=np.float64)
    if v.ndim != 1:
        raise DimensionError(f"{name}: expected 1D array, got {v.ndim}D with shape {v.shape}")
    return v


# =====================================================================
# Elementary operations
# =====================================================================

def transpose(A: ArrayLike) -> NDArray[np.floating[Any]]:
    """Return A' as a new array."""
    return _as_matrix(A, 'A').T.copy()


def multiply(A: ArrayLike, B: ArrayLike) -> NDArray[np.floating[Any]]:
    """Matrix product A @ B. Inner dimensions must agree."""
    A = _as_matrix(A, 'A')
    B = _as_matrix(B, 'B')
    if A.shape[1] != B.shape[0]:
        raise DimensionError(
            f"Matrix columns ({A.shape[1]}) must match rows of right operand ({B.shape[0]})"
        )
    return A @ B


def matvec(A: ArrayLike, v: ArrayLike) -> NDArray[np.floating[Any]]:
    """Matrix-vector product A @ v."""
    A = _as_matrix(A, 'A')
    v = _as_vector(v, 'v')
    if A.shape[1] != v.shape[0]:
        raise DimensionError(
            f"Matrix columns ({A.shape[1]}) must match vector length ({v.shape[0]})"
        )
    return A @ v


def dot_product(a: ArrayLike, b: ArrayLike) -> float:
    """Inner product of two equal-length vectors."""
    a = _as_vector(a, 'a')
    b = _as_vector(b, 'b')
    if a.shape[0] != b.shape[0]:
        raise DimensionError(
            f"Vectors must be of the same length: a={a.shape[0]}, b={b.shape[0]}"
        )
    return float(a @ b)


def vector_norm_diff(a: ArrayLike, b: ArrayLike) -> float:
    """Euclidean distance ||a - b||. Used as the IRLS convergence metric."""
    a = _as_vector(a, 'a')
    b = _as_vector(b, 'b')
    if a.shape[0] != b.shape[0]:
        raise DimensionError(
            f"Vectors must be of the same length: a={a.shape[0]}, b={b.shape[0]}"
        )
    return float(np.sqrt(np.sum((a - b) ** 2)))


# =====================================================================
# Design helpers
# =====================================================================

def add_intercept(X: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Prepend a column of ones to X.

    Args:
        X: Feature matrix (n x p)

    Returns:
        Augmented matrix (n x (p + 1)) whose first column is 1.0

    Raises:
        ValidationError: If X has no rows
    """
    X = _as_matrix(X, 'X')
    n = X.shape[0]
    if n == 0:
        raise ValidationError("X: cannot add intercept to a matrix with zero rows")
    return np.hstack([np.ones((n, 1), dtype=np.float64), X])


def residuals(
    XA: ArrayLike,
    y: ArrayLike,
    beta: ArrayLike,
) -> NDArray[np.floating[Any]]:
    """
    Residual vector y - XA @ beta.

    Raises:
        DimensionError: If beta does not have one entry per column of XA,
            or y does not have one entry per row
    """
    XA = _as_matrix(XA, 'XA')
    y = _as_vector(y, 'y')
    beta = _as_vector(beta, 'beta')
    if beta.shape[0] != XA.shape[1]:
        raise DimensionError(
            f"beta length ({beta.shape[0]}) must match columns of XA ({XA.shape[1]})"
        )
    if y.shape[0] != XA.shape[0]:
        raise DimensionError(
            f"y length ({y.shape[0]}) must match rows of XA ({XA.shape[0]})"
        )
    return y - XA @ beta


# =====================================================================
# Robust location / scale
# =====================================================================

def median(values: ArrayLike) -> float:
    """
    Statistical median.

    Even-length input averages the two middle values; odd-length input
    returns the middle value. The input is not modified.

    Raises:
        ValidationError: If values is empty
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    if values.size == 0:
        raise ValidationError("Cannot compute median of empty array")
    return float(np.median(values))


def median_absolute_deviation(r: ArrayLike) -> float:
    """
    Robust scale estimate from residuals.

    Sorts |r| and takes the element at index n // 2 (lower-median
    convention: for even n the upper of the two middle values is taken,
    not their average), then multiplies by MAD_CONSISTENCY. This is the
    only place the consistency factor is applied.

    The result is floored at MAD_FLOOR so that residual / scale is always
    defined, e.g. when more than half the residuals are exactly zero.

    Raises:
        ValidationError: If r is empty
    """
    r = np.asarray(r, dtype=np.float64).ravel()
    if r.size == 0:
        raise ValidationError("Cannot compute MAD of empty array")
    abs_sorted = np.sort(np.abs(r))
    mad = MAD_CONSISTENCY * abs_sorted[r.size // 2]
    if not mad >= MAD_FLOOR:
        mad = MAD_FLOOR
    return float(mad)


# =====================================================================
# Linear solvers
# =====================================================================

def gaussian_solve(A: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Solve A x = b by Gaussian elimination without pivoting.

    Each row is normalized by its own diagonal pivot and eliminated from
    the rows below; back substitution then recovers x. Rows are never
    exchanged, so a system whose leading pivots vanish fails here even if
    A itself is invertible. Callers must pass a matrix whose successive
    pivots are non-zero; the normal-equations matrix of a full-rank design
    satisfies this.

    Args:
        A: Square coefficient matrix (n x n)
        b: Right-hand side (n,)

    Returns:
        Solution vector x (n,)

    Raises:
        DimensionError: If A is not square or b has the wrong length
        SingularMatrixError: If pivot i is non-finite or at or below
            n * eps * max|A[i, :]|
    """
    A = _as_matrix(A, 'A')
    b = _as_vector(b, 'b')
    n = A.shape[0]
    if A.shape[1] != n:
        raise DimensionError(f"A: expected square matrix, got shape {A.shape}")
    if b.shape[0] != n:
        raise DimensionError(f"b length ({b.shape[0]}) must match size of A ({n})")

    # Pivot i is compared against the largest entry of row i of A.
    row_scale = np.max(np.abs(A), axis=1) if A.size else np.zeros(n)

    # Augmented system [A | b]
    M = np.hstack([A, b[:, np.newaxis]])

    for i in range(n):
        pivot = M[i, i]
        tol = PIVOT_RTOL * n * float(row_scale[i])
        if not (np.isfinite(pivot) and abs(pivot) > tol):
            raise SingularMatrixError(
                f"Matrix is singular or nearly singular: pivot {i} is {pivot:.3e} "
                f"(threshold {tol:.3e}). Check the design for collinear columns.",
                matrix_name='A',
                pivot_index=i,
                pivot=float(pivot),
            )
        M[i, i:] /= pivot
        if i + 1 < n:
            M[i + 1:, i:] -= np.outer(M[i + 1:, i], M[i, i:])

    x = np.zeros(n, dtype=np.float64)
    for i in range(n - 1, -1, -1):
        x[i] = M[i, n] - M[i, i + 1:n] @ x[i + 1:]
    return x


def cholesky_solve(A: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Solve A x = b for symmetric positive definite A via Cholesky.

    Factorizes A = LL' and solves the two triangular systems.

    Raises:
        DimensionError: If A is not square or b has the wrong length
        NotPositiveDefiniteError: If the factorization meets a
            non-positive pivot
    """
    A = _as_matrix(A, 'A')
    b = _as_vector(b, 'b')
    n = A.shape[0]
    if A.shape[1] != n:
        raise DimensionError(f"A: expected square matrix, got shape {A.shape}")
    if b.shape[0] != n:
        raise DimensionError(f"b length ({b.shape[0]}) must match size of A ({n})")

    try:
        factor = cho_factor(A, lower=True)
    except LinAlgError as e:
        min_eig = float(np.linalg.eigvalsh(A)[0])
        raise NotPositiveDefiniteError(
            f"Matrix is not positive definite (min eigenvalue {min_eig:.3e})",
            matrix_name='A',
            min_eigenvalue=min_eig,
        ) from e
    return cho_solve(factor, b)


# =====================================================================
# Least squares
# =====================================================================

def ols(XA: ArrayLike, y: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Ordinary least squares via the normal equations.

    Solves (XA'XA) beta = XA'y with gaussian_solve.

    Raises:
        DimensionError: If XA and y have different numbers of rows
        SingularMatrixError: If XA'XA is singular (collinear columns,
            fewer informative rows than columns)
    """
    XA = _as_matrix(XA, 'XA')
    y = _as_vector(y, 'y')
    if XA.shape[0] != y.shape[0]:
        raise DimensionError(
            f"Number of rows in X ({XA.shape[0]}) must match length of y ({y.shape[0]})"
        )
    XT = transpose(XA)
    return gaussian_solve(multiply(XT, XA), matvec(XT, y))


def wls(XA: ArrayLike, y: ArrayLike, w: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Weighted least squares by row scaling.

    Multiplies row i of XA and entry i of y by sqrt(w[i]) and solves the
    resulting OLS problem. A zero weight removes the observation.

    Raises:
        DimensionError: If XA, y and w disagree in length
        ValidationError: If any weight is negative
    """
    XA = _as_matrix(XA, 'XA')
    y = _as_vector(y, 'y')
    w = _as_vector(w, 'w')
    if not (XA.shape[0] == y.shape[0] == w.shape[0]):
        raise DimensionError(
            f"Inconsistent lengths: XA={XA.shape[0]}, y={y.shape[0]}, w={w.shape[0]}"
        )
    check_non_negative(w, 'w')
    sqrt_w = np.sqrt(w)
    return ols(XA * sqrt_w[:, np.newaxis], y * sqrt_w)


def regularized_wls(
    X: ArrayLike,
    y: ArrayLike,
    w: ArrayLike,
    alpha: float,
) -> NDArray[np.floating[Any]]:
    """
    Ridge-penalized weighted least squares.

    Builds X'WX + alpha*I and X'Wy directly and solves with
    cholesky_solve. The penalty applies to every column, including the
    intercept column when X carries one. With alpha == 0 the solution
    equals wls() whenever X'WX is positive definite.

    Raises:
        DimensionError: If X, y and w disagree in length
        ValidationError: If alpha or any weight is negative
        NotPositiveDefiniteError: If X'WX + alpha*I is not positive definite
    """
    X = _as_matrix(X, 'X')
    y = _as_vector(y, 'y')
    w = _as_vector(w, 'w')
    if not (X.shape[0] == y.shape[0] == w.shape[0]):
        raise DimensionError(
            f"X, y, and weights must have the same number of rows: "
            f"X={X.shape[0]}, y={y.shape[0]}, w={w.shape[0]}"
        )
    check_non_negative(w, 'w')
    if not alpha >= 0:
        raise ValidationError(f"alpha: must be >= 0, got {alpha}")

    p = X.shape[1]
    XtW = X.T * w
    XtWX = XtW @ X + alpha * np.eye(p)
    XtWy = XtW @ y
    return cholesky_solve(XtWX, XtWy)
