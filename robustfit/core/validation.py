"""
Boundary validators.

Every public entry point (Design.from_arrays, the linalg kernels that accept
weights, predict) runs its inputs through these checks before any
arithmetic. A failing check raises immediately; nothing here repairs,
drops or imputes data.

Conventions:
    - The first argument is the value, the last is the parameter name
      used as the message prefix ("X: ...", "w: ...")
    - Messages report the offending value, shape or count
    - Shape problems raise DimensionError, everything else ValidationError
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from robustfit.core.exceptions import ValidationError, DimensionError

# dtype kinds accepted as numeric input: bool, signed, unsigned, float
_NUMERIC_KINDS = frozenset('biuf')


def check_not_none(value: Any, name: str) -> None:
    """
    Reject a missing required argument.

    Raises:
        ValidationError: If value is None
    """
    if value is None:
        raise ValidationError(f"{name}: required argument is None")


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Convert an array-like to a float ndarray.

    Scalars become 0-d arrays. Integer and boolean input is promoted to
    float64; float input keeps its precision.

    Args:
        array: Input to convert
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input is None, ragged, mixed, non-numeric or
            complex
    """
    check_not_none(array, name)
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    kind = arr.dtype.kind
    if kind == 'O':
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types, "
            f"ragged rows or non-numeric data"
        )
    if kind not in _NUMERIC_KINDS:
        raise ValidationError(
            f"{name}: non-numeric dtype {arr.dtype}, expected real numeric data"
        )
    return arr if kind == 'f' else arr.astype(np.float64)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Reject NaN and +/-Inf entries, reporting how many of each were found.

    Raises:
        ValidationError: If any entry is non-finite
    """
    finite = np.isfinite(array)
    if finite.all():
        return
    n_nan = int(np.count_nonzero(np.isnan(array)))
    n_inf = int(np.count_nonzero(~finite)) - n_nan
    raise ValidationError(
        f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
    )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Require an exact number of dimensions.

    Raises:
        DimensionError: If array.ndim != ndim
    """
    if array.ndim == ndim:
        return
    raise DimensionError(
        f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
    )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Require a vector."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Require a matrix."""
    check_ndim(array, 2, name)


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Require every array to have the same number of rows.

    Args:
        *arrays: Arrays to compare along axis 0
        names: One parameter name per array

    Raises:
        ValueError: If len(names) != len(arrays) (caller bug)
        DimensionError: If the row counts differ
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    rows = {name: arr.shape[0] for name, arr in zip(names, arrays)}
    if len(set(rows.values())) > 1:
        details = ", ".join(f"{name}={n}" for name, n in rows.items())
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray[np.floating[Any]], min_samples: int, name: str) -> None:
    """
    Require at least min_samples rows.

    A regression with more coefficients than observations has no unique
    solution, so Design calls this with the coefficient count.

    Raises:
        ValidationError: If array.shape[0] < min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_non_negative(values: NDArray[np.floating[Any]], name: str) -> None:
    """
    Require every entry to be >= 0 (observation weights).

    Raises:
        ValidationError: If any entry is negative; the message lists the
            offending indices
    """
    bad = np.flatnonzero(np.asarray(values) < 0)
    if bad.size:
        raise ValidationError(f"{name}: entries {bad.tolist()} are negative")
