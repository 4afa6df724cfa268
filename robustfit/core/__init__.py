"""
Core infrastructure for RobustFit.

This module provides shared abstractions, utilities, and numeric kernels
used by the regression package.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, linear algebra primitives
"""

from robustfit.core.protocols import Backend
from robustfit.core.result import Result
from robustfit.core.exceptions import (
    RobustFitError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    NotFittedError,
    ConvergenceError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "RobustFitError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "NotFittedError",
    "ConvergenceError",
]
