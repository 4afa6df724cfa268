"""
Shared compute infrastructure for RobustFit.

This module provides timing utilities, numeric policy constants and the
dense linear algebra kernels used by the regression backends.

IMPORTANT: This is NOT where backends live. Those go in
regression/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Numeric policy constants and tolerance tiers
    linalg: Dense linear algebra kernels
"""

from robustfit.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
