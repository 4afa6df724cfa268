"""
Regression backends.

Available backends:
    CPUNormalEquationsBackend: OLS via normal equations and elimination
    CPUIRLSBackend: robust regression via IRLS
"""

from robustfit.regression.backends.cpu import CPUNormalEquationsBackend
from robustfit.regression.backends.cpu_irls import CPUIRLSBackend

__all__ = [
    "CPUNormalEquationsBackend",
    "CPUIRLSBackend",
]
