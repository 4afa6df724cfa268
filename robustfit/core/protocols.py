"""
Structural interfaces.

Backends are matched by shape, not by inheritance: any object with a
`name` and a `solve(design, ...)` returning a Result is a Backend.
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

from robustfit.core.result import Result

P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    A solver that turns a validated Design into a Result[P].

    Backends hold no per-fit state. The Design is the only positional
    argument; fit settings are keyword-only (the IRLS backend takes
    loss, alpha, max_iter, tol and initial_estimate). The Design is
    trusted and not re-validated.
    """

    @property
    def name(self) -> str:
        """'{device}_{method}', e.g. 'cpu_normal_eq' or 'cpu_irls'."""
        ...

    def solve(self, design: D, **settings: Any) -> Result[P]:
        """
        Fit the model described by design.

        Raises:
            NumericalError: If an inner linear solve breaks down
        """
        ...
