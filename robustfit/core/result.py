"""
The envelope every backend returns.

A backend's solve() produces its parameter payload (LinearParams,
RobustParams) and wraps it in a Result together with everything the
library reports about how the fit went. RobustFit does not log; callers
inspect info, timing and warnings instead.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Fitted parameters plus solve diagnostics. Immutable.

    Attributes:
        params: Payload produced by the backend
        info: Method-specific metadata. The IRLS backend records
            'iterations', 'converged', 'inner_solver' and 'scale_floored'
        timing: Timer.result() of the solve, or None
        backend_name: e.g. 'cpu_normal_eq', 'cpu_irls'
        warnings: Human-readable notes on non-fatal conditions, such as an
            exhausted iteration budget

    Example:
        >>> Result(
        ...     params=RobustParams(...),
        ...     info={'method': 'irls', 'converged': True, 'iterations': 7},
        ...     timing={'total_seconds': 0.02, 'weights': 0.004, 'solve': 0.012},
        ...     backend_name='cpu_irls',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """True if some warning message contains substring."""
        return any(substring in message for message in self.warnings)
