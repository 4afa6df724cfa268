"""
Regression solution types.

Backends produce a frozen payload (LinearParams, RobustParams) inside a
Result. The solution classes wrap that Result together with its Design
and expose the fitted model: coefficients, diagnostics, prediction and
a printable summary.

predict_from_coefficients is the single prediction rule; the solutions
and the stateful regressors in models.py all delegate to it.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats
from scipy.linalg import cho_factor, cho_solve

from robustfit.core.exceptions import DimensionError, NotFittedError
from robustfit.core.result import Result
from robustfit.core.validation import check_array, check_finite

if TYPE_CHECKING:
    from robustfit.regression.design import Design

P = TypeVar('P')

_RULE = "-" * 60


def predict_from_coefficients(
    coefficients: NDArray[np.floating[Any]],
    fit_intercept: bool,
    x: ArrayLike,
) -> float | NDArray[np.floating[Any]]:
    """
    Evaluate intercept + sum_j slope[j] * x[j].

    Args:
        coefficients: Fitted coefficients (intercept first when present)
        fit_intercept: Whether coefficients[0] is an intercept
        x: One observation (scalar for a single-feature model, or 1-D of
           length p) or a batch (2-D, one observation per row)

    Returns:
        float for a single observation, (m,) array for a batch

    Raises:
        NotFittedError: If coefficients is empty
        DimensionError: If the feature count does not match the model
    """
    if coefficients is None or len(coefficients) == 0:
        raise NotFittedError("Model is not fitted. Call fit(...) first.")

    x_arr = check_array(x, 'x')
    check_finite(x_arr, 'x')

    if fit_intercept:
        intercept, slopes = coefficients[0], coefficients[1:]
    else:
        intercept, slopes = 0.0, coefficients
    p = len(slopes)

    if x_arr.ndim > 2:
        raise DimensionError(
            f"x: expected scalar, 1D or 2D input, got {x_arr.ndim}D with shape {x_arr.shape}"
        )

    if x_arr.ndim == 2:
        if x_arr.shape[1] != p:
            raise DimensionError(
                f"x: model has {p} features, got {x_arr.shape[1]} columns"
            )
        return np.array([intercept + row @ slopes for row in x_arr], dtype=np.float64)

    row = np.atleast_1d(x_arr)
    if row.shape[0] != p:
        raise DimensionError(f"x: model has {p} features, got {row.shape[0]}")
    return float(intercept + row @ slopes)


def _term_names(n_coef: int, fit_intercept: bool) -> list[str]:
    if fit_intercept:
        return ['Intercept'] + [f'x{j}' for j in range(1, n_coef)]
    return [f'x{j}' for j in range(1, n_coef + 1)]


# =====================================================================
# Payloads
# =====================================================================

@dataclass(frozen=True)
class LinearParams:
    """OLS payload: coefficients plus sums of squares."""
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    df_residual: int


@dataclass(frozen=True)
class RobustParams:
    """
    IRLS payload.

    weights and scale are the ones that produced the final coefficients;
    objective is sum(loss(residual / scale)) at those coefficients.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    weights: NDArray[np.floating[Any]]
    scale: float
    objective: float
    n_iter: int
    converged: bool
    final_change: float
    loss_name: str
    tuning_constant: float
    alpha: float


# =====================================================================
# Solutions
# =====================================================================

@dataclass
class _FitSolution(Generic[P]):
    """Accessors shared by every solution: the fitted model and the envelope."""
    _result: Result[P]
    _design: 'Design'

    @property
    def params(self) -> P:
        return self._result.params

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self.params.fitted_values

    @property
    def fit_intercept(self) -> bool:
        return self._design.fit_intercept

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def predict(self, x: ArrayLike) -> float | NDArray[np.floating[Any]]:
        """Predict for one observation or a batch (see predict_from_coefficients)."""
        return predict_from_coefficients(self.coefficients, self.fit_intercept, x)

    def _header(self, title: str) -> list[str]:
        return [
            title,
            "=" * 60,
            f"Observations: {self._design.n}",
            f"Features: {self._design.p}",
            f"Intercept: {'yes' if self.fit_intercept else 'no'}",
        ]

    def _footer(self) -> list[str]:
        lines = [_RULE, f"Backend: {self.backend_name}"]
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        lines.extend(f"Warning: {w}" for w in self.warnings)
        return lines


@dataclass
class LinearSolution(_FitSolution[LinearParams]):
    """
    OLS fit with classical inference.

    Standard errors assume homoscedastic Gaussian errors:
    SE(b) = sqrt(diag(s^2 (XA'XA)^-1)) with s^2 = RSS / (n - p).
    They, the t-statistics and the p-values are NaN when the fit has no
    residual degrees of freedom.
    """
    _standard_errors: NDArray[np.floating[Any]] | None = None

    @property
    def rss(self) -> float:
        return self.params.rss

    @property
    def tss(self) -> float:
        return self.params.tss

    @property
    def df_residual(self) -> int:
        return self.params.df_residual

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - self.rss / self.tss

    @property
    def adjusted_r_squared(self) -> float:
        n, k = self._design.n, self._design.n_coef
        if n <= k or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (n - 1) / (n - k)

    @property
    def residual_std_error(self) -> float:
        if self.df_residual <= 0:
            return 0.0
        return float(np.sqrt(self.rss / self.df_residual))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        if self._standard_errors is None:
            k = len(self.coefficients)
            if self.df_residual <= 0:
                se = np.full(k, np.nan, dtype=np.float64)
            else:
                # XA'XA was solved successfully, so it is positive definite
                XtX_inv = cho_solve(cho_factor(self._design.XtX()), np.eye(k))
                se = np.sqrt(self.rss / self.df_residual * np.diag(XtX_inv))
            self._standard_errors = se
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / self.standard_errors
        return np.where(np.isfinite(t), t, np.nan)

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from Student's t on df_residual."""
        t = self.t_statistics
        if self.df_residual <= 0:
            return np.full_like(t, np.nan)
        return 2.0 * stats.t.sf(np.abs(t), self.df_residual)

    def summary(self) -> str:
        """R-style coefficient table."""
        lines = self._header("Linear Regression Results (OLS)") + [
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {self.adjusted_r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            "Coefficients:",
            _RULE,
            f"{'Term':<12} {'Estimate':>12} {'Std.Error':>12} {'t value':>10} {'Pr(>|t|)':>10}",
            _RULE,
        ]
        rows = zip(
            _term_names(len(self.coefficients), self.fit_intercept),
            self.coefficients, self.standard_errors, self.t_statistics, self.p_values,
        )
        for name, coef, se, t, pv in rows:
            se_str = "NA".rjust(12) if np.isnan(se) else f"{se:12.6f}"
            t_str = "NA".rjust(10) if np.isnan(t) else f"{t:10.3f}"
            p_str = "NA".rjust(10) if np.isnan(pv) else f"{pv:10.4g}"
            lines.append(f"{name:<12} {coef:12.6f} {se_str} {t_str} {p_str}")
        return "\n".join(lines + self._footer())

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"r_squared={self.r_squared:.4f})"
        )


@dataclass
class RobustSolution(_FitSolution[RobustParams]):
    """
    IRLS fit.

    converged is False when max_iter ran out before the coefficient
    change fell below tol; the coefficients are then the last iterate.
    """

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        """Final IRLS weights, one per observation, in [0, 1] for the built-in losses."""
        return self.params.weights

    @property
    def scale(self) -> float:
        return self.params.scale

    @property
    def objective(self) -> float:
        return self.params.objective

    @property
    def n_iter(self) -> int:
        return self.params.n_iter

    @property
    def converged(self) -> bool:
        return self.params.converged

    @property
    def final_change(self) -> float:
        return self.params.final_change

    @property
    def loss_name(self) -> str:
        return self.params.loss_name

    @property
    def tuning_constant(self) -> float:
        return self.params.tuning_constant

    @property
    def alpha(self) -> float:
        return self.params.alpha

    def summary(self) -> str:
        status = "converged" if self.converged else "NOT converged"
        lines = self._header("Robust Regression Results (IRLS)") + [
            f"Loss: {self.loss_name} (c={self.tuning_constant:g})",
            f"Ridge alpha: {self.alpha:g}",
            f"Iterations: {self.n_iter} ({status}, last change {self.final_change:.3e})",
            f"Scale (MAD): {self.scale:.6f}",
            f"Objective: {self.objective:.6f}",
            f"Downweighted obs (w < 1): {int(np.count_nonzero(self.weights < 1.0))}",
            "",
            "Coefficients:",
            _RULE,
            f"{'Term':<12} {'Estimate':>12}",
            _RULE,
        ]
        names = _term_names(len(self.coefficients), self.fit_intercept)
        lines.extend(f"{name:<12} {coef:12.6f}" for name, coef in zip(names, self.coefficients))
        return "\n".join(lines + self._footer())

    def __repr__(self) -> str:
        return (
            f"RobustSolution(n={self._design.n}, p={self._design.p}, "
            f"loss={self.loss_name!r}, n_iter={self.n_iter}, converged={self.converged})"
        )
