"""
CPU backend for robust linear regression via IRLS.

Implements Iteratively Reweighted Least Squares with a pluggable loss.
Each iteration re-estimates the residual scale, turns scaled residuals
into weights through the loss, and re-solves a weighted least squares
problem.

Algorithm:
    Initialize: beta from OLS, from median(y) in the intercept slot,
                or zeros
    For iteration 1..max_iter:
        r      = y - XA @ beta
        s      = MAD(r)                       # consistency factor inside MAD
        w      = loss.weight(r / s)
        beta'  = WLS(XA, y, w)                if alpha == 0
               = RegularizedWLS(XA, y, w, a)  otherwise
        change = ||beta' - beta||
        beta   = beta'
        Stop if change < tol

Exhausting max_iter is not an error: the last iterate is returned with
converged=False and a message in Result.warnings. Numerical failures from
the inner solve propagate unchanged and abort the fit.
"""

from typing import Any
import numpy as np

from robustfit.core.result import Result
from robustfit.core.compute.timing import Timer
from robustfit.core.compute.tolerances import MAD_FLOOR
from robustfit.core.compute.linalg import (
    median,
    median_absolute_deviation,
    ols,
    regularized_wls,
    residuals,
    vector_norm_diff,
    wls,
)
from robustfit.core.exceptions import ValidationError
from robustfit.regression.design import Design
from robustfit.regression.losses import LossFunction
from robustfit.regression.solution import RobustParams


class CPUIRLSBackend:
    """CPU backend running IRLS with elimination or Cholesky inner solves."""

    @property
    def name(self) -> str:
        return 'cpu_irls'

    def solve(
        self,
        design: Design,
        *,
        loss: LossFunction,
        alpha: float = 0.0,
        max_iter: int = 50,
        tol: float = 1e-6,
        initial_estimate: str = 'ols',
    ) -> Result[RobustParams]:
        """Run IRLS to fit the robust regression.

        Args:
            design: Design object with XA and y
            loss: Loss function supplying the weights
            alpha: Ridge penalty; 0 selects the plain WLS path
            max_iter: Maximum IRLS iterations
            tol: Convergence tolerance on ||beta_new - beta||
            initial_estimate: 'ols', 'median', or anything else for zeros

        Returns:
            Result[RobustParams] with coefficients, final weights, scale, etc.

        Raises:
            SingularMatrixError: If a WLS system is singular
            NotPositiveDefiniteError: If a regularized system is not PD
        """
        timer = Timer()
        timer.start()

        XA, y = design.XA, design.y
        n = design.n

        warnings_list: list[str] = []

        # ------------------------------------------------------------------
        # Initial estimate
        # ------------------------------------------------------------------
        with timer.section('initialize'):
            beta = self._initial_beta(design, initial_estimate)

        # ------------------------------------------------------------------
        # IRLS loop
        # ------------------------------------------------------------------
        converged = False
        scale_floored = False
        change = float('inf')
        scale = float('nan')
        w = np.ones(n, dtype=np.float64)
        n_iter = 0

        for iteration in range(1, max_iter + 1):
            with timer.section('weights'):
                r = residuals(XA, y, beta)
                scale = median_absolute_deviation(r)
                if scale <= MAD_FLOOR:
                    scale_floored = True
                w = self._weights(loss, r / scale, n)

            with timer.section('solve'):
                if alpha == 0.0:
                    beta_new = wls(XA, y, w)
                else:
                    beta_new = regularized_wls(XA, y, w, alpha)

            change = vector_norm_diff(beta, beta_new)
            beta = beta_new
            n_iter = iteration
            if change < tol:
                converged = True
                break

        if not converged:
            warnings_list.append(
                f"IRLS did not converge in {max_iter} iterations "
                f"(last change={change:.3e}, tol={tol:.3e})"
            )

        # ------------------------------------------------------------------
        # Final quantities
        # ------------------------------------------------------------------
        with timer.section('statistics'):
            fitted_values = XA @ beta
            resid = y - fitted_values
            objective = float(np.sum(loss.loss(resid / scale)))

        timer.stop()

        params = RobustParams(
            coefficients=beta,
            residuals=resid,
            fitted_values=fitted_values,
            weights=w,
            scale=scale,
            objective=objective,
            n_iter=n_iter,
            converged=converged,
            final_change=change,
            loss_name=loss.name,
            tuning_constant=float(loss.tuning_constant),
            alpha=float(alpha),
        )

        return Result(
            params=params,
            info={
                'method': 'irls',
                'inner_solver': 'wls_elimination' if alpha == 0.0 else 'ridge_cholesky',
                'initial_estimate': initial_estimate,
                'iterations': n_iter,
                'converged': converged,
                'scale_floored': scale_floored,
                'fit_intercept': design.fit_intercept,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _initial_beta(design: Design, initial_estimate: str) -> np.ndarray:
        """Starting coefficients.

        'ols' solves the unweighted problem. 'median' starts from zeros
        with median(y) in the intercept slot (plain zeros without an
        intercept). Any other value starts from zeros.
        """
        choice = initial_estimate.lower()
        if choice == 'ols':
            return ols(design.XA, design.y)

        beta = np.zeros(design.n_coef, dtype=np.float64)
        if choice == 'median' and design.fit_intercept:
            beta[0] = median(design.y)
        return beta

    @staticmethod
    def _weights(loss: LossFunction, scaled: np.ndarray, n: int) -> np.ndarray:
        w = np.asarray(loss.weight(scaled), dtype=np.float64)
        if w.shape != (n,):
            raise ValidationError(
                f"loss.weight must be elementwise: expected shape ({n},), got {w.shape}"
            )
        return w
