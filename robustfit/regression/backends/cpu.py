"""
CPU backend for ordinary least squares.

Forms the normal equations XA'XA b = XA'y and solves them by Gaussian
elimination without pivoting (core.compute.linalg.ols). The IRLS backend
uses the same solve for its starting point and for every unregularized
iteration, so an IRLS fit with unit weights reproduces this one.
"""

import numpy as np

from robustfit.core.result import Result
from robustfit.core.compute.timing import Timer
from robustfit.core.compute.linalg import ols
from robustfit.regression.design import Design
from robustfit.regression.solution import LinearParams


class CPUNormalEquationsBackend:
    """Backend protocol for Design -> LinearParams, one elimination solve."""

    @property
    def name(self) -> str:
        return 'cpu_normal_eq'

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Fit y ~ XA by least squares.

        Raises:
            SingularMatrixError: If XA'XA has a vanishing pivot
                (collinear or constant columns)
        """
        timer = Timer()
        timer.start()

        with timer.section('solve'):
            beta = ols(design.XA, design.y)

        with timer.section('residuals'):
            fitted = design.XA @ beta
            resid = design.y - fitted

        with timer.section('statistics'):
            centered = design.y - design.y.mean()
            rss = float(resid @ resid)
            tss = float(centered @ centered)

        timer.stop()

        return Result(
            params=LinearParams(
                coefficients=beta,
                residuals=resid,
                fitted_values=fitted,
                rss=rss,
                tss=tss,
                df_residual=design.n - design.n_coef,
            ),
            info={
                'method': 'normal_equations',
                'solver': 'gaussian_elimination',
                'fit_intercept': design.fit_intercept,
            },
            timing=timer.result(),
            backend_name=self.name,
        )
