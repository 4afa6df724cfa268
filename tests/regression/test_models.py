"""
Tests for the stateful regressors.

Validates OLSRegressor / RobustRegressor life cycle (unfitted → fitted),
single and batch prediction, and the RegressorKind factory.
"""

import pytest
import numpy as np

from robustfit.regression import (
    HuberLoss,
    OLSRegressor,
    RegressorKind,
    RobustRegressor,
    TukeyLoss,
    make_regressor,
)
from robustfit.core.exceptions import (
    DimensionError,
    NotFittedError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Unfitted state
# ═══════════════════════════════════════════════════════════════════════


class TestUnfitted:

    @pytest.mark.parametrize("model", [OLSRegressor(), RobustRegressor()],
                             ids=['ols', 'robust'])
    def test_predict_before_fit_raises(self, model):
        with pytest.raises(NotFittedError, match="not fitted"):
            model.predict([1.0])

    def test_coefficients_empty_before_fit(self):
        model = OLSRegressor()
        assert model.coefficients.shape == (0,)
        assert not model.is_fitted
        assert model.solution is None

    def test_intercept_before_fit_raises(self):
        with pytest.raises(NotFittedError):
            OLSRegressor().intercept

    def test_convergence_info_before_fit_raises(self):
        model = RobustRegressor()
        with pytest.raises(NotFittedError):
            model.converged
        with pytest.raises(NotFittedError):
            model.n_iter

    def test_not_fitted_is_not_validation_error(self):
        with pytest.raises(NotFittedError) as exc_info:
            OLSRegressor().predict([1.0])
        assert not isinstance(exc_info.value, ValidationError)

    def test_repr(self):
        assert repr(OLSRegressor()) == "OLSRegressor(fit_intercept=True, unfitted)"


# ═══════════════════════════════════════════════════════════════════════
# OLSRegressor
# ═══════════════════════════════════════════════════════════════════════


class TestOLSRegressor:

    def test_fit_returns_self(self):
        model = OLSRegressor()
        assert model.fit([[1.0], [2.0], [3.0]], [3.0, 5.0, 7.0]) is model

    def test_exact_line(self):
        model = OLSRegressor().fit([[1.0], [2.0], [3.0]], [3.0, 5.0, 7.0])
        np.testing.assert_allclose(model.coefficients, [1.0, 2.0], atol=1e-10)
        assert model.intercept == pytest.approx(1.0)
        assert model.predict([4.0]) == pytest.approx(9.0)
        assert repr(model) == "OLSRegressor(fit_intercept=True, fitted)"

    def test_scalar_predict_single_feature(self):
        model = OLSRegressor().fit([1.0, 2.0, 3.0], [3.0, 5.0, 7.0])
        assert model.predict(4.0) == pytest.approx(9.0)

    def test_batch_equals_single(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = OLSRegressor().fit(X, y)
        batch = model.predict(X[:10])
        assert batch.shape == (10,)
        singles = np.array([model.predict(row) for row in X[:10]])
        np.testing.assert_allclose(batch, singles)

    def test_predict_returns_float_for_single(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = OLSRegressor().fit(X, y)
        assert isinstance(model.predict(X[0]), float)

    def test_predict_wrong_feature_count(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = OLSRegressor().fit(X, y)
        with pytest.raises(DimensionError, match="3 features, got 2"):
            model.predict([1.0, 2.0])
        with pytest.raises(DimensionError, match="3 features, got 4 columns"):
            model.predict(np.ones((5, 4)))

    def test_predict_rejects_non_finite(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = OLSRegressor().fit(X, y)
        with pytest.raises(ValidationError):
            model.predict([1.0, np.nan, 0.0])

    def test_through_origin(self):
        model = OLSRegressor(fit_intercept=False).fit([[1.0], [2.0]], [2.0, 4.0])
        assert model.intercept == 0.0
        assert model.predict([3.0]) == pytest.approx(6.0)

    def test_mismatched_rows(self):
        with pytest.raises(DimensionError):
            OLSRegressor().fit(np.ones((4, 1)), np.ones(3))

    def test_failed_fit_keeps_previous_state(self, collinear_data):
        model = OLSRegressor().fit([[1.0], [2.0], [3.0]], [3.0, 5.0, 7.0])
        before = model.coefficients.copy()
        X, y = collinear_data
        with pytest.raises(SingularMatrixError):
            model.fit(X, y)
        np.testing.assert_array_equal(model.coefficients, before)

    def test_refit_overwrites(self):
        model = OLSRegressor().fit([[1.0], [2.0], [3.0]], [3.0, 5.0, 7.0])
        model.fit([[1.0], [2.0], [3.0]], [1.0, 1.0, 1.0])
        np.testing.assert_allclose(model.coefficients, [1.0, 0.0], atol=1e-10)

    def test_solution_kept(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = OLSRegressor().fit(X, y)
        assert model.solution.r_squared > 0.99


# ═══════════════════════════════════════════════════════════════════════
# RobustRegressor
# ═══════════════════════════════════════════════════════════════════════


class TestRobustRegressor:

    def test_fit_with_loss_argument(self, outlier_data):
        X, y, beta_true, _ = outlier_data
        model = RobustRegressor().fit(X, y, loss=TukeyLoss())
        assert model.converged
        assert model.n_iter >= 1
        np.testing.assert_allclose(model.coefficients, beta_true, atol=0.2)

    def test_bound_loss_used_by_default(self, outlier_data):
        X, y, _, _ = outlier_data
        model = RobustRegressor(loss=HuberLoss(c=2.0)).fit(X, y)
        assert model.solution.loss_name == 'huber'
        assert model.solution.tuning_constant == 2.0

    def test_loss_argument_overrides_bound(self, outlier_data):
        X, y, _, _ = outlier_data
        model = RobustRegressor(loss='huber').fit(X, y, loss='tukey')
        assert model.solution.loss_name == 'tukey'

    def test_missing_loss_raises(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with pytest.raises(ValidationError, match="loss"):
            RobustRegressor().fit(X, y)

    def test_nonconvergence_still_fits(self, outlier_data):
        X, y, _, _ = outlier_data
        with pytest.warns(RuntimeWarning, match="did not converge"):
            model = RobustRegressor().fit(X, y, loss='tukey', max_iter=1, tol=0.0)
        assert model.is_fitted
        assert not model.converged
        assert model.n_iter == 1

    def test_nonconvergence_warning_points_at_caller(self, outlier_data):
        X, y, _, _ = outlier_data
        with pytest.warns(RuntimeWarning) as record:
            RobustRegressor().fit(X, y, loss='tukey', max_iter=1, tol=0.0)
        [warning] = [w for w in record if "did not converge" in str(w.message)]
        assert warning.filename == __file__

    def test_settings_forwarded(self, outlier_data):
        X, y, _, _ = outlier_data
        model = RobustRegressor().fit(
            X, y, loss='huber', alpha=0.5, initial_estimate='median'
        )
        assert model.solution.alpha == 0.5
        assert model.solution.info['initial_estimate'] == 'median'

    def test_batch_equals_single(self, outlier_data):
        X, y, _, _ = outlier_data
        model = RobustRegressor().fit(X, y, loss='huber')
        batch = model.predict(X[:5])
        np.testing.assert_allclose(batch, [model.predict(row) for row in X[:5]])

    def test_single_outlier_example(self):
        X = [1.0, 2.0, 3.0, 4.0, 5.0]
        y = [2.0, 4.0, 6.0, 8.0, 100.0]
        ols_slope = OLSRegressor().fit(X, y).coefficients[1]
        robust_slope = RobustRegressor().fit(X, y, loss=TukeyLoss()).coefficients[1]
        assert abs(robust_slope - 2.0) < abs(ols_slope - 2.0)

    def test_invalid_settings_leave_model_unfitted(self, simple_regression_data):
        X, y, _ = simple_regression_data
        model = RobustRegressor()
        with pytest.raises(ValidationError):
            model.fit(X, y, loss='huber', max_iter=0)
        assert not model.is_fitted


# ═══════════════════════════════════════════════════════════════════════
# RegressorKind / make_regressor
# ═══════════════════════════════════════════════════════════════════════


class TestMakeRegressor:

    def test_ols(self):
        model = make_regressor(RegressorKind.OLS)
        assert isinstance(model, OLSRegressor)

    @pytest.mark.parametrize("kind, loss_cls", [
        (RegressorKind.HUBER, HuberLoss),
        (RegressorKind.TUKEY, TukeyLoss),
    ])
    def test_robust_kinds_bind_loss(self, kind, loss_cls):
        model = make_regressor(kind)
        assert isinstance(model, RobustRegressor)
        assert isinstance(model.loss, loss_cls)

    def test_string_kind(self):
        assert isinstance(make_regressor('Tukey').loss, TukeyLoss)

    def test_fit_intercept_forwarded(self):
        assert make_regressor('ols', fit_intercept=False).fit_intercept is False

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            make_regressor('lasso')

    def test_factory_model_fits(self, outlier_data):
        X, y, _, _ = outlier_data
        model = make_regressor(RegressorKind.HUBER).fit(X, y)
        assert model.converged
