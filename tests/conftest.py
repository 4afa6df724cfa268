"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Three-feature dataset with small Gaussian noise. Coefficients are
    intercept-first."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([0.5, 1.0, -2.0, 0.5])
    y = beta_true[0] + X @ beta_true[1:] + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def outlier_data(rng):
    """y = 2 + 3 x1 + 1.5 x2 + noise, with 10 of 200 responses corrupted."""
    n = 200
    X = rng.uniform(-5, 5, size=(n, 2))
    beta_true = np.array([2.0, 3.0, 1.5])
    y = beta_true[0] + X @ beta_true[1:] + rng.standard_normal(n) * 0.5
    idx = rng.choice(n, size=10, replace=False)
    y[idx] += rng.uniform(30, 60, size=10)
    return X, y, beta_true, idx


@pytest.fixture
def collinear_data():
    """Second feature is exactly twice the first. Small integers keep the
    elimination exact, so the vanishing pivot is exactly zero."""
    X = np.array([
        [1.0, 2.0],
        [2.0, 4.0],
        [3.0, 6.0],
        [4.0, 8.0],
        [5.0, 10.0],
    ])
    y = np.array([1.0, 3.0, 2.0, 5.0, 4.0])
    return X, y
