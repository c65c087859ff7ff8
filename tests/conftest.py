"""Shared pytest fixtures for pyfitlib tests."""
import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np

from pyfitlib.core.matrix import Matrix
from pyfitlib.parsing.config.fit_config import FitConfig


@pytest.fixture
def line_data():
    """Exact data on y = 3 + 2x for x = 0..4."""
    x = Matrix.column([0.0, 1.0, 2.0, 3.0, 4.0])
    y = Matrix.column([3.0, 5.0, 7.0, 9.0, 11.0])
    return x, y


@pytest.fixture
def exponential_data():
    """Exact data on y = 2 exp(0.5 x) for x = 0..4."""
    x = np.arange(5.0)
    return Matrix.from_array(x), Matrix.from_array(2.0 * np.exp(0.5 * x))


@pytest.fixture
def strict_config():
    """Tight tolerance so fitted parameters can be compared closely."""
    return FitConfig(tolerance=1e-10, max_iterations=200)


@pytest.fixture
def square_matrix():
    """Well-conditioned 3x3 matrix."""
    return Matrix.from_rows([[4.0, -2.0, 1.0],
                             [-2.0, 4.0, -2.0],
                             [1.0, -2.0, 4.0]])


@pytest.fixture
def drying_curve():
    """Synthetic Crank drying curve with kF = 2e-4 1/s, X0 = 0.8, Xe = 0.1."""
    from pyfitlib.models.diffusion import crank_equation
    t = np.linspace(60.0, 3600.0, 12)
    X = np.array([crank_equation(2e-4, ti, 0.8, 0.1) for ti in t])
    return t, X
