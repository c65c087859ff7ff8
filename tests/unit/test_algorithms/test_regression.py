"""Unit tests for linear and polynomial regression."""

import pytest
import numpy as np
import sympy as sp

from pyfitlib.algorithms.regression import (regress, polyfit, polyval, polynomial_design_matrix,
                                            coefficient_of_determination, polynomial_expression)
from pyfitlib.core.exceptions import DimensionMismatchError, SingularMatrixError, UndefinedStatisticError
from pyfitlib.core.matrix import Matrix


class TestRegress:
    """Test cases for ordinary least squares."""

    def test_exact_line(self, line_data):
        """Test that y = 3 + 2x is recovered within 1e-9."""
        x, y = line_data
        X = Matrix.ones(5, 1).augment(x)
        beta = regress(y, X)
        assert beta.shape == (2, 1)
        np.testing.assert_allclose(beta.to_numpy()[:, 0], [3.0, 2.0], atol=1e-9)

    def test_overdetermined_least_squares(self):
        """Test agreement with numpy's least squares on noisy data."""
        rng = np.random.default_rng(42)
        x = np.linspace(0.0, 1.0, 20)
        y = 1.0 - 0.5 * x + 0.1 * rng.standard_normal(20)
        X = np.column_stack([np.ones_like(x), x])
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        beta = regress(y, X)
        np.testing.assert_allclose(beta.to_numpy()[:, 0], expected, rtol=1e-9)

    def test_small_scale_column(self):
        """Test that a well-posed fit with a column in very small units is not rejected."""
        x = np.linspace(1e-7, 5e-7, 5)
        y = 3.0 + 2e7 * x
        beta = regress(y, np.column_stack([np.ones_like(x), x]))
        np.testing.assert_allclose(beta.to_numpy()[:, 0], [3.0, 2e7], rtol=1e-6)

    def test_identical_columns_singular(self):
        """Test that linearly dependent columns raise SingularMatrixError."""
        X = Matrix.from_rows([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
        with pytest.raises(SingularMatrixError):
            regress([1.0, 2.0, 3.0], X)

    def test_row_mismatch(self):
        """Test that y and X with different row counts raise."""
        with pytest.raises(DimensionMismatchError):
            regress([1.0, 2.0], Matrix.ones(3, 1))

    def test_y_must_be_column(self):
        """Test that a multi-column y raises."""
        with pytest.raises(DimensionMismatchError):
            regress(Matrix(3, 2), Matrix.ones(3, 1))


class TestPolyfit:
    """Test cases for polynomial fits."""

    def test_matches_regress(self, line_data):
        """Test that polyfit equals regress with the equivalent design matrix."""
        x, y = line_data
        X = Matrix.ones(5, 1).augment(x)
        assert polyfit(x, y, 1).allclose(regress(y, X), rtol=0.0, atol=1e-12)

    def test_quadratic(self):
        """Test recovery of an exact quadratic."""
        x = np.linspace(-2.0, 2.0, 9)
        y = 1.0 - 2.0 * x + 0.5 * x ** 2
        beta = polyfit(x, y, 2)
        np.testing.assert_allclose(beta.to_numpy()[:, 0], [1.0, -2.0, 0.5], atol=1e-9)

    def test_design_matrix_columns(self):
        """Test that column j holds x**j."""
        X = polynomial_design_matrix([2.0, 3.0], 2)
        assert X == Matrix.from_rows([[1.0, 2.0, 4.0], [1.0, 3.0, 9.0]])

    def test_design_matrix_uses_every_row(self):
        """Test that all n observations are filled."""
        X = polynomial_design_matrix([1.0, 2.0, 3.0, 4.0], 1)
        assert X.rows == 4
        assert X.get(3, 1) == 4.0

    def test_negative_order(self):
        """Test that a negative order is rejected."""
        with pytest.raises(ValueError):
            polynomial_design_matrix([1.0], -1)

    def test_order_too_high_is_singular(self):
        """Test that more coefficients than points raise SingularMatrixError."""
        with pytest.raises(SingularMatrixError):
            polyfit([1.0, 2.0], [1.0, 2.0], 2)

    def test_polyval(self):
        """Test polynomial evaluation in polyfit ordering."""
        values = polyval([1.0, 0.0, 2.0], [0.0, 1.0, 2.0])
        np.testing.assert_allclose(values.to_numpy()[:, 0], [1.0, 3.0, 9.0])


class TestCoefficientOfDetermination:
    """Test cases for R^2."""

    def test_perfect_fit(self, line_data):
        """Test that an exact fit gives R^2 = 1."""
        x, y = line_data
        beta = polyfit(x, y, 1)
        assert coefficient_of_determination(x, y, beta) == pytest.approx(1.0, abs=1e-12)

    def test_known_value(self):
        """Test R^2 against a hand computation."""
        x = [0.0, 1.0, 2.0]
        y = [0.0, 2.0, 1.0]
        # Mean 1, SS_tot = 2; the line 0.5 + 0.5x leaves SS_res = 1.5
        assert coefficient_of_determination(x, y, [0.5, 0.5]) == pytest.approx(0.25)

    def test_constant_data_undefined(self):
        """Test that constant observations make R^2 undefined."""
        with pytest.raises(UndefinedStatisticError):
            coefficient_of_determination([0.0, 1.0, 2.0], [4.0, 4.0, 4.0], [4.0, 0.0])


class TestPolynomialExpression:
    """Test cases for the symbolic polynomial."""

    def test_symbolic(self):
        """Test that a sympy polynomial is returned for a symbol."""
        T = sp.Symbol('T')
        expr = polynomial_expression([1.0, 2.0], T)
        assert isinstance(expr, sp.Expr)
        assert float(expr.subs(T, 3.0)) == pytest.approx(7.0)

    def test_numeric(self):
        """Test that a number is returned for a numeric argument."""
        assert polynomial_expression([1.0, 2.0, 3.0], 2.0) == pytest.approx(17.0)
