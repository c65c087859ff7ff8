import logging
from typing import Union

import numpy as np
import sympy as sp

from pyfitlib.core.exceptions import DimensionMismatchError, UndefinedStatisticError
from pyfitlib.core.matrix import Matrix, MatrixLike, as_matrix

logger = logging.getLogger(__name__)


def _as_column(value: MatrixLike, name: str) -> Matrix:
    column = as_matrix(value)
    if column.cols != 1:
        raise DimensionMismatchError(f"{name} (expected a single column)", column.shape, (column.rows, 1))
    return column


def regress(y: MatrixLike, X: MatrixLike) -> Matrix:
    """
    Ordinary least squares through the normal equations.

    beta = (X^T X)^{-1} X^T y

    Args:
        y: Observations, n x 1.
        X: Design matrix, n x k.
    Returns:
        Coefficient vector, k x 1.
    Raises:
        DimensionMismatchError: If y is not a single column or its row count differs from X.
        SingularMatrixError: If X^T X cannot be inverted, which happens when the columns
            of X are linearly dependent or n < k.
    """
    y = _as_column(y, "regress")
    X = as_matrix(X)
    if y.rows != X.rows:
        raise DimensionMismatchError("regress", X.shape, y.shape)
    logger.debug("Solving normal equations: %d observations, %d coefficients", X.rows, X.cols)
    Xt = X.transpose()
    XtX_inv = Xt.multiply(X).inverse()
    beta = XtX_inv.multiply(Xt).multiply(y)
    return beta


def polynomial_design_matrix(x: MatrixLike, order: int) -> Matrix:
    """Design matrix whose column j holds x**j, for j in [0, order]."""
    if order < 0:
        raise ValueError(f"Polynomial order must be non-negative, got {order}")
    x = _as_column(x, "polynomial_design_matrix")
    values = x.to_numpy()[:, 0]
    return Matrix.from_array(np.vander(values, order + 1, increasing=True))


def polyfit(x: MatrixLike, y: MatrixLike, order: int) -> Matrix:
    """
    Fit a polynomial of the given order by least squares.

    Returns the coefficients ordered from the constant term upward. Asking for
    order >= number of observations is the caller's responsibility: the normal
    equations are then singular and SingularMatrixError is raised.
    """
    X = polynomial_design_matrix(x, order)
    logger.debug("Fitting polynomial of order %d to %d points", order, X.rows)
    return regress(y, X)


def polyval(beta: MatrixLike, x: MatrixLike) -> Matrix:
    """Evaluate a polyfit coefficient vector at every element of x."""
    beta = _as_column(beta, "polyval")
    X = polynomial_design_matrix(x, beta.rows - 1)
    return X.multiply(beta)


def coefficient_of_determination(x: MatrixLike, y: MatrixLike, beta: MatrixLike) -> float:
    """
    R^2 = 1 - SS_res / SS_tot for a polynomial in x.

    Args:
        x: Independent variable, n x 1.
        y: Observations, n x 1.
        beta: Polynomial coefficients in polyfit ordering.
    Raises:
        UndefinedStatisticError: If every y is equal, so SS_tot is zero.
    """
    y = _as_column(y, "coefficient_of_determination")
    predicted = polyval(beta, x)
    if predicted.rows != y.rows:
        raise DimensionMismatchError("coefficient_of_determination", predicted.shape, y.shape)
    observed = y.to_numpy()[:, 0]
    ss_res = float(np.sum((observed - predicted.to_numpy()[:, 0]) ** 2))
    ss_tot = float(np.sum((observed - observed.mean()) ** 2))
    if ss_tot == 0.0:
        raise UndefinedStatisticError("R^2 is undefined: all observations are equal (SS_tot = 0)")
    r_squared = 1.0 - ss_res / ss_tot
    logger.debug("R^2 = %.6f (SS_res=%.6e, SS_tot=%.6e)", r_squared, ss_res, ss_tot)
    return r_squared


def polynomial_expression(beta: MatrixLike, x: Union[sp.Symbol, float]) -> Union[sp.Expr, float]:
    """Build the fitted polynomial as a sympy expression in x (constant term first)."""
    beta = _as_column(beta, "polynomial_expression")
    coefficients = beta.to_numpy()[:, 0]
    expr = sum((sp.Float(float(c)) * x ** j for j, c in enumerate(coefficients)), sp.Integer(0))
    if isinstance(x, (sp.Symbol, sp.Expr)):
        return sp.expand(expr)
    return float(expr)
