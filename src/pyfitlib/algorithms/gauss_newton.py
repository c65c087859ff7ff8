"""
Nonlinear least squares using the Gauss-Newton algorithm.

Each iteration linearizes the model around the current coefficients with a
forward-difference Jacobian

    J_ij = (f(x_i, beta + h e_j) - f(x_i, beta)) / h

and solves the linearized normal equations

    (J^T J) dbeta = J^T dy,    dy_i = y_i - f(x_i, beta)

through ``regress``, then updates ``beta <- beta + dbeta``. J holds +df/dbeta,
which is why the update is added. The loop stops once the largest absolute
update falls below the tolerance, or reports non-convergence when the iteration
budget runs out while still returning the latest estimate.

The finite-difference step is tiny (1e-10 by default), so parameters should be
of order one. Reparameterize badly scaled or sign-constrained parameters (for
example fit sqrt(p) instead of p) before calling the fitter.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from pyfitlib.algorithms.regression import regress
from pyfitlib.core.exceptions import (DimensionMismatchError, NonConvergenceError, NonConvergenceWarning,
                                      SingularJacobianError, SingularMatrixError)
from pyfitlib.core.matrix import Matrix, MatrixLike, as_matrix
from pyfitlib.core.typedefs import AuxModel, RowEvaluator, ScalarModel, VectorModel
from pyfitlib.data.constants import FittingConstants
from pyfitlib.parsing.config.fit_config import FitConfig

logger = logging.getLogger(__name__)

_NO_AUX = object()


@dataclass
class FitResult:
    """
    Outcome of a Gauss-Newton fit.

    Attributes:
        beta (Matrix): Fitted coefficients (k x 1). Holds the latest estimate even when
            the fit did not converge.
        iterations (int): Number of iterations performed.
        converged (bool): Whether the largest update fell below the tolerance.
        max_update (float): Largest absolute update of the last completed iteration.
        residual_sum_of_squares (float): Sum of squared residuals at beta.
    """
    beta: Matrix
    iterations: int
    converged: bool
    max_update: float
    residual_sum_of_squares: float

    @property
    def parameters(self) -> np.ndarray:
        """Fitted coefficients as a flat numpy array."""
        return self.beta.to_numpy()[:, 0]


# --- Building blocks ---
def _residuals(evaluate: RowEvaluator, observed: np.ndarray, beta: Matrix) -> Matrix:
    predicted = np.array([float(evaluate(i, beta)) for i in range(observed.shape[0])])
    return Matrix.from_array(observed - predicted)


def _jacobian(evaluate: RowEvaluator, n_obs: int, beta: Matrix, step: float) -> Matrix:
    perturbed = []
    for j in range(beta.rows):
        beta_h = beta.copy()
        beta_h.add(j, 0, step)
        perturbed.append(beta_h)
    J = np.empty((n_obs, beta.rows))
    for i in range(n_obs):
        base = float(evaluate(i, beta))
        for j, beta_h in enumerate(perturbed):
            J[i, j] = (float(evaluate(i, beta_h)) - base) / step
    return Matrix.from_array(J)


def _scalar_evaluator(model: ScalarModel, x: Matrix) -> RowEvaluator:
    values = x.to_numpy()[:, 0]
    return lambda i, beta: model(float(values[i]), beta)


def calc_residuals(model: ScalarModel, x: MatrixLike, y: MatrixLike, beta: MatrixLike) -> Matrix:
    """Residual column dy_i = y_i - model(x_i, beta)."""
    x, y, beta = _check_inputs(x, y, beta, single_column_x=True)
    return _residuals(_scalar_evaluator(model, x), y.to_numpy()[:, 0], beta)


def calc_jacobian(model: ScalarModel, x: MatrixLike, beta: MatrixLike,
                  step: float = FittingConstants.DEFAULT_STEP) -> Matrix:
    """Forward-difference Jacobian of model with respect to beta, one row per x value."""
    x = as_matrix(x)
    if x.cols != 1:
        raise DimensionMismatchError("calc_jacobian (x must be a single column)", x.shape, (x.rows, 1))
    beta = _check_beta(beta)
    return _jacobian(_scalar_evaluator(model, x), x.rows, beta, step)


def _check_beta(beta0: MatrixLike) -> Matrix:
    beta0 = as_matrix(beta0)
    if beta0.cols != 1:
        raise DimensionMismatchError("fit (initial guess must be a single column)", beta0.shape, (beta0.rows, 1))
    return beta0


def _check_inputs(x: MatrixLike, y: MatrixLike, beta0: MatrixLike, single_column_x: bool):
    x = as_matrix(x)
    y = as_matrix(y)
    if y.cols != 1:
        raise DimensionMismatchError("fit (y must be a single column)", y.shape, (y.rows, 1))
    if single_column_x and x.cols != 1:
        raise DimensionMismatchError("fit (x must be a single column)", x.shape, (x.rows, 1))
    if x.rows != y.rows:
        raise DimensionMismatchError("fit (x and y row counts differ)", x.shape, y.shape)
    return x, y, _check_beta(beta0)


class GaussNewtonFitter:
    """
    Gauss-Newton fitter for the three recognised model signatures.

    Example:
        >>> fitter = GaussNewtonFitter(FitConfig(max_iterations=100))
        >>> result = fitter.fit(lambda x, b: b.get(0, 0) * np.exp(b.get(1, 0) * x), x, y, [1.0, 0.1])
        >>> result.converged, result.parameters
    """

    def __init__(self, config: Optional[FitConfig] = None) -> None:
        self.config = config if config is not None else FitConfig()

    # --- Public API ---
    def fit(self, model: ScalarModel, x: MatrixLike, y: MatrixLike, beta0: MatrixLike) -> FitResult:
        """Fit model(x, beta) where x is a single column of independent values."""
        x, y, beta0 = _check_inputs(x, y, beta0, single_column_x=True)
        return self._run(_scalar_evaluator(model, x), y, beta0)

    def fit_multivariate(self, model: VectorModel, X: MatrixLike, y: MatrixLike, beta0: MatrixLike) -> FitResult:
        """Fit model(x_row, beta) where x_row is row i of X as a 1 x m matrix."""
        X, y, beta0 = _check_inputs(X, y, beta0, single_column_x=False)
        rows = [X.extract_row(i) for i in range(X.rows)]
        return self._run(lambda i, beta: model(rows[i], beta), y, beta0)

    def fit_aux(self, model: AuxModel, x: MatrixLike, y: MatrixLike, beta0: MatrixLike, aux: Any) -> FitResult:
        """Fit model(x, beta, aux); aux is handed to every call and never fitted."""
        x, y, beta0 = _check_inputs(x, y, beta0, single_column_x=True)
        values = x.to_numpy()[:, 0]
        return self._run(lambda i, beta: model(float(values[i]), beta, aux), y, beta0)

    # --- Iteration ---
    def _run(self, evaluate: RowEvaluator, y: Matrix, beta0: Matrix) -> FitResult:
        config = self.config
        observed = y.to_numpy()[:, 0]
        n_obs = y.rows
        beta = beta0.copy()
        converged = False
        max_update = float('inf')
        iteration = 0
        failure = None
        logger.info("Starting Gauss-Newton fit: %d observations, %d parameters, tol=%g, max_iter=%d",
                    n_obs, beta.rows, config.tolerance, config.max_iterations)
        for iteration in range(1, config.max_iterations + 1):
            try:
                with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
                    dy = _residuals(evaluate, observed, beta)
                    J = _jacobian(evaluate, n_obs, beta, config.step)
            except (OverflowError, FloatingPointError) as e:
                failure = f"Model evaluation overflowed at iteration {iteration}: {e}"
                break
            if not (np.all(np.isfinite(dy.to_numpy())) and np.all(np.isfinite(J.to_numpy()))):
                failure = f"Model produced non-finite values at iteration {iteration}"
                break
            with np.errstate(over='ignore', invalid='ignore'):
                J_values = J.to_numpy()
                normal = J_values.T @ J_values
                gradient = J_values.T @ dy.to_numpy()
            if not (np.all(np.isfinite(normal)) and np.all(np.isfinite(gradient))):
                failure = f"Normal equations overflowed at iteration {iteration}"
                break
            try:
                with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
                    dbeta = regress(dy, J)
            except SingularMatrixError as e:
                raise SingularJacobianError(iteration, str(e)) from e
            if not np.all(np.isfinite(dbeta.to_numpy())):
                failure = f"Parameter update is non-finite at iteration {iteration}"
                break
            beta = beta + dbeta
            max_update = abs(dbeta.extremum())
            logger.debug("Iteration %d: max |dbeta| = %.6e", iteration, max_update)
            if max_update < config.tolerance:
                converged = True
                break
        result = FitResult(beta=beta, iterations=iteration, converged=converged, max_update=max_update,
                           residual_sum_of_squares=self._residual_sum_of_squares(evaluate, observed, beta))
        if converged:
            logger.info("Gauss-Newton fit converged after %d iterations (SSR=%.6e)",
                        iteration, result.residual_sum_of_squares)
            return result
        message = failure or (f"Maximum number of iterations reached ({config.max_iterations}); "
                              f"last max |dbeta| = {max_update:.6e}")
        logger.warning("Gauss-Newton fit did not converge: %s", message)
        if config.raise_on_nonconvergence:
            raise NonConvergenceError(result, message)
        warnings.warn(message, NonConvergenceWarning, stacklevel=3)
        return result

    @staticmethod
    def _residual_sum_of_squares(evaluate: RowEvaluator, observed: np.ndarray, beta: Matrix) -> float:
        try:
            with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
                dy = _residuals(evaluate, observed, beta).to_numpy()
                return float(np.sum(dy ** 2))
        except (OverflowError, FloatingPointError):
            return float('inf')


# --- Functional interface ---
def fitnlm(model: ScalarModel, x: MatrixLike, y: MatrixLike, beta0: MatrixLike,
           config: Optional[FitConfig] = None) -> FitResult:
    """Fit a scalar-x model. See GaussNewtonFitter.fit."""
    return GaussNewtonFitter(config).fit(model, x, y, beta0)


def fitnlm_multivariate(model: VectorModel, X: MatrixLike, y: MatrixLike, beta0: MatrixLike,
                        config: Optional[FitConfig] = None) -> FitResult:
    """Fit a model that takes a row of a multi-column X. See GaussNewtonFitter.fit_multivariate."""
    return GaussNewtonFitter(config).fit_multivariate(model, X, y, beta0)


def fitnlm_aux(model: AuxModel, x: MatrixLike, y: MatrixLike, beta0: MatrixLike, aux: Any,
               config: Optional[FitConfig] = None) -> FitResult:
    """Fit a scalar-x model with a fixed auxiliary argument. See GaussNewtonFitter.fit_aux."""
    return GaussNewtonFitter(config).fit_aux(model, x, y, beta0, aux)


def fit_subsets(model, x: MatrixLike, y: MatrixLike, beta0: MatrixLike, chunk_size: int,
                row_start: int = 0, config: Optional[FitConfig] = None, aux: Any = _NO_AUX) -> List[FitResult]:
    """
    Fit consecutive chunks of rows independently.

    Rows [row_start + i*chunk_size, row_start + (i+1)*chunk_size) form chunk i; a
    trailing partial chunk is dropped. When aux is given the model is called as
    model(x, beta, aux), otherwise as model(x, beta).

    Returns:
        One FitResult per chunk, in row order.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    x, y, beta0 = _check_inputs(x, y, beta0, single_column_x=True)
    if not 0 <= row_start < x.rows:
        raise ValueError(f"row_start must lie in [0, {x.rows}), got {row_start}")
    n_chunks = (x.rows - row_start) // chunk_size
    if n_chunks == 0:
        logger.warning("No complete chunk of %d rows after row %d (%d rows available)",
                       chunk_size, row_start, x.rows)
        return []
    logger.info("Fitting %d chunks of %d rows starting at row %d", n_chunks, chunk_size, row_start)
    fitter = GaussNewtonFitter(config)
    x_values = x.to_numpy()
    y_values = y.to_numpy()
    results = []
    for chunk in range(n_chunks):
        start = row_start + chunk * chunk_size
        stop = start + chunk_size
        x_chunk = Matrix.from_array(x_values[start:stop])
        y_chunk = Matrix.from_array(y_values[start:stop])
        if aux is _NO_AUX:
            results.append(fitter.fit(model, x_chunk, y_chunk, beta0))
        else:
            results.append(fitter.fit_aux(model, x_chunk, y_chunk, beta0, aux))
    return results
