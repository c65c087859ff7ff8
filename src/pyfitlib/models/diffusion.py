"""
Moisture diffusion in a slab (Crank 1956) and the kF helpers built on it.

The Crank solution for diffusion in a sheet of thickness l is

    (X - Xe) / (X0 - Xe) = 8/pi^2 sum_{n>=0} exp(-kF t (2n+1)^2) / (2n+1)^2,
    kF = pi^2 D / l^2

and the helpers below estimate kF from drying or sorption curves, either
pointwise with Newton's method or by nonlinear regression over chunks of data.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from pyfitlib.algorithms.gauss_newton import fit_subsets
from pyfitlib.algorithms.regression import polyfit
from pyfitlib.core.exceptions import FittingError, NonConvergenceError
from pyfitlib.core.matrix import Matrix, MatrixLike, as_matrix
from pyfitlib.data.constants import FittingConstants
from pyfitlib.models._parameters import unpack_parameters
from pyfitlib.parsing.config.fit_config import FitConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrankConditions:
    """
    Fixed boundary values of a drying or sorption run.

    Attributes:
        X0 (float): Initial moisture content [kg/kg db].
        Xe (float): Equilibrium moisture content [kg/kg db].
        nterms (int): Number of series terms to evaluate.
    """
    X0: float
    Xe: float
    nterms: int = FittingConstants.CRANK_TERMS


def crank_equation(kf: float, t: float, X0: float, Xe: float,
                   nterms: int = FittingConstants.CRANK_TERMS) -> float:
    """
    Average moisture content of a slab after time t.
    Args:
        kf: Diffusivity constant pi^2 D / l^2 [1/s].
        t: Time [s].
        X0: Initial moisture content [kg/kg db].
        Xe: Equilibrium moisture content [kg/kg db].
        nterms: Number of series terms.
    Returns:
        Moisture content [kg/kg db].
    """
    odd = 2 * np.arange(nterms) + 1
    value = float(np.sum(8 / (odd ** 2 * math.pi ** 2) * np.exp(-kf * t * odd ** 2)))
    return value * (X0 - Xe) + Xe


def crank_profile(x: float, t: float, L: float, D: float, X1: float, X0: float,
                  nterms: int = FittingConstants.CRANK_TERMS) -> float:
    """
    Moisture content at depth x of a membrane whose surfaces are held at X1.
    Args:
        x: Coordinate measured from the slab centre [m].
        t: Time [s].
        L: Membrane thickness [m].
        D: Diffusivity [m^2/s].
        X1: Surface moisture content [kg/kg db].
        X0: Initial interior moisture content [kg/kg db].
        nterms: Number of series terms.
    Returns:
        Moisture content [kg/kg db].
    """
    kF = D * math.pi ** 2 / L ** 2
    n = np.arange(nterms)
    odd = 2 * n + 1
    terms = (-1.0) ** n / odd * np.exp(-kF * odd ** 2 * t / 4) * np.cos(odd * math.pi * x / (2 * L))
    return (1 - 4 / math.pi * float(np.sum(terms))) * (X1 - X0) + X0


def crank_model(t: float, beta: Matrix, conditions: CrankConditions) -> float:
    """Crank equation with beta = [kF], for use with fitnlm_aux."""
    (kf,) = unpack_parameters(beta, 1, "crank_model")
    return crank_equation(kf, t, conditions.X0, conditions.Xe, conditions.nterms)


def diffusivity_from_kf(kf: float, thickness: float) -> float:
    """D = kF l^2 / pi^2."""
    return kf * thickness ** 2 / math.pi ** 2


def solve_crank_kf(t: float, X: float, X0: float, Xe: float,
                   kf0: float = FittingConstants.DEFAULT_KF_GUESS,
                   tol: float = FittingConstants.NEWTON_TOLERANCE,
                   max_iterations: int = FittingConstants.NEWTON_MAX_ITERATIONS,
                   nterms: int = FittingConstants.CRANK_TERMS) -> float:
    """
    Solve the Crank equation for kF at a single (t, X) point with Newton's method.

    The derivative is taken by central differences.

    Raises:
        FittingError: If the derivative vanishes (for example at t = 0).
        NonConvergenceError: If the update is still above tol after max_iterations.
    """
    h = FittingConstants.NEWTON_STEP
    kf = kf0
    for _ in range(max_iterations):
        f = crank_equation(kf, t, X0, Xe, nterms) - X
        df = (crank_equation(kf + h, t, X0, Xe, nterms) - crank_equation(kf - h, t, X0, Xe, nterms)) / (2 * h)
        if df == 0 or not math.isfinite(df):
            raise FittingError(f"Crank equation derivative vanished at t={t}, kF={kf}")
        kf_previous = kf
        kf = kf - f / df
        if abs(kf_previous - kf) <= tol:
            return kf
    raise NonConvergenceError(kf, f"Newton's method for kF did not converge in {max_iterations} iterations "
                                  f"(t={t}, X={X})")


def calc_kf_points(t: MatrixLike, Xdb: MatrixLike, Xe: float) -> Matrix:
    """
    kF at every data point, measuring time from the start of the run.

    The initial moisture content is taken from the first row. Points at t <= 0
    carry no information about kF and are reported as NaN.

    Returns:
        n x 3 matrix with columns [t, Xdb, kF].
    """
    t_values, x_values = _paired_columns(t, Xdb)
    X0 = x_values[0]
    kf = np.full(t_values.shape, np.nan)
    for i, (ti, Xi) in enumerate(zip(t_values, x_values)):
        if ti > 0:
            kf[i] = solve_crank_kf(ti, Xi, X0, Xe)
    skipped = int(np.count_nonzero(t_values <= 0))
    if skipped:
        logger.warning("Skipped %d points with t <= 0 when calculating kF", skipped)
    return Matrix.from_array(np.column_stack([t_values, x_values, kf]))


def calc_kf_steps(t: MatrixLike, Xdb: MatrixLike, Xe: float) -> Matrix:
    """
    kF between consecutive data points.

    Each point is treated as a fresh run that starts from the previous point's
    moisture content, with time reset to the gap between the two points. The
    first row has no predecessor and is reported as NaN.

    Returns:
        n x 3 matrix with columns [t, Xdb, kF].
    """
    t_values, x_values = _paired_columns(t, Xdb)
    kf = np.full(t_values.shape, np.nan)
    for i in range(1, t_values.shape[0]):
        dt = t_values[i] - t_values[i - 1]
        if dt <= 0:
            raise ValueError(f"Time must increase strictly, got t[{i - 1}]={t_values[i - 1]}, t[{i}]={t_values[i]}")
        kf[i] = solve_crank_kf(dt, x_values[i], x_values[i - 1], Xe)
    return Matrix.from_array(np.column_stack([t_values, x_values, kf]))


def fit_kf(t: MatrixLike, Xdb: MatrixLike, X0: float, Xe: float,
           chunk_size: int = FittingConstants.DEFAULT_KF_CHUNK_SIZE,
           kf0: float = FittingConstants.DEFAULT_KF_GUESS,
           row_start: int = 0,
           config: Optional[FitConfig] = None) -> Matrix:
    """
    Fit kF by nonlinear regression over consecutive chunks of the drying curve.

    X0 and Xe are held fixed for every chunk, so each chunk estimates the kF that
    best describes that part of the curve as seen from the start of the run.

    Returns:
        n_chunks x 2 matrix with columns [mean Xdb of the chunk, kF].
    """
    t_values, x_values = _paired_columns(t, Xdb)
    results = fit_subsets(crank_model, t_values, x_values, [kf0], chunk_size,
                          row_start=row_start, config=config, aux=CrankConditions(X0, Xe))
    if not results:
        raise ValueError(f"Not enough data for a single chunk of {chunk_size} rows")
    rows = []
    for chunk, result in enumerate(results):
        start = row_start + chunk * chunk_size
        rows.append([float(np.mean(x_values[start:start + chunk_size])), result.beta.get(0, 0)])
    logger.info("Fitted kF for %d chunks", len(rows))
    return Matrix.from_rows(rows)


def equilibrium_moisture(t: MatrixLike, Xdb: MatrixLike, Xe0: float, initial: int = 0,
                         tol: float = FittingConstants.NEWTON_TOLERANCE,
                         max_iterations: int = FittingConstants.NEWTON_MAX_ITERATIONS) -> float:
    """
    Estimate the equilibrium moisture content from a drying curve.

    Xe is chosen so that ln(X - Xe) is linear in time with intercept ln(X0 - Xe).
    Each Newton step fits y = a t + b to y = ln(X - Xe) and solves
    F(Xe) = b - ln(X0 - Xe) = 0 using dF/dXe = 1 / (X0 - Xe).

    Args:
        t: Time [s].
        Xdb: Moisture content [kg/kg db].
        Xe0: Initial guess, below every moisture content used.
        initial: First row to use; X0 is taken from this row.
    Raises:
        ValueError: If initial leaves fewer than two rows, or an iterate of Xe is
            not below every moisture content.
        NonConvergenceError: If Xe is still moving after max_iterations.
    """
    t_values, x_values = _paired_columns(t, Xdb)
    if (isinstance(initial, bool) or not isinstance(initial, (int, np.integer))
            or not 0 <= initial <= len(t_values) - 2):
        raise ValueError(f"initial must be a row index leaving at least two points, "
                         f"got {initial!r} for {len(t_values)} rows")
    t_values = t_values[initial:]
    x_values = x_values[initial:]
    X0 = x_values[0]
    Xe = Xe0
    for iteration in range(1, max_iterations + 1):
        if not np.all(x_values > Xe):
            raise ValueError(f"Equilibrium moisture estimate {Xe} is not below all moisture contents")
        b = polyfit(t_values, np.log(x_values - Xe), 1).get(0, 0)
        f = b - math.log(X0 - Xe)
        df = 1 / (X0 - Xe)
        Xe_previous = Xe
        Xe = Xe - f / df
        logger.debug("Xe iteration %d: %.10g", iteration, Xe)
        if abs(Xe - Xe_previous) <= tol:
            logger.info("Equilibrium moisture converged after %d iterations: Xe=%g", iteration, Xe)
            return Xe
    raise NonConvergenceError(Xe, f"Equilibrium moisture did not converge in {max_iterations} iterations")


def _paired_columns(t: MatrixLike, Xdb: MatrixLike):
    t = as_matrix(t)
    Xdb = as_matrix(Xdb)
    if t.cols != 1 or Xdb.cols != 1 or t.rows != Xdb.rows:
        raise ValueError(f"Time and moisture data must be columns of equal length, "
                         f"got {t.rows}x{t.cols} and {Xdb.rows}x{Xdb.cols}")
    return t.to_numpy()[:, 0], Xdb.to_numpy()[:, 0]
