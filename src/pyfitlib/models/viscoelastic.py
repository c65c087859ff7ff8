"""
Creep compliance and dynamic modulus models for viscoelastic materials.

The Prony series models fit the square roots of their compliances and
retardation times so that the Gauss-Newton engine can work with unconstrained
parameters while the physical values stay positive.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pyfitlib.algorithms.gauss_newton import fitnlm_aux
from pyfitlib.algorithms.regression import regress
from pyfitlib.core.matrix import Matrix, MatrixLike, as_matrix
from pyfitlib.models._parameters import unpack_parameters
from pyfitlib.parsing.config.fit_config import FitConfig

logger = logging.getLogger(__name__)


def _prony_sum(t: float, roots: List[float]) -> float:
    J = 0.0
    for sqrt_J, sqrt_tau in zip(roots[0::2], roots[1::2]):
        J += sqrt_J ** 2 * (1 - math.exp(-t / sqrt_tau ** 2))
    return J


def prony_creep(t: float, beta: Matrix, J0: float) -> float:
    """
    Prony series creep compliance with a fixed instantaneous compliance.
    J(t) = J0 + sum_i Ji (1 - exp(-t / tau_i))
    Args:
        t: Time [s].
        beta: Column [sqrt(J1), sqrt(tau1), sqrt(J2), sqrt(tau2), ...].
        J0: Instantaneous compliance [1/Pa], passed as the auxiliary argument.
    Returns:
        Creep compliance [1/Pa].
    """
    roots = unpack_parameters(beta, None, "prony_creep")
    if len(roots) % 2:
        raise ValueError(f"prony_creep expects an even number of parameters, got {len(roots)}")
    return J0 + _prony_sum(t, roots)


def prony_creep_free(t: float, beta: Matrix) -> float:
    """Prony series creep compliance with beta = [sqrt(J0), sqrt(J1), sqrt(tau1), ...]."""
    roots = unpack_parameters(beta, None, "prony_creep_free")
    if len(roots) % 2 != 1:
        raise ValueError(f"prony_creep_free expects an odd number of parameters, got {len(roots)}")
    return roots[0] ** 2 + _prony_sum(t, roots[1:])


def prony_initial_guess(J: MatrixLike, taus: Sequence[float] = (10.0, 200.0)) -> Matrix:
    """
    Starting point for prony_creep.

    The total creep J(end) - J(0) is split evenly between the terms, one per
    retardation time in taus, and everything is returned as square roots.
    """
    J = as_matrix(J)
    creep = J.get(J.rows - 1, 0) - J.get(0, 0)
    if creep < 0:
        raise ValueError(f"Compliance must not decrease over the run, got a change of {creep}")
    share = math.sqrt(creep / len(taus))
    guess = []
    for tau in taus:
        guess.extend([share, math.sqrt(tau)])
    return Matrix.column(guess)


def prony_parameters(beta: MatrixLike) -> np.ndarray:
    """Physical parameters (the squares) of a fitted Prony coefficient column."""
    return as_matrix(beta).to_numpy()[:, 0] ** 2


def burgers_creep(X: Matrix, beta: Matrix) -> float:
    """
    Burgers creep compliance with time-moisture-pressure superposition.

    The reduced time is

        xi = t exp(aM0 (M - M0)) exp(aP0 (P - P0))

    and the compliance

        J = J0 + J1 (1 - exp(-xi / lambda1)) + J2 (1 - exp(-xi / lambda2)) + xi / mu0

    Args:
        X: One row of independent values [t, M, P].
        beta: Column [J0, J1, J2, lambda1, lambda2, mu0, aM0, M0, aP0, P0].
    Returns:
        Creep compliance [1/Pa].
    """
    J0, J1, J2, lam1, lam2, mu0, aM0, M0, aP0, P0 = unpack_parameters(beta, 10, "burgers_creep")
    t = X.get(0, 0)
    M = X.get(0, 1)
    P = X.get(0, 2)
    xi = t * math.exp(aM0 * (M - M0)) * math.exp(aP0 * (P - P0))
    return J0 + J1 * (1 - math.exp(-xi / lam1)) + J2 * (1 - math.exp(-xi / lam2)) + xi / mu0


def retardation_design_matrix(t: MatrixLike, taus: Sequence[float]) -> Matrix:
    """Design matrix with a ones column followed by 1 - exp(-t / tau_i) for every tau_i."""
    t = as_matrix(t)
    if t.cols != 1:
        raise ValueError(f"Time must be a single column, got {t.rows}x{t.cols}")
    if len(taus) == 0:
        raise ValueError("At least one retardation time is required")
    if any(tau <= 0 for tau in taus):
        raise ValueError(f"Retardation times must be positive, got {list(taus)}")
    times = t.to_numpy()
    return Matrix.from_array(np.hstack([np.ones_like(times)] + [1 - np.exp(-times / tau) for tau in taus]))


def fit_retardation_spectrum(t: MatrixLike, J: MatrixLike, taus: Sequence[float]) -> Matrix:
    """
    Linear least-squares fit of a discrete retardation spectrum with fixed times.
    Args:
        t: Time column [s].
        J: Measured creep compliance column [1/Pa].
        taus: Retardation times [s].
    Returns:
        Column [J0, J1, ..., Jn].
    """
    X = retardation_design_matrix(t, taus)
    beta = regress(J, X)
    logger.info("Fitted retardation spectrum with %d retardation times", len(taus))
    return beta


def oscillatory_strain(t: float, e0: float, frequency: float) -> float:
    """Applied sinusoidal strain e0 sin(w t)."""
    return e0 * math.sin(frequency * t)


def oscillatory_stress(t: float, beta: Matrix, frequency: float) -> float:
    """
    Stress response to a sinusoidal strain.

    s(t) = s0 sin(w t + delta)

    Args:
        t: Time [s].
        beta: Column [s0, delta], the stress amplitude [Pa] and phase lag [rad].
        frequency: Angular frequency w [rad/s], passed as the auxiliary argument.
    """
    s0, shift = unpack_parameters(beta, 2, "oscillatory_stress")
    return s0 * math.sin(frequency * t + shift)


def storage_modulus(e0: float, s0: float, shift: float) -> float:
    """In-phase part of the dynamic modulus, E' = s0/e0 cos(delta)."""
    if e0 == 0:
        raise ValueError("Strain amplitude must be nonzero")
    return s0 / e0 * math.cos(shift)


def loss_modulus(e0: float, s0: float, shift: float) -> float:
    """Out-of-phase part of the dynamic modulus, E'' = s0/e0 sin(delta)."""
    if e0 == 0:
        raise ValueError("Strain amplitude must be nonzero")
    return s0 / e0 * math.sin(shift)


def fit_dynamic_moduli(t: MatrixLike, stress: MatrixLike, e0: float, frequency: float,
                       shift0: float = 0.3, config: Optional[FitConfig] = None) -> Tuple[float, float]:
    """
    Storage and loss moduli from a stress signal measured under sinusoidal strain.

    The stress amplitude and phase lag are fitted with oscillatory_stress, starting
    from s0 = e0 and the given phase lag.

    Args:
        t: Time [s].
        stress: Measured stress [Pa].
        e0: Strain amplitude.
        frequency: Angular frequency of the applied strain [rad/s].
        shift0: Initial guess for the phase lag [rad].
        config: Fitting settings.
    Returns:
        (E', E'') in Pa.
    """
    result = fitnlm_aux(oscillatory_stress, t, stress, [e0, shift0], frequency, config=config)
    s0, shift = result.parameters
    logger.info("Fitted stress amplitude %g and phase lag %g rad at w=%g rad/s", s0, shift, frequency)
    return storage_modulus(e0, s0, shift), loss_modulus(e0, s0, shift)
