"""Sorption isotherm models in the form expected by the fitting engine."""

import math

from pyfitlib.core.matrix import Matrix
from pyfitlib.models._parameters import unpack_parameters


def gab(aw: float, beta: Matrix) -> float:
    """
    GAB (Guggenheim-Anderson-de Boer) isotherm.
    X_db = C K X_m a_w / ((1 - K a_w)(1 - K a_w + C K a_w))
    Args:
        aw: Water activity [-].
        beta: Column of fitting parameters [C, K, Xm].
    Returns:
        Moisture content [kg/kg db].
    """
    C, K, Xm = unpack_parameters(beta, 3, "gab")
    return C * K * Xm * aw / ((1 - K * aw) * (1 - K * aw + C * K * aw))


def oswin(X: Matrix, beta: Matrix) -> float:
    """
    Temperature-dependent Oswin isotherm.
    X_db = (k0 + k1 T) (a_w / (1 - a_w))^(n0 + n1 T)
    Args:
        X: One row of independent values [aw, T].
        beta: Column of fitting parameters [k0, k1, n0, n1].
    Returns:
        Moisture content [kg/kg db].
    """
    k0, k1, n0, n1 = unpack_parameters(beta, 4, "oswin")
    aw = X.get(0, 0)
    T = X.get(0, 1)
    return (k0 + k1 * T) * math.pow(aw / (1 - aw), n0 + n1 * T)
