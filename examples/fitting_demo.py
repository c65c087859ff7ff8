"""Demonstration script for fitting isotherm, drying and creep data."""
import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import sympy as sp

from pyfitlib import FitVisualizer, Matrix, coefficient_of_determination, fitnlm, fitnlm_aux, polyfit
from pyfitlib.algorithms.regression import polynomial_expression
from pyfitlib.models import (crank_equation, equilibrium_moisture, fit_kf, fit_retardation_spectrum, gab,
                             prony_creep, prony_initial_guess, prony_parameters)
from pyfitlib.parsing.config.fit_config import FitConfig, FitConfigParser


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s -> %(message)s"
    )
    # Silence noisy libraries
    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('fontTools').setLevel(logging.WARNING)


def demonstrate_isotherm(parser, plot_directory):
    """Fit the GAB isotherm to noisy sorption data."""
    rng = np.random.default_rng(1)
    aw = np.linspace(0.1, 0.85, 15)
    X = np.array([gab(a, Matrix.column([10.0, 0.9, 0.1])) for a in aw]) * (1 + 0.01 * rng.standard_normal(15))
    result = fitnlm(gab, aw, X, parser.initial_guess, config=parser.fit_config)
    C, K, Xm = result.parameters
    print(f"\n{'=' * 80}")
    print("GAB ISOTHERM")
    print(f"{'=' * 80}")
    print(f"Converged: {result.converged} after {result.iterations} iterations")
    print(f"C = {C:.4f}, K = {K:.4f}, Xm = {Xm:.4f}")
    print(f"Residual sum of squares: {result.residual_sum_of_squares:.3e}")
    fig = FitVisualizer().plot_fit(aw, X, gab, result.beta, title="GAB isotherm",
                                   xlabel="Water activity [-]", ylabel="X [kg/kg db]",
                                   save_path=plot_directory / "gab.png")
    plt.close(fig)


def demonstrate_drying(config):
    """Estimate Xe and kF from a synthetic drying curve."""
    t = np.linspace(0.0, 7200.0, 25)
    X = np.array([crank_equation(2e-4, ti, 0.8, 0.1) for ti in t])
    X[0] = 0.8
    Xe = equilibrium_moisture(t[4:], X[4:], 0.05)
    table = fit_kf(t, X, 0.8, 0.1, chunk_size=4, config=config)
    print(f"\n{'=' * 80}")
    print("DRYING CURVE")
    print(f"{'=' * 80}")
    print(f"Equilibrium moisture estimate: {Xe:.4f}")
    for i in range(table.rows):
        print(f"  X = {table.get(i, 0):.4f}  kF = {table.get(i, 1):.4e} 1/s")
    beta = polyfit(table.extract_column(0), table.extract_column(1), 1)
    print(f"kF(X) = {polynomial_expression(beta, sp.Symbol('X'))}")
    if table.rows > 2:
        print(f"R^2 = {coefficient_of_determination(table.extract_column(0), table.extract_column(1), beta):.4f}")


def demonstrate_creep(config):
    """Fit a two-term Prony series and the equivalent fixed-time spectrum."""
    t = np.logspace(-1, 3, 40)
    J = 1.0 + 0.3 * (1 - np.exp(-t / 8.0)) + 0.6 * (1 - np.exp(-t / 250.0))
    result = fitnlm_aux(prony_creep, t, J, prony_initial_guess(J), J[0], config=config)
    print(f"\n{'=' * 80}")
    print("CREEP COMPLIANCE")
    print(f"{'=' * 80}")
    print(f"Prony fit converged: {result.converged}")
    print(f"[J1, tau1, J2, tau2] = {np.round(prony_parameters(result.beta), 4)}")
    spectrum = fit_retardation_spectrum(t, J, [8.0, 250.0])
    print(f"Fixed-time spectrum [J0, J1, J2] = {np.round(spectrum.to_numpy()[:, 0], 4)}")


def main():
    setup_logging()
    current_file = Path(__file__)
    parser = FitConfigParser(current_file.parent / "fit_settings.yaml")
    plot_directory = current_file.parent / "pyfitlib_plots"
    demonstrate_isotherm(parser, plot_directory)
    demonstrate_drying(FitConfig(tolerance=1e-12))
    demonstrate_creep(parser.fit_config)


if __name__ == "__main__":
    main()
