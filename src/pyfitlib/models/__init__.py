"""
Domain models ready to be passed to the fitting engine.

Includes sorption isotherms (GAB, Oswin), Crank diffusion together with the kF
and equilibrium moisture helpers, Prony/Burgers creep compliance models and
the oscillatory stress model behind storage and loss moduli.
"""

from .isotherms import gab, oswin
from .diffusion import (CrankConditions, crank_equation, crank_profile, crank_model, diffusivity_from_kf,
                        solve_crank_kf, calc_kf_points, calc_kf_steps, fit_kf, equilibrium_moisture)
from .viscoelastic import (prony_creep, prony_creep_free, prony_initial_guess, prony_parameters, burgers_creep,
                           retardation_design_matrix, fit_retardation_spectrum, oscillatory_strain,
                           oscillatory_stress, storage_modulus, loss_modulus, fit_dynamic_moduli)

__all__ = [
    "gab",
    "oswin",
    "CrankConditions",
    "crank_equation",
    "crank_profile",
    "crank_model",
    "diffusivity_from_kf",
    "solve_crank_kf",
    "calc_kf_points",
    "calc_kf_steps",
    "fit_kf",
    "equilibrium_moisture",
    "prony_creep",
    "prony_creep_free",
    "prony_initial_guess",
    "prony_parameters",
    "burgers_creep",
    "retardation_design_matrix",
    "fit_retardation_spectrum",
    "oscillatory_strain",
    "oscillatory_stress",
    "storage_modulus",
    "loss_modulus",
    "fit_dynamic_moduli",
]
