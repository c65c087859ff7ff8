"""
Core computational algorithms for model fitting.

This module provides ordinary least squares through the normal equations,
polynomial fitting and the coefficient of determination, and a Gauss-Newton
engine for nonlinear least squares with a numerical Jacobian.
"""

from .regression import (regress, polyfit, polyval, polynomial_design_matrix,
                         coefficient_of_determination, polynomial_expression)
from .gauss_newton import (FitResult, GaussNewtonFitter, calc_jacobian, calc_residuals,
                           fitnlm, fitnlm_multivariate, fitnlm_aux, fit_subsets)

__all__ = [
    "regress",
    "polyfit",
    "polyval",
    "polynomial_design_matrix",
    "coefficient_of_determination",
    "polynomial_expression",
    "FitResult",
    "GaussNewtonFitter",
    "calc_jacobian",
    "calc_residuals",
    "fitnlm",
    "fitnlm_multivariate",
    "fitnlm_aux",
    "fit_subsets",
]
