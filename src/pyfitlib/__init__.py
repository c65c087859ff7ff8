"""
pyfitlib - Least-squares model fitting for food and polymer materials data.

This library provides dense matrix primitives, linear and polynomial regression,
and a Gauss-Newton engine for fitting nonlinear models with a numerical Jacobian,
together with ready-made models for sorption isotherms, moisture diffusion and
creep compliance.

Key Features:
- Matrix and vector containers with bounds checking and Gauss-Jordan inversion
- Ordinary least squares, polynomial fits and R^2
- Nonlinear least squares for scalar, multivariate and auxiliary-argument models
- Chunked fits of long time series
- YAML configuration of the fitting engine
- CSV input/output and plots of fits and residuals

Main Components:
- Core: Matrix/Vector containers and the exception hierarchy
- Algorithms: Regression and the Gauss-Newton engine
- Models: Isotherms, diffusion and viscoelastic models
- Parsing: YAML configuration and data file handling
- Visualization: Fit and residual plots
- Data: Physical constants and numerical defaults
"""

# Enhanced version handling with multiple fallbacks
try:
    from ._version import version as __version__
except ImportError:
    try:
        from importlib.metadata import version
        __version__ = version("pyfitlib")
    except ImportError:
        __version__ = "0.1.0+unknown"  # Fallback version

# Core data structures
from .core.matrix import Matrix, Vector, parse_matrix
from .core.exceptions import (PyFitLibError, MatrixError, SingularMatrixError, FittingError,
                              SingularJacobianError, NonConvergenceError, NonConvergenceWarning)

# Algorithms
from .algorithms.regression import regress, polyfit, polyval, coefficient_of_determination
from .algorithms.gauss_newton import (FitResult, GaussNewtonFitter, fitnlm, fitnlm_multivariate,
                                      fitnlm_aux, fit_subsets)

# Configuration and I/O
from .parsing.config.fit_config import FitConfig, load_fit_config
from .parsing.io.data_handler import load_csv_matrix, load_columns, save_matrix_csv

# Visualization
from .visualization.plotters import FitVisualizer

__all__ = [
    # Version
    '__version__',

    # Core classes
    'Matrix',
    'Vector',
    'parse_matrix',

    # Errors
    'PyFitLibError',
    'MatrixError',
    'SingularMatrixError',
    'FittingError',
    'SingularJacobianError',
    'NonConvergenceError',
    'NonConvergenceWarning',

    # Algorithms
    'regress',
    'polyfit',
    'polyval',
    'coefficient_of_determination',
    'FitResult',
    'GaussNewtonFitter',
    'fitnlm',
    'fitnlm_multivariate',
    'fitnlm_aux',
    'fit_subsets',

    # Configuration and I/O
    'FitConfig',
    'load_fit_config',
    'load_csv_matrix',
    'load_columns',
    'save_matrix_csv',

    # Visualization
    'FitVisualizer'
]

__description__ = "Least-squares model fitting for materials data"
