"""
Core data structures and error types.

This module contains the dense matrix and vector containers, the model callable
type aliases and the exception hierarchy used throughout pyfitlib.
"""

from .matrix import (Matrix, Vector, as_matrix, transpose, multiply, invert, augment,
                     concatenate_column_vectors, linspace, parse_matrix)
from .typedefs import ScalarModel, VectorModel, AuxModel
from .exceptions import (PyFitLibError, MatrixError, InvalidDimensionError, IndexOutOfRangeError,
                         DimensionMismatchError, SingularMatrixError, MatrixParseError, FittingError,
                         SingularJacobianError, NonConvergenceError, NonConvergenceWarning,
                         UndefinedStatisticError)

__all__ = [
    "Matrix",
    "Vector",
    "as_matrix",
    "transpose",
    "multiply",
    "invert",
    "augment",
    "concatenate_column_vectors",
    "linspace",
    "parse_matrix",
    "ScalarModel",
    "VectorModel",
    "AuxModel",
    "PyFitLibError",
    "MatrixError",
    "InvalidDimensionError",
    "IndexOutOfRangeError",
    "DimensionMismatchError",
    "SingularMatrixError",
    "MatrixParseError",
    "FittingError",
    "SingularJacobianError",
    "NonConvergenceError",
    "NonConvergenceWarning",
    "UndefinedStatisticError",
]
