"""
typedefs.py

Type aliases for the model callables accepted by the fitting engine.

A model maps the independent variable(s) and the current coefficient vector to a
single predicted value. Three signatures are recognised:

    ScalarModel: model(x, beta) -> float
        x is one value of a single-column independent variable.
    VectorModel: model(x_row, beta) -> float
        x_row is one row (1 x m Matrix) of a multi-column independent variable.
    AuxModel: model(x, beta, aux) -> float
        aux is a fixed, caller-supplied value that is passed through untouched
        and never fitted.

Models must read everything they need from their arguments (or from values
bound when the callable was built) so that independent fits never share state.
"""

from typing import Any, Callable

from pyfitlib.core.matrix import Matrix

ScalarModel = Callable[[float, Matrix], float]
VectorModel = Callable[[Matrix, Matrix], float]
AuxModel = Callable[[float, Matrix, Any], float]

# Internal form every variant is reduced to: (observation index, beta) -> prediction
RowEvaluator = Callable[[int, Matrix], float]
