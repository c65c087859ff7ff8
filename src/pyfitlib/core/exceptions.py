"""Custom exceptions for pyfitlib core functionality."""
import logging

logger = logging.getLogger(__name__)


class PyFitLibError(Exception):
    """Base exception for all pyfitlib errors."""

    def __init__(self, message):
        super().__init__(message)
        logger.error("%s raised: %s", type(self).__name__, message)


# --- Matrix errors ---
class MatrixError(PyFitLibError):
    """Base exception for matrix and vector operations."""
    pass


class InvalidDimensionError(MatrixError, ValueError):
    """Exception raised when a matrix is created with a non-positive shape."""

    def __init__(self, rows, cols):
        self.rows = rows
        self.cols = cols
        super().__init__(f"Matrix dimensions must be positive integers, got {rows}x{cols}")


class IndexOutOfRangeError(MatrixError, IndexError):
    """Exception raised when an element is accessed outside the matrix bounds."""

    def __init__(self, row, col, shape):
        self.row = row
        self.col = col
        self.shape = shape
        super().__init__(f"Index ({row}, {col}) out of range for {shape[0]}x{shape[1]} matrix")


class DimensionMismatchError(MatrixError, ValueError):
    """Exception raised when operand shapes are incompatible."""

    def __init__(self, operation: str, left_shape, right_shape):
        self.operation = operation
        self.left_shape = left_shape
        self.right_shape = right_shape
        super().__init__(f"Dimension mismatch in {operation}: "
                         f"{left_shape[0]}x{left_shape[1]} and {right_shape[0]}x{right_shape[1]}")


class SingularMatrixError(MatrixError, ArithmeticError):
    """Exception raised when a matrix cannot be inverted."""
    pass


class MatrixParseError(MatrixError, ValueError):
    """Exception raised when matrix text cannot be parsed."""
    pass


# --- Fitting errors ---
class FittingError(PyFitLibError):
    """Base exception for nonlinear fitting failures."""
    pass


class SingularJacobianError(FittingError, SingularMatrixError):
    """Exception raised when the linearized normal equations cannot be solved."""

    def __init__(self, iteration: int, message: str):
        self.iteration = iteration
        super().__init__(f"Jacobian solve failed at iteration {iteration}: {message}\n"
                         "The model may be insensitive to a parameter at the current estimate. "
                         "Try a better scaled initial guess.")


class NonConvergenceError(FittingError):
    """Exception raised when the iteration budget is exhausted and the caller asked for strict fitting.

    The partial result is kept in ``result`` so it can still be inspected.
    """

    def __init__(self, result, message: str = "Maximum number of iterations reached"):
        self.result = result
        super().__init__(message)


class NonConvergenceWarning(UserWarning):
    """Warning emitted when a fit returns without meeting its tolerance."""
    pass


# --- Statistics errors ---
class UndefinedStatisticError(PyFitLibError, ArithmeticError):
    """Exception raised when a statistic is requested on degenerate data."""
    pass
