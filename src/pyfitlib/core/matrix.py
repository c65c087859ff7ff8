"""
matrix.py

Dense matrix and vector containers used by the regression and fitting engines.

Both containers store their elements in a float64 numpy array whose shape is
fixed at creation. Element access is bounds-checked against the logical shape
(negative indices are rejected rather than wrapped), every operation returns a
new container, and copies are always explicit.

Classes:
    Matrix: A rows x cols dense matrix.
    Vector: A 1-D dense vector, logically a single column.

Functions:
    transpose, multiply, invert, augment: Functional forms of the Matrix methods.
    concatenate_column_vectors: Join vectors side by side into a matrix.
    linspace: Evenly spaced values as a Vector.
    parse_matrix: Build a matrix from MATLAB-style text such as "[1, 2; 3, 4]".
    as_matrix: Coerce arrays, lists and vectors into a Matrix.
"""

import logging
import re
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from pyfitlib.core.exceptions import (DimensionMismatchError, IndexOutOfRangeError, InvalidDimensionError,
                                      MatrixParseError, SingularMatrixError)
from pyfitlib.data.constants import FittingConstants

logger = logging.getLogger(__name__)


def _is_index(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


class Matrix:
    """
    A dense, mutable, zero-indexed 2-D matrix of floats.

    Attributes:
        rows (int): Number of rows.
        cols (int): Number of columns.

    Example:
        >>> A = Matrix(2, 2)
        >>> A.set(0, 0, 4.0)
        >>> A.get(0, 0)
        4.0
    """
    __slots__ = ('_data',)
    __hash__ = None

    def __init__(self, rows: int, cols: int) -> None:
        if not (_is_index(rows) and _is_index(cols)) or rows <= 0 or cols <= 0:
            raise InvalidDimensionError(rows, cols)
        self._data = np.zeros((int(rows), int(cols)), dtype=np.float64)

    # --- Constructors ---
    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Matrix":
        """Wrap a 2-D float array without copying it."""
        matrix = cls.__new__(cls)
        matrix._data = array
        return matrix

    @classmethod
    def from_array(cls, values) -> "Matrix":
        """
        Build a matrix from a numpy array or nested sequence.

        1-D input becomes a single column. The data is always copied.
        """
        try:
            array = np.array(values, dtype=np.float64)
        except ValueError as e:
            raise MatrixParseError(f"Cannot convert values to a numeric matrix: {e}") from e
        if array.ndim == 1:
            array = array.reshape(-1, 1)
        if array.ndim != 2 or array.size == 0:
            raise InvalidDimensionError(*(array.shape + (0, 0))[:2])
        return cls._wrap(array)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """Build a matrix from a list of equally long rows."""
        rows = [list(row) for row in rows]
        if not rows:
            raise InvalidDimensionError(0, 0)
        width = len(rows[0])
        for row in rows[1:]:
            if len(row) != width:
                raise DimensionMismatchError("from_rows", (1, width), (1, len(row)))
        return cls.from_array(rows)

    @classmethod
    def column(cls, values: Iterable[float]) -> "Matrix":
        """Build a single-column matrix."""
        return cls.from_array(np.asarray(list(values), dtype=np.float64).reshape(-1, 1))

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(rows, cols)

    @classmethod
    def ones(cls, rows: int, cols: int) -> "Matrix":
        matrix = cls(rows, cols)
        matrix._data.fill(1.0)
        return matrix

    @classmethod
    def identity(cls, n: int) -> "Matrix":
        matrix = cls(n, n)
        np.fill_diagonal(matrix._data, 1.0)
        return matrix

    # --- Shape ---
    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    # --- Element access ---
    def _check_index(self, row, col) -> None:
        if not (_is_index(row) and _is_index(col)) or not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexOutOfRangeError(row, col, self.shape)

    def get(self, row: int, col: int) -> float:
        self._check_index(row, col)
        return float(self._data[row, col])

    def set(self, row: int, col: int, value: float) -> None:
        self._check_index(row, col)
        self._data[row, col] = value

    def add(self, row: int, col: int, delta: float) -> None:
        """Add delta to a single element in place."""
        self._check_index(row, col)
        self._data[row, col] += delta

    def _split_index(self, index):
        if not isinstance(index, tuple) or len(index) != 2:
            raise IndexOutOfRangeError(index, None, self.shape)
        return index

    def __getitem__(self, index: Tuple[int, int]) -> float:
        row, col = self._split_index(index)
        return self.get(row, col)

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        row, col = self._split_index(index)
        self.set(row, col, value)

    # --- Structural operations ---
    def copy(self) -> "Matrix":
        return Matrix._wrap(self._data.copy())

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the elements as a 2-D numpy array."""
        return self._data.copy()

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._data.T.copy())

    def augment(self, other: "Matrix") -> "Matrix":
        """Join other to the right of this matrix."""
        if self.rows != other.rows:
            raise DimensionMismatchError("augment", self.shape, other.shape)
        return Matrix._wrap(np.hstack([self._data, other._data]))

    def extract_column(self, index: int) -> "Matrix":
        self._check_index(0, index)
        return Matrix._wrap(self._data[:, [index]].copy())

    def extract_column_as_vector(self, index: int) -> "Vector":
        self._check_index(0, index)
        return Vector._wrap(self._data[:, index].copy())

    def extract_row(self, index: int) -> "Matrix":
        """Return row index as a 1 x cols matrix."""
        self._check_index(index, 0)
        return Matrix._wrap(self._data[[index], :].copy())

    def to_vector(self) -> "Vector":
        if self.cols != 1:
            raise DimensionMismatchError("to_vector", self.shape, (self.rows, 1))
        return Vector._wrap(self._data[:, 0].copy())

    def delete_nan_rows(self) -> "Matrix":
        """Return a copy without the rows that contain a NaN."""
        keep = ~np.isnan(self._data).any(axis=1)
        dropped = int(self.rows - np.count_nonzero(keep))
        if dropped:
            logger.warning("Removing %d of %d rows containing NaN values", dropped, self.rows)
        if not keep.any():
            raise InvalidDimensionError(0, self.cols)
        return Matrix._wrap(self._data[keep].copy())

    # --- Arithmetic ---
    def multiply(self, other: "Matrix") -> "Matrix":
        if self.cols != other.rows:
            raise DimensionMismatchError("multiply", self.shape, other.shape)
        return Matrix._wrap(self._data @ other._data)

    def scale(self, factor: float) -> "Matrix":
        return Matrix._wrap(self._data * float(factor))

    def _check_same_shape(self, other: "Matrix", operation: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatchError(operation, self.shape, other.shape)

    def plus(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "add")
        return Matrix._wrap(self._data + other._data)

    def minus(self, other: "Matrix") -> "Matrix":
        self._check_same_shape(other, "subtract")
        return Matrix._wrap(self._data - other._data)

    def inverse(self) -> "Matrix":
        """
        Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

        The matrix is first equilibrated, rows and then columns scaled so that
        their largest entry is one, so that a column measured in very small units
        is not mistaken for a zero column. The inverse of the scaled matrix B = R A C
        is mapped back as inv(A) = C inv(B) R.

        Raises:
            DimensionMismatchError: If the matrix is not square.
            SingularMatrixError: If the matrix holds non-finite values, has a zero
                row or column, or a pivot of the scaled matrix falls below the
                singularity threshold.
        """
        n = self.rows
        if n != self.cols:
            raise DimensionMismatchError("invert", self.shape, self.shape[::-1])
        if not np.all(np.isfinite(self._data)):
            raise SingularMatrixError("Cannot invert a matrix containing non-finite values")
        row_scale = np.max(np.abs(self._data), axis=1)
        if np.any(row_scale == 0.0):
            raise SingularMatrixError(f"Matrix is singular: row {int(np.argmin(row_scale))} is zero")
        scaled = self._data / row_scale[:, np.newaxis]
        col_scale = np.max(np.abs(scaled), axis=0)
        if np.any(col_scale == 0.0):
            raise SingularMatrixError(f"Matrix is singular: column {int(np.argmin(col_scale))} is zero")
        scaled = scaled / col_scale
        threshold = FittingConstants.SINGULARITY_EPSILON
        aug = np.hstack([scaled, np.eye(n)])
        for col in range(n):
            pivot_row = col + int(np.argmax(np.abs(aug[col:, col])))
            pivot = aug[pivot_row, col]
            if abs(pivot) <= threshold:
                logger.debug("Pivot %.3e in column %d is below threshold %.3e", pivot, col, threshold)
                raise SingularMatrixError(f"Matrix is singular or ill-conditioned "
                                          f"(pivot {pivot:.3e} in column {col})")
            if pivot_row != col:
                aug[[col, pivot_row]] = aug[[pivot_row, col]]
            aug[col] /= aug[col, col]
            factors = aug[:, col].copy()
            factors[col] = 0.0
            aug -= np.outer(factors, aug[col])
        inverse = aug[:, n:] / col_scale[:, np.newaxis] / row_scale
        return Matrix._wrap(inverse)

    def extremum(self) -> float:
        """Return the element with the largest magnitude, keeping its sign."""
        flat = self._data.ravel()
        return float(flat[int(np.argmax(np.abs(flat)))])

    def allclose(self, other: "Matrix", rtol: float = 1e-9, atol: float = 1e-9) -> bool:
        return self.shape == other.shape and bool(np.allclose(self._data, other._data, rtol=rtol, atol=atol))

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return self.multiply(other)

    def __add__(self, other: "Matrix") -> "Matrix":
        return self.plus(other)

    def __sub__(self, other: "Matrix") -> "Matrix":
        return self.minus(other)

    def __mul__(self, factor: float) -> "Matrix":
        if isinstance(factor, (Matrix, Vector)):
            return NotImplemented
        return self.scale(factor)

    __rmul__ = __mul__

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"Matrix({self._data.tolist()})"

    def __str__(self) -> str:
        return "\n".join(" ".join(f"{value:g}" for value in row) for row in self._data)


class Vector:
    """A dense, mutable, zero-indexed 1-D vector of floats."""
    __slots__ = ('_data',)
    __hash__ = None

    def __init__(self, length: int) -> None:
        if not _is_index(length) or length <= 0:
            raise InvalidDimensionError(length, 1)
        self._data = np.zeros(int(length), dtype=np.float64)

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Vector":
        vector = cls.__new__(cls)
        vector._data = array
        return vector

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "Vector":
        array = np.array(list(values), dtype=np.float64)
        if array.ndim != 1 or array.size == 0:
            raise InvalidDimensionError(array.size, 1)
        return cls._wrap(array)

    def __len__(self) -> int:
        return self._data.shape[0]

    def _check_index(self, index) -> None:
        if not _is_index(index) or not 0 <= index < len(self):
            raise IndexOutOfRangeError(index, 0, (len(self), 1))

    def get(self, index: int) -> float:
        self._check_index(index)
        return float(self._data[index])

    def set(self, index: int, value: float) -> None:
        self._check_index(index)
        self._data[index] = value

    def add(self, index: int, delta: float) -> None:
        self._check_index(index)
        self._data[index] += delta

    def __getitem__(self, index: int) -> float:
        return self.get(index)

    def __setitem__(self, index: int, value: float) -> None:
        self.set(index, value)

    def __iter__(self):
        return (float(value) for value in self._data)

    def copy(self) -> "Vector":
        return Vector._wrap(self._data.copy())

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def to_matrix(self) -> Matrix:
        """Return the vector as a single-column matrix."""
        return Matrix._wrap(self._data.reshape(-1, 1).copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"Vector({self._data.tolist()})"


MatrixLike = Union[Matrix, Vector, np.ndarray, List]


def as_matrix(value: MatrixLike) -> Matrix:
    """Coerce a Matrix, Vector, numpy array or nested list into a Matrix.

    Matrices are returned as-is; everything else is copied.
    """
    if isinstance(value, Matrix):
        return value
    if isinstance(value, Vector):
        return value.to_matrix()
    return Matrix.from_array(value)


def transpose(a: Matrix) -> Matrix:
    return a.transpose()


def multiply(a: Matrix, b: Matrix) -> Matrix:
    return a.multiply(b)


def invert(a: Matrix) -> Matrix:
    return a.inverse()


def augment(a: Matrix, b: Matrix) -> Matrix:
    return a.augment(b)


def concatenate_column_vectors(*vectors: Union[Vector, Matrix]) -> Matrix:
    """Place each vector in its own column, in argument order."""
    if not vectors:
        raise InvalidDimensionError(0, 0)
    result = as_matrix(vectors[0])
    for vector in vectors[1:]:
        result = result.augment(as_matrix(vector))
    return result


def linspace(start: float, stop: float, count: int) -> Vector:
    """Return count evenly spaced values from start to stop inclusive."""
    if not _is_index(count) or count <= 0:
        raise InvalidDimensionError(count, 1)
    return Vector._wrap(np.linspace(start, stop, count))


_NUMBER_SEPARATOR = re.compile(r'[,\s]+')


def parse_matrix(text: str) -> Matrix:
    """
    Parse MATLAB-style matrix text.

    Rows are separated by ';' and columns by ',' or whitespace, and the
    enclosing brackets are optional: "[1.63e-6; 1.45e-7]" is a 2x1 column.

    Raises:
        MatrixParseError: If the text is empty or contains a non-numeric entry.
        DimensionMismatchError: If the rows have different lengths.
    """
    body = text.strip()
    if body.startswith('['):
        if not body.endswith(']'):
            raise MatrixParseError(f"Unbalanced brackets in matrix text: {text!r}")
        body = body[1:-1]
    rows = []
    for row_text in body.split(';'):
        entries = [entry for entry in _NUMBER_SEPARATOR.split(row_text.strip()) if entry]
        if not entries:
            continue
        try:
            rows.append([float(entry) for entry in entries])
        except ValueError as e:
            raise MatrixParseError(f"Invalid number in matrix text {text!r}: {e}") from e
    if not rows:
        raise MatrixParseError(f"Matrix text contains no values: {text!r}")
    return Matrix.from_rows(rows)
