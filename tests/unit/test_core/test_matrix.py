"""Unit tests for the Matrix and Vector containers."""

import pytest
import numpy as np

from pyfitlib.core.matrix import (Matrix, Vector, as_matrix, transpose, multiply, invert, augment,
                                  concatenate_column_vectors, linspace, parse_matrix)
from pyfitlib.core.exceptions import (InvalidDimensionError, IndexOutOfRangeError, DimensionMismatchError,
                                      SingularMatrixError, MatrixParseError)


class TestMatrixCreation:
    """Test cases for building matrices."""

    def test_new_matrix_is_zero_filled(self):
        """Test that a new matrix holds zeros."""
        A = Matrix(2, 3)
        assert A.shape == (2, 3)
        assert all(A.get(i, j) == 0.0 for i in range(2) for j in range(3))

    @pytest.mark.parametrize("rows,cols", [(0, 2), (2, 0), (-1, 3), (2.5, 2)])
    def test_invalid_dimensions(self, rows, cols):
        """Test that non-positive or non-integer shapes are rejected."""
        with pytest.raises(InvalidDimensionError):
            Matrix(rows, cols)

    def test_from_array_one_dimensional_becomes_column(self):
        """Test that a flat array is stored as a column."""
        A = Matrix.from_array(np.array([1.0, 2.0, 3.0]))
        assert A.shape == (3, 1)
        assert A.get(2, 0) == 3.0

    def test_from_array_copies_input(self):
        """Test that later changes to the source array do not leak in."""
        source = np.array([[1.0, 2.0]])
        A = Matrix.from_array(source)
        source[0, 0] = 99.0
        assert A.get(0, 0) == 1.0

    def test_from_rows_ragged(self):
        """Test that rows of different lengths are rejected."""
        with pytest.raises(DimensionMismatchError):
            Matrix.from_rows([[1.0, 2.0], [3.0]])

    def test_identity_and_ones(self):
        """Test the identity and ones constructors."""
        I = Matrix.identity(3)
        assert I.get(1, 1) == 1.0 and I.get(0, 1) == 0.0
        assert Matrix.ones(2, 2).to_numpy().sum() == 4.0


class TestMatrixElementAccess:
    """Test cases for bounds-checked element access."""

    def test_set_and_get(self):
        """Test writing and reading back an element."""
        A = Matrix(2, 2)
        A.set(1, 0, 4.5)
        assert A.get(1, 0) == 4.5
        assert A[1, 0] == 4.5

    def test_add_in_place(self):
        """Test incrementing a single element."""
        A = Matrix(1, 1)
        A.add(0, 0, 2.0)
        A.add(0, 0, 0.5)
        assert A.get(0, 0) == 2.5

    @pytest.mark.parametrize("row,col", [(2, 0), (0, 2), (-1, 0), (0, -1)])
    def test_out_of_range(self, row, col):
        """Test that indices outside the shape, negative ones included, raise."""
        A = Matrix(2, 2)
        with pytest.raises(IndexOutOfRangeError):
            A.get(row, col)
        with pytest.raises(IndexError):
            A[row, col] = 1.0

    @pytest.mark.parametrize("index", [0, (0,), (0, 0, 0), "a"])
    def test_item_access_needs_row_and_column(self, index):
        """Test that subscripts other than a (row, col) pair raise IndexOutOfRangeError."""
        A = Matrix(2, 2)
        with pytest.raises(IndexOutOfRangeError):
            A[index]
        with pytest.raises(IndexOutOfRangeError):
            A[index] = 1.0

    def test_copy_is_independent(self):
        """Test that copies do not share storage."""
        A = Matrix.from_rows([[1.0, 2.0]])
        B = A.copy()
        B.set(0, 0, 5.0)
        assert A.get(0, 0) == 1.0

    def test_to_numpy_returns_copy(self):
        """Test that the exported array cannot modify the matrix."""
        A = Matrix.from_rows([[1.0]])
        A.to_numpy()[0, 0] = 7.0
        assert A.get(0, 0) == 1.0


class TestMatrixOperations:
    """Test cases for structural and arithmetic operations."""

    def test_transpose_twice_is_identity(self):
        """Test that transpose(transpose(A)) equals A exactly."""
        A = Matrix.from_rows([[1.5, -2.0, 3.25], [4.0, 5.0, -6.125]])
        assert transpose(transpose(A)) == A
        assert A.transpose().shape == (3, 2)

    def test_multiply(self):
        """Test the matrix product against hand-computed values."""
        A = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])
        B = Matrix.from_rows([[5.0], [6.0]])
        C = multiply(A, B)
        assert C == Matrix.from_rows([[17.0], [39.0]])
        assert (A @ B) == C

    def test_multiply_mismatch(self):
        """Test that incompatible inner dimensions raise."""
        with pytest.raises(DimensionMismatchError):
            Matrix(2, 3).multiply(Matrix(2, 3))

    def test_inverse_times_original_is_identity(self, square_matrix):
        """Test that A times inv(A) is the identity within 1e-9."""
        product = square_matrix.multiply(invert(square_matrix))
        assert product.allclose(Matrix.identity(3), rtol=0.0, atol=1e-9)

    def test_inverse_needs_pivoting(self):
        """Test inversion of a matrix with a zero leading element."""
        A = Matrix.from_rows([[0.0, 1.0], [1.0, 0.0]])
        assert A.inverse().allclose(A)

    def test_inverse_singular(self):
        """Test that a singular matrix raises SingularMatrixError."""
        A = Matrix.from_rows([[1.0, 2.0], [2.0, 4.0]])
        with pytest.raises(SingularMatrixError):
            A.inverse()

    def test_inverse_zero_matrix(self):
        """Test that the zero matrix is singular."""
        with pytest.raises(SingularMatrixError):
            Matrix(2, 2).inverse()

    def test_inverse_mixed_scales(self):
        """Test that rows and columns of very different magnitude are inverted."""
        A = Matrix.from_rows([[2e-9, 1e-9], [1.0, 3.0]])
        product = A.multiply(A.inverse())
        assert product.allclose(Matrix.identity(2), rtol=0.0, atol=1e-9)

    def test_inverse_tiny_diagonal(self):
        """Test that a small but nonzero diagonal entry is not treated as singular."""
        A = Matrix.from_rows([[1e-14, 0.0], [0.0, 1.0]])
        np.testing.assert_allclose(A.inverse().to_numpy(), [[1e14, 0.0], [0.0, 1.0]])

    def test_inverse_zero_column(self):
        """Test that a zero column is singular."""
        with pytest.raises(SingularMatrixError, match="column 1"):
            Matrix.from_rows([[1.0, 0.0], [2.0, 0.0]]).inverse()

    def test_inverse_not_square(self):
        """Test that a rectangular matrix cannot be inverted."""
        with pytest.raises(DimensionMismatchError):
            Matrix(2, 3).inverse()

    def test_augment(self):
        """Test joining matrices side by side."""
        A = augment(Matrix.identity(2), Matrix.ones(2, 1))
        assert A.shape == (2, 3)
        assert A.get(1, 2) == 1.0
        with pytest.raises(DimensionMismatchError):
            Matrix(2, 1).augment(Matrix(3, 1))

    def test_plus_minus_scale(self):
        """Test elementwise arithmetic and scalar multiplication."""
        A = Matrix.from_rows([[1.0, 2.0]])
        B = Matrix.from_rows([[0.5, 0.5]])
        assert (A + B) == Matrix.from_rows([[1.5, 2.5]])
        assert (A - B) == Matrix.from_rows([[0.5, 1.5]])
        assert (2 * A) == Matrix.from_rows([[2.0, 4.0]])
        with pytest.raises(DimensionMismatchError):
            A.plus(Matrix(2, 1))

    def test_extremum_keeps_sign(self):
        """Test that the largest-magnitude element keeps its sign."""
        assert Matrix.column([1.0, -5.0, 3.0]).extremum() == -5.0

    def test_extract_row_and_column(self):
        """Test extracting single rows and columns."""
        A = Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])
        assert A.extract_row(1) == Matrix.from_rows([[3.0, 4.0]])
        assert A.extract_column(0) == Matrix.column([1.0, 3.0])
        assert A.extract_column_as_vector(1) == Vector.from_values([2.0, 4.0])
        with pytest.raises(IndexOutOfRangeError):
            A.extract_row(2)

    def test_delete_nan_rows(self):
        """Test that rows with a NaN are dropped."""
        A = Matrix.from_rows([[1.0, 2.0], [np.nan, 3.0], [4.0, 5.0]])
        B = A.delete_nan_rows()
        assert B == Matrix.from_rows([[1.0, 2.0], [4.0, 5.0]])

    def test_delete_nan_rows_all_nan(self):
        """Test that removing every row raises."""
        with pytest.raises(InvalidDimensionError):
            Matrix.from_rows([[np.nan]]).delete_nan_rows()

    def test_matrices_are_unhashable(self):
        """Test that mutable matrices cannot be used as dict keys."""
        with pytest.raises(TypeError):
            hash(Matrix(1, 1))


class TestVector:
    """Test cases for Vector."""

    def test_vector_access(self):
        """Test element access and iteration."""
        v = Vector(3)
        v.set(1, 2.0)
        v.add(1, 1.0)
        assert v[1] == 3.0
        assert list(v) == [0.0, 3.0, 0.0]
        assert len(v) == 3

    def test_vector_out_of_range(self):
        """Test that negative and too large indices raise."""
        v = Vector(2)
        with pytest.raises(IndexOutOfRangeError):
            v.get(-1)
        with pytest.raises(IndexOutOfRangeError):
            v.get(2)

    def test_vector_invalid_length(self):
        """Test that an empty vector cannot be built."""
        with pytest.raises(InvalidDimensionError):
            Vector(0)

    def test_to_matrix_is_column(self):
        """Test the conversion to a column matrix."""
        assert Vector.from_values([1.0, 2.0]).to_matrix().shape == (2, 1)

    def test_linspace(self):
        """Test evenly spaced values including both ends."""
        v = linspace(0.0, 1.0, 5)
        assert list(v) == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])

    def test_concatenate_column_vectors(self):
        """Test that each vector becomes one column."""
        M = concatenate_column_vectors(Vector.from_values([1.0, 2.0]), Vector.from_values([3.0, 4.0]))
        assert M == Matrix.from_rows([[1.0, 3.0], [2.0, 4.0]])

    def test_as_matrix(self):
        """Test coercion of lists, arrays and vectors."""
        A = Matrix(1, 1)
        assert as_matrix(A) is A
        assert as_matrix([1.0, 2.0]).shape == (2, 1)
        assert as_matrix([[1.0, 2.0]]).shape == (1, 2)
        assert as_matrix(Vector(3)).shape == (3, 1)


class TestParseMatrix:
    """Test cases for MATLAB-style matrix text."""

    def test_parse_column(self):
        """Test a bracketed column vector."""
        A = parse_matrix("[1.63e-6; 1.45e-7]")
        assert A.shape == (2, 1)
        assert A.get(0, 0) == pytest.approx(1.63e-6)

    def test_parse_rows_with_mixed_separators(self):
        """Test commas and whitespace as column separators."""
        A = parse_matrix("1, 2 3; 4 5,6")
        assert A == Matrix.from_rows([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])

    def test_parse_ragged(self):
        """Test that rows of different lengths are rejected."""
        with pytest.raises(DimensionMismatchError):
            parse_matrix("[1 2; 3]")

    @pytest.mark.parametrize("text", ["", "[]", "[1 a]", "[1 2"])
    def test_parse_invalid(self, text):
        """Test that empty or malformed text raises MatrixParseError."""
        with pytest.raises(MatrixParseError):
            parse_matrix(text)
