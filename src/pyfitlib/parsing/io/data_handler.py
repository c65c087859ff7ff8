import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from pyfitlib.core.matrix import Matrix, MatrixLike, as_matrix
from pyfitlib.data.constants import ErrorMessages, FileConstants, FittingConstants, PhysicalConstants

logger = logging.getLogger(__name__)


def load_csv_matrix(file_path: Union[str, Path], skip_rows: int = 0) -> Matrix:
    """
    Reads a numeric table into a Matrix.
    Args:
        file_path: Path to a .csv file, or a whitespace separated .txt file.
        skip_rows: Number of leading lines (headers, instrument preamble) to skip.
    Returns:
        Matrix with one row per data line. Cells that are not numbers become NaN.
    Raises:
        FileNotFoundError: If the specified file doesn't exist
        ValueError: If the file type is unsupported or no data is found
    """
    file_path = _check_file(file_path)
    if skip_rows < 0:
        raise ValueError(f"skip_rows must be non-negative, got {skip_rows}")
    try:
        df = _read_table(file_path, skip_rows)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"No data found in file {file_path}: {str(e)}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Error reading file {file_path}: {str(e)}") from e
    if df.empty:
        raise ValueError(f"No data found in file: {file_path}")
    values = df.apply(pd.to_numeric, errors='coerce').to_numpy(dtype=float)
    nan_count = int(np.isnan(values).sum())
    if nan_count > 0:
        logger.warning("Found %d non-numeric or missing cells in %s", nan_count, file_path)
    logger.info("Loaded %dx%d matrix from %s", values.shape[0], values.shape[1], file_path)
    return Matrix.from_array(values)


def load_columns(file_path: Union[str, Path], columns: Sequence[int], skip_rows: int = 0,
                 drop_nan: bool = True) -> Matrix:
    """
    Reads selected columns of a numeric table.
    Args:
        file_path: Path to the data file.
        columns: Zero-based column indices, in the order they should appear.
        skip_rows: Number of leading lines to skip.
        drop_nan: Remove every row that holds a NaN in one of the selected columns.
    Returns:
        Matrix with len(columns) columns.
    """
    data = load_csv_matrix(file_path, skip_rows)
    if len(columns) == 0:
        raise ValueError("At least one column must be selected")
    for col in columns:
        if isinstance(col, bool) or not isinstance(col, int) or not 0 <= col < data.cols:
            raise ValueError(f"Column index {col!r} out of bounds (file has {data.cols} columns)")
    selected = Matrix.from_array(data.to_numpy()[:, list(columns)])
    if drop_nan:
        selected = selected.delete_nan_rows()
    if selected.rows < FittingConstants.MIN_DATA_POINTS:
        raise ValueError(ErrorMessages.INSUFFICIENT_DATA_POINTS.format(
            count=selected.rows, min_points=FittingConstants.MIN_DATA_POINTS))
    return selected


def load_igasorp(file_path: Union[str, Path], dry_mass: float,
                 skip_rows: int = FileConstants.IGASORP_HEADER_ROWS) -> Matrix:
    """
    Reads a gravimetric sorption analyser export into time and moisture columns.

    The file holds time in minutes in the first column and sample mass in the
    second. Time is converted to seconds and mass to dry-basis moisture content
    X = (m - m_dry) / m_dry.

    Returns:
        n x 2 matrix with columns [t (s), X (kg/kg db)].
    """
    if dry_mass <= 0:
        raise ValueError(f"Dry mass must be positive, got {dry_mass}")
    data = load_columns(file_path, [0, 1], skip_rows=skip_rows).to_numpy()
    t = data[:, 0] * PhysicalConstants.SECONDS_PER_MINUTE
    Xdb = (data[:, 1] - dry_mass) / dry_mass
    return Matrix.from_array(np.column_stack([t, Xdb]))


def save_matrix_csv(matrix: MatrixLike, file_path: Union[str, Path], header: Optional[str] = None) -> Path:
    """
    Writes a matrix as comma separated rows.
    Args:
        matrix: Data to write.
        file_path: Destination; parent directories are created when missing.
        header: Optional first line, for example "t,X,kF".
    Returns:
        Path of the written file.
    """
    matrix = as_matrix(matrix)
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(matrix.to_numpy())
    with open(file_path, 'w', encoding=FileConstants.DEFAULT_ENCODING, newline='') as f:
        if header is not None:
            f.write(header.rstrip('\n') + '\n')
        df.to_csv(f, header=False, index=False, float_format='%.17g')
    logger.info("Saved %dx%d matrix to %s", matrix.rows, matrix.cols, file_path)
    return file_path


def _check_file(file_path: Union[str, Path]) -> Path:
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise ValueError(f"Path is not a file: {file_path}")
    file_extension = file_path.suffix.lower()
    if file_extension not in FileConstants.SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: '{file_extension}'. "
                         f"Supported types are: {FileConstants.SUPPORTED_EXTENSIONS}")
    return file_path


def _read_table(file_path: Path, skip_rows: int) -> pd.DataFrame:
    """Read a headerless table, comma separated for .csv and whitespace separated otherwise."""
    if file_path.suffix.lower() == '.csv':
        return pd.read_csv(
            file_path,
            header=None,
            skiprows=skip_rows,
            na_values=list(FileConstants.NA_VALUES),
            encoding=FileConstants.DEFAULT_ENCODING,
            skipinitialspace=True,
        )
    return pd.read_csv(
        file_path,
        sep=r'\s+',
        header=None,
        skiprows=skip_rows,
        na_values=list(FileConstants.NA_VALUES),
        encoding=FileConstants.DEFAULT_ENCODING,
        engine='python'  # Explicitly specify engine for regex separator
    )
