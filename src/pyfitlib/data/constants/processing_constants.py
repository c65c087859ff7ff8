from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class FittingConstants:
    """Numerical defaults shared by the regression and fitting engines."""
    # Gauss-Newton defaults
    DEFAULT_STEP: Final[float] = 1e-10
    DEFAULT_TOLERANCE: Final[float] = 1e-3
    DEFAULT_MAX_ITERATIONS: Final[int] = 500
    # Pivots of the row- and column-equilibrated matrix below this are treated as zero
    SINGULARITY_EPSILON: Final[float] = 1e-12
    # Newton solvers used by the diffusion helpers
    NEWTON_STEP: Final[float] = 1e-10
    NEWTON_TOLERANCE: Final[float] = 1e-10
    NEWTON_MAX_ITERATIONS: Final[int] = 100
    # Crank series
    CRANK_TERMS: Final[int] = 50
    DEFAULT_KF_GUESS: Final[float] = 1e-4
    DEFAULT_KF_CHUNK_SIZE: Final[int] = 3
    # Data validation
    MIN_DATA_POINTS: Final[int] = 2


@dataclass(frozen=True)
class ErrorMessages:
    """Standardized error message templates."""
    PARAMETER_COUNT: Final[str] = "{model} expects {expected} parameters, got {count}"
    INSUFFICIENT_DATA_POINTS: Final[str] = "Insufficient data points ({count}), minimum required: {min_points}"
    NON_POSITIVE_SETTING: Final[str] = "Fitting setting '{key}' must be positive, got {value}"


@dataclass(frozen=True)
class FileConstants:
    """File processing related constants."""
    SUPPORTED_EXTENSIONS: Final[tuple] = ('.csv', '.txt')
    DEFAULT_ENCODING: Final[str] = 'utf-8'
    # Preamble lines of a gravimetric sorption analyser export
    IGASORP_HEADER_ROWS: Final[int] = 17
    # Missing value indicators
    NA_VALUES: Final[tuple] = ('', ' ', '  ', '   ', 'nan', 'NaN', 'NULL', 'null', 'N/A', 'n/a', 'NA')
