"""Physical and processing constants for pyfitlib."""

from .physical_constants import PhysicalConstants
from .processing_constants import FittingConstants, ErrorMessages, FileConstants

__all__ = [
    "PhysicalConstants",
    "FittingConstants",
    "ErrorMessages",
    "FileConstants"
]
