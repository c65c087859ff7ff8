"""
Physical and processing constants.

This package provides access to the physical constants used by the model
functions and the numerical defaults used by the fitting engines.
"""

from .constants.physical_constants import PhysicalConstants
from .constants.processing_constants import FittingConstants, ErrorMessages, FileConstants

__all__ = [
    "PhysicalConstants",
    "FittingConstants",
    "ErrorMessages",
    "FileConstants",
]
