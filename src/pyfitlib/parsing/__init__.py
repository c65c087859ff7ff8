"""
Parsing and configuration modules for pyfitlib.

This package handles the YAML fitting configuration and reading and writing
numeric data tables.
"""

from .config.fit_config import FitConfig, FitConfigParser, load_fit_config
from .io.data_handler import load_csv_matrix, load_columns, load_igasorp, save_matrix_csv

__all__ = [
    'FitConfig',
    'FitConfigParser',
    'load_fit_config',
    'load_csv_matrix',
    'load_columns',
    'load_igasorp',
    'save_matrix_csv',
]
