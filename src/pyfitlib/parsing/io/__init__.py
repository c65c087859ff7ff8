from .data_handler import load_csv_matrix, load_columns, load_igasorp, save_matrix_csv

__all__ = [
    'load_csv_matrix',
    'load_columns',
    'load_igasorp',
    'save_matrix_csv',
]
