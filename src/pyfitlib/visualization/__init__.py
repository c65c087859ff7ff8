from .plotters import FitVisualizer

__all__ = ['FitVisualizer']
