import logging
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from pyfitlib.core.matrix import MatrixLike, as_matrix
from pyfitlib.core.typedefs import ScalarModel

logger = logging.getLogger(__name__)


class FitVisualizer:
    """Draws measured data against fitted scalar models."""

    # --- Constructor ---
    def __init__(self, n_points: int = 200) -> None:
        if n_points < 2:
            raise ValueError(f"At least two curve points are required, got {n_points}")
        self.n_points = n_points
        self.setup_style()
        logger.debug("FitVisualizer initialized with %d curve points", n_points)

    @staticmethod
    def setup_style() -> None:
        plt.rcParams.update({
            'font.size': 10,
            'font.family': 'sans-serif',
            'font.sans-serif': ['DejaVu Sans', 'Arial', 'Helvetica', 'Liberation Sans'],
            'axes.titlesize': 12,
            'axes.labelsize': 10,
            'xtick.labelsize': 9,
            'ytick.labelsize': 9,
            'legend.fontsize': 9,
            'axes.grid': True,
            'grid.alpha': 0.3,
            'grid.linestyle': '--',
            'axes.axisbelow': True,
            'figure.facecolor': 'white',
            'axes.facecolor': 'white',
            'savefig.facecolor': 'white',
            'savefig.edgecolor': 'none',
            'savefig.dpi': 300,
        })

    # --- Public API Methods ---
    def plot_fit(self, x: MatrixLike, y: MatrixLike, model: ScalarModel, beta: MatrixLike,
                 title: str = "Model fit", xlabel: str = "x", ylabel: str = "y",
                 save_path: Optional[Union[str, Path]] = None) -> Figure:
        """
        Plot data points and the fitted curve on a new figure.
        Args:
            x: Independent variable column.
            y: Observations column.
            model: Scalar model, called as model(x, beta).
            beta: Fitted coefficients.
            save_path: Where to save the figure, if given.
        Returns:
            The matplotlib figure. The caller owns it and should close it.
        """
        x_values, y_values = self._columns(x, y)
        beta = as_matrix(beta)
        x_curve = np.linspace(x_values.min(), x_values.max(), self.n_points)
        y_curve = np.array([model(float(xi), beta) for xi in x_curve])
        logger.info("Plotting fit '%s' over %d data points", title, x_values.shape[0])
        fig, ax = plt.subplots(figsize=(8, 5))
        ax.plot(x_values, y_values, 'o', color='tab:blue', markersize=5, label='Data')
        ax.plot(x_curve, y_curve, '-', color='tab:red', linewidth=1.5, label='Fit')
        ax.set_title(title)
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.legend(loc='best')
        if save_path is not None:
            self.save(fig, save_path)
        return fig

    def plot_residuals(self, x: MatrixLike, y: MatrixLike, model: ScalarModel, beta: MatrixLike,
                       title: str = "Residuals", xlabel: str = "x",
                       save_path: Optional[Union[str, Path]] = None) -> Figure:
        """Plot y_i - model(x_i, beta) against x on a new figure."""
        x_values, y_values = self._columns(x, y)
        beta = as_matrix(beta)
        residuals = y_values - np.array([model(float(xi), beta) for xi in x_values])
        logger.debug("Residual range: %g to %g", residuals.min(), residuals.max())
        fig, ax = plt.subplots(figsize=(8, 4))
        ax.axhline(0.0, color='black', linewidth=0.8)
        ax.plot(x_values, residuals, 's', color='tab:green', markersize=4)
        ax.set_title(title)
        ax.set_xlabel(xlabel)
        ax.set_ylabel("Residual")
        if save_path is not None:
            self.save(fig, save_path)
        return fig

    @staticmethod
    def save(fig: Figure, save_path: Union[str, Path]) -> Path:
        """Save a figure, creating the parent directory when needed."""
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(
            str(save_path),
            bbox_inches="tight",  # Cropping
            facecolor='white',
            edgecolor='none',
            pad_inches=0.2
        )
        logger.info("Plot saved as %s", save_path)
        return save_path

    # --- Helpers ---
    @staticmethod
    def _columns(x: MatrixLike, y: MatrixLike):
        x = as_matrix(x)
        y = as_matrix(y)
        if x.cols != 1 or y.cols != 1 or x.rows != y.rows:
            raise ValueError(f"x and y must be columns of equal length, got {x.rows}x{x.cols} and {y.rows}x{y.cols}")
        if x.rows == 0:
            raise ValueError("No data to plot")
        return x.to_numpy()[:, 0], y.to_numpy()[:, 0]
