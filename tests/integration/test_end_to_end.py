"""End-to-end integration tests."""

import warnings

import pytest
import numpy as np
import matplotlib.pyplot as plt
from ruamel.yaml import YAML

import pyfitlib
from pyfitlib import (FitVisualizer, Matrix, NonConvergenceError, fitnlm, load_columns, load_csv_matrix,
                      load_fit_config, polyfit, coefficient_of_determination, save_matrix_csv)
from pyfitlib.models import crank_equation, fit_kf, gab
from pyfitlib.parsing.config.fit_config import FitConfigParser


def write_yaml(path, data):
    yaml = YAML()
    with open(path, 'w') as f:
        yaml.dump(data, f)


class TestEndToEnd:
    """End-to-end integration tests."""

    def test_package_exports(self):
        """Test that the top-level API is importable."""
        for name in pyfitlib.__all__:
            assert hasattr(pyfitlib, name)
        assert isinstance(pyfitlib.__version__, str)

    def test_isotherm_from_files(self, tmp_path):
        """Test fitting GAB to data and settings read from disk."""
        aw = np.linspace(0.1, 0.85, 12)
        X = np.array([gab(a, Matrix.column([10.0, 0.9, 0.1])) for a in aw])
        data_path = tmp_path / "isotherm.csv"
        save_matrix_csv(Matrix.from_array(np.column_stack([aw, X])), data_path, header="aw,X")
        config_path = tmp_path / "fit.yaml"
        write_yaml(config_path, {"fitting": {"tolerance": 1.0e-10, "max_iterations": 100},
                                 "initial_guess": "[9; 0.88; 0.11]"})

        data = load_columns(data_path, [0, 1], skip_rows=1)
        parser = FitConfigParser(config_path)
        result = fitnlm(gab, data.extract_column(0), data.extract_column(1), parser.initial_guess,
                        config=parser.fit_config)

        assert result.converged
        np.testing.assert_allclose(result.parameters, [10.0, 0.9, 0.1], rtol=1e-5)

    def test_drying_curve_kf_table(self, tmp_path, drying_curve):
        """Test the kF workflow from a data file to a saved result table and plot."""
        t, X = drying_curve
        data_path = tmp_path / "drying.csv"
        save_matrix_csv(Matrix.from_array(np.column_stack([t, X])), data_path, header="t,X")
        config_path = tmp_path / "fit.yaml"
        write_yaml(config_path, {"fitting": {"tolerance": 1.0e-12}})

        data = load_columns(data_path, [0, 1], skip_rows=1)
        table = fit_kf(data.extract_column(0), data.extract_column(1), 0.8, 0.1,
                       chunk_size=4, config=load_fit_config(config_path))
        out_path = save_matrix_csv(table, tmp_path / "results" / "kf.csv", header="X,kF")

        saved = load_csv_matrix(out_path, skip_rows=1)
        assert saved.shape == (3, 2)
        np.testing.assert_allclose(saved.to_numpy()[:, 1], 2e-4, rtol=1e-6)

        fig = FitVisualizer().plot_fit(data.extract_column(0), data.extract_column(1),
                                       lambda ti, b: crank_equation(b.get(0, 0), ti, 0.8, 0.1), [2e-4],
                                       save_path=tmp_path / "results" / "fit.png")
        plt.close(fig)
        assert (tmp_path / "results" / "fit.png").exists()

    def test_strict_config_raises(self, tmp_path, exponential_data):
        """Test that raise_on_nonconvergence from YAML turns the warning into an error."""
        config_path = tmp_path / "fit.yaml"
        write_yaml(config_path, {"fitting": {"max_iterations": 1, "tolerance": 1.0e-14,
                                             "raise_on_nonconvergence": True}})
        config = load_fit_config(config_path)
        x, y = exponential_data
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            with pytest.raises(NonConvergenceError) as exc_info:
                fitnlm(lambda xi, b: b.get(0, 0) * np.exp(b.get(1, 0) * xi), x, y, [1.0, 0.1], config=config)
        assert exc_info.value.result.iterations == 1

    def test_polynomial_r_squared(self, tmp_path):
        """Test polyfit and R^2 on data read back from a file."""
        x = np.linspace(0.0, 4.0, 9)
        y = 1.0 + 0.5 * x - 0.25 * x ** 2
        path = save_matrix_csv(Matrix.from_array(np.column_stack([x, y])), tmp_path / "poly.csv")
        data = load_csv_matrix(path)
        beta = polyfit(data.extract_column(0), data.extract_column(1), 2)
        np.testing.assert_allclose(beta.to_numpy()[:, 0], [1.0, 0.5, -0.25], atol=1e-9)
        assert coefficient_of_determination(data.extract_column(0), data.extract_column(1), beta) == \
            pytest.approx(1.0)
