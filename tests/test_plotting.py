"""
Unit tests for the plotting utilities.
"""

import pytest
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from fieldlab.data.scene import ChargeScene
from fieldlab.physics import FieldGrid, trace_field_lines
from fieldlab.utils.plotting import ApplicationPlotter, FieldLinePlotter, PlotConfig


class TestPlotting:
    """Test suite for field and application plotters."""

    @pytest.fixture
    def charges(self):
        return ChargeScene.default().charges

    @pytest.fixture
    def plotter(self):
        return FieldLinePlotter(PlotConfig(figsize=(4, 4), dpi=50))

    @pytest.fixture(autouse=True)
    def close_figures(self):
        yield
        plt.close('all')

    def test_plot_config_from_dict(self):
        config = PlotConfig.from_dict({'figsize': [6, 5], 'dpi': 72, 'output_dir': 'plots'})
        assert config.figsize == (6, 5)
        assert config.dpi == 72

    def test_plot_scene(self, plotter, charges):
        lines = trace_field_lines(charges)
        grid_data = FieldGrid().evaluate((0.0, 100.0, 0.0, 100.0), (21, 21), charges)
        fig = plotter.plot_scene(charges, lines, grid_data=grid_data)

        ax = fig.axes[0]
        assert ax.get_ylim() == (100.0, 0.0)
        assert len(ax.collections[-1].get_segments()) == 20
        assert ax.get_title() == 'Field lines (20 traced)'

    def test_plot_vector_field(self, plotter, charges):
        grid_data = FieldGrid().evaluate((0.0, 100.0, 0.0, 100.0), (11, 11), charges)
        fig = plotter.plot_vector_field(grid_data, charges, subsample=1)
        assert fig.axes[0].get_title() == 'Field direction'

    def test_save_figure(self, plotter, charges, tmp_path):
        fig = plotter.plot_scene(charges, [])
        path = plotter.save_figure(fig, 'empty_scene', str(tmp_path))
        assert path.exists()
        assert path.suffix == '.png'

    def test_plot_history(self):
        fig = ApplicationPlotter(PlotConfig(figsize=(4, 6), dpi=50)).plot_history(
            {'lightning': [0.0, 0.2, 0.4], 'fuel_truck': [0.0, 3.0, 6.0]},
            {'lightning': [1]}
        )
        assert len(fig.axes) == 2
        assert fig.axes[-1].get_xlabel() == 'Time (s)'


if __name__ == "__main__":
    pytest.main([__file__])
