"""
Visualization tools for the electrostatic field lab.

Draws traced field lines, charges, potential maps and field vectors in the
normalized lab plane. The lab's y axis points down (screen convention), so
axes are inverted to match what the lab shows.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from matplotlib.patches import Circle
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..physics.charges import Bounds, FieldLine, PointCharge


@dataclass
class PlotConfig:
    """Configuration for plot styling and parameters."""
    figsize: Tuple[int, int] = (8, 8)
    dpi: int = 150
    colormap: str = 'RdBu_r'
    line_color: str = '#22d3ee'
    line_alpha: float = 0.6
    line_width: float = 1.0
    charge_radius: float = 2.0
    font_size: int = 12
    title_size: int = 14
    label_size: int = 10
    save_format: str = 'png'
    transparent: bool = False

    @classmethod
    def from_dict(cls, options: Dict) -> "PlotConfig":
        known = {k: v for k, v in options.items() if k in cls.__dataclass_fields__}
        if 'figsize' in known:
            known['figsize'] = tuple(known['figsize'])
        return cls(**known)


class BasePlotter:
    """Base class for field lab plotting utilities."""

    def __init__(self, config: Optional[PlotConfig] = None):
        self.config = config or PlotConfig()
        self._setup_matplotlib()

    def _setup_matplotlib(self):
        """Configure matplotlib settings."""
        plt.rcParams.update({
            'font.size': self.config.font_size,
            'axes.titlesize': self.config.title_size,
            'axes.labelsize': self.config.label_size,
            'xtick.labelsize': self.config.label_size,
            'ytick.labelsize': self.config.label_size,
            'legend.fontsize': self.config.label_size,
            'figure.dpi': self.config.dpi,
            'savefig.dpi': self.config.dpi,
            'savefig.transparent': self.config.transparent
        })

    def save_figure(self, fig: plt.Figure, filename: str, directory: str = "plots") -> Path:
        """Save figure with consistent formatting."""
        save_dir = Path(directory)
        save_dir.mkdir(parents=True, exist_ok=True)

        filepath = save_dir / f"{filename}.{self.config.save_format}"
        fig.savefig(filepath, format=self.config.save_format,
                    bbox_inches='tight', transparent=self.config.transparent)
        print(f"Saved plot: {filepath}")
        return filepath

    def _lab_axes(self, ax: plt.Axes, bounds: Bounds):
        x_min, x_max, y_min, y_max = bounds
        ax.set_xlim(x_min, x_max)
        ax.set_ylim(y_max, y_min)
        ax.set_aspect('equal', adjustable='box')
        ax.set_xlabel('x (% of width)')
        ax.set_ylabel('y (% of height)')


class FieldLinePlotter(BasePlotter):
    """Plotter for field lines, charges and field maps."""

    def draw_charges(self, ax: plt.Axes, charges: Sequence[PointCharge]):
        """Red discs for positive charges, blue for negative, with a sign label."""
        for charge in charges:
            positive = charge.magnitude > 0
            ax.add_patch(Circle(charge.position, self.config.charge_radius,
                                color='#dc2626' if positive else '#2563eb', zorder=3))
            ax.text(charge.x, charge.y, '+' if positive else '-', color='white',
                    ha='center', va='center', fontweight='bold', zorder=4)

    def draw_lines(self, ax: plt.Axes, lines: Sequence[FieldLine]) -> LineCollection:
        segments = [np.asarray(line.points) for line in lines if len(line) > 1]
        collection = LineCollection(segments, colors=self.config.line_color,
                                    alpha=self.config.line_alpha,
                                    linewidths=self.config.line_width, zorder=2)
        ax.add_collection(collection)
        return collection

    def plot_scene(self,
                   charges: Sequence[PointCharge],
                   lines: Sequence[FieldLine],
                   bounds: Bounds = (0.0, 100.0, 0.0, 100.0),
                   grid_data: Optional[Dict[str, np.ndarray]] = None,
                   title: Optional[str] = None) -> plt.Figure:
        """
        Plot field lines over an optional potential map.

        Args:
            charges: Charges of the scene
            lines: Traced field lines
            bounds: Visible lab rectangle
            grid_data: Output of FieldGrid.evaluate for the background map
            title: Plot title

        Returns:
            Matplotlib figure
        """
        fig, ax = plt.subplots(figsize=self.config.figsize)

        if grid_data is not None:
            potential = grid_data['potential']
            # Symmetric colour range so V = 0 sits at the neutral colour
            limit = np.nanpercentile(np.abs(potential), 95) or 1.0
            im = ax.pcolormesh(grid_data['X'], grid_data['Y'], potential,
                               cmap=self.config.colormap, vmin=-limit, vmax=limit,
                               shading='auto', zorder=1)
            fig.colorbar(im, ax=ax, label='Potential V')

        self.draw_lines(ax, lines)
        self.draw_charges(ax, charges)
        self._lab_axes(ax, bounds)
        ax.set_title(title or f'Field lines ({len(lines)} traced)')

        return fig

    def plot_vector_field(self,
                          grid_data: Dict[str, np.ndarray],
                          charges: Sequence[PointCharge] = (),
                          bounds: Bounds = (0.0, 100.0, 0.0, 100.0),
                          subsample: int = 2) -> plt.Figure:
        """
        Plot field direction arrows coloured by log |E|.

        Args:
            grid_data: Output of FieldGrid.evaluate
            charges: Charges to overlay
            bounds: Visible lab rectangle
            subsample: Subsampling factor for arrows

        Returns:
            Matplotlib figure
        """
        X = grid_data['X'][::subsample, ::subsample]
        Y = grid_data['Y'][::subsample, ::subsample]
        Ex = grid_data['Ex'][::subsample, ::subsample]
        Ey = grid_data['Ey'][::subsample, ::subsample]
        magnitude = np.hypot(Ex, Ey)

        with np.errstate(divide='ignore', invalid='ignore'):
            ux = np.where(magnitude > 0, Ex / magnitude, 0.0)
            uy = np.where(magnitude > 0, Ey / magnitude, 0.0)
            shade = np.log10(np.where(magnitude > 0, magnitude, np.nan))

        fig, ax = plt.subplots(figsize=self.config.figsize)
        quiver = ax.quiver(X, Y, ux, uy, shade, cmap='viridis', pivot='mid', zorder=2)
        fig.colorbar(quiver, ax=ax, label='log10 |E|')

        self.draw_charges(ax, charges)
        self._lab_axes(ax, bounds)
        ax.set_title('Field direction')

        return fig


class ApplicationPlotter(BasePlotter):
    """Time series of the electrostatics application models."""

    def plot_history(self,
                     histories: Dict[str, List[float]],
                     discharges: Optional[Dict[str, List[int]]] = None,
                     tick_seconds: float = 0.05) -> plt.Figure:
        """
        Plot charge level against time, one panel per application.

        Args:
            histories: Application name -> charge level per tick
            discharges: Application name -> ticks where a discharge happened
            tick_seconds: Duration of one tick

        Returns:
            Matplotlib figure
        """
        discharges = discharges or {}
        fig, axes = plt.subplots(len(histories), 1, figsize=self.config.figsize,
                                 sharex=True, squeeze=False)

        for ax, (name, values) in zip(axes[:, 0], histories.items()):
            t = np.arange(len(values)) * tick_seconds
            ax.plot(t, values, linewidth=1.5)
            for tick in discharges.get(name, []):
                ax.axvline(tick * tick_seconds, color='orange', alpha=0.6, linewidth=1.0)
            ax.set_ylabel(name)
            ax.grid(True, alpha=0.3)

        axes[-1, 0].set_xlabel('Time (s)')
        fig.tight_layout()
        return fig
