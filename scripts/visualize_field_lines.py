"""
Render the configured charge scene: field lines over a potential map,
plus a field-direction plot.
"""

import sys
import argparse
import logging
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import load_config, get_config
from fieldlab.physics import ElectrostaticFieldEngine, FieldGrid, TraceConfig
from fieldlab.data import ChargeScene, probe_reading, probe_options
from fieldlab.utils.plotting import FieldLinePlotter, PlotConfig

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Plot field lines of the configured charge scene')
    parser.add_argument('--output', type=str, default=None, help='Output directory')
    parser.add_argument('--resolution', type=int, nargs=2, default=None,
                        help='Grid resolution for the potential map (nx ny)')
    parser.add_argument('--show', action='store_true', help='Also open an interactive window')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = load_config()
    engine = ElectrostaticFieldEngine(get_config('engine.coupling_constant'),
                                      get_config('engine.singularity_radius'))
    trace_config = TraceConfig.from_dict(config['tracing'])
    scene = ChargeScene.from_config(get_config('scene.charges', []))
    logger.info(f"Scene has {len(scene)} charges")

    lines = engine.trace_field_lines(scene.charges, trace_config)
    logger.info(f"Traced {len(lines)} field lines")

    probe = get_config('scene.probe', {})
    sample = engine.sample_field((probe.get('x', 50.0), probe.get('y', 50.0)), scene.charges)
    reading = probe_reading(sample, **probe_options(probe))
    logger.info(f"Probe at ({probe.get('x', 50.0)}, {probe.get('y', 50.0)}): "
                f"{reading.field_label}, {reading.potential_label}")

    grid = FieldGrid(engine.coupling_constant, engine.singularity_radius, device=config['device'])
    resolution = tuple(args.resolution or get_config('grid.resolution', [41, 41]))
    grid_data = grid.evaluate(trace_config.bounds, resolution, scene.charges)

    plotter = FieldLinePlotter(PlotConfig.from_dict(get_config('plotting', {})))
    output_dir = args.output or get_config('plotting.output_dir', 'plots')

    fig = plotter.plot_scene(scene.charges, lines, trace_config.bounds, grid_data)
    plotter.save_figure(fig, 'field_lines', output_dir)

    fig = plotter.plot_vector_field(grid_data, scene.charges, trace_config.bounds)
    plotter.save_figure(fig, 'field_vectors', output_dir)

    if args.show:
        import matplotlib.pyplot as plt
        plt.show()


if __name__ == "__main__":
    main()
