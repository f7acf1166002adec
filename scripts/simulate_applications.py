"""
Run the electrostatics application models (Van de Graaff, lightning,
fuel truck) for a number of ticks and plot their charge levels.
"""

import sys
import argparse
import logging
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import load_config, get_config
from fieldlab.physics.applications import (
    VanDeGraaffState,
    LightningState,
    FuelTruckState,
    TICK_SECONDS
)
from fieldlab.utils.plotting import ApplicationPlotter, PlotConfig

logger = logging.getLogger(__name__)

LEVELS = {
    'van_de_graaff': lambda state: state.dome_voltage,
    'lightning': lambda state: state.cloud_charge,
    'fuel_truck': lambda state: state.charge,
}


def build_states(settings: dict) -> dict:
    return {
        'van_de_graaff': VanDeGraaffState(**settings.get('van_de_graaff', {})),
        'lightning': LightningState(**settings.get('lightning', {})),
        'fuel_truck': FuelTruckState(**settings.get('fuel_truck', {})),
    }


def simulate(states: dict, ticks: int, rng: np.random.Generator):
    """Advance every model together, recording levels and discharge ticks."""
    histories = {name: [] for name in states}
    discharges = {name: [] for name in states}

    for tick in range(ticks):
        for name, state in states.items():
            state, discharge = state.step(rng)
            states[name] = state
            histories[name].append(LEVELS[name](state))
            if discharge is not None:
                discharges[name].append(tick)

    return histories, discharges


def main():
    parser = argparse.ArgumentParser(description='Simulate the electrostatics applications')
    parser.add_argument('--ticks', type=int, default=None, help='Number of 50 ms ticks')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    parser.add_argument('--output', type=str, default=None, help='Output directory')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    load_config()
    settings = get_config('applications', {})
    ticks = args.ticks or int(settings.get('ticks', 400))
    seed = args.seed if args.seed is not None else settings.get('seed')
    rng = np.random.default_rng(seed)

    model_settings = {k: v for k, v in settings.items() if k in LEVELS}
    histories, discharges = simulate(build_states(model_settings), ticks, rng)

    for name, ticks_hit in discharges.items():
        logger.info(f"{name}: {len(ticks_hit)} discharges, final level {(histories[name] or [0.0])[-1]:.1f}")

    plotter = ApplicationPlotter(PlotConfig.from_dict(get_config('plotting', {})))
    fig = plotter.plot_history(histories, discharges, TICK_SECONDS)
    plotter.save_figure(fig, 'applications', args.output or get_config('plotting.output_dir', 'plots'))


if __name__ == "__main__":
    main()
