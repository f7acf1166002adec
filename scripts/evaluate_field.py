"""
Evaluation script for the electrostatic field engine.

Runs the physics sanity metrics on the configured scene, logs a summary,
and exports the metrics as JSON and the traced lines as a CSV table.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import load_config, get_config
from fieldlab.physics import ElectrostaticFieldEngine, FieldGrid, TraceConfig
from fieldlab.data import ChargeScene
from fieldlab.utils.metrics import MetricsCollector, TraceMetrics


class FieldEvaluator:
    """Runs all field metrics on one charge scene."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or load_config()
        self.setup_logging()

        self.engine = ElectrostaticFieldEngine(
            get_config('engine.coupling_constant'),
            get_config('engine.singularity_radius')
        )
        self.trace_config = TraceConfig.from_dict(self.config['tracing'])
        self.scene = ChargeScene.from_config(get_config('scene.charges', []))
        self.collector = MetricsCollector(self.engine, device=self.config['device'])
        self.lines = []

    def setup_logging(self):
        """Setup logging."""
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )
        self.logger = logging.getLogger(__name__)

    def run(self, resolution) -> Dict:
        self.logger.info(f"Evaluating scene with {len(self.scene)} charges")

        self.lines = self.engine.trace_field_lines(self.scene.charges, self.trace_config)
        self.logger.info(f"Traced {len(self.lines)} lines, per charge: "
                         f"{TraceMetrics.lines_per_charge(self.lines)}")

        grid = FieldGrid(self.engine.coupling_constant, self.engine.singularity_radius,
                         device=self.config['device'])
        _, _, coords = grid.meshgrid(self.trace_config.bounds, resolution)

        results = self.collector.evaluate_all(self.scene.charges, coords, self.lines)
        for category, category_results in results.items():
            failed = [name for name, r in category_results.items() if r.is_converged is False]
            if failed:
                self.logger.warning(f"{category}: checks above tolerance: {failed}")
        return results

    def lines_table(self) -> pd.DataFrame:
        """One row per traced line."""
        rows = []
        for index, line in enumerate(self.lines):
            rows.append({
                'line': index,
                'origin_charge': line.origin_charge,
                'direction': line.direction.name.lower(),
                'points': len(line),
                'stop_reason': line.stop_reason.value,
                'start_x': line.start[0],
                'start_y': line.start[1],
                'end_x': line.end[0],
                'end_y': line.end[1],
            })
        return pd.DataFrame(rows)

    def export_results(self, output_dir: str):
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        self.collector.save_metrics(str(output_path / 'field_metrics.json'))
        self.lines_table().to_csv(output_path / 'field_lines.csv', index=False)
        self.logger.info(f"Results written to {output_path}")


def main():
    """Main evaluation function."""
    parser = argparse.ArgumentParser(description='Evaluate the electrostatic field engine')
    parser.add_argument('--output', type=str, default='./evaluation_results', help='Output directory')
    parser.add_argument('--resolution', type=int, nargs=2, default=[41, 41],
                        help='Grid resolution for field checks (nx ny)')
    args = parser.parse_args()

    evaluator = FieldEvaluator()
    evaluator.run(tuple(args.resolution))

    print()
    print(evaluator.collector.get_summary_report())

    evaluator.export_results(args.output)
    print(f"\nDetailed results saved to: {args.output}")


if __name__ == '__main__':
    main()
