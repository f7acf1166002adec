"""
Metrics for checking the electrostatic field engine.

Provides physics sanity metrics (superposition, symmetry, E = -∇V),
agreement between the scalar engine and the batched grid, and field-line
trace statistics.
"""

import json
import math
import warnings
import torch
import numpy as np
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence

from ..physics.charges import FieldLine, PointCharge, TraceStop
from ..physics.electrostatics import ElectrostaticFieldEngine
from ..physics.field_grid import FieldGrid


@dataclass
class MetricResult:
    """Container for metric evaluation results."""
    name: str
    value: float
    std: Optional[float] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    is_converged: Optional[bool] = None
    threshold: Optional[float] = None


class BaseMetric(ABC):
    """Abstract base class for field metrics."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def compute(self, **kwargs) -> Dict[str, MetricResult]:
        """Compute the metric values."""
        pass


class SuperpositionMetrics(BaseMetric):
    """Field of a union of charge sets equals the sum of the parts."""

    def __init__(self, engine: Optional[ElectrostaticFieldEngine] = None, tolerance: float = 1e-9):
        super().__init__("superposition")
        self.engine = engine or ElectrostaticFieldEngine()
        self.tolerance = tolerance

    def compute(self,
                points: Sequence,
                charges_a: Sequence[PointCharge],
                charges_b: Sequence[PointCharge],
                **kwargs) -> Dict[str, MetricResult]:
        """
        Largest deviation from superposition over ``points``.

        Args:
            points: Query points, none within the singularity radius of a charge
            charges_a: First charge set
            charges_b: Second charge set

        Returns:
            Dictionary with the max absolute residual of Ex, Ey and V
        """
        union = list(charges_a) + list(charges_b)
        residuals = {'Ex': 0.0, 'Ey': 0.0, 'V': 0.0}

        for point in points:
            point = (float(point[0]), float(point[1]))
            whole = self.engine.sample_field(point, union)
            part_a = self.engine.sample_field(point, charges_a)
            part_b = self.engine.sample_field(point, charges_b)
            scale = max(1.0, whole.magnitude, abs(whole.potential))
            residuals['Ex'] = max(residuals['Ex'], abs(whole.ex - part_a.ex - part_b.ex) / scale)
            residuals['Ey'] = max(residuals['Ey'], abs(whole.ey - part_a.ey - part_b.ey) / scale)
            residuals['V'] = max(residuals['V'], abs(whole.potential - part_a.potential - part_b.potential) / scale)

        results = {}
        for component, value in residuals.items():
            results[f'{component}_residual'] = MetricResult(
                name=f'superposition_{component}',
                value=value,
                unit='relative',
                description=f'Max relative superposition residual in {component}',
                is_converged=value <= self.tolerance,
                threshold=self.tolerance
            )
        return results


class SymmetryMetrics(BaseMetric):
    """Potential vanishes midway between equal and opposite charges."""

    def __init__(self, engine: Optional[ElectrostaticFieldEngine] = None, tolerance: float = 1e-9):
        super().__init__("symmetry")
        self.engine = engine or ElectrostaticFieldEngine()
        self.tolerance = tolerance

    def compute(self,
                positive: PointCharge,
                negative: PointCharge,
                **kwargs) -> Dict[str, MetricResult]:
        """
        Args:
            positive: Charge +q
            negative: Charge -q at another position

        Returns:
            Dictionary with the midpoint potential and transverse field
        """
        midpoint = ((positive.x + negative.x) / 2.0, (positive.y + negative.y) / 2.0)
        sample = self.engine.sample_field(midpoint, [positive, negative])

        # Field component perpendicular to the axis joining the charges
        axis = (negative.x - positive.x, negative.y - positive.y)
        length = math.hypot(*axis) or 1.0
        transverse = (sample.ex * -axis[1] + sample.ey * axis[0]) / length

        return {
            'midpoint_potential': MetricResult(
                name='midpoint_potential',
                value=abs(sample.potential),
                unit='V',
                description='|V| at the midpoint of a +q/-q pair',
                is_converged=abs(sample.potential) <= self.tolerance,
                threshold=self.tolerance
            ),
            'transverse_field': MetricResult(
                name='midpoint_transverse_field',
                value=abs(transverse),
                unit='N/C',
                description='Field perpendicular to the charge axis at the midpoint',
                is_converged=abs(transverse) <= self.tolerance,
                threshold=self.tolerance
            )
        }


class GradientConsistencyMetrics(BaseMetric):
    """Checks E = -∇V on a set of query points via autograd."""

    def __init__(self, grid: Optional[FieldGrid] = None, tolerance: float = 1e-6):
        super().__init__("gradient_consistency")
        self.grid = grid or FieldGrid()
        self.tolerance = tolerance

    def compute(self,
                coords: torch.Tensor,
                charges: Sequence[PointCharge],
                **kwargs) -> Dict[str, MetricResult]:
        residual = self.grid.potential_gradient_residual(coords, charges)
        field_scale = torch.max(self.grid.magnitude(coords, charges))
        field_scale = max(1.0, float(field_scale))

        max_residual = float(torch.max(torch.norm(residual, dim=-1))) / field_scale
        mean_residual = float(torch.mean(torch.norm(residual, dim=-1))) / field_scale

        return {
            'max_residual': MetricResult(
                name='gradient_max_residual',
                value=max_residual,
                unit='relative',
                description='Max |E + ∇V| relative to the largest |E|',
                is_converged=max_residual <= self.tolerance,
                threshold=self.tolerance
            ),
            'mean_residual': MetricResult(
                name='gradient_mean_residual',
                value=mean_residual,
                unit='relative',
                description='Mean |E + ∇V| relative to the largest |E|'
            )
        }


class EngineAgreementMetrics(BaseMetric):
    """Agreement between the scalar engine and the batched grid."""

    def __init__(self,
                 engine: Optional[ElectrostaticFieldEngine] = None,
                 grid: Optional[FieldGrid] = None):
        super().__init__("engine_agreement")
        self.engine = engine or ElectrostaticFieldEngine()
        self.grid = grid or FieldGrid(self.engine.coupling_constant, self.engine.singularity_radius)

    def compute(self,
                coords: torch.Tensor,
                charges: Sequence[PointCharge],
                **kwargs) -> Dict[str, MetricResult]:
        E_grid = self.grid.field(coords, charges).cpu().numpy()
        V_grid = self.grid.potential(coords, charges).cpu().numpy()

        samples = [self.engine.sample_field((float(x), float(y)), charges)
                   for x, y in coords.cpu().numpy()]
        E_engine = np.array([[s.ex, s.ey] for s in samples]).reshape(-1, 2)
        V_engine = np.array([s.potential for s in samples])

        E_error = np.linalg.norm(E_grid - E_engine, axis=-1)
        ref_magnitude = np.linalg.norm(E_engine, axis=-1)
        relative_error = float(np.mean(E_error / (ref_magnitude + 1e-10))) if len(samples) else 0.0

        return {
            'field_mae': MetricResult(
                name='field_mean_absolute_error',
                value=float(np.mean(E_error)) if len(samples) else 0.0,
                unit='N/C',
                description='Mean |E_grid - E_engine|'
            ),
            'field_relative_error': MetricResult(
                name='field_relative_error',
                value=relative_error,
                unit='dimensionless',
                description='Mean relative field error'
            ),
            'potential_mae': MetricResult(
                name='potential_mean_absolute_error',
                value=float(np.mean(np.abs(V_grid - V_engine))) if len(samples) else 0.0,
                unit='V',
                description='Mean |V_grid - V_engine|'
            )
        }


class TraceMetrics(BaseMetric):
    """Statistics over a set of traced field lines."""

    def __init__(self):
        super().__init__("trace")

    def compute(self, lines: Sequence[FieldLine], **kwargs) -> Dict[str, MetricResult]:
        lengths = np.array([len(line) for line in lines], dtype=float)
        stops = Counter(line.stop_reason for line in lines)

        results = {
            'line_count': MetricResult(
                name='line_count',
                value=float(len(lines)),
                unit='lines',
                description='Number of traced field lines'
            ),
            'mean_points': MetricResult(
                name='mean_points',
                value=float(lengths.mean()) if len(lengths) else 0.0,
                std=float(lengths.std()) if len(lengths) else 0.0,
                unit='points',
                description='Mean polyline length'
            )
        }
        for reason in TraceStop:
            fraction = stops.get(reason, 0) / len(lines) if lines else 0.0
            results[f'stopped_{reason.value}'] = MetricResult(
                name=f'stopped_{reason.value}',
                value=fraction,
                unit='fraction',
                description=f'Fraction of lines ending with {reason.value}'
            )
        return results

    @staticmethod
    def lines_per_charge(lines: Sequence[FieldLine]) -> Dict:
        return dict(Counter(line.origin_charge for line in lines))


class MetricsCollector:
    """Centralized collector for all field engine metrics."""

    def __init__(self,
                 engine: Optional[ElectrostaticFieldEngine] = None,
                 device: str = 'cpu'):
        self.engine = engine or ElectrostaticFieldEngine()
        self.grid = FieldGrid(self.engine.coupling_constant, self.engine.singularity_radius,
                              device=device)

        self.metrics = {
            'superposition': SuperpositionMetrics(self.engine),
            'symmetry': SymmetryMetrics(self.engine),
            'gradient': GradientConsistencyMetrics(self.grid),
            'agreement': EngineAgreementMetrics(self.engine, self.grid),
            'trace': TraceMetrics()
        }

        self.all_results = {}

    def evaluate_all(self,
                     charges: Sequence[PointCharge],
                     coords: torch.Tensor,
                     lines: Optional[Sequence[FieldLine]] = None) -> Dict[str, Dict[str, MetricResult]]:
        """
        Evaluate every metric that applies to the scene.

        A metric that fails is reported with a warning and left out; the
        others still run.

        Args:
            charges: Charges of the scene
            coords: Query points of shape (N, 2)
            lines: Traced field lines, if available

        Returns:
            Nested dictionary of metric results
        """
        charges = list(charges)
        results = {}
        far_points = self._far_points(coords, charges)

        runs = {
            'gradient': lambda: self.metrics['gradient'].compute(coords=coords, charges=charges),
            'agreement': lambda: self.metrics['agreement'].compute(coords=coords, charges=charges),
        }
        if len(charges) >= 2:
            half = len(charges) // 2
            runs['superposition'] = lambda: self.metrics['superposition'].compute(
                points=far_points, charges_a=charges[:half], charges_b=charges[half:])
        pair = self._opposite_pair(charges)
        if pair is not None:
            runs['symmetry'] = lambda: self.metrics['symmetry'].compute(positive=pair[0], negative=pair[1])
        if lines is not None:
            runs['trace'] = lambda: self.metrics['trace'].compute(lines=lines)

        for name, run in runs.items():
            try:
                results[name] = run()
            except (RuntimeError, ValueError, ZeroDivisionError) as e:
                warnings.warn(f"{name} metrics failed: {e}")

        self.all_results = results
        return results

    def _far_points(self, coords: torch.Tensor, charges: List[PointCharge]) -> np.ndarray:
        """Query points outside every charge's singularity radius."""
        points = coords.detach().cpu().numpy()
        if not charges:
            return points
        positions = np.array([[c.x, c.y] for c in charges])
        distances = np.linalg.norm(points[:, None, :] - positions[None, :, :], axis=-1)
        return points[np.all(distances >= self.engine.singularity_radius, axis=1)]

    @staticmethod
    def _opposite_pair(charges: Sequence[PointCharge]):
        for positive in charges:
            for negative in charges:
                if positive.magnitude > 0 and negative.magnitude == -positive.magnitude:
                    return positive, negative
        return None

    def get_summary_report(self) -> str:
        """Generate a summary report of the last evaluation."""
        if not self.all_results:
            return "No metrics available yet."

        report = ["=== ELECTROSTATIC FIELD METRICS SUMMARY ===", ""]
        for category, category_results in self.all_results.items():
            report.append(f"{category}:")
            for name, result in category_results.items():
                status = ""
                if result.is_converged is not None:
                    status = " [ok]" if result.is_converged else " [FAIL]"
                report.append(f"  {name}: {result.value:.3e} {result.unit or ''}{status}")
            report.append("")

        return "\n".join(report)

    def save_metrics(self, filepath: str):
        """Save the last evaluation to a JSON file."""
        serializable = {
            category: {name: asdict(result) for name, result in category_results.items()}
            for category, category_results in self.all_results.items()
        }

        with open(filepath, 'w') as f:
            json.dump(serializable, f, indent=2)
