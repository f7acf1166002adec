"""
Unit tests for the field engine metrics.
"""

import json
import pytest
import torch
from fieldlab.data.scene import ChargeScene
from fieldlab.physics import PointCharge, TraceConfig, trace_field_lines
from fieldlab.utils.metrics import (
    MetricsCollector,
    SymmetryMetrics,
    TraceMetrics,
    BaseMetric
)


class TestMetrics:
    """Test suite for the metric classes."""

    @pytest.fixture
    def charges(self):
        return ChargeScene.default().charges

    @pytest.fixture
    def coords(self):
        torch.manual_seed(0)
        return torch.rand(50, 2, dtype=torch.float64) * 100.0

    @pytest.fixture
    def collector(self):
        return MetricsCollector()

    def test_evaluate_all(self, collector, charges, coords):
        lines = trace_field_lines(charges)
        results = collector.evaluate_all(charges, coords, lines)

        assert set(results) == {'gradient', 'agreement', 'superposition', 'symmetry', 'trace'}
        assert results['symmetry']['midpoint_potential'].is_converged
        assert results['symmetry']['transverse_field'].is_converged
        assert results['gradient']['max_residual'].is_converged
        for result in results['superposition'].values():
            assert result.is_converged
        assert results['agreement']['field_mae'].value < 1e-9
        assert results['trace']['line_count'].value == 20.0

    def test_single_charge_skips_pair_metrics(self, collector, coords):
        results = collector.evaluate_all([PointCharge('solo', 50.0, 50.0, 2.0)], coords)
        assert 'superposition' not in results
        assert 'symmetry' not in results
        assert 'trace' not in results

    def test_symmetry_off_axis(self):
        positive = PointCharge('p', 20.0, 20.0, 3.0)
        negative = PointCharge('n', 60.0, 50.0, -3.0)
        results = SymmetryMetrics().compute(positive=positive, negative=negative)
        assert results['midpoint_potential'].value == pytest.approx(0.0, abs=1e-12)
        assert results['transverse_field'].value == pytest.approx(0.0, abs=1e-9)

    def test_trace_fractions(self, charges):
        lines = trace_field_lines(charges, TraceConfig(max_steps=10))
        results = TraceMetrics().compute(lines=lines)
        fractions = [r.value for name, r in results.items() if name.startswith('stopped_')]
        assert sum(fractions) == pytest.approx(1.0)
        assert TraceMetrics.lines_per_charge(lines) == {'1': 10, '2': 10}

    def test_trace_metrics_empty(self):
        results = TraceMetrics().compute(lines=[])
        assert results['line_count'].value == 0.0
        assert results['mean_points'].value == 0.0

    def test_summary_report(self, collector, charges, coords):
        assert collector.get_summary_report() == "No metrics available yet."
        collector.evaluate_all(charges, coords)
        report = collector.get_summary_report()
        assert report.startswith("=== ELECTROSTATIC FIELD METRICS SUMMARY ===")
        assert "symmetry:" in report

    def test_save_metrics(self, collector, charges, coords, tmp_path):
        collector.evaluate_all(charges, coords)
        path = tmp_path / "metrics.json"
        collector.save_metrics(str(path))
        saved = json.loads(path.read_text())
        assert saved['symmetry']['midpoint_potential']['unit'] == 'V'

    def test_collector_metrics_are_stateless(self, collector, charges, coords):
        """Metrics keep no per-run state; only the collector holds the last results."""
        for metric in collector.metrics.values():
            assert isinstance(metric, BaseMetric)
            assert vars(metric).keys() <= {'name', 'engine', 'grid', 'tolerance'}
        first = collector.evaluate_all(charges, coords)
        second = collector.evaluate_all(charges, coords)
        assert first == second
        assert collector.all_results is second


if __name__ == "__main__":
    pytest.main([__file__])
