"""
Utilities module for the electrostatic field lab.

This module provides physics sanity metrics and plotting tools for the
field engine and the application models.
"""

from .metrics import (
    MetricResult,
    SuperpositionMetrics,
    SymmetryMetrics,
    GradientConsistencyMetrics,
    EngineAgreementMetrics,
    TraceMetrics,
    MetricsCollector
)

from .plotting import (
    PlotConfig,
    FieldLinePlotter,
    ApplicationPlotter
)

__all__ = [
    # Metrics
    'MetricResult',
    'SuperpositionMetrics',
    'SymmetryMetrics',
    'GradientConsistencyMetrics',
    'EngineAgreementMetrics',
    'TraceMetrics',
    'MetricsCollector',

    # Plotting
    'PlotConfig',
    'FieldLinePlotter',
    'ApplicationPlotter'
]
