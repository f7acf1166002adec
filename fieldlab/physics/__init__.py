"""
Physics module for the electrostatic field lab.

This module contains the core electrostatics implementations:
- Point-charge data model and tracing options
- Scalar field engine (sampling and field-line tracing)
- Batched tensor evaluation on grids
- Tick models of everyday electrostatics applications
"""

from .charges import PointCharge, FieldSample, FieldLine, LineDirection, TraceStop, TraceConfig
from .electrostatics import ElectrostaticFieldEngine, sample_field, trace_field_lines
from .field_grid import FieldGrid
from .applications import VanDeGraaffState, LightningState, FuelTruckState, Discharge

__all__ = [
    'PointCharge', 'FieldSample', 'FieldLine', 'LineDirection', 'TraceStop', 'TraceConfig',
    'ElectrostaticFieldEngine', 'sample_field', 'trace_field_lines',
    'FieldGrid',
    'VanDeGraaffState', 'LightningState', 'FuelTruckState', 'Discharge'
]
