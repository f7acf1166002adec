"""
Electrostatic field lab.

Point-charge field, potential and field-line computation for the
Electricity lab, with tooling to visualise and check the results.
"""

from .physics.charges import (
    PointCharge,
    FieldSample,
    FieldLine,
    LineDirection,
    TraceStop,
    TraceConfig
)
from .physics.electrostatics import ElectrostaticFieldEngine, sample_field, trace_field_lines

__all__ = [
    'PointCharge',
    'FieldSample',
    'FieldLine',
    'LineDirection',
    'TraceStop',
    'TraceConfig',
    'ElectrostaticFieldEngine',
    'sample_field',
    'trace_field_lines'
]

__version__ = '0.1.0'
