"""
Scene state and point placement for the electrostatic field lab.

This module provides the caller-owned charge scene, the sensor probe
readout, and seed/grid point generation for tracing and field maps.
"""

from .seed_points import line_count, circle_seeds, uniform_grid
from .scene import ChargeScene, ProbeReading, probe_reading, probe_options

__all__ = [
    'line_count',
    'circle_seeds',
    'uniform_grid',
    'ChargeScene',
    'ProbeReading',
    'probe_reading',
    'probe_options'
]
