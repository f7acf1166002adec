"""
Electrostatic field engine for point charges in the normalized lab plane.

Implements the inverse-square law with a visualization-scale coupling
constant:

    E = k q r̂ / r²
    V = k q / r

Charges closer to the query point than the singularity radius are left
out of the sum, so sampling on top of a charge never blows up. Both
operations are pure functions of their inputs and keep no state between
calls.
"""

import math
from typing import Iterable, List, Optional, Sequence

from .charges import (
    FieldLine,
    FieldSample,
    LineDirection,
    Point,
    PointCharge,
    TraceConfig,
    TraceStop,
)
from ..data.seed_points import circle_seeds, line_count

DEFAULT_COUPLING_CONSTANT = 200.0
DEFAULT_SINGULARITY_RADIUS = 1.0


class ElectrostaticFieldEngine:
    """
    Field, potential and field-line computation for a set of point charges.

    The coupling constant is not the vacuum Coulomb constant: positions are in
    percent of the viewport, and k only sets how strong fields look on screen.
    """

    def __init__(self, coupling_constant: float = DEFAULT_COUPLING_CONSTANT,
                 singularity_radius: float = DEFAULT_SINGULARITY_RADIUS):
        """
        Initialise the engine.

        Args:
            coupling_constant: Positive scale factor k for field and potential
            singularity_radius: Distance below which a charge is skipped
        """
        self.coupling_constant = coupling_constant
        self.singularity_radius = singularity_radius

    def sample_field(self, point: Point, charges: Iterable[PointCharge]) -> FieldSample:
        """
        Superpose the field and potential of all charges at ``point``.

        Args:
            point: Query point (x, y)
            charges: Charges of the scene, order irrelevant

        Returns:
            FieldSample with Ex, Ey and V; zero when nothing contributes
        """
        px, py = point
        k = self.coupling_constant
        ex = ey = potential = 0.0

        for charge in charges:
            dx = px - charge.x
            dy = py - charge.y
            r_sq = dx * dx + dy * dy
            r = math.sqrt(r_sq)
            if r < self.singularity_radius or r == 0.0:
                continue
            strength = k * charge.magnitude / r_sq
            ex += strength * (dx / r)
            ey += strength * (dy / r)
            potential += k * charge.magnitude / r

        return FieldSample(ex=ex, ey=ey, potential=potential)

    def trace_field_lines(self, charges: Sequence[PointCharge],
                          config: Optional[TraceConfig] = None) -> List[FieldLine]:
        """
        Trace field lines from every charged seed circle.

        Positive charges trace along the field, negative charges against it,
        so lines run from positive charges toward negative ones.

        Args:
            charges: Charges of the scene
            config: Tracing options; out-of-range values are clamped

        Returns:
            One FieldLine per seed, in charge order then angle order
        """
        config = (config or TraceConfig()).clamped()
        charges = list(charges)
        lines = []

        for charge in charges:
            if charge.magnitude == 0:
                continue
            count = line_count(charge.magnitude, config.lines_per_unit_charge)
            direction = LineDirection.for_magnitude(charge.magnitude)
            for seed in circle_seeds(charge.position, count, config.spawn_radius):
                start = (float(seed[0]), float(seed[1]))
                lines.append(self._trace(start, charge, direction, charges, config))

        return lines

    def _trace(self, start: Point, origin: PointCharge, direction: LineDirection,
               charges: List[PointCharge], config: TraceConfig) -> FieldLine:
        line = FieldLine(origin_charge=origin.id, direction=direction, points=[start])
        x, y = start
        sign = direction.value

        for step in range(config.max_steps):
            if not config.contains((x, y)):
                line.stop_reason = TraceStop.LEFT_BOUNDS
                return line
            if step > config.grace_steps and self._near_charge(x, y, charges, config):
                line.stop_reason = TraceStop.HIT_CHARGE
                return line

            sample = self.sample_field((x, y), charges)
            magnitude = sample.magnitude
            if magnitude == 0:
                line.stop_reason = TraceStop.ZERO_FIELD
                return line

            x += (sample.ex / magnitude) * config.step_size * sign
            y += (sample.ey / magnitude) * config.step_size * sign
            line.points.append((x, y))

        line.stop_reason = TraceStop.MAX_STEPS
        return line

    @staticmethod
    def _near_charge(x: float, y: float, charges: Iterable[PointCharge],
                     config: TraceConfig) -> bool:
        for charge in charges:
            dx = x - charge.x
            dy = y - charge.y
            if dx * dx + dy * dy < config.hit_radius_squared:
                return True
        return False


_default_engine = ElectrostaticFieldEngine()


def sample_field(point: Point, charges: Iterable[PointCharge]) -> FieldSample:
    """Sample the field with the default engine."""
    return _default_engine.sample_field(point, charges)


def trace_field_lines(charges: Sequence[PointCharge],
                      config: Optional[TraceConfig] = None) -> List[FieldLine]:
    """Trace field lines with the default engine."""
    return _default_engine.trace_field_lines(charges, config)
