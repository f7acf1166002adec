"""
Data model for the 2-D point-charge field engine.

Coordinates are in the normalized lab plane, where each axis runs from
0 to 100 (percentage of the viewport).
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Tuple, Union

Point = Tuple[float, float]
Bounds = Tuple[float, float, float, float]
ChargeId = Union[str, int]

# Step count used when an option is given as +inf
STEP_COUNT_CAP = 10_000


def _step_count(value, fallback: int) -> int:
    """Non-negative integer step count; NaN gives ``fallback``, +inf the cap."""
    value = float(value)
    if math.isnan(value):
        return fallback
    if math.isinf(value):
        return STEP_COUNT_CAP if value > 0 else 0
    return max(0, int(value))


class LineDirection(Enum):
    """Tracing direction of a field line relative to the local field."""
    OUTWARD = 1
    INWARD = -1

    @classmethod
    def for_magnitude(cls, magnitude: float) -> "LineDirection":
        return cls.OUTWARD if magnitude > 0 else cls.INWARD


class TraceStop(Enum):
    """Why a field-line trace ended."""
    LEFT_BOUNDS = "left_bounds"
    HIT_CHARGE = "hit_charge"
    ZERO_FIELD = "zero_field"
    MAX_STEPS = "max_steps"


@dataclass(frozen=True)
class PointCharge:
    """
    Idealized charge with no spatial extent.

    Attributes:
        id: Stable identifier, unique within a scene
        x: Horizontal position in lab units
        y: Vertical position in lab units
        magnitude: Signed charge; the sign sets the polarity
    """
    id: ChargeId
    x: float
    y: float
    magnitude: float

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def moved_to(self, position: Point) -> "PointCharge":
        return replace(self, x=position[0], y=position[1])


@dataclass(frozen=True)
class FieldSample:
    """Field vector and potential at a single query point."""
    ex: float = 0.0
    ey: float = 0.0
    potential: float = 0.0

    @property
    def magnitude(self) -> float:
        return math.hypot(self.ex, self.ey)

    @property
    def vector(self) -> Point:
        return (self.ex, self.ey)


@dataclass
class FieldLine:
    """Polyline traced along the field, starting next to its origin charge."""
    origin_charge: ChargeId
    direction: LineDirection
    points: List[Point] = field(default_factory=list)
    stop_reason: TraceStop = TraceStop.MAX_STEPS

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class TraceConfig:
    """
    Options for field-line tracing.

    Attributes:
        step_size: Distance moved per trace step
        max_steps: Upper bound on steps per line
        hit_radius_squared: Squared distance counted as reaching a charge
        bounds: (x_min, x_max, y_min, y_max) rectangle the trace must stay in
        lines_per_unit_charge: Lines spawned per unit of |magnitude|
        spawn_radius: Distance from the charge centre where traces begin
        grace_steps: Steps before the hit test applies, so a line does not
            stop at its own spawn point
    """
    step_size: float = 3.0
    max_steps: int = 500
    hit_radius_squared: float = 2.0
    bounds: Bounds = (0.0, 100.0, 0.0, 100.0)
    lines_per_unit_charge: float = 2.0
    spawn_radius: float = 2.0
    grace_steps: int = 5

    def clamped(self) -> "TraceConfig":
        """Return a copy with out-of-range options pulled back to safe values."""
        x_min, x_max, y_min, y_max = self.bounds
        return TraceConfig(
            step_size=max(0.0, self.step_size),
            max_steps=_step_count(self.max_steps, fallback=0),
            hit_radius_squared=max(0.0, self.hit_radius_squared),
            bounds=(min(x_min, x_max), max(x_min, x_max),
                    min(y_min, y_max), max(y_min, y_max)),
            lines_per_unit_charge=max(0.0, self.lines_per_unit_charge),
            spawn_radius=max(0.0, self.spawn_radius),
            grace_steps=_step_count(self.grace_steps, fallback=5),
        )

    def contains(self, point: Point) -> bool:
        x_min, x_max, y_min, y_max = self.bounds
        x, y = point
        # NaN compares False on both sides, so a NaN point never counts as outside
        return not (x < x_min or x > x_max or y < y_min or y > y_max)

    @classmethod
    def from_dict(cls, options: dict) -> "TraceConfig":
        """Build from a configuration section, ignoring unknown keys."""
        known = {name: options[name] for name in cls.__dataclass_fields__ if name in options}
        if 'bounds' in known:
            known['bounds'] = tuple(float(v) for v in known['bounds'])
        return cls(**known)
