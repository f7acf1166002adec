"""
Caller-side scene state for the field lab.

The field engine is stateless; the scene owns the charge list that gets
passed to it after every add, remove or drag, and the probe helpers turn
a FieldSample into what the sensor overlay shows.
"""

import itertools
import math
import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..physics.charges import ChargeId, FieldSample, Point, PointCharge


class ChargeScene:
    """
    Ordered, id-unique collection of point charges.

    Mutations replace the stored charges rather than editing them, so any
    snapshot previously handed to the engine stays valid.
    """

    def __init__(self, charges: Iterable[PointCharge] = (),
                 rng: Optional[np.random.Generator] = None):
        self._charges: List[PointCharge] = []
        self._rng = rng if rng is not None else np.random.default_rng()
        self._ids = itertools.count(1)
        for charge in charges:
            self._insert(charge)

    @classmethod
    def default(cls, rng: Optional[np.random.Generator] = None) -> "ChargeScene":
        """The lab's opening dipole: +5 on the left, -5 on the right."""
        return cls([
            PointCharge(id='1', x=35.0, y=50.0, magnitude=5.0),
            PointCharge(id='2', x=65.0, y=50.0, magnitude=-5.0),
        ], rng=rng)

    @classmethod
    def from_config(cls, entries: Iterable[dict],
                    rng: Optional[np.random.Generator] = None) -> "ChargeScene":
        """Build a scene from config entries with 'id', 'x', 'y' and 'q' keys."""
        return cls([
            PointCharge(id=entry['id'], x=float(entry['x']), y=float(entry['y']),
                        magnitude=float(entry['q']))
            for entry in entries
        ], rng=rng)

    def _insert(self, charge: PointCharge) -> None:
        if any(c.id == charge.id for c in self._charges):
            raise ValueError(f"Duplicate charge id: {charge.id!r}")
        self._charges.append(charge)

    def _index(self, charge_id: ChargeId) -> int:
        for i, charge in enumerate(self._charges):
            if charge.id == charge_id:
                return i
        raise KeyError(charge_id)

    def _next_id(self) -> str:
        taken = {str(c.id) for c in self._charges}
        while True:
            candidate = f"q{next(self._ids)}"
            if candidate not in taken:
                return candidate

    def add(self, magnitude: float, position: Optional[Point] = None,
            charge_id: Optional[ChargeId] = None) -> PointCharge:
        """
        Add a charge.

        Without a position the charge is dropped near the centre with a small
        random offset, so repeated adds do not stack exactly.

        Args:
            magnitude: Signed charge
            position: Optional (x, y) in lab units
            charge_id: Optional explicit id; generated when omitted

        Returns:
            The new charge

        Raises:
            ValueError: If ``charge_id`` is already in the scene
        """
        if position is None:
            offset = self._rng.uniform(0.0, 10.0, size=2)
            position = (50.0 + float(offset[0]), 50.0 + float(offset[1]))
        if charge_id is None:
            charge_id = self._next_id()

        charge = PointCharge(id=charge_id, x=position[0], y=position[1], magnitude=magnitude)
        self._insert(charge)
        return charge

    def remove(self, charge_id: ChargeId) -> PointCharge:
        """Remove and return a charge. Raises KeyError for unknown ids."""
        return self._charges.pop(self._index(charge_id))

    def move(self, charge_id: ChargeId, position: Point) -> PointCharge:
        """Move a charge (drag). Raises KeyError for unknown ids."""
        i = self._index(charge_id)
        self._charges[i] = self._charges[i].moved_to(position)
        return self._charges[i]

    def get(self, charge_id: ChargeId) -> PointCharge:
        return self._charges[self._index(charge_id)]

    @property
    def charges(self) -> Tuple[PointCharge, ...]:
        """Immutable snapshot for the engine."""
        return tuple(self._charges)

    def __len__(self) -> int:
        return len(self._charges)

    def __iter__(self):
        return iter(self.charges)

    def __contains__(self, charge_id) -> bool:
        return any(c.id == charge_id for c in self._charges)


@dataclass(frozen=True)
class ProbeReading:
    """What the sensor overlay displays for one field sample."""
    angle_degrees: float
    arrow_length: float
    arrow_visible: bool
    field_label: str
    potential_label: str


def probe_reading(sample: FieldSample, arrow_scale: float = 10.0,
                  max_arrow_length: float = 100.0, min_visible: float = 0.1) -> ProbeReading:
    """
    Convert a field sample into the sensor arrow and value labels.

    Args:
        sample: Field at the probe position
        arrow_scale: Arrow length per unit of |E|
        max_arrow_length: Arrow length cap
        min_visible: |E| at or below which the arrow is hidden

    Returns:
        ProbeReading
    """
    magnitude = sample.magnitude
    return ProbeReading(
        angle_degrees=math.degrees(math.atan2(sample.ey, sample.ex)),
        arrow_length=min(max_arrow_length, magnitude * arrow_scale),
        arrow_visible=magnitude > min_visible,
        field_label=f"E: {magnitude:.1f} N/C",
        potential_label=f"V: {sample.potential:.1f} V",
    )


def probe_options(section: dict) -> dict:
    """Keyword arguments for ``probe_reading`` from a ``scene.probe`` config section."""
    keys = ('arrow_scale', 'max_arrow_length', 'min_visible')
    return {key: float(section[key]) for key in keys if key in section}
