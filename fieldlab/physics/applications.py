"""
Everyday electrostatics demonstrations advanced one tick at a time.

Each model is a small frozen state plus a pure ``step`` that returns the
next state and whether a discharge happened on that tick. Callers advance
them on a fixed timer (the lab uses 50 ms) and own the resulting state.
Random draws come from an injected numpy Generator so runs are repeatable.
"""

import numpy as np
from dataclasses import dataclass, replace
from typing import Optional, Tuple

TICK_SECONDS = 0.05


@dataclass(frozen=True)
class Discharge:
    """A spark or strike, located in lab units."""
    x: float
    y: float


@dataclass(frozen=True)
class VanDeGraaffState:
    """
    Van de Graaff generator with a discharge wand.

    Attributes:
        dome_voltage: Dome charge level, 0 to 100
        belt_on: Whether the belt is charging the dome
        wand_distance: Gap between dome and wand; larger gaps need more voltage
    """
    dome_voltage: float = 0.0
    belt_on: bool = False
    wand_distance: float = 50.0

    charge_rate: float = 0.5
    leak_rate: float = 0.2
    max_voltage: float = 100.0

    @property
    def breakdown_voltage(self) -> float:
        return self.wand_distance * 1.5 + 10.0

    def step(self, rng: np.random.Generator) -> Tuple["VanDeGraaffState", Optional[Discharge]]:
        """
        Advance one tick.

        The spark test uses the voltage before this tick's charging, and a
        spark halves the dome voltage.
        """
        if self.belt_on:
            voltage = min(self.max_voltage, self.dome_voltage + self.charge_rate)
        else:
            voltage = max(0.0, self.dome_voltage - self.leak_rate)

        spark = None
        if self.dome_voltage > self.breakdown_voltage:
            spark = Discharge(x=50.0 + rng.uniform(0.0, 10.0), y=50.0)
            voltage *= 0.5

        return replace(self, dome_voltage=voltage), spark


@dataclass(frozen=True)
class LightningState:
    """
    Charged storm cloud over a town, with an optional lightning rod.

    Attributes:
        cloud_position: Horizontal cloud position in lab units
        cloud_charge: Accumulated charge, 0 to 120
        has_rod: Whether a lightning rod is installed on the tall building
    """
    cloud_position: float = 50.0
    cloud_charge: float = 0.0
    has_rod: bool = False

    charge_rate: float = 0.2
    max_charge: float = 120.0
    strike_chance: float = 0.05
    rod_position: float = 50.0
    ground_level: float = 80.0

    @property
    def strike_threshold(self) -> float:
        # A rod lets charge build a little further before striking
        return 90.0 if self.has_rod else 80.0

    def step(self, rng: np.random.Generator) -> Tuple["LightningState", Optional[Discharge]]:
        """Advance one tick; a strike drains the cloud completely."""
        charge = min(self.max_charge, self.cloud_charge + self.charge_rate)

        if self.cloud_charge > self.strike_threshold and rng.random() > 1.0 - self.strike_chance:
            x = self.rod_position if self.has_rod else self.cloud_position
            return replace(self, cloud_charge=0.0), Discharge(x=x, y=self.ground_level)

        return replace(self, cloud_charge=charge), None


@dataclass(frozen=True)
class FuelTruckState:
    """
    Fuel tanker charging by friction as it drives.

    Attributes:
        speed: Driving speed; charge builds proportionally
        charge: Static charge on the tank, 0 to 100
        grounded: Whether the grounding chain touches the road
    """
    speed: float = 30.0
    charge: float = 0.0
    grounded: bool = False

    charge_per_speed: float = 0.1
    max_charge: float = 100.0
    danger_level: float = 90.0
    spark_chance: float = 0.1

    @property
    def is_dangerous(self) -> bool:
        return self.charge > self.danger_level and not self.grounded

    def step(self, rng: np.random.Generator) -> Tuple["FuelTruckState", Optional[Discharge]]:
        """Advance one tick; grounding drains the tank immediately."""
        charge = self.charge
        if self.speed > 0 and not self.grounded:
            charge = min(self.max_charge, charge + self.speed * self.charge_per_speed)
        if self.grounded:
            charge = 0.0

        spark = None
        if self.is_dangerous and rng.random() > 1.0 - self.spark_chance:
            spark = Discharge(x=50.0, y=50.0)

        return replace(self, charge=charge), spark


def run(state, ticks: int, rng: Optional[np.random.Generator] = None):
    """
    Advance any application model for ``ticks`` ticks.

    Returns:
        (final_state, discharges) where discharges lists (tick, Discharge)
    """
    rng = rng if rng is not None else np.random.default_rng()
    discharges = []
    for tick in range(max(0, ticks)):
        state, discharge = state.step(rng)
        if discharge is not None:
            discharges.append((tick, discharge))
    return state, discharges
