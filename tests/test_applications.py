"""
Unit tests for the electrostatics application tick models.
"""

import pytest
import numpy as np
from fieldlab.physics.applications import (
    VanDeGraaffState,
    LightningState,
    FuelTruckState,
    Discharge,
    run
)


class FixedDraws:
    """Stand-in for numpy's Generator returning a fixed draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self):
        return self.value

    def uniform(self, low=0.0, high=1.0, size=None):
        return low + (high - low) * self.value


class TestVanDeGraaff:
    """Test suite for the Van de Graaff generator."""

    def test_belt_charges_dome(self):
        state, spark = VanDeGraaffState(dome_voltage=10.0, belt_on=True).step(FixedDraws(0.5))
        assert state.dome_voltage == pytest.approx(10.5)
        assert spark is None

    def test_voltage_capped(self):
        state = VanDeGraaffState(dome_voltage=99.8, belt_on=True, wand_distance=100.0)
        state, _ = state.step(FixedDraws(0.5))
        assert state.dome_voltage == 100.0

    def test_leaks_when_belt_off(self):
        state, _ = VanDeGraaffState(dome_voltage=1.0).step(FixedDraws(0.5))
        assert state.dome_voltage == pytest.approx(0.8)
        state, _ = VanDeGraaffState(dome_voltage=0.1).step(FixedDraws(0.5))
        assert state.dome_voltage == 0.0

    def test_breakdown_voltage(self):
        assert VanDeGraaffState(wand_distance=40.0).breakdown_voltage == pytest.approx(70.0)

    def test_spark_halves_voltage(self):
        state = VanDeGraaffState(dome_voltage=90.0, belt_on=True, wand_distance=40.0)
        state, spark = state.step(FixedDraws(0.5))
        assert spark == Discharge(x=55.0, y=50.0)
        assert state.dome_voltage == pytest.approx(90.5 * 0.5)

    def test_no_spark_below_breakdown(self):
        state = VanDeGraaffState(dome_voltage=70.0, belt_on=True, wand_distance=40.0)
        _, spark = state.step(FixedDraws(0.5))
        assert spark is None

    def test_step_is_pure(self):
        state = VanDeGraaffState(dome_voltage=10.0, belt_on=True)
        state.step(FixedDraws(0.5))
        assert state.dome_voltage == 10.0


class TestLightning:
    """Test suite for the storm cloud and lightning rod."""

    def test_cloud_charges_up_and_caps(self):
        state, _ = LightningState(cloud_charge=5.0).step(FixedDraws(0.0))
        assert state.cloud_charge == pytest.approx(5.2)
        state, _ = LightningState(cloud_charge=119.9).step(FixedDraws(0.0))
        assert state.cloud_charge == 120.0

    def test_strike_under_cloud_without_rod(self):
        state = LightningState(cloud_position=30.0, cloud_charge=85.0)
        state, strike = state.step(FixedDraws(0.99))
        assert strike == Discharge(x=30.0, y=80.0)
        assert state.cloud_charge == 0.0

    def test_rod_raises_threshold(self):
        state = LightningState(cloud_position=30.0, cloud_charge=85.0, has_rod=True)
        state, strike = state.step(FixedDraws(0.99))
        assert strike is None
        assert state.cloud_charge == pytest.approx(85.2)

    def test_strike_lands_on_rod(self):
        state = LightningState(cloud_position=30.0, cloud_charge=95.0, has_rod=True)
        _, strike = state.step(FixedDraws(0.99))
        assert strike == Discharge(x=50.0, y=80.0)

    def test_unlucky_draw_holds_charge(self):
        state, strike = LightningState(cloud_charge=100.0).step(FixedDraws(0.5))
        assert strike is None
        assert state.cloud_charge == pytest.approx(100.2)


class TestFuelTruck:
    """Test suite for the fuel truck grounding demo."""

    def test_driving_builds_charge(self):
        state, _ = FuelTruckState(speed=30.0).step(FixedDraws(0.0))
        assert state.charge == pytest.approx(3.0)

    def test_parked_truck_holds_charge(self):
        state, _ = FuelTruckState(speed=0.0, charge=12.0).step(FixedDraws(0.0))
        assert state.charge == 12.0

    def test_charge_capped(self):
        state, _ = FuelTruckState(speed=30.0, charge=99.0).step(FixedDraws(0.0))
        assert state.charge == 100.0

    def test_grounding_drains(self):
        state, spark = FuelTruckState(speed=30.0, charge=95.0, grounded=True).step(FixedDraws(0.99))
        assert state.charge == 0.0
        assert spark is None

    def test_spark_when_dangerous(self):
        state = FuelTruckState(speed=30.0, charge=95.0)
        assert state.is_dangerous
        _, spark = state.step(FixedDraws(0.95))
        assert spark == Discharge(x=50.0, y=50.0)

    def test_no_spark_on_low_draw(self):
        _, spark = FuelTruckState(speed=30.0, charge=95.0).step(FixedDraws(0.5))
        assert spark is None


class TestRun:
    """Test suite for the multi-tick runner."""

    def test_run_is_reproducible(self):
        first = run(LightningState(), 2000, np.random.default_rng(3))
        second = run(LightningState(), 2000, np.random.default_rng(3))
        assert first == second

    def test_lightning_eventually_strikes(self):
        state, strikes = run(LightningState(), 2000, np.random.default_rng(3))
        assert strikes
        assert all(d.y == 80.0 for _, d in strikes)
        assert 0.0 <= state.cloud_charge <= 120.0

    def test_grounded_truck_never_sparks(self):
        state, sparks = run(FuelTruckState(grounded=True), 500, np.random.default_rng(0))
        assert sparks == []
        assert state.charge == 0.0

    def test_zero_ticks(self):
        state, discharges = run(VanDeGraaffState(dome_voltage=5.0), 0)
        assert state.dome_voltage == 5.0
        assert discharges == []


if __name__ == "__main__":
    pytest.main([__file__])
