"""Tests for engine/fuel.py — deterministic fuel-limited dispatch.

Covers:
  - Fuel runs out mid-outage; failure is permanent
  - Per-unit fuel limits and idle intercept
  - Dispatch order by fuel runway (ties keep type order)
  - Fuel used reported in the caller's type order
  - Battery discharge and charging from negative net load
  - Unlimited fuel → every start time survives
"""

from __future__ import annotations

import numpy as np
import pytest

from outage_simulator.config import GeneratorFleet
from outage_simulator.engine.derived import StorageInputs
from outage_simulator.engine.fuel import fuel_dispatch_order, fuel_use


@pytest.fixture
def thirsty_generator() -> GeneratorFleet:
    """One 10 kW unit burning 0.1 per kWh with 2.5 units of fuel."""
    return GeneratorFleet(
        num_generators=[1],
        generator_size_kw=[10.0],
        fuel_burn_rate_per_kwh=[0.1],
        fuel_limit=[2.5],
    )


class TestFuelLimit:

    def test_fuel_runs_out(self, thirsty_generator):
        # 1.0 fuel per step at 10 kW: steps 1-2 full, step 3 only 5 kW
        survival, fuel_used = fuel_use([10.0] * 4, thirsty_generator, 4)
        np.testing.assert_array_equal(survival, np.tile([1, 1, 0, 0], (4, 1)))
        np.testing.assert_allclose(fuel_used, 2.5)

    def test_failure_is_permanent(self, thirsty_generator):
        # load drops to zero after the fuel runs out but the outage already failed
        survival, _ = fuel_use([10.0, 10.0, 10.0, 0.0], thirsty_generator, 4)
        np.testing.assert_array_equal(survival[0], [1, 1, 0, 0])

    def test_partial_load_burns_less(self, thirsty_generator):
        survival, fuel_used = fuel_use([5.0, 5.0], thirsty_generator, 2)
        np.testing.assert_array_equal(survival, [[1, 1], [1, 1]])
        np.testing.assert_allclose(fuel_used, [[1.0], [1.0]])

    def test_per_generator_limit_scales_with_units(self):
        fleet = GeneratorFleet(
            num_generators=[2],
            generator_size_kw=[10.0],
            fuel_burn_rate_per_kwh=[0.1],
            fuel_limit=[1.5],
            fuel_limit_is_per_generator=[True],
        )
        # 3.0 fuel total, 20 kW burns 2.0 per step
        survival, fuel_used = fuel_use([20.0] * 3, fleet, 3)
        np.testing.assert_array_equal(survival[0], [1, 0, 0])
        assert fuel_used[0, 0] == pytest.approx(3.0)

    def test_idle_intercept_burns_fuel(self):
        fleet = GeneratorFleet(
            num_generators=[1],
            generator_size_kw=[10.0],
            fuel_burn_rate_per_kwh=[0.0],
            fuel_intercept_per_hr=[0.5],
            fuel_limit=[10.0],
        )
        _, fuel_used = fuel_use([0.0] * 3, fleet, 3)
        np.testing.assert_allclose(fuel_used[:, 0], 1.5)

    def test_sub_hourly_steps_burn_proportionally(self, thirsty_generator):
        # 4 steps per hour: 10 kW for 15 min burns 0.25
        survival, fuel_used = fuel_use([10.0] * 8, thirsty_generator, 8, time_steps_per_hour=4)
        np.testing.assert_array_equal(survival[0], [1] * 8)
        assert fuel_used[0, 0] == pytest.approx(2.0)

    def test_unlimited_fuel_always_survives(self, mixed_loads, mixed_fleet):
        survival, _ = fuel_use(mixed_loads, mixed_fleet, 10)
        assert (survival == 1).all()


class TestDispatchOrder:

    def test_greatest_runway_first(self):
        fleet = GeneratorFleet(
            num_generators=[1, 1],
            generator_size_kw=[10.0, 10.0],
            fuel_burn_rate_per_kwh=[0.1, 0.1],
            fuel_limit=[10.0, 100.0],
        )
        np.testing.assert_array_equal(fuel_dispatch_order(fleet), [1, 0])

    def test_ties_keep_type_order(self):
        fleet = GeneratorFleet(
            num_generators=[1, 1, 1],
            generator_size_kw=[10.0, 10.0, 10.0],
            fuel_limit=[5.0, 5.0, 5.0],
        )
        np.testing.assert_array_equal(fuel_dispatch_order(fleet), [0, 1, 2])

    def test_fuel_used_in_caller_order(self):
        fleet = GeneratorFleet(
            num_generators=[1, 1],
            generator_size_kw=[10.0, 10.0],
            fuel_burn_rate_per_kwh=[0.1, 0.1],
            fuel_limit=[10.0, 100.0],
        )
        # 10 kW load split by capacity: type 1 serves 5 kW, type 0 the other 5 kW
        _, fuel_used = fuel_use([10.0], fleet, 1)
        np.testing.assert_allclose(fuel_used[0], [0.5, 0.5])

    def test_type_without_fuel_leaves_shortfall(self):
        fleet = GeneratorFleet(
            num_generators=[1, 1],
            generator_size_kw=[10.0, 10.0],
            fuel_burn_rate_per_kwh=[0.1, 0.1],
            fuel_limit=[0.0, 100.0],
        )
        # type 1 dispatches first at half the load, type 0 has no fuel → shortfall
        survival, fuel_used = fuel_use([10.0], fleet, 1)
        assert survival[0, 0] == 0
        np.testing.assert_allclose(fuel_used[0], [0.0, 0.5])


class TestWithBattery:

    def test_battery_covers_load_until_empty(self):
        fleet = GeneratorFleet(num_generators=[0], generator_size_kw=[0.0])
        battery = StorageInputs(
            size_kwh=2.0, charge_kw=1.0, discharge_kw=1.0,
            starting_soc_kwh=np.full(3, 2.0),
        )
        survival, _ = fuel_use([1.0, 1.0, 1.0], fleet, 3, battery=battery)
        np.testing.assert_array_equal(survival, np.tile([1, 1, 0], (3, 1)))

    def test_negative_load_charges_battery(self):
        fleet = GeneratorFleet(num_generators=[0], generator_size_kw=[0.0])
        battery = StorageInputs(
            size_kwh=2.0, charge_kw=1.0, discharge_kw=1.0,
            starting_soc_kwh=np.ones(3),
        )
        # start 1 kWh, charge 1 kWh from PV surplus, then serve two 1 kW steps
        survival, _ = fuel_use([-1.0, 1.0, 1.0], fleet, 3, battery=battery)
        np.testing.assert_array_equal(survival[0], [1, 1, 1])

    def test_discharge_efficiency_drains_faster(self):
        fleet = GeneratorFleet(num_generators=[0], generator_size_kw=[0.0])
        battery = StorageInputs(
            size_kwh=2.0, charge_kw=2.0, discharge_kw=2.0,
            discharge_efficiency=0.5, starting_soc_kwh=np.full(2, 2.0),
        )
        # 1 kW delivered draws 2 kWh of charge
        survival, _ = fuel_use([1.0, 1.0], fleet, 2, battery=battery)
        np.testing.assert_array_equal(survival[0], [1, 0])
