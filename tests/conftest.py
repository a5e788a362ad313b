"""Shared test fixtures — small systems with hand-calculable survival."""

from __future__ import annotations

import numpy as np
import pytest

from outage_simulator.config import GeneratorFleet, ReliabilityScenario, SimulationConfig
from outage_simulator.engine.derived import StorageInputs


@pytest.fixture
def loads() -> list[float]:
    """Net critical load over four time steps (kW)."""
    return [1.0, 2.0, 2.0, 1.0]


@pytest.fixture
def two_unit_fleet() -> GeneratorFleet:
    """Two 1 kW units, always start, fail with p = 1/5 per step."""
    return GeneratorFleet(
        num_generators=[2],
        generator_size_kw=[1.0],
        operational_availability=[1.0],
        failure_to_start=[0.0],
        mean_time_to_failure=[5.0],
    )


@pytest.fixture
def small_battery() -> StorageInputs:
    """2 kWh / 1 kW lossless battery in 3 bins (1 kWh each), half full at every start."""
    return StorageInputs(
        size_kwh=2.0,
        charge_kw=1.0,
        discharge_kw=1.0,
        charge_efficiency=1.0,
        discharge_efficiency=1.0,
        starting_soc_kwh=np.ones(4),
        num_bins=3,
    )


@pytest.fixture
def mixed_fleet() -> GeneratorFleet:
    """Two generator types with imperfect availability."""
    return GeneratorFleet(
        num_generators=[2, 1],
        generator_size_kw=[250.0, 300.0],
        operational_availability=[0.99, 0.95],
        failure_to_start=[0.01, 0.02],
        mean_time_to_failure=[50.0, 20.0],
    )


@pytest.fixture
def mixed_loads() -> np.ndarray:
    """Twelve steps of load that sometimes needs every unit."""
    return np.array([200, 450, 500, 520, 700, 790, 300, 260, 550, 800, 100, 0], dtype=float)


@pytest.fixture
def scenario(loads: list[float], two_unit_fleet: GeneratorFleet) -> ReliabilityScenario:
    return ReliabilityScenario(
        critical_loads_kw=loads,
        generator=two_unit_fleet,
        simulation=SimulationConfig(max_outage_duration=3, parallel=False),
    )
