"""Configuration models — every reliability input type."""

from outage_simulator.config.generator import GeneratorFleet
from outage_simulator.config.storage import BatteryConfig, HydrogenConfig
from outage_simulator.config.pv import PVConfig
from outage_simulator.config.scenario import ReliabilityScenario, SimulationConfig

__all__ = [
    "GeneratorFleet",
    "BatteryConfig",
    "HydrogenConfig",
    "PVConfig",
    "SimulationConfig",
    "ReliabilityScenario",
]
