"""Result models — simulation output contracts."""

from outage_simulator.models.results import ReliabilityRun, ReliabilitySummary

__all__ = [
    "ReliabilityRun",
    "ReliabilitySummary",
]
