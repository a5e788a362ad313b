"""Derived inputs — scenario → arrays the simulators consume.

Pure preparation, no simulation:
  - PV output is subtracted from critical load (net load) when PV runs
  - microgrid-only runs drop PV / storage that was not microgrid-upgraded
  - battery size becomes the *effective* size above the minimum SOC, and the
    starting SOC series is shifted down by the same amount
  - SOC bin counts default to 20 bins per hour of storage duration
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import numpy as np

from outage_simulator.config.generator import GeneratorFleet
from outage_simulator.config.scenario import ReliabilityScenario, SimulationConfig
from outage_simulator.engine.storage_bins import (
    StorageDimension,
    bin_storage_charge,
    num_storage_bins_default,
    storage_bin_size,
)
from outage_simulator.errors import NumericalWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageInputs:
    """One storage device as seen by the simulators."""

    size_kwh: float
    charge_kw: float
    discharge_kw: float
    charge_efficiency: float = 1.0
    discharge_efficiency: float = 1.0
    starting_soc_kwh: np.ndarray = field(default_factory=lambda: np.zeros(0))
    num_bins: int = 1

    @classmethod
    def absent(cls) -> StorageInputs:
        return cls(size_kwh=0.0, charge_kw=0.0, discharge_kw=0.0)

    @property
    def is_modeled(self) -> bool:
        return self.num_bins > 1 and self.discharge_kw > 0

    def dimension(self) -> StorageDimension:
        return StorageDimension(
            bin_size=storage_bin_size(self.size_kwh, self.num_bins),
            charge_kw=self.charge_kw,
            discharge_kw=self.discharge_kw,
            charge_efficiency=self.charge_efficiency,
            discharge_efficiency=self.discharge_efficiency,
        )

    def starting_bins(self, length: int) -> np.ndarray:
        """1-based SOC bin at every start time."""
        return bin_storage_charge(self.starting_soc_kwh, self.num_bins, self.size_kwh, length=length)


@dataclass(frozen=True)
class DerivedInputs:
    """Simulation-ready inputs computed once from a ``ReliabilityScenario``."""

    critical_loads_kw: np.ndarray
    net_critical_loads_kw: np.ndarray
    """Critical load minus PV output when PV runs, else the critical load."""

    pv_included: bool
    fleet: GeneratorFleet
    battery: StorageInputs
    hydrogen: StorageInputs
    battery_operational_availability: float
    pv_operational_availability: float
    pv_can_dispatch_without_battery: bool
    simulation: SimulationConfig


def _warn(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, NumericalWarning, stacklevel=3)


def _starting_fraction(series: list[float] | None, length: int, device: str) -> np.ndarray:
    if series is None:
        logger.warning(
            "No %s SOC series provided to reliability inputs. "
            "Assuming %s fully charged at start of outage.", device, device,
        )
        return np.ones(length)
    return np.asarray(series, dtype=np.float64)


def compute_derived_inputs(scenario: ReliabilityScenario) -> DerivedInputs:
    """Prepare simulator inputs from a validated scenario."""
    sim = scenario.simulation
    loads = np.asarray(scenario.critical_loads_kw, dtype=np.float64)
    t_max = len(loads)

    # ── PV ──────────────────────────────────────────────────────────────
    pv = scenario.pv
    pv_series = pv.output_series_kw()
    pv_included = pv_series is not None and (not sim.microgrid_only or pv.microgrid_upgraded)
    if pv_included:
        net_loads = loads - np.asarray(pv_series, dtype=np.float64)
    else:
        net_loads = loads.copy()

    # ── Battery ─────────────────────────────────────────────────────────
    b = scenario.battery
    if b.is_present and (not sim.microgrid_only or b.microgrid_upgraded):
        init_soc = _starting_fraction(b.starting_soc_series_fraction, t_max, "battery")
        starting_soc_kwh = init_soc * b.size_kwh

        # Outage dispatch only sees energy above the minimum SOC.
        minimum_soc_kwh = b.size_kwh * b.minimum_soc_fraction
        effective_kwh = b.size_kwh - minimum_soc_kwh
        if starting_soc_kwh.min() < minimum_soc_kwh:
            _warn("Some battery starting states of charge are less than the provided minimum state of charge.")
        starting_soc_kwh = starting_soc_kwh - minimum_soc_kwh

        battery = StorageInputs(
            size_kwh=effective_kwh,
            charge_kw=b.size_kw,
            discharge_kw=b.size_kw,
            charge_efficiency=b.charge_efficiency,
            discharge_efficiency=b.discharge_efficiency,
            starting_soc_kwh=starting_soc_kwh,
            num_bins=b.num_bins or num_storage_bins_default(b.size_kw, effective_kwh),
        )
    else:
        battery = StorageInputs.absent()

    # ── Hydrogen ────────────────────────────────────────────────────────
    h2 = scenario.hydrogen
    if h2.is_present and (not sim.microgrid_only or h2.microgrid_upgraded):
        init_soc = _starting_fraction(h2.starting_soc_series_fraction, t_max, "hydrogen storage")
        hydrogen = StorageInputs(
            size_kwh=h2.size_kwh,
            charge_kw=h2.electrolyzer_size_kw,
            discharge_kw=h2.fuelcell_size_kw,
            charge_efficiency=h2.charge_efficiency,
            discharge_efficiency=h2.discharge_efficiency,
            starting_soc_kwh=init_soc * h2.size_kwh,
            num_bins=h2.num_bins or num_storage_bins_default(h2.fuelcell_size_kw, h2.size_kwh),
        )
    else:
        hydrogen = StorageInputs.absent()

    return DerivedInputs(
        critical_loads_kw=loads,
        net_critical_loads_kw=net_loads,
        pv_included=pv_included,
        fleet=scenario.generator,
        battery=battery,
        hydrogen=hydrogen,
        battery_operational_availability=b.operational_availability,
        pv_operational_availability=pv.operational_availability,
        pv_can_dispatch_without_battery=pv.can_dispatch_without_battery,
        simulation=sim,
    )
