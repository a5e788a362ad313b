"""Reliability orchestrator — system sub-scenarios, weighting, fuel limits.

At outage start the battery and PV may each be unavailable.  The run is
split into up to four system sub-scenarios, each simulated separately and
weighted by its probability:

  scenario         battery   PV    probability (battery a_b, PV a_p)
  gen_pv_battery   yes       yes   a_b · a_p
  gen_battery      yes       no    a_b · (1 − a_p)
  gen_pv           no        yes   (1 − a_b) · a_p        ← only if PV can run without battery
  gen              no        no    (1 − a_b) · (1 − a_p)  ← or (1 − a_b) when gen_pv is not allowed

Weights sum to 1.  Hydrogen storage, when present, is part of every
scenario.

The weighted matrix ignores fuel.  Fuel limits are applied afterwards from
a deterministic dispatch of the full system (``fuel_use``), and the two are
multiplied element-wise in the summary.

Entry point: ``run_reliability(scenario)``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from outage_simulator.config.scenario import ReliabilityScenario
from outage_simulator.engine.derived import DerivedInputs, StorageInputs, compute_derived_inputs
from outage_simulator.engine.fuel import fuel_use
from outage_simulator.engine.summary import process_reliability_results
from outage_simulator.engine.survival import survival_gen_only, survival_with_storage
from outage_simulator.models.results import ReliabilityRun

logger = logging.getLogger(__name__)

# Battery inverters below this rating are treated as absent.
MIN_BATTERY_KW = 0.1


@dataclass(frozen=True)
class SystemScenario:
    """One battery / PV availability combination."""

    name: str
    probability: float
    net_critical_loads_kw: np.ndarray
    battery: StorageInputs


# ═══════════════════════════════════════════════════════════════════════════
# Sub-scenario weighting
# ═══════════════════════════════════════════════════════════════════════════

def system_scenarios(derived: DerivedInputs) -> list[SystemScenario]:
    """Sub-scenarios with non-zero probability, in a fixed order."""
    battery_avail = derived.battery_operational_availability
    pv_avail = derived.pv_operational_availability
    has_battery = derived.battery.discharge_kw > 0
    has_pv = derived.pv_included

    probability = {"gen": 1.0, "gen_pv_battery": 0.0, "gen_battery": 0.0, "gen_pv": 0.0}
    if has_battery and has_pv:
        probability["gen_pv_battery"] = battery_avail * pv_avail
        probability["gen_battery"] = battery_avail * (1 - pv_avail)
        if derived.pv_can_dispatch_without_battery:
            probability["gen_pv"] = (1 - battery_avail) * pv_avail
            probability["gen"] = (1 - battery_avail) * (1 - pv_avail)
        else:
            probability["gen"] = 1 - battery_avail
    elif has_battery:
        probability["gen_battery"] = battery_avail
        probability["gen"] = 1 - battery_avail
    elif has_pv and derived.pv_can_dispatch_without_battery:
        probability["gen_pv"] = pv_avail
        probability["gen"] = 1 - pv_avail

    no_battery = StorageInputs.absent()
    systems = {
        "gen": (derived.critical_loads_kw, no_battery),
        "gen_pv_battery": (derived.net_critical_loads_kw, derived.battery),
        "gen_battery": (derived.critical_loads_kw, derived.battery),
        "gen_pv": (derived.net_critical_loads_kw, no_battery),
    }
    return [
        SystemScenario(name=name, probability=probability[name], net_critical_loads_kw=loads, battery=battery)
        for name, (loads, battery) in systems.items()
        if probability[name] != 0
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Simulation
# ═══════════════════════════════════════════════════════════════════════════

def backup_reliability_single_run(
    net_critical_loads_kw: np.ndarray,
    derived: DerivedInputs,
    battery: StorageInputs,
) -> np.ndarray:
    """Unweighted ``(T, D)`` survival matrix for one system sub-scenario."""
    sim = derived.simulation
    if battery.discharge_kw < MIN_BATTERY_KW and not derived.hydrogen.is_modeled:
        return survival_gen_only(
            net_critical_loads_kw,
            derived.fleet,
            sim.max_outage_duration,
            marginal_survival=sim.marginal_survival,
            parallel=sim.parallel,
            max_workers=sim.max_workers,
        )
    return survival_with_storage(
        net_critical_loads_kw,
        derived.fleet,
        sim.max_outage_duration,
        battery=battery if battery.discharge_kw >= MIN_BATTERY_KW else StorageInputs.absent(),
        hydrogen=derived.hydrogen,
        marginal_survival=sim.marginal_survival,
        time_steps_per_hour=sim.time_steps_per_hour,
        parallel=sim.parallel,
        max_workers=sim.max_workers,
    )


def return_backup_reliability(
    derived: DerivedInputs,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, dict[str, float]]:
    """Weighted unlimited-fuel survival, fuel survival and fuel used.

    Returns ``(results_no_fuel_limit, fuel_survival, fuel_used,
    scenario_probabilities)``.
    """
    sim = derived.simulation
    t_max = len(derived.critical_loads_kw)
    results_no_fuel_limit = np.zeros((t_max, sim.max_outage_duration))
    probabilities: dict[str, float] = {}

    for system in system_scenarios(derived):
        logger.debug("Simulating %s (probability %.6f)", system.name, system.probability)
        survival = backup_reliability_single_run(system.net_critical_loads_kw, derived, system.battery)
        results_no_fuel_limit += survival * system.probability
        probabilities[system.name] = system.probability

    fuel_survival, fuel_used = fuel_use(
        derived.net_critical_loads_kw,
        derived.fleet,
        sim.max_outage_duration,
        battery=derived.battery,
        time_steps_per_hour=sim.time_steps_per_hour,
    )
    return results_no_fuel_limit, fuel_survival, fuel_used, probabilities


# ═══════════════════════════════════════════════════════════════════════════
# Public entry point
# ═══════════════════════════════════════════════════════════════════════════

def run_reliability(scenario: ReliabilityScenario) -> ReliabilityRun:
    """Run the full backup reliability analysis for one scenario."""
    derived = compute_derived_inputs(scenario)
    logger.info(
        "Reliability run: %d start times, %d-step outages, %d generator type(s), "
        "battery %s, hydrogen %s, PV %s",
        len(derived.critical_loads_kw),
        derived.simulation.max_outage_duration,
        derived.fleet.num_types,
        "modeled" if derived.battery.discharge_kw > 0 else "absent",
        "modeled" if derived.hydrogen.is_modeled else "absent",
        "included" if derived.pv_included else "absent",
    )

    results_no_fuel_limit, fuel_survival, fuel_used, probabilities = return_backup_reliability(derived)
    summary = process_reliability_results(results_no_fuel_limit, fuel_survival, fuel_used)
    logger.info(
        "Reliability run complete: mean survival over full outage %.6f",
        summary.mean_cumulative_survival_final_time_step,
    )
    return ReliabilityRun(
        scenario_probabilities=probabilities,
        unlimited_fuel_survival=results_no_fuel_limit,
        fuel_survival=fuel_survival,
        fuel_used=fuel_used,
        summary=summary,
    )
