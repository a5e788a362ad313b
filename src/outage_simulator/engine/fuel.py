"""Fuel-limited survival — deterministic, failure-free dispatch.

Assumes no equipment ever fails and tracks fuel depletion to bound
survival under finite fuel.  Each time step:

  net load < 0 and battery not full → surplus charges the battery
  otherwise:
    generator types in dispatch order each serve
      min(type capacity,
          share of remaining load ∝ capacity among types not yet dispatched,
          output the remaining fuel can sustain this step)
    battery covers what is left, within power and energy limits

A start time survives duration d only if load was fully met in every step
1..d; once failed it stays failed.

Dispatch order is by fuel runway, fuel_limit / full-load burn per hour,
greatest runway first.  Ties keep the caller's type order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from outage_simulator.config.generator import GeneratorFleet
from outage_simulator.engine.derived import StorageInputs

logger = logging.getLogger(__name__)

# Unmet load below this many decimals counts as met.
_LOAD_TOLERANCE_DIGITS = 5


def fuel_dispatch_order(fleet: GeneratorFleet) -> np.ndarray:
    """Generator type indices sorted by fuel runway, greatest first."""
    fuel_limit = _total_fuel_limit(fleet)
    num = np.asarray(fleet.num_generators, dtype=np.float64)
    capacity_kw = num * np.asarray(fleet.generator_size_kw, dtype=np.float64)
    burn_per_hr = (
        capacity_kw * np.asarray(fleet.fuel_burn_rate_per_kwh, dtype=np.float64)
        + np.asarray(fleet.fuel_intercept_per_hr, dtype=np.float64) * num
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        runway = fuel_limit / burn_per_hr
    runway = np.nan_to_num(runway, nan=0.0, posinf=np.inf)
    return np.argsort(-runway, kind="stable")


def _total_fuel_limit(fleet: GeneratorFleet) -> np.ndarray:
    """Fuel per generator type, expanding per-unit limits by unit count."""
    fuel_limit = np.asarray(fleet.fuel_limit, dtype=np.float64).copy()
    per_unit = np.asarray(fleet.fuel_limit_is_per_generator, dtype=bool)
    fuel_limit[per_unit] *= np.asarray(fleet.num_generators, dtype=np.float64)[per_unit]
    return fuel_limit


def fuel_use(
    net_critical_loads_kw: Sequence[float] | np.ndarray,
    fleet: GeneratorFleet,
    max_outage_duration: int,
    battery: StorageInputs | None = None,
    time_steps_per_hour: float = 1.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Fuel survival matrix and fuel burned.

    Returns
    -------
    survival : np.ndarray
        ``(T, D)`` of 0/1 — 1 where load was met from the start through
        that duration.
    fuel_used : np.ndarray
        ``(T, n_types)`` fuel burned over an outage of ``max_outage_duration``
        steps, in the fleet's generator-type order.
    """
    loads = np.asarray(net_critical_loads_kw, dtype=np.float64)
    battery = battery if battery is not None else StorageInputs.absent()
    tsph = time_steps_per_hour

    order = fuel_dispatch_order(fleet)
    num = np.asarray(fleet.num_generators, dtype=np.float64)[order]
    fuel_limit = _total_fuel_limit(fleet)[order]
    capacity_kw = (num * np.asarray(fleet.generator_size_kw, dtype=np.float64)[order]).tolist()
    burn_rate = np.asarray(fleet.fuel_burn_rate_per_kwh, dtype=np.float64)[order].tolist()
    intercept = (np.asarray(fleet.fuel_intercept_per_hr, dtype=np.float64)[order] * num).tolist()
    # Capacity of this type and every type dispatched after it.
    remaining_capacity = np.cumsum(capacity_kw[::-1])[::-1].tolist()
    n_types = len(capacity_kw)

    battery_included = battery.discharge_kw > 0
    battery_kw = battery.discharge_kw
    battery_kwh = battery.size_kwh
    charge_eff = battery.charge_efficiency
    discharge_eff = battery.discharge_efficiency

    t_max = len(loads)
    survival = np.zeros((t_max, max_outage_duration), dtype=np.int64)
    fuel_used = np.zeros((t_max, n_types))

    for t in range(t_max):
        fuel_remaining = fuel_limit.tolist()
        soc_kwh = float(battery.starting_soc_kwh[t]) if battery_included else 0.0
        alive = True

        for d in range(max_outage_duration):
            load_kw = loads[(t + d) % t_max]

            if load_kw < 0 and battery_included and soc_kwh < battery_kwh:
                soc_kwh += min(
                    battery_kwh - soc_kwh,
                    battery_kw / tsph * charge_eff,
                    -load_kw / tsph * charge_eff,
                )
            else:
                for i in range(n_types):
                    if remaining_capacity[i] == 0:
                        generation = 0.0
                    else:
                        fuel_limited_kw = max(
                            0.0, (fuel_remaining[i] * tsph - intercept[i]) / burn_rate[i]
                        ) if burn_rate[i] > 0 else float("inf")
                        generation = max(0.0, min(
                            capacity_kw[i],
                            load_kw * capacity_kw[i] / remaining_capacity[i],
                            fuel_limited_kw,
                        ))
                    fuel_remaining[i] = max(
                        0.0, fuel_remaining[i] - (generation * burn_rate[i] + intercept[i]) / tsph
                    )
                    load_kw -= generation

                if battery_included:
                    dispatch = max(0.0, min(load_kw, soc_kwh * tsph * discharge_eff, battery_kw))
                    load_kw -= dispatch
                    soc_kwh -= dispatch / (tsph * discharge_eff)

            if alive and round(load_kw, _LOAD_TOLERANCE_DIGITS) > 0:
                alive = False
            survival[t, d] = 1 if alive else 0

        # Back to the fleet's type order.
        fuel_used[t, order] = fuel_limit - np.asarray(fuel_remaining)

    logger.debug(
        "Fuel survival: %d start times, %d survive the full %d steps",
        t_max, int(survival[:, -1].sum()), max_outage_duration,
    )
    return survival, fuel_used
