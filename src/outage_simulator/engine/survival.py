"""Outage survival simulation — joint generator / storage probability recursion.

For an outage starting at time step t, the engine tracks a joint
probability tensor over (generator state, battery SOC bin, H2 SOC bin).
Each duration step d = 1..D:

  1. h = (t + d − 1) mod T                    ← wraps around the year
  2. survival mask = max_generation ≥ net_load[h]
  3. tensor ← TransitionMatrix · tensor        ← units fail (generator axis)
  4. cumulative: tensor ← tensor × mask, record Σ tensor
     marginal:   record Σ (tensor × mask), tensor unchanged
  5. shift SOC bins by the excess / deficit of each generator state

The transition comes before the survival check, so the first recorded
duration already includes one step of running failures.

Start times are independent.  They are split into contiguous chunks and
spread over a thread pool; every chunk owns one ``_Workspace`` (two tensors
plus the mask) that is reused for every start time in the chunk.  With
storage, the transition writes into the second tensor and the bin shift
writes back into the first, so a step allocates nothing tensor-sized.
Rows are written back by index, so the result does not depend on the pool
size.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from outage_simulator.config.generator import GeneratorFleet
from outage_simulator.engine.derived import StorageInputs
from outage_simulator.engine.markov import generator_output, markov_matrix, starting_probabilities
from outage_simulator.engine.max_generation import maximum_generation
from outage_simulator.engine.storage_bins import StorageDimension, shift_gen_storage_prob_matrix

logger = logging.getLogger(__name__)

# Chunks per worker, so a slow chunk does not leave other workers idle.
_CHUNKS_PER_WORKER = 4


# ═══════════════════════════════════════════════════════════════════════════
# Shared read-only model
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SurvivalModel:
    """Everything a single start-time run reads; built once, never mutated."""

    net_critical_loads_kw: np.ndarray
    """(T,) critical load minus any PV serving it."""

    markov: np.ndarray
    """(N, N) transition matrix, ``[end, start]``."""

    starting_gens: np.ndarray
    """(N,) generator state distribution at outage start."""

    generator_production: np.ndarray
    """(N,) generator output per state (kW)."""

    maximum_generation: np.ndarray
    """(N, M_b, M_h) maximum deliverable power per joint state (kW)."""

    starting_battery_bins: np.ndarray
    """(T,) 0-based battery bin at each start time."""

    starting_h2_bins: np.ndarray
    """(T,) 0-based H2 bin at each start time."""

    battery: StorageDimension
    hydrogen: StorageDimension
    max_outage_duration: int
    marginal_survival: bool
    time_steps_per_hour: float

    @property
    def t_max(self) -> int:
        return len(self.net_critical_loads_kw)

    @property
    def tensor_shape(self) -> tuple[int, int, int]:
        return self.maximum_generation.shape


@dataclass
class _Workspace:
    """Private mutable buffers for one worker chunk."""

    buffers: tuple[np.ndarray, np.ndarray]
    survival: np.ndarray

    @classmethod
    def allocate(cls, shape: tuple[int, ...]) -> _Workspace:
        return cls(
            buffers=(np.zeros(shape), np.zeros(shape)),
            survival=np.zeros(shape),
        )


def _build_model(
    net_critical_loads_kw: Sequence[float] | np.ndarray,
    fleet: GeneratorFleet,
    max_outage_duration: int,
    battery: StorageInputs,
    hydrogen: StorageInputs,
    marginal_survival: bool,
    time_steps_per_hour: float,
) -> SurvivalModel:
    loads = np.asarray(net_critical_loads_kw, dtype=np.float64)
    t_max = len(loads)
    battery_dim = battery.dimension()
    h2_dim = hydrogen.dimension()
    return SurvivalModel(
        net_critical_loads_kw=loads,
        markov=markov_matrix(fleet.num_generators, fleet.failure_probability),
        starting_gens=starting_probabilities(
            fleet.num_generators, fleet.operational_availability, fleet.failure_to_start,
        ),
        generator_production=generator_output(fleet.num_generators, fleet.generator_size_kw),
        maximum_generation=maximum_generation(
            battery_size_kw=battery.discharge_kw,
            h2_fuelcell_size_kw=hydrogen.discharge_kw,
            generator_size_kw=fleet.generator_size_kw,
            battery_bin_size=battery_dim.bin_size,
            battery_num_bins=battery.num_bins,
            h2_bin_size=h2_dim.bin_size,
            h2_num_bins=hydrogen.num_bins,
            num_generators=fleet.num_generators,
            battery_discharge_efficiency=battery.discharge_efficiency,
            h2_discharge_efficiency=hydrogen.discharge_efficiency,
        ),
        starting_battery_bins=battery.starting_bins(t_max) - 1,
        starting_h2_bins=hydrogen.starting_bins(t_max) - 1,
        battery=battery_dim,
        hydrogen=h2_dim,
        max_outage_duration=max_outage_duration,
        marginal_survival=marginal_survival,
        time_steps_per_hour=time_steps_per_hour,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Single start time kernels
# ═══════════════════════════════════════════════════════════════════════════

def _record_survival(prob: np.ndarray, survival: np.ndarray, marginal: bool) -> float:
    if marginal:
        return float(np.vdot(prob, survival))
    prob *= survival
    return float(prob.sum())


def gen_only_survival_single_start_time(t: int, model: SurvivalModel, ws: _Workspace) -> np.ndarray:
    """Survival chances for every duration, outage starting at ``t`` (generators only)."""
    n_states = len(model.generator_production)
    production = model.generator_production.reshape(n_states, 1)
    survival = ws.survival.reshape(n_states, 1)
    prob = [buf.reshape(n_states, 1) for buf in ws.buffers]
    prob[0][:, 0] = model.starting_gens

    chances = np.zeros(model.max_outage_duration)
    for d in range(1, model.max_outage_duration + 1):
        h = (t + d - 1) % model.t_max
        np.greater_equal(production, model.net_critical_loads_kw[h], out=survival)

        start = prob[(d - 1) % 2]
        end = prob[d % 2]
        np.matmul(model.markov, start, out=end)
        chances[d - 1] = _record_survival(end, survival, model.marginal_survival)
    return chances


def survival_with_storage_single_start_time(t: int, model: SurvivalModel, ws: _Workspace) -> np.ndarray:
    """Survival chances for every duration, outage starting at ``t`` (with storage)."""
    n_states, m_b, m_h = model.tensor_shape
    current, stepped = ws.buffers
    current.fill(0.0)
    current[:, model.starting_battery_bins[t], model.starting_h2_bins[t]] = model.starting_gens

    # The generator-axis product handles every (battery, H2) column at once.
    current_columns = current.reshape(n_states, m_b * m_h)
    stepped_columns = stepped.reshape(n_states, m_b * m_h)

    chances = np.zeros(model.max_outage_duration)
    for d in range(1, model.max_outage_duration + 1):
        h = (t + d - 1) % model.t_max
        load_h = model.net_critical_loads_kw[h]
        np.greater_equal(model.maximum_generation, load_h, out=ws.survival)

        np.matmul(model.markov, current_columns, out=stepped_columns)
        chances[d - 1] = _record_survival(stepped, ws.survival, model.marginal_survival)

        excess_kw = (model.generator_production - load_h) / model.time_steps_per_hour
        shift_gen_storage_prob_matrix(stepped, excess_kw, model.battery, model.hydrogen, out=current)
    return chances


# ═══════════════════════════════════════════════════════════════════════════
# Fan-out over start times
# ═══════════════════════════════════════════════════════════════════════════

def _chunk_ranges(t_max: int, n_chunks: int) -> list[range]:
    n_chunks = max(1, min(n_chunks, t_max))
    bounds = np.linspace(0, t_max, n_chunks + 1).round().astype(int)
    return [range(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def _simulate_start_times(
    model: SurvivalModel,
    kernel: Callable[[int, SurvivalModel, _Workspace], np.ndarray],
    parallel: bool,
    max_workers: int | None,
) -> np.ndarray:
    survival_matrix = np.zeros((model.t_max, model.max_outage_duration))

    def run_chunk(chunk: range) -> np.ndarray:
        ws = _Workspace.allocate(model.tensor_shape)
        return np.stack([kernel(t, model, ws) for t in chunk])

    if not parallel or model.t_max == 1:
        survival_matrix[:] = run_chunk(range(model.t_max))
        return survival_matrix

    workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
    chunks = _chunk_ranges(model.t_max, workers * _CHUNKS_PER_WORKER)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for chunk, rows in zip(chunks, executor.map(run_chunk, chunks)):
            survival_matrix[chunk.start:chunk.stop] = rows
    return survival_matrix


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def survival_gen_only(
    net_critical_loads_kw: Sequence[float] | np.ndarray,
    fleet: GeneratorFleet,
    max_outage_duration: int,
    marginal_survival: bool = False,
    parallel: bool = True,
    max_workers: int | None = None,
) -> np.ndarray:
    """Survival matrix ``(T, D)`` with backup generators only.

    Rows are outage start time steps, columns outage durations.  With
    ``marginal_survival`` each entry is the chance of meeting load in that
    duration step; otherwise the chance of meeting load in every step up to
    and including it.

    Examples
    --------
    Two 1 kW units, MTTF 5 steps (p = 0.2), loads [1, 2, 2, 1].  Starting at
    step 0 the chance at least one unit survives step 1 is 1 − 0.2² = 0.96;
    steps 2 and 3 need both units, 0.8⁴ and 0.8⁶:

    >>> fleet = GeneratorFleet(num_generators=[2], generator_size_kw=[1],
    ...     operational_availability=[1], failure_to_start=[0], mean_time_to_failure=[5])
    >>> survival_gen_only([1, 2, 2, 1], fleet, 3, marginal_survival=True)[0]
    array([0.96    , 0.4096  , 0.262144])
    """
    model = _build_model(
        net_critical_loads_kw, fleet, max_outage_duration,
        battery=StorageInputs.absent(), hydrogen=StorageInputs.absent(),
        marginal_survival=marginal_survival, time_steps_per_hour=1.0,
    )
    logger.debug(
        "Generator-only survival: %d start times × %d durations, %d generator states",
        model.t_max, max_outage_duration, len(model.starting_gens),
    )
    return _simulate_start_times(model, gen_only_survival_single_start_time, parallel, max_workers)


def survival_with_storage(
    net_critical_loads_kw: Sequence[float] | np.ndarray,
    fleet: GeneratorFleet,
    max_outage_duration: int,
    battery: StorageInputs,
    hydrogen: StorageInputs | None = None,
    marginal_survival: bool = False,
    time_steps_per_hour: float = 1.0,
    parallel: bool = True,
    max_workers: int | None = None,
) -> np.ndarray:
    """Survival matrix ``(T, D)`` with generators plus battery and/or H2 storage.

    Storage SOC at each start time comes from the storages' starting SOC
    series.  Storage discharges to cover generation shortfall and charges
    from surplus, within its power ratings.
    """
    hydrogen = hydrogen if hydrogen is not None else StorageInputs.absent()
    model = _build_model(
        net_critical_loads_kw, fleet, max_outage_duration,
        battery=battery, hydrogen=hydrogen,
        marginal_survival=marginal_survival, time_steps_per_hour=time_steps_per_hour,
    )
    logger.debug(
        "Storage survival: %d start times × %d durations, tensor %s",
        model.t_max, max_outage_duration, model.tensor_shape,
    )
    return _simulate_start_times(model, survival_with_storage_single_start_time, parallel, max_workers)
