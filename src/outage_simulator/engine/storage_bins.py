"""Storage state-of-charge discretisation and bin-shift dynamics.

SOC of a storage device (battery or hydrogen) is tracked as an integer bin.
Bin 1 is empty and bin ``num_bins`` is full, so each bin is
``size_kwh / (num_bins − 1)`` wide.  ``num_bins = 1`` means the device is not
modeled at all (bin width 0, nothing ever shifts).

Public functions return 1-based bins to match that convention; probability
tensors are indexed 0-based (bin − 1).

During an outage step, excess (or missing) power moves probability mass up
(or down) the SOC axis.  Mass that would move past the empty or full bin
piles up on that boundary bin:

  bins:   [0] [1] [2] [3]       shift +2
  before:  a   b   c   d
  after:   0   0   a   b+c+d

Power the battery cannot absorb or supply is handed to hydrogen storage:
the battery's power-limit remainder plus the energy of any bins that hit
the battery boundary.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

# Number of time steps in the assumed non-leap year at hourly resolution.
HOURS_PER_YEAR = 8760


@dataclass(frozen=True)
class StorageDimension:
    """Everything the bin shift needs to know about one storage device."""

    bin_size: float
    """kWh per bin; 0.0 when the device is not modeled."""

    charge_kw: float
    """Charging power limit (battery inverter or electrolyzer)."""

    discharge_kw: float
    """Discharging power limit (battery inverter or fuel cell)."""

    charge_efficiency: float = 1.0
    discharge_efficiency: float = 1.0

    @classmethod
    def absent(cls) -> StorageDimension:
        return cls(bin_size=0.0, charge_kw=0.0, discharge_kw=0.0)


def storage_bin_size(size_kwh: float, num_bins: int) -> float:
    """Width of one SOC bin (kWh); 0.0 for an unmodeled device."""
    if num_bins <= 1:
        return 0.0
    return size_kwh / (num_bins - 1)


def num_storage_bins_default(size_kw: float, size_kwh: float) -> int:
    """Default SOC bin count: 20 bins per hour of storage duration."""
    if not size_kw:
        return 1
    duration_hours = size_kwh / size_kw
    return max(2, int(round(duration_hours * 20)))


def bin_storage_charge(
    storage_soc_kwh: Sequence[float] | np.ndarray,
    num_bins: int,
    storage_size_kwh: float,
    length: int = HOURS_PER_YEAR,
) -> np.ndarray:
    """Discretise an SOC series into 1-based bins, rounded to the nearest bin.

    Returns a ones vector of ``length`` when the series is empty or the
    device is not modeled.

    Examples
    --------
    >>> bin_storage_charge([30, 100, 170.5, 250, 251, 1000], 11, 1000)
    array([ 1,  2,  3,  3,  4, 11])
    """
    soc = np.asarray(storage_soc_kwh, dtype=np.float64)
    if soc.size == 0 or num_bins == 1:
        return np.ones(length, dtype=np.int64)

    bin_size = storage_bin_size(storage_size_kwh, num_bins)
    with np.errstate(divide="ignore", invalid="ignore"):
        bins = np.round(soc / bin_size)
    bins = np.nan_to_num(bins, nan=0.0, posinf=num_bins - 1, neginf=0.0)
    return np.clip(bins + 1, 1, num_bins).astype(np.int64)


def storage_bin_shift(
    excess_generation_kw: Sequence[float] | np.ndarray,
    storage: StorageDimension,
) -> tuple[np.ndarray, np.ndarray]:
    """Bins to shift SOC by, and the power left over, for each entry.

    Storage charges from positive excess and discharges to cover negative
    excess, limited by its power ratings.  Charging loses energy
    (× charge efficiency) and discharging draws extra (÷ discharge
    efficiency).

    Examples
    --------
    >>> battery = StorageDimension(bin_size=100, charge_kw=300, discharge_kw=300)
    >>> storage_bin_shift([-500, -120, 0, 50, 175, 400], battery)
    (array([-3, -1,  0,  0,  2,  3]), array([-200.,    0.,    0.,    0.,    0.,  100.]))
    """
    excess = np.asarray(excess_generation_kw, dtype=np.float64)
    if storage.bin_size == 0 or (storage.charge_kw == 0 and storage.discharge_kw == 0):
        return np.zeros(excess.shape, dtype=np.int64), excess.copy()

    kw_to_storage = np.clip(excess, -storage.discharge_kw, storage.charge_kw)
    kw_to_storage = np.where(
        kw_to_storage > 0,
        kw_to_storage * storage.charge_efficiency,
        kw_to_storage / storage.discharge_efficiency,
    )
    shift = np.nan_to_num(np.round(kw_to_storage / storage.bin_size), nan=0.0).astype(np.int64)
    remaining_kw = excess - kw_to_storage
    return shift, remaining_kw


def _accumulate_shifted(src: np.ndarray, dst: np.ndarray, shift: int) -> None:
    """Add ``src`` into ``dst`` moved ``shift`` places along axis 0.

    Both arrays have the same length along axis 0; entries moved past either
    end pile up on the end entry.
    """
    m = src.shape[0]
    if m == 0:
        return
    k = min(abs(int(shift)), m - 1)
    if k == 0:
        dst += src
    elif shift > 0:
        dst[k:] += src[:m - k]
        dst[m - 1] += src[m - k:].sum(axis=0)
    else:
        dst[:m - k] += src[k:]
        dst[0] += src[:k].sum(axis=0)


def shift_gen_storage_prob_matrix(
    gen_storage_prob_matrix: np.ndarray,
    excess_generation_kw: np.ndarray,
    battery: StorageDimension,
    hydrogen: StorageDimension,
    out: np.ndarray | None = None,
) -> None:
    """Move probability mass along both SOC axes.

    ``gen_storage_prob_matrix`` has shape ``(N, M_b, M_h)``;
    ``excess_generation_kw`` has one entry per generator state.  Every
    (state, battery bin, H2 bin) cell lands on a clamped destination cell and
    cells landing together are summed, so total mass is unchanged.

    The result is written to ``out`` when given (same shape, not the input
    itself), otherwise back into ``gen_storage_prob_matrix``.  Passing a
    reusable ``out`` keeps the per-step work free of tensor-sized
    temporaries.
    """
    n_states, m_b, _ = gen_storage_prob_matrix.shape

    battery_shift, remaining_kw = storage_bin_shift(excess_generation_kw, battery)
    # H2 shift for battery bins that stay inside the battery range.
    kept_h2_shift, _ = storage_bin_shift(remaining_kw, hydrogen)

    if not battery_shift.any() and not kept_h2_shift.any():
        if out is not None:
            np.copyto(out, gen_storage_prob_matrix)
        return

    if out is None:
        src, dst = gen_storage_prob_matrix.copy(), gen_storage_prob_matrix
    else:
        src, dst = gen_storage_prob_matrix, out
    dst.fill(0.0)

    for n in range(n_states):
        shift = int(battery_shift[n])
        # Source bins whose destination falls past the empty or full bin.
        k = min(abs(shift), m_b)
        if shift >= 0:
            kept, kept_dest = slice(0, m_b - k), slice(k, m_b)
            spilled, edge = np.arange(m_b - k, m_b), m_b - 1
        else:
            kept, kept_dest = slice(k, m_b), slice(0, m_b - k)
            spilled, edge = np.arange(0, k), 0

        _accumulate_shifted(src[n, kept].T, dst[n, kept_dest].T, kept_h2_shift[n])
        if k == 0:
            continue

        # Energy that did not fit in the battery goes to hydrogen.
        overflow_kw = remaining_kw[n] + (spilled + shift - edge) * battery.bin_size
        spilled_h2_shift, _ = storage_bin_shift(overflow_kw, hydrogen)
        for h2_shift in np.unique(spilled_h2_shift):
            rows = spilled[spilled_h2_shift == h2_shift]
            _accumulate_shifted(src[n, rows].sum(axis=0), dst[n, edge], h2_shift)
