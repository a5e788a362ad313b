"""Maximum deliverable power for every (generator state, battery bin, H2 bin)."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from outage_simulator.engine.markov import generator_output


def maximum_generation(
    battery_size_kw: float,
    h2_fuelcell_size_kw: float,
    generator_size_kw: Sequence[float],
    battery_bin_size: float,
    battery_num_bins: int,
    h2_bin_size: float,
    h2_num_bins: int,
    num_generators: Sequence[int],
    battery_discharge_efficiency: float,
    h2_discharge_efficiency: float,
) -> np.ndarray:
    """Table of maximum system output (kW), shape ``(N, M_b, M_h)``.

    Each cell is the generator output of that state plus what each storage
    device can deliver from that SOC bin, capped by its discharge rating:

      gen[n] + min(battery_kw, (b − 1) × bin_b × η_b) + min(fuelcell_kw, (h − 1) × bin_h × η_h)

    Examples
    --------
    >>> table = maximum_generation(100, 100, [50, 125], 50, 5, 400, 3, [2, 1], 0.98, 0.9)
    >>> table[:, :, 0][0]
    array([  0.,  49.,  98., 100., 100.])
    """
    gen = generator_output(num_generators, generator_size_kw)
    battery = np.minimum(
        battery_size_kw,
        np.arange(battery_num_bins) * battery_bin_size * battery_discharge_efficiency,
    )
    h2 = np.minimum(
        h2_fuelcell_size_kw,
        np.arange(h2_num_bins) * h2_bin_size * h2_discharge_efficiency,
    )
    return gen[:, np.newaxis, np.newaxis] + battery[np.newaxis, :, np.newaxis] + h2[np.newaxis, np.newaxis, :]
