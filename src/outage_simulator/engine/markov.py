"""Generator failure model — discrete-state Markov chain over working units.

A generator *state* is a tuple with the number of working units of each
generator type.  States are enumerated with the leftmost type incrementing
fastest, so for ``num_generators = [2, 1]``:

  index   working units
    0        (0, 0)
    1        (1, 0)
    2        (2, 0)
    3        (0, 1)
    4        (1, 1)
    5        (2, 1)

Within one time step a running unit fails with probability p = 1 / MTTF and
is never repaired, so going from s working units of a type to e ≤ s is a
binomial thinning:

  P(s → e) = C(s, e) × (1 − p)^e × p^(s − e)

and the joint probability across types is the product over types.  The
transition matrix is laid out ``[end_state, start_state]``; every column is a
probability distribution.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.special import comb

from outage_simulator.errors import ConfigurationError


def generator_states(num_generators: Sequence[int]) -> np.ndarray:
    """All generator states in canonical order, shape ``(N, n_types)``."""
    dims = tuple(int(g) + 1 for g in num_generators)
    n_states = int(np.prod(dims))
    return np.stack(np.unravel_index(np.arange(n_states), dims, order="F"), axis=1)


def transition_probability(
    start_states: np.ndarray,
    end_states: np.ndarray,
    fail_prob: Sequence[float],
) -> np.ndarray:
    """Probability of moving from each start state to the paired end state.

    ``start_states`` and ``end_states`` broadcast against each other; the last
    axis indexes generator type.  Entries where an end count exceeds the start
    count are 0.  ``0 × inf`` terms are normalised to 0.
    """
    start = np.asarray(start_states, dtype=np.float64)
    end = np.asarray(end_states, dtype=np.float64)
    p = np.asarray(fail_prob, dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        per_type = comb(start, end) * (1.0 - p) ** end * p ** (start - end)
        probs = np.prod(per_type, axis=-1)
    return np.nan_to_num(probs, nan=0.0, posinf=0.0, neginf=0.0)


def _check_probabilities(num_generators: Sequence[int], probs: Sequence[float], name: str) -> None:
    if len(num_generators) != len(probs):
        raise ConfigurationError(
            f"{name} has {len(probs)} entries but there are {len(num_generators)} generator types."
        )
    for p in probs:
        if not 0.0 <= p <= 1.0:
            raise ConfigurationError(f"{name} must lie in [0, 1], got {p}.")


def markov_matrix(num_generators: Sequence[int], fail_prob: Sequence[float]) -> np.ndarray:
    """One-step transition matrix, ``M[end, start]``, shape ``(N, N)``.

    Examples
    --------
    >>> markov_matrix([1], [0.0])
    array([[1., 0.],
           [0., 1.]])
    """
    _check_probabilities(num_generators, fail_prob, "Generator failure probability")
    states = generator_states(num_generators)
    # rows = end state, columns = start state
    return transition_probability(states[np.newaxis, :, :], states[:, np.newaxis, :], fail_prob)


def starting_probabilities(
    num_generators: Sequence[int],
    operational_availability: Sequence[float],
    failure_to_start: Sequence[float],
) -> np.ndarray:
    """Distribution over generator states at the first step of an outage.

    A unit is *unready* if it is down for maintenance or available but fails
    to start: q = (1 − availability) + failure_to_start × availability.
    Starting from the all-working state, the binomial thinning with q gives
    the chance of each state.
    """
    _check_probabilities(num_generators, operational_availability, "Operational availability")
    _check_probabilities(num_generators, failure_to_start, "Failure to start")
    availability = np.asarray(operational_availability, dtype=np.float64)
    fts = np.asarray(failure_to_start, dtype=np.float64)
    unready = (1.0 - availability) + fts * availability

    states = generator_states(num_generators)
    all_working = states[-1]
    return transition_probability(all_working[np.newaxis, :], states, unready)


def generator_output(num_generators: Sequence[int], generator_size_kw: Sequence[float]) -> np.ndarray:
    """Maximum generator output (kW) in every generator state.

    Examples
    --------
    >>> generator_output([2, 1], [250, 300])
    array([  0., 250., 500., 300., 550., 800.])
    """
    if len(num_generators) != len(generator_size_kw):
        raise ConfigurationError("generator_size_kw must have one entry per generator type.")
    states = generator_states(num_generators)
    return states @ np.asarray(generator_size_kw, dtype=np.float64)
