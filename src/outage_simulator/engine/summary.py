"""Summary statistics over survival matrices.

Combined survival multiplies the unlimited-fuel (equipment failure)
matrix by the 0/1 fuel survival matrix, element-wise.

Monthly statistics partition the final-duration survival of every start
time by calendar month of a non-leap year (2022), with
``steps_per_hour = T / 8760``.  Below one step per hour there is no
meaningful monthly partition and those vectors are left empty.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from outage_simulator.engine.storage_bins import HOURS_PER_YEAR
from outage_simulator.models.results import ReliabilitySummary

_DIGITS = 6
_MONTHLY_QUANTILES = [0.0, 0.25, 0.5, 0.75, 1.0]
_CALENDAR_YEAR = 2022


def _rounded(values: np.ndarray) -> list[float]:
    return np.round(values, _DIGITS).tolist()


def monthly_quantiles(final_survival: np.ndarray) -> pd.DataFrame | None:
    """Min / quartiles / max of ``final_survival`` per calendar month.

    Returns a 12 × 5 frame indexed by month (1..12) with one column per
    quantile, or ``None`` when there are fewer than one step per hour.
    """
    time_steps_per_hour = len(final_survival) / HOURS_PER_YEAR
    if time_steps_per_hour < 1:
        return None

    index = pd.date_range(
        start=f"{_CALENDAR_YEAR}-01-01",
        periods=len(final_survival),
        freq=pd.Timedelta(hours=1) / time_steps_per_hour,
    )
    series = pd.Series(final_survival, index=index)
    return series.groupby(series.index.month).quantile(_MONTHLY_QUANTILES).unstack()


def process_reliability_results(
    cumulative_results: np.ndarray,
    fuel_survival: np.ndarray,
    fuel_used: np.ndarray,
) -> ReliabilitySummary:
    """Reduce the raw ``(T, D)`` matrices to a ``ReliabilitySummary``."""
    combined = cumulative_results * fuel_survival
    combined_final = np.round(cumulative_results[:, -1] * fuel_survival[:, -1], _DIGITS)

    monthly = monthly_quantiles(combined_final)
    if monthly is None:
        monthly_columns: list[list[float]] = [[] for _ in _MONTHLY_QUANTILES]
    else:
        monthly_columns = [_rounded(monthly[q].to_numpy()) for q in _MONTHLY_QUANTILES]

    return ReliabilitySummary(
        unlimited_fuel_mean_cumulative_survival_by_duration=_rounded(cumulative_results.mean(axis=0)),
        unlimited_fuel_min_cumulative_survival_by_duration=_rounded(cumulative_results.min(axis=0)),
        unlimited_fuel_cumulative_survival_final_time_step=_rounded(cumulative_results[:, -1]),
        mean_fuel_survival_by_duration=_rounded(fuel_survival.mean(axis=0)),
        fuel_outage_survival_final_time_step=_rounded(fuel_survival[:, -1]),
        mean_cumulative_survival_by_duration=_rounded(combined.mean(axis=0)),
        min_cumulative_survival_by_duration=_rounded(combined.min(axis=0)),
        cumulative_survival_final_time_step=_rounded(combined_final),
        mean_cumulative_survival_final_time_step=round(float(combined_final.mean()), _DIGITS),
        monthly_min_cumulative_survival_final_time_step=monthly_columns[0],
        monthly_lower_quartile_cumulative_survival_final_time_step=monthly_columns[1],
        monthly_median_cumulative_survival_final_time_step=monthly_columns[2],
        monthly_upper_quartile_cumulative_survival_final_time_step=monthly_columns[3],
        monthly_max_cumulative_survival_final_time_step=monthly_columns[4],
        fuel_used=_rounded(fuel_used),
    )
