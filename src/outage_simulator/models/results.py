"""Result types — the contract between the engines and callers.

``ReliabilitySummary`` holds the named summary vectors (plain lists, so
``model_dump()`` is JSON-ready).  ``ReliabilityRun`` bundles the summary
with the raw survival matrices it was computed from.
"""

from __future__ import annotations

import numpy as np
from pydantic import BaseModel, ConfigDict


# ═══════════════════════════════════════════════════════════════════════════
# Summary vectors
# ═══════════════════════════════════════════════════════════════════════════

class ReliabilitySummary(BaseModel):
    """Survival statistics by outage duration and by start time.

    All values rounded to 6 decimals.  "By duration" vectors have one entry
    per outage duration 1..D; "final time step" vectors have one entry per
    outage start time and describe surviving the full D steps.
    """

    # --- Unlimited fuel (equipment failures only) ---
    unlimited_fuel_mean_cumulative_survival_by_duration: list[float]
    unlimited_fuel_min_cumulative_survival_by_duration: list[float]
    unlimited_fuel_cumulative_survival_final_time_step: list[float]

    # --- Fuel limited (no equipment failures) ---
    mean_fuel_survival_by_duration: list[float]
    fuel_outage_survival_final_time_step: list[float]
    """0/1 per start time: whether fuel lasts the full outage."""

    # --- Combined (unlimited fuel × fuel survival) ---
    mean_cumulative_survival_by_duration: list[float]
    min_cumulative_survival_by_duration: list[float]
    cumulative_survival_final_time_step: list[float]
    mean_cumulative_survival_final_time_step: float

    # --- Monthly spread of final-step combined survival ---
    monthly_min_cumulative_survival_final_time_step: list[float]
    monthly_lower_quartile_cumulative_survival_final_time_step: list[float]
    monthly_median_cumulative_survival_final_time_step: list[float]
    monthly_upper_quartile_cumulative_survival_final_time_step: list[float]
    monthly_max_cumulative_survival_final_time_step: list[float]
    """Twelve entries each, or empty when there is less than one step per hour."""

    fuel_used: list[list[float]]
    """Fuel burned per start time (rows) and generator type (columns)."""


# ═══════════════════════════════════════════════════════════════════════════
# Full run
# ═══════════════════════════════════════════════════════════════════════════

class ReliabilityRun(BaseModel):
    """Complete output of ``run_reliability``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    scenario_probabilities: dict[str, float]
    """Weight of each system sub-scenario that was simulated."""

    unlimited_fuel_survival: np.ndarray
    """(T, D) probability-weighted survival ignoring fuel."""

    fuel_survival: np.ndarray
    """(T, D) 0/1 fuel-limited survival."""

    fuel_used: np.ndarray
    """(T, n_types) fuel burned per start time."""

    summary: ReliabilitySummary

    @property
    def cumulative_survival(self) -> np.ndarray:
        """(T, D) combined survival, unlimited-fuel × fuel survival."""
        return self.unlimited_fuel_survival * self.fuel_survival
